"""Address detection for assistant answers."""

from src.addresses.constants import CITY_NAME, COUNTRY_NAME
from src.addresses.extractor import (
    AddressMatch,
    TextSegment,
    extract_addresses,
    find_address_spans,
    highlight_addresses,
    normalize_address,
)

__all__ = [
    "CITY_NAME",
    "COUNTRY_NAME",
    "AddressMatch",
    "TextSegment",
    "extract_addresses",
    "find_address_spans",
    "highlight_addresses",
    "normalize_address",
]
