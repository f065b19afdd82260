"""
Heuristic detection of Amsterdam street addresses in free text.

Every pattern in ``ADDRESS_PATTERNS`` runs over the whole text on its own, so
the same address is usually found more than once. Matches are normalized and
deduplicated by their normalized text, keeping the earliest occurrence.
"""

from dataclasses import dataclass

from src.addresses.constants import ADDRESS_PATTERNS, COMMA_SPACING, WHITESPACE_RUN


@dataclass(frozen=True)
class AddressMatch:
    """A normalized address and the span of its earliest occurrence."""

    address: str
    start: int
    end: int


@dataclass(frozen=True)
class TextSegment:
    """A slice of message text; ``address`` is set when the slice is an address."""

    text: str
    address: str | None = None

    @property
    def is_address(self) -> bool:
        return self.address is not None


def normalize_address(raw: str) -> str:
    """Collapse whitespace runs and normalize comma spacing to ', '."""
    collapsed = WHITESPACE_RUN.sub(" ", raw.strip())
    return COMMA_SPACING.sub(", ", collapsed)


def find_address_spans(text: str) -> list[AddressMatch]:
    """Find unique addresses with the span of their first occurrence.

    Args:
        text: Text to scan

    Returns:
        list[AddressMatch]: Matches ordered by ascending start offset
    """
    if not text:
        return []

    earliest: dict[str, AddressMatch] = {}
    for pattern in ADDRESS_PATTERNS:
        for match in pattern.finditer(text):
            address = normalize_address(match.group(0))
            existing = earliest.get(address)
            if existing is None or match.start() < existing.start:
                earliest[address] = AddressMatch(
                    address=address, start=match.start(), end=match.end()
                )

    # sorted() is stable, so equal offsets keep discovery order
    return sorted(earliest.values(), key=lambda m: m.start)


def extract_addresses(text: str) -> list[str]:
    """Extract addresses from text, deduplicated and in order of first appearance.

    Args:
        text: Text to scan

    Returns:
        list[str]: Normalized address strings
    """
    return [m.address for m in find_address_spans(text)]


def highlight_addresses(text: str) -> list[TextSegment]:
    """Split text into plain and address segments for rendering.

    Spans overlapping an earlier highlighted span are left as plain text.
    """
    segments: list[TextSegment] = []
    cursor = 0
    for match in find_address_spans(text):
        if match.start < cursor:
            continue
        if match.start > cursor:
            segments.append(TextSegment(text=text[cursor : match.start]))
        segments.append(
            TextSegment(text=text[match.start : match.end], address=match.address)
        )
        cursor = match.end
    if cursor < len(text):
        segments.append(TextSegment(text=text[cursor:]))
    return segments
