"""
Address detection constants.

Street naming conventions and regular expressions for Amsterdam addresses.
"""

import re

CITY_NAME = "Amsterdam"
COUNTRY_NAME = "Netherlands"

STREET_SUFFIXES = (
    "straat",
    "gracht",
    "laan",
    "plein",
    "weg",
    "dam",
    "kade",
    "singel",
    "steeg",
    "dijk",
)

_SUFFIX = "(?:" + "|".join(STREET_SUFFIXES) + ")"
# House number with optional addition: 12, 12a, 263-267, 12-H
_HOUSE_NUMBER = r"\d+[a-zA-Z]?(?:-[a-zA-Z0-9]+)?"
# Optional ", 1015 MN Amsterdam" tail
_POSTAL_TAIL = rf"(?:\s*,\s*\d{{4}}\s*[A-Z]{{2}}\s+{CITY_NAME})?"

ADDRESS_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Street-type suffix: Westerstraat 35, Prinsengracht 263-267
    re.compile(rf"[A-Z][a-z]+{_SUFFIX}\s+{_HOUSE_NUMBER}{_POSTAL_TAIL}"),
    # Any capitalized name followed by a number: Rokin 84
    re.compile(rf"\b[A-Z][a-z]+\s+{_HOUSE_NUMBER}{_POSTAL_TAIL}\b"),
    # Names with a 'de' infix: Admiraal de Ruijterweg 56
    re.compile(
        rf"[A-Z][a-z]+\s+de\s+[A-Z][a-z]+{_SUFFIX}?\s+{_HOUSE_NUMBER}{_POSTAL_TAIL}"
    ),
    re.compile(rf"\bSingel\s+{_HOUSE_NUMBER}{_POSTAL_TAIL}\b"),
)

WHITESPACE_RUN = re.compile(r"\s+")
COMMA_SPACING = re.compile(r"\s*,\s*")
