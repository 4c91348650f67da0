import re
import unicodedata
from functools import lru_cache

# Generic tokens to ignore when comparing stop and route names
GENERIC_TOKENS = frozenset({
    "bus", "stop", "stand", "station", "road", "rd", "more", "moor", "no",
    "service", "route", "the",
})

# Route number patterns: "route 3", "bus 3", "3 no", "no. 3", "leguna 2"
ROUTE_NUMBER_PATTERNS = (
    re.compile(r"(?:route|bus|line|the)\s+(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)\s*no\b", re.IGNORECASE),
    re.compile(r"(?:#|no\.?\s*)(\d+)", re.IGNORECASE),
)
LEGUNA_PATTERN = re.compile(r"leguna\s*-?\s*(\d+)", re.IGNORECASE)


@lru_cache(maxsize=4096)
def remove_accents(text: str) -> str:
    """Remove accents from text.

    Example: "Chawkbazār" -> "Chawkbazar"
    """
    normalized = unicodedata.normalize("NFD", text)
    return "".join(c for c in normalized if unicodedata.category(c) != "Mn")


@lru_cache(maxsize=4096)
def normalize_text(text: str) -> str:
    """Normalize a stop name or query for exact and containment lookup.

    - Converts to lowercase
    - Trims and collapses whitespace

    Example: "  New   Market " -> "new market"
    """
    return " ".join(text.lower().split())


@lru_cache(maxsize=4096)
def fuzzy_text(text: str) -> str:
    """Normalize text for fuzzy matching (normalize_text plus accent removal)."""
    return remove_accents(normalize_text(text))


def get_meaningful_tokens(text: str) -> set[str]:
    """Extract tokens from text, excluding generic/noise words.

    Example: "2no Gate" -> {"2no", "gate"}
    Example: "Bus Terminal" -> {"terminal"}
    """
    raw_tokens = re.split(r"[\s/\-]+", fuzzy_text(text))
    return {t for t in raw_tokens if t and len(t) > 1 and t not in GENERIC_TOKENS}


def extract_route_number(query: str) -> str | None:
    """Extract a route number from query text.

    Returns the route number if the query looks like a route number, None otherwise.

    Examples:
        "3" -> "3"
        "route 3" -> "3"
        "3 no bus" -> "3"
        "Leguna-2" -> "Leguna-2"
        "new market" -> None
    """
    query = query.strip()
    if query.isdigit():
        return query

    match = LEGUNA_PATTERN.search(query)
    if match:
        return f"Leguna-{match.group(1)}"

    for pattern in ROUTE_NUMBER_PATTERNS:
        match = pattern.search(query)
        if match:
            return match.group(1)

    return None


def canonical_route_number(number: str) -> str:
    """Normalize a dataset route number so "Leguna -1" and "Leguna-1" compare equal."""
    return extract_route_number(number) or normalize_text(number)
