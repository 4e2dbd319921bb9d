"""DOI normalization and URL helpers.

Every DOI that enters the system, whether from a search backend or from
model-generated prose, is passed through ``normalize_doi`` before it is
compared, stored or rendered.
"""

import re
from urllib.parse import quote, unquote

DOI_URL_BASE = "https://doi.org/"

# Loose DOI matcher for free text (URLs, snippets, prose).
DOI_REGEX = re.compile(r"10\.\d{4,}/[^\s<>\"]+")

_MARKDOWN_LINK_TAIL = re.compile(
    r"\]\(https?://(?:dx\.)?doi\.org/[^)\s]*\)?$", re.IGNORECASE
)
_LEADING_LABEL = re.compile(r"^[\[(\s]*(?:doi:\s*)?", re.IGNORECASE)
_URL_PREFIX = re.compile(r"^https?://(?:dx\.)?doi\.org/", re.IGNORECASE)
_PERCENT_ESCAPE = re.compile(r"%[0-9A-Fa-f]{2}")
_TRAILING_PUNCTUATION = re.compile(r"[.,;:!?)\]]+$")


def _normalize_once(value: str) -> str:
    value = value.strip()
    value = _MARKDOWN_LINK_TAIL.sub("", value)
    value = _LEADING_LABEL.sub("", value)
    value = _URL_PREFIX.sub("", value)
    if _PERCENT_ESCAPE.search(value):
        value = unquote(value)
    value = _TRAILING_PUNCTUATION.sub("", value)
    return value.strip()


def normalize_doi(raw: str | None) -> str:
    """Reduce a DOI-like string to its canonical form.
    
    Strips a wrapping markdown link that points at doi.org, a leading
    ``doi:`` label or doi.org URL prefix, percent-escapes, and trailing
    sentence punctuation. Applying it twice gives the same result as
    applying it once.
    
    Args:
        raw: DOI as found in text, a URL, or a backend record.
        
    Returns:
        Canonical DOI string (empty if nothing is left).
    
    Example:
        >>> normalize_doi("[DOI: 10.1234/AbC.](https://doi.org/10.1234/AbC.)")
        '10.1234/AbC'
    """
    value = raw or ""
    # Each pass either leaves the value untouched or shortens it.
    while True:
        normalized = _normalize_once(value)
        if normalized == value:
            return normalized
        value = normalized


def doi_key(doi: str) -> str:
    """Case-insensitive lookup key for a DOI."""
    return normalize_doi(doi).lower()


def to_doi_url(doi: str) -> str:
    """Build the resolvable doi.org URL for a DOI.
    
    Characters are percent-encoded except ``/`` so the URL is safe inside
    a markdown link.
    """
    return DOI_URL_BASE + quote(normalize_doi(doi), safe="/")


def extract_dois(text: str) -> list[str]:
    """Find DOIs in free text, normalized and deduplicated in order."""
    found: list[str] = []
    seen: set[str] = set()
    for match in DOI_REGEX.finditer(text or ""):
        doi = normalize_doi(match.group(0))
        key = doi.lower()
        if doi and key not in seen:
            seen.add(key)
            found.append(doi)
    return found
