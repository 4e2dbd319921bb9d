"""Author-year labels and reference lines for DOI citations."""

from neuro_scholar.citations.doi import normalize_doi, to_doi_url
from neuro_scholar.state.models import BibliographicInfo, ReferenceFallbackInfo

MAX_REFERENCE_AUTHORS = 3


def get_last_name(full_name: str) -> str:
    """Final whitespace-delimited token of a name."""
    parts = full_name.split()
    return parts[-1] if parts else ""


def format_year(year: int | None) -> str:
    return str(year) if year and year > 0 else "n.d."


def format_author_label(authors: list[str]) -> str:
    """
    Short author label for an inline citation.
    
    Examples:
        - no authors: "Unknown"
        - one author: "Smith"
        - two authors: "Smith and Jones"
        - three or more: "Smith et al."
    """
    names = [a for a in authors if a and a.strip()]
    if not names:
        return "Unknown"
    first = get_last_name(names[0])
    if len(names) == 1:
        return first
    if len(names) == 2:
        return f"{first} and {get_last_name(names[1])}"
    return f"{first} et al."


def format_citation_link_text(info: ReferenceFallbackInfo) -> str:
    """Link text such as ``Smith et al. 2021`` or ``Unknown n.d.``."""
    return f"{format_author_label(info.authors)} {format_year(info.year)}"


def format_inline_citation_link(
    doi: str,
    info: ReferenceFallbackInfo,
    parenthesized: bool = True,
) -> str:
    """
    Render a verified citation as a markdown link to doi.org.
    
    Args:
        doi: Normalized DOI of the cited source.
        info: Bibliographic projection of the source.
        parenthesized: Wrap the link in parentheses.
        
    Returns:
        ``([Label Year](https://doi.org/...))`` or the bare link.
    """
    link = f"[{format_citation_link_text(info)}]({to_doi_url(doi)})"
    return f"({link})" if parenthesized else link


def format_reference_authors(authors: list[str]) -> str:
    names = [a.strip() for a in authors if a and a.strip()]
    if not names:
        return "Unknown"
    shown = ", ".join(names[:MAX_REFERENCE_AUTHORS])
    if len(names) > MAX_REFERENCE_AUTHORS:
        shown += ", et al."
    return shown


def format_reference_line(
    doi: str,
    info: ReferenceFallbackInfo | BibliographicInfo | None,
) -> str:
    """
    Format one bibliography line.
    
    Format: ``- Authors. Year. Title. *Journal*. [DOI: doi](url)``
    
    Missing fields render as "Unknown", "n.d.", "Untitled" and
    "Unknown Journal".
    """
    if isinstance(info, BibliographicInfo) and info.doi:
        doi = info.doi
    doi = normalize_doi(doi)
    authors = format_reference_authors(info.authors if info else [])
    year = format_year(info.year if info else 0)
    title = (info.title if info else "") or "Untitled"
    journal = (info.journal if info else "") or "Unknown Journal"
    return f"- {authors}. {year}. {title}. *{journal}*. [DOI: {doi}]({to_doi_url(doi)})"
