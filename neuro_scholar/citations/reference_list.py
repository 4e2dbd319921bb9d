"""References section generation."""

from neuro_scholar.citations.doi import doi_key, normalize_doi
from neuro_scholar.citations.formatter import format_reference_line
from neuro_scholar.state.enums import ReportLanguage
from neuro_scholar.state.models import BibliographicInfo, ReferenceFallbackInfo

REFERENCES_HEADINGS = {
    ReportLanguage.EN: "## References",
    ReportLanguage.KO: "## 참고문헌",
}


class ReferenceListGenerator:
    """
    Builds the references section for a report.
    
    Entries follow the order in which DOIs were first cited, so the list
    traces the reading order of the report. Metadata from the secondary
    lookup (``validated``) is preferred over the fallback projection of
    the retrieved source.
    """
    
    def __init__(
        self,
        fallback_by_doi: dict[str, ReferenceFallbackInfo] | None = None,
        validated: dict[str, BibliographicInfo] | None = None,
    ):
        self._fallback = {doi_key(k): v for k, v in (fallback_by_doi or {}).items()}
        self._validated = {
            doi_key(k): v for k, v in (validated or {}).items() if v.is_valid
        }
    
    def format_entry(self, doi: str) -> str:
        key = doi_key(doi)
        info = self._validated.get(key) or self._fallback.get(key)
        return format_reference_line(doi, info)
    
    def generate(
        self,
        cited_dois: list[str],
        language: ReportLanguage | str = ReportLanguage.EN,
    ) -> str:
        """
        Generate the references section.
        
        Args:
            cited_dois: DOIs in order of first citation (may repeat).
            language: Heading language.
            
        Returns:
            Markdown section: heading, blank line, one entry per unique
            DOI separated by blank lines, trailing newline. An empty
            string when no DOI was cited.
        """
        heading = REFERENCES_HEADINGS[ReportLanguage.coerce(language)]
        unique: list[str] = []
        seen: set[str] = set()
        for raw in cited_dois:
            doi = normalize_doi(raw)
            if doi and doi.lower() not in seen:
                seen.add(doi.lower())
                unique.append(doi)
        if not unique:
            return ""
        lines = [self.format_entry(doi) for doi in unique]
        return f"{heading}\n\n" + "\n\n".join(lines) + "\n"


def generate_references_section(
    cited_dois: list[str],
    validated_dois: dict[str, BibliographicInfo] | None,
    fallback_by_doi: dict[str, ReferenceFallbackInfo] | None,
    language: ReportLanguage | str = ReportLanguage.EN,
) -> str:
    """Render the localized references section for ``cited_dois``."""
    generator = ReferenceListGenerator(fallback_by_doi, validated_dois)
    return generator.generate(cited_dois, language)
