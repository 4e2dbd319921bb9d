"""DOI citation handling.

Pure text utilities for normalizing DOIs, recognizing inline citation
markers, rewriting them against the retrieved-source allow-list, and
rendering the references section. The optional network metadata lookup
lives in ``neuro_scholar.citations.metadata``.
"""

from neuro_scholar.citations.doi import (
    DOI_REGEX,
    doi_key,
    extract_dois,
    normalize_doi,
    to_doi_url,
)
from neuro_scholar.citations.patterns import (
    CITATION_FORMS,
    CITATION_GRAMMAR,
    CitationForm,
    compile_citation_grammar,
)
from neuro_scholar.citations.formatter import (
    format_author_label,
    format_citation_link_text,
    format_inline_citation_link,
    format_reference_line,
    get_last_name,
)
from neuro_scholar.citations.validator import (
    FallbackMap,
    build_fallback_map,
    filter_and_format_citations_with_source_dois,
)
from neuro_scholar.citations.reference_list import (
    REFERENCES_HEADINGS,
    ReferenceListGenerator,
    generate_references_section,
)

__all__ = [
    # DOI helpers
    "DOI_REGEX",
    "doi_key",
    "extract_dois",
    "normalize_doi",
    "to_doi_url",
    # Grammar
    "CITATION_FORMS",
    "CITATION_GRAMMAR",
    "CitationForm",
    "compile_citation_grammar",
    # Formatting
    "format_author_label",
    "format_citation_link_text",
    "format_inline_citation_link",
    "format_reference_line",
    "get_last_name",
    # Rewriting
    "FallbackMap",
    "build_fallback_map",
    "filter_and_format_citations_with_source_dois",
    # References
    "REFERENCES_HEADINGS",
    "ReferenceListGenerator",
    "generate_references_section",
]
