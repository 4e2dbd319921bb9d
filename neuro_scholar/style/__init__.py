"""Report text cleanup."""

from neuro_scholar.style.report_cleanup import (
    REFERENCE_BLOCK_MARKERS,
    clean_section_content,
    filter_reserved_sections,
    is_reference_block_marker,
    strip_inline_references_block,
    strip_markdown_headers,
)

__all__ = [
    "REFERENCE_BLOCK_MARKERS",
    "clean_section_content",
    "filter_reserved_sections",
    "is_reference_block_marker",
    "strip_inline_references_block",
    "strip_markdown_headers",
]
