"""Cleanup of model output before it is placed in the report.

Section bodies are written by the model, which sometimes adds its own
headings or a trailing references list. Headings are owned by the report
assembler and the only references list is the generated one, so both
are stripped here.
"""

import re

from neuro_scholar.state.models import SectionResult, is_reserved_title

_HEADING_LINE = re.compile(r"^#{1,6}\s+.+$", re.MULTILINE)

# Lines (trimmed, lowercased) that open a references block.
REFERENCE_BLOCK_MARKERS = frozenset({
    "references",
    "bibliography",
    "works cited",
    "참고문헌",
})
REFERENCE_BLOCK_PREFIXES = ("references:", "bibliography:", "참고문헌:")

# Markdown emphasis/heading decoration around a marker, e.g. "**References**".
_DECORATION = re.compile(r"^[#*_\s]+|[*_\s]+$")


def strip_markdown_headers(text: str) -> str:
    """Remove markdown heading lines of any level."""
    return _HEADING_LINE.sub("", text or "").strip()


def is_reference_block_marker(line: str) -> bool:
    """Whether ``line`` opens an inline references block."""
    t = line.strip().lower()
    bare = _DECORATION.sub("", t)
    if t in REFERENCE_BLOCK_MARKERS or bare in REFERENCE_BLOCK_MARKERS:
        return True
    return t.startswith(REFERENCE_BLOCK_PREFIXES) or bare.startswith(REFERENCE_BLOCK_PREFIXES)


def strip_inline_references_block(text: str) -> str:
    """Truncate ``text`` at the first references-block marker line.
    
    Everything from the marker line onward is dropped. Text without a
    marker is returned unchanged.
    """
    lines = (text or "").split("\n")
    for index, line in enumerate(lines):
        if is_reference_block_marker(line):
            return "\n".join(lines[:index]).strip()
    return text


def clean_section_content(text: str) -> str:
    """Drop a leaked references block, then any leaked headings.
    
    The block is located first so that a "## References" heading still
    marks where it starts.
    """
    return strip_markdown_headers(strip_inline_references_block(text))


def filter_reserved_sections(results: list[SectionResult]) -> list[SectionResult]:
    """Drop section results whose title is reserved for generated content."""
    return [r for r in results if not is_reserved_title(r.title)]
