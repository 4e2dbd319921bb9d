"""Recognized inline citation forms.

The accepted surface forms are kept as a table so the grammar can be
inspected and tested apart from the rewriting logic. At any text
position the forms are tried in table order, which lets composite forms
(``([DOI: x])``, ``[DOI: x](url)``) win over their shorter prefixes.
"""

import re
from dataclasses import dataclass

# DOI body inside a bare marker: stops at whitespace, quotes and closers.
BARE_DOI = r"10\.\d+/[^\s<>\")\]]+"
# DOI body inside a markdown link label: runs to the closing bracket.
LINK_LABEL_DOI = r"10\.\d+/[^\]]+"


@dataclass(frozen=True)
class CitationForm:
    """One accepted citation surface form.
    
    Attributes:
        name: Identifier of the form, also used as regex group name
        template: Regex with a ``{doi}`` placeholder for the DOI capture
        doi_pattern: Regex the DOI capture must match
        example: Sample text matching the form
        parenthesized: Whether the rewritten link is wrapped in parentheses
    """
    
    name: str
    template: str
    doi_pattern: str
    example: str
    parenthesized: bool = True
    
    def regex(self) -> str:
        """Standalone regex for this form, DOI in the group named ``doi``."""
        return self.template.format(doi=f"(?P<doi>{self.doi_pattern})")


CITATION_FORMS: tuple[CitationForm, ...] = (
    CitationForm(
        name="paren_markdown_link",
        template=r"\(\[DOI:\s*{doi}\]\([^)]*\)\)",
        doi_pattern=LINK_LABEL_DOI,
        example="([DOI: 10.1000/xyz](https://doi.org/10.1000/xyz))",
    ),
    CitationForm(
        name="paren_bracket",
        template=r"\(\[DOI:\s*{doi}\]\)",
        doi_pattern=BARE_DOI,
        example="([DOI: 10.1000/xyz])",
    ),
    CitationForm(
        name="markdown_link",
        template=r"\[DOI:\s*{doi}\]\([^)]*\)",
        doi_pattern=LINK_LABEL_DOI,
        example="[DOI: 10.1000/xyz](https://doi.org/10.1000/xyz)",
        parenthesized=False,
    ),
    CitationForm(
        name="bracket",
        template=r"\[DOI:\s*{doi}\]",
        doi_pattern=BARE_DOI,
        example="[DOI: 10.1000/xyz]",
    ),
    CitationForm(
        name="paren",
        template=r"\(DOI:\s*{doi}\)",
        doi_pattern=BARE_DOI,
        example="(DOI: 10.1000/xyz)",
    ),
)


def compile_citation_grammar(
    forms: tuple[CitationForm, ...] = CITATION_FORMS,
) -> re.Pattern[str]:
    """Compile the forms into one case-insensitive alternation.
    
    Each form becomes a named group ``<name>`` whose DOI is captured in
    ``<name>_doi``.
    
    Args:
        forms: Citation forms in priority order
        
    Returns:
        Compiled pattern
    """
    alternatives = []
    for form in forms:
        body = form.template.format(doi=f"(?P<{form.name}_doi>{form.doi_pattern})")
        alternatives.append(f"(?P<{form.name}>{body})")
    return re.compile("|".join(alternatives), re.IGNORECASE)


def match_form(
    match: re.Match[str],
    forms: tuple[CitationForm, ...] = CITATION_FORMS,
) -> tuple[CitationForm, str]:
    """Return the form that produced ``match`` and its raw DOI."""
    for form in forms:
        if match.group(form.name) is not None:
            return form, match.group(f"{form.name}_doi")
    raise ValueError(f"Match does not belong to any citation form: {match.group(0)!r}")


CITATION_GRAMMAR = compile_citation_grammar()
