"""Unit tests for DOI normalization and URL helpers."""

import pytest

from neuro_scholar.citations.doi import doi_key, extract_dois, normalize_doi, to_doi_url


class TestNormalizeDoi:
    """Tests for normalize_doi."""
    
    def test_markdown_link_wrapper(self):
        """A markdown link around a doi.org URL is stripped with the label."""
        raw = "[DOI: 10.1234/AbC.](https://doi.org/10.1234/AbC.)"
        assert normalize_doi(raw) == "10.1234/AbC"
    
    @pytest.mark.parametrize("raw, expected", [
        ("10.1000/xyz", "10.1000/xyz"),
        ("doi:10.1000/xyz", "10.1000/xyz"),
        ("DOI: 10.1000/xyz", "10.1000/xyz"),
        ("https://doi.org/10.1000/xyz", "10.1000/xyz"),
        ("http://dx.doi.org/10.1000/xyz", "10.1000/xyz"),
        ("https://doi.org/10.1000%2Fxyz", "10.1000/xyz"),
        ("10.1000/xyz).", "10.1000/xyz"),
        ("  10.1000/xyz;  ", "10.1000/xyz"),
        ("10.1000/xyz?!", "10.1000/xyz"),
    ])
    def test_strips_decorations(self, raw, expected):
        assert normalize_doi(raw) == expected
    
    def test_preserves_case(self):
        assert normalize_doi("10.1000/ABC.def") == "10.1000/ABC.def"
    
    @pytest.mark.parametrize("raw", [None, "", "   ", "doi:", "."])
    def test_empty_inputs(self, raw):
        assert normalize_doi(raw) == ""
    
    @pytest.mark.parametrize("raw", [
        "[DOI: 10.1234/AbC.](https://doi.org/10.1234/AbC.)",
        "(doi: https://doi.org/10.1000/x%29y).",
        "https://doi.org/doi:10.1000/xyz.,",
        "([10.1000/nested])",
    ])
    def test_idempotent(self, raw):
        once = normalize_doi(raw)
        assert normalize_doi(once) == once


class TestDoiHelpers:
    """Tests for doi_key, to_doi_url and extract_dois."""
    
    def test_doi_key_is_case_insensitive(self):
        assert doi_key("https://doi.org/10.1000/ABC") == doi_key("10.1000/abc")
    
    def test_to_doi_url(self):
        assert to_doi_url("10.1000/xyz") == "https://doi.org/10.1000/xyz"
    
    def test_to_doi_url_encodes_but_keeps_slash(self):
        """Parentheses would break a markdown link, so they are escaped."""
        url = to_doi_url("10.1002/(SICI)1097-4636")
        assert url == "https://doi.org/10.1002/%28SICI%291097-4636"
    
    def test_to_doi_url_normalizes_first(self):
        assert to_doi_url("doi:10.1000/xyz.") == "https://doi.org/10.1000/xyz"
    
    def test_extract_dois_dedupes_in_order(self):
        text = (
            "See 10.1234/abc. Also https://doi.org/10.1234/ABC and "
            "10.5555/xyz, plus 10.12/short."
        )
        assert extract_dois(text) == ["10.1234/abc", "10.5555/xyz"]
    
    def test_extract_dois_empty(self):
        assert extract_dois("") == []
        assert extract_dois(None) == []
