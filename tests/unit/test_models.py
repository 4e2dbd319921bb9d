"""Unit tests for state models and enums."""

import pytest
from pydantic import ValidationError

from neuro_scholar.errors import SessionStateError
from neuro_scholar.state import (
    AcademicSource,
    PlanSection,
    ReportLanguage,
    ResearchPlan,
    ResearchSession,
    SessionStatus,
    UploadedFile,
    create_initial_state,
)


class TestSessionStatus:
    """Tests for status lifecycle rules."""
    
    @pytest.mark.parametrize("current, target, allowed", [
        (SessionStatus.PENDING, SessionStatus.RUNNING, True),
        (SessionStatus.RUNNING, SessionStatus.PAUSED, True),
        (SessionStatus.PAUSED, SessionStatus.RUNNING, True),
        (SessionStatus.PAUSED, SessionStatus.CANCELLED, True),
        (SessionStatus.RUNNING, SessionStatus.COMPLETED, True),
        (SessionStatus.PENDING, SessionStatus.PAUSED, False),
        (SessionStatus.COMPLETED, SessionStatus.RUNNING, False),
        (SessionStatus.CANCELLED, SessionStatus.RUNNING, False),
    ])
    def test_transitions(self, current, target, allowed):
        assert current.can_transition_to(target) is allowed
    
    def test_terminal(self):
        assert SessionStatus.COMPLETED.is_terminal
        assert SessionStatus.CANCELLED.is_terminal
        assert not SessionStatus.PAUSED.is_terminal


class TestReportLanguage:
    """Tests for language coercion."""
    
    @pytest.mark.parametrize("value, expected", [
        ("en", ReportLanguage.EN),
        ("ko", ReportLanguage.KO),
        ("ko-KR", ReportLanguage.KO),
        ("KO", ReportLanguage.KO),
        ("fr", ReportLanguage.EN),
        (None, ReportLanguage.EN),
        (ReportLanguage.KO, ReportLanguage.KO),
    ])
    def test_coerce(self, value, expected):
        assert ReportLanguage.coerce(value) is expected


class TestAcademicSource:
    """Tests for AcademicSource."""
    
    def test_doi_normalized_and_url_derived(self):
        source = AcademicSource(doi="https://doi.org/10.1000/ABC.", title="T")
        assert source.doi == "10.1000/ABC"
        assert source.url == "https://doi.org/10.1000/ABC"
        assert source.identity_key == "10.1000/abc"
    
    def test_empty_doi_rejected(self):
        with pytest.raises(ValidationError):
            AcademicSource(doi="doi:")
    
    def test_event_payload(self, source_factory):
        source = source_factory("10.1/a", title="T", journal="J")
        assert source.to_event_payload() == {
            "title": "T",
            "url": "https://doi.org/10.1/a",
            "doi": "10.1/a",
            "journal": "J",
        }


class TestResearchPlan:
    """Tests for plan validation."""
    
    def test_requires_a_section(self):
        with pytest.raises(ValidationError):
            ResearchPlan(sections=[])
    
    def test_requires_titles(self):
        with pytest.raises(ValidationError):
            ResearchPlan.model_validate({"sections": [{"title": "  ", "description": "x"}]})
    
    def test_content_sections_skip_reserved(self):
        plan = ResearchPlan(sections=[
            PlanSection(title="Background"),
            PlanSection(title="Executive Summary"),
            PlanSection(title="References"),
        ])
        assert plan.titles == ["Background", "Executive Summary", "References"]
        assert [s.title for s in plan.content_sections()] == ["Background"]
    
    def test_missing_description_defaults(self):
        plan = ResearchPlan.model_validate({"sections": [{"title": "A", "description": None}]})
        assert plan.sections[0].description == ""


class TestResearchSession:
    """Tests for ResearchSession invariants."""
    
    def test_illegal_transition_raises(self):
        session = ResearchSession(chat_id="c", query="q")
        session.set_status(SessionStatus.RUNNING)
        session.set_status(SessionStatus.COMPLETED)
        with pytest.raises(SessionStateError):
            session.set_status(SessionStatus.RUNNING)
    
    def test_step_never_decreases(self):
        session = ResearchSession(chat_id="c", query="q")
        session.advance_to(2)
        session.advance_to(2)
        with pytest.raises(SessionStateError):
            session.advance_to(1)
    
    def test_add_sources_dedupes(self, source_factory):
        session = ResearchSession(chat_id="c", query="q")
        added = session.add_sources([source_factory("10.1/a"), source_factory("10.1/b")])
        added_again = session.add_sources([source_factory("10.1/A"), source_factory("10.1/c")])
        
        assert [s.doi for s in added] == ["10.1/a", "10.1/b"]
        assert [s.doi for s in added_again] == ["10.1/c"]
        assert [s.doi for s in session.sources] == ["10.1/a", "10.1/b", "10.1/c"]


def test_uploaded_file_type_validated():
    assert UploadedFile(chat_id="c", filename="x.QMD", file_type=".QMD").file_type == "qmd"
    with pytest.raises(ValidationError):
        UploadedFile(chat_id="c", filename="x.docx", file_type="docx")


def test_create_initial_state():
    state = create_initial_state("s1", "c1", "query", "ko")
    assert state["section_index"] == 0
    assert state["section_results"] == []
    assert state["enhanced_query"] == "query"
    assert state["no_sources"] is False
