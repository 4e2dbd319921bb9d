"""Unit tests for session persistence.

Both stores are run through the same behavioral tests.
"""

import pytest

from neuro_scholar.errors import DataValidationError
from neuro_scholar.memory import InMemorySessionStore, SqliteSessionStore, get_session_store
from neuro_scholar.state.enums import MessageRole, SessionStatus
from neuro_scholar.state.models import PlanSection, ResearchPlan, ResearchSession


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    if request.param == "sqlite":
        store = SqliteSessionStore(tmp_path / "sessions.db")
        yield store
        store.close()
    else:
        yield InMemorySessionStore()


def _plan() -> ResearchPlan:
    return ResearchPlan(sections=[
        PlanSection(title="Background", description="Context"),
        PlanSection(title="Mechanisms", description="How"),
    ])


class TestSessions:
    """Tests for session rows."""
    
    def test_create_and_get(self, store):
        session = ResearchSession(chat_id="chat-1", query="microglia")
        store.create_session(session)
        
        record = store.get_session(session.id)
        
        assert record.id == session.id
        assert record.chat_id == "chat-1"
        assert record.status == SessionStatus.PENDING
        assert record.plan is None
        assert record.current_step == 0
        assert store.get_chat_title("chat-1") == "New Chat"
    
    def test_update_fields(self, store):
        session = ResearchSession(chat_id="chat-1", query="q")
        store.create_session(session)
        
        store.update_session(
            session.id, status=SessionStatus.RUNNING, plan=_plan(), current_step=1
        )
        record = store.get_session(session.id)
        
        assert record.status == SessionStatus.RUNNING
        assert record.plan.titles == ["Background", "Mechanisms"]
        assert record.current_step == 1
        assert record.updated_at >= record.created_at
    
    def test_unknown_field_rejected(self, store):
        session = ResearchSession(chat_id="chat-1", query="q")
        store.create_session(session)
        with pytest.raises(DataValidationError):
            store.update_session(session.id, report_content="x")
    
    def test_missing_session(self, store):
        assert store.get_session("missing") is None
    
    def test_list_sessions_newest_first(self, store):
        first = ResearchSession(chat_id="chat-1", query="one")
        second = ResearchSession(chat_id="chat-1", query="two")
        other = ResearchSession(chat_id="chat-2", query="three")
        for session in (first, second, other):
            store.create_session(session)
        
        assert [r.query for r in store.list_sessions_for_chat("chat-1")] == ["two", "one"]
    
    def test_recover_interrupted_sessions(self, store):
        running = ResearchSession(chat_id="c", query="a")
        done = ResearchSession(chat_id="c", query="b")
        store.create_session(running)
        store.create_session(done)
        store.update_session(running.id, status=SessionStatus.RUNNING)
        store.update_session(done.id, status=SessionStatus.COMPLETED)
        
        assert store.recover_interrupted_sessions() == [running.id]
        assert store.get_session(running.id).status == SessionStatus.CANCELLED
        assert store.get_session(done.id).status == SessionStatus.COMPLETED


class TestChatsAndMessages:
    """Tests for chats, messages and uploaded files."""
    
    def test_chat_title(self, store):
        chat_id = store.create_chat(title="Initial")
        store.update_chat_title(chat_id, "Microglia in AD")
        assert store.get_chat_title(chat_id) == "Microglia in AD"
    
    def test_create_chat_is_idempotent(self, store):
        store.create_chat("chat-1", title="First")
        store.create_chat("chat-1", title="Second")
        assert store.get_chat_title("chat-1") == "First"
    
    def test_messages_round_trip_metadata(self, store):
        store.append_message("chat-1", MessageRole.USER, "question")
        store.append_message(
            "chat-1", "assistant", "report", {"sources": [{"doi": "10.1/a", "year": 2020}]}
        )
        
        messages = store.list_messages("chat-1")
        
        assert [m.role for m in messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert messages[0].metadata is None
        assert messages[1].metadata == {"sources": [{"doi": "10.1/a", "year": 2020}]}
    
    def test_uploaded_files(self, store):
        store.add_uploaded_file("chat-1", "notes.md", "md", "Some notes")
        store.add_uploaded_file("chat-2", "other.pdf", "pdf", "Other")
        
        files = store.list_uploaded_files("chat-1")
        
        assert [(f.filename, f.file_type, f.content) for f in files] == [("notes.md", "md", "Some notes")]


def test_get_session_store(tmp_path):
    assert isinstance(get_session_store(), InMemorySessionStore)
    persistent = get_session_store(persistent=True, db_path=tmp_path / "nested" / "db.sqlite")
    assert isinstance(persistent, SqliteSessionStore)
    assert (tmp_path / "nested").is_dir()
    persistent.close()
