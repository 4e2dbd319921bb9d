"""Durable records of research sessions and conversation messages.

The orchestrator writes through the small ``SessionStore`` interface:
insert a session when a run starts, update individual fields as the run
advances, and append the finished report as a conversation message.
Two implementations are provided: SQLite for the desktop app and an
in-memory store for tests and ephemeral runs.
"""

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from neuro_scholar.config import settings
from neuro_scholar.errors.exceptions import DataValidationError
from neuro_scholar.state.enums import MessageRole, SessionStatus
from neuro_scholar.state.models import (
    ResearchPlan,
    ResearchSession,
    SessionRecord,
    StoredMessage,
    UploadedFile,
)

logger = logging.getLogger(__name__)

# Columns of research_sessions that may be changed after insert.
UPDATABLE_SESSION_FIELDS = frozenset({"status", "query", "plan", "current_step"})
ACTIVE_STATUSES = (SessionStatus.PENDING, SessionStatus.RUNNING, SessionStatus.PAUSED)
DEFAULT_CHAT_TITLE = "New Chat"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _serialize_field(name: str, value: Any) -> Any:
    if name == "plan":
        if value is None:
            return None
        if isinstance(value, ResearchPlan):
            return value.model_dump_json()
        return json.dumps(value)
    if name == "status":
        return SessionStatus(value).value
    return value


def _check_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - UPDATABLE_SESSION_FIELDS
    if unknown:
        raise DataValidationError(
            f"Cannot update session field(s): {', '.join(sorted(unknown))}",
            field=",".join(sorted(unknown)),
            constraint=f"one of {sorted(UPDATABLE_SESSION_FIELDS)}",
        )


class SessionStore(ABC):
    """Row store for sessions, chats, messages and uploaded files."""
    
    @abstractmethod
    def create_chat(self, chat_id: str | None = None, title: str = DEFAULT_CHAT_TITLE, mode: str = "research") -> str:
        """Insert a chat if it does not exist and return its id."""
    
    @abstractmethod
    def get_chat_title(self, chat_id: str) -> str | None:
        """Current chat title, or None for an unknown chat."""
    
    @abstractmethod
    def update_chat_title(self, chat_id: str, title: str) -> None:
        """Rename a chat."""
    
    @abstractmethod
    def create_session(self, session: ResearchSession) -> None:
        """Insert a new session row."""
    
    @abstractmethod
    def update_session(self, session_id: str, **fields: Any) -> None:
        """Update individual session fields and bump ``updated_at``."""
    
    @abstractmethod
    def get_session(self, session_id: str) -> SessionRecord | None:
        """Persisted view of one session."""
    
    @abstractmethod
    def list_sessions_for_chat(self, chat_id: str) -> list[SessionRecord]:
        """Sessions of a chat, newest first."""
    
    @abstractmethod
    def append_message(
        self,
        chat_id: str,
        role: MessageRole | str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Append a conversation message and return its id."""
    
    @abstractmethod
    def list_messages(self, chat_id: str) -> list[StoredMessage]:
        """Messages of a chat, oldest first."""
    
    @abstractmethod
    def add_uploaded_file(self, chat_id: str, filename: str, file_type: str, content: str) -> str:
        """Attach a parsed document to a chat and return its id."""
    
    @abstractmethod
    def list_uploaded_files(self, chat_id: str) -> list[UploadedFile]:
        """Documents attached to a chat, in upload order."""
    
    @abstractmethod
    def recover_interrupted_sessions(self) -> list[str]:
        """Close sessions left active by a previous process.
        
        Returns:
            Ids of the sessions that were marked ``cancelled``.
        """


# =============================================================================
# SQLite
# =============================================================================

SCHEMA = """
CREATE TABLE IF NOT EXISTS chats (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    mode TEXT NOT NULL DEFAULT 'research',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    chat_id TEXT REFERENCES chats(id) ON DELETE CASCADE,
    role TEXT NOT NULL CHECK (role IN ('user', 'assistant', 'system')),
    content TEXT NOT NULL,
    metadata TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS research_sessions (
    id TEXT PRIMARY KEY,
    chat_id TEXT REFERENCES chats(id) ON DELETE CASCADE,
    status TEXT NOT NULL CHECK (status IN ('pending', 'running', 'paused', 'cancelled', 'completed')),
    query TEXT NOT NULL,
    plan TEXT,
    current_step INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS uploaded_files (
    id TEXT PRIMARY KEY,
    chat_id TEXT REFERENCES chats(id) ON DELETE CASCADE,
    filename TEXT NOT NULL,
    file_type TEXT NOT NULL CHECK (file_type IN ('pdf', 'md', 'qmd')),
    content TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_messages_chat_id ON messages(chat_id);
CREATE INDEX IF NOT EXISTS idx_research_sessions_chat_id ON research_sessions(chat_id);
CREATE INDEX IF NOT EXISTS idx_uploaded_files_chat_id ON uploaded_files(chat_id);
"""


class SqliteSessionStore(SessionStore):
    """
    SQLite-backed session store.
    
    One connection is shared across threads behind a lock, so pause and
    resume requests from a UI thread can write while a run is active.
    
    Example:
        ```python
        store = SqliteSessionStore("data/neuro_scholar.db")
        chat_id = store.create_chat(title="Ketamine and depression")
        ```
    """
    
    def __init__(self, db_path: Path | str | None = None):
        path = db_path or settings.database_path
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._lock, self._conn:
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(SCHEMA)
    
    def close(self) -> None:
        with self._lock:
            self._conn.close()
    
    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        with self._lock, self._conn:
            return self._conn.execute(sql, params)
    
    def _fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()
    
    # -- chats ---------------------------------------------------------------
    
    def create_chat(self, chat_id: str | None = None, title: str = DEFAULT_CHAT_TITLE, mode: str = "research") -> str:
        chat_id = chat_id or uuid4().hex
        now = _now_iso()
        self._execute(
            "INSERT OR IGNORE INTO chats (id, title, mode, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
            (chat_id, title, mode, now, now),
        )
        return chat_id
    
    def get_chat_title(self, chat_id: str) -> str | None:
        rows = self._fetchall("SELECT title FROM chats WHERE id = ?", (chat_id,))
        return rows[0]["title"] if rows else None
    
    def update_chat_title(self, chat_id: str, title: str) -> None:
        self._execute(
            "UPDATE chats SET title = ?, updated_at = ? WHERE id = ?",
            (title, _now_iso(), chat_id),
        )
    
    # -- sessions ------------------------------------------------------------
    
    def create_session(self, session: ResearchSession) -> None:
        self.create_chat(session.chat_id)
        now = _now_iso()
        self._execute(
            """INSERT INTO research_sessions
               (id, chat_id, status, query, plan, current_step, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                session.id,
                session.chat_id,
                session.status.value,
                session.query,
                _serialize_field("plan", session.plan),
                session.current_step,
                now,
                now,
            ),
        )
    
    def update_session(self, session_id: str, **fields: Any) -> None:
        if not fields:
            return
        _check_fields(fields)
        columns = sorted(fields)
        assignments = ", ".join(f"{name} = ?" for name in columns)
        values = tuple(_serialize_field(name, fields[name]) for name in columns)
        self._execute(
            f"UPDATE research_sessions SET {assignments}, updated_at = ? WHERE id = ?",
            values + (_now_iso(), session_id),
        )
    
    @staticmethod
    def _to_record(row: sqlite3.Row) -> SessionRecord:
        return SessionRecord(
            id=row["id"],
            chat_id=row["chat_id"],
            status=SessionStatus(row["status"]),
            query=row["query"],
            plan=ResearchPlan.model_validate_json(row["plan"]) if row["plan"] else None,
            current_step=row["current_step"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
    
    def get_session(self, session_id: str) -> SessionRecord | None:
        rows = self._fetchall("SELECT * FROM research_sessions WHERE id = ?", (session_id,))
        return self._to_record(rows[0]) if rows else None
    
    def list_sessions_for_chat(self, chat_id: str) -> list[SessionRecord]:
        rows = self._fetchall(
            "SELECT * FROM research_sessions WHERE chat_id = ? ORDER BY created_at DESC, rowid DESC",
            (chat_id,),
        )
        return [self._to_record(row) for row in rows]
    
    def recover_interrupted_sessions(self) -> list[str]:
        placeholders = ", ".join("?" for _ in ACTIVE_STATUSES)
        statuses = tuple(s.value for s in ACTIVE_STATUSES)
        with self._lock, self._conn:
            ids = [
                row["id"]
                for row in self._conn.execute(
                    f"SELECT id FROM research_sessions WHERE status IN ({placeholders})",
                    statuses,
                ).fetchall()
            ]
            self._conn.execute(
                f"UPDATE research_sessions SET status = ?, updated_at = ? WHERE status IN ({placeholders})",
                (SessionStatus.CANCELLED.value, _now_iso()) + statuses,
            )
        if ids:
            logger.warning(f"STORE: closed {len(ids)} interrupted session(s) as cancelled")
        return ids
    
    # -- messages and files --------------------------------------------------
    
    def append_message(
        self,
        chat_id: str,
        role: MessageRole | str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        self.create_chat(chat_id)
        message_id = uuid4().hex
        self._execute(
            "INSERT INTO messages (id, chat_id, role, content, metadata, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (
                message_id,
                chat_id,
                MessageRole(role).value,
                content,
                json.dumps(metadata, ensure_ascii=False) if metadata is not None else None,
                _now_iso(),
            ),
        )
        return message_id
    
    def list_messages(self, chat_id: str) -> list[StoredMessage]:
        rows = self._fetchall(
            "SELECT * FROM messages WHERE chat_id = ? ORDER BY created_at, rowid", (chat_id,)
        )
        return [
            StoredMessage(
                id=row["id"],
                chat_id=row["chat_id"],
                role=MessageRole(row["role"]),
                content=row["content"],
                metadata=json.loads(row["metadata"]) if row["metadata"] else None,
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]
    
    def add_uploaded_file(self, chat_id: str, filename: str, file_type: str, content: str) -> str:
        self.create_chat(chat_id)
        record = UploadedFile(chat_id=chat_id, filename=filename, file_type=file_type, content=content)
        self._execute(
            "INSERT INTO uploaded_files (id, chat_id, filename, file_type, content, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (record.id, chat_id, record.filename, record.file_type, record.content, record.created_at.isoformat()),
        )
        return record.id
    
    def list_uploaded_files(self, chat_id: str) -> list[UploadedFile]:
        rows = self._fetchall(
            "SELECT * FROM uploaded_files WHERE chat_id = ? ORDER BY created_at, rowid", (chat_id,)
        )
        return [
            UploadedFile(
                id=row["id"],
                chat_id=row["chat_id"],
                filename=row["filename"],
                file_type=row["file_type"],
                content=row["content"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]


# =============================================================================
# In-memory
# =============================================================================


class InMemorySessionStore(SessionStore):
    """Dict-backed store with the same behavior as the SQLite store."""
    
    def __init__(self):
        self._lock = threading.Lock()
        self.chats: dict[str, dict[str, Any]] = {}
        self.sessions: dict[str, dict[str, Any]] = {}
        self.messages: list[StoredMessage] = []
        self.files: list[UploadedFile] = []
    
    def create_chat(self, chat_id: str | None = None, title: str = DEFAULT_CHAT_TITLE, mode: str = "research") -> str:
        chat_id = chat_id or uuid4().hex
        with self._lock:
            if chat_id not in self.chats:
                now = _now_iso()
                self.chats[chat_id] = {"title": title, "mode": mode, "created_at": now, "updated_at": now}
        return chat_id
    
    def get_chat_title(self, chat_id: str) -> str | None:
        chat = self.chats.get(chat_id)
        return chat["title"] if chat else None
    
    def update_chat_title(self, chat_id: str, title: str) -> None:
        with self._lock:
            if chat_id in self.chats:
                self.chats[chat_id].update(title=title, updated_at=_now_iso())
    
    def create_session(self, session: ResearchSession) -> None:
        self.create_chat(session.chat_id)
        now = _now_iso()
        with self._lock:
            self.sessions[session.id] = {
                "id": session.id,
                "chat_id": session.chat_id,
                "status": session.status.value,
                "query": session.query,
                "plan": _serialize_field("plan", session.plan),
                "current_step": session.current_step,
                "created_at": now,
                "updated_at": now,
            }
    
    def update_session(self, session_id: str, **fields: Any) -> None:
        if not fields:
            return
        _check_fields(fields)
        with self._lock:
            row = self.sessions.get(session_id)
            if row is None:
                return
            for name, value in fields.items():
                row[name] = _serialize_field(name, value)
            row["updated_at"] = _now_iso()
    
    @staticmethod
    def _to_record(row: dict[str, Any]) -> SessionRecord:
        return SessionRecord(
            **{**row, "plan": ResearchPlan.model_validate_json(row["plan"]) if row["plan"] else None}
        )
    
    def get_session(self, session_id: str) -> SessionRecord | None:
        row = self.sessions.get(session_id)
        return self._to_record(row) if row else None
    
    def list_sessions_for_chat(self, chat_id: str) -> list[SessionRecord]:
        rows = [r for r in self.sessions.values() if r["chat_id"] == chat_id]
        return [self._to_record(r) for r in reversed(rows)]
    
    def recover_interrupted_sessions(self) -> list[str]:
        active = {s.value for s in ACTIVE_STATUSES}
        recovered = []
        with self._lock:
            for row in self.sessions.values():
                if row["status"] in active:
                    row["status"] = SessionStatus.CANCELLED.value
                    row["updated_at"] = _now_iso()
                    recovered.append(row["id"])
        return recovered
    
    def append_message(
        self,
        chat_id: str,
        role: MessageRole | str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        self.create_chat(chat_id)
        # Round-trip through JSON so stored metadata matches the SQLite store.
        stored_metadata = json.loads(json.dumps(metadata)) if metadata is not None else None
        message = StoredMessage(chat_id=chat_id, role=MessageRole(role), content=content, metadata=stored_metadata)
        with self._lock:
            self.messages.append(message)
        return message.id
    
    def list_messages(self, chat_id: str) -> list[StoredMessage]:
        return [m for m in self.messages if m.chat_id == chat_id]
    
    def add_uploaded_file(self, chat_id: str, filename: str, file_type: str, content: str) -> str:
        self.create_chat(chat_id)
        record = UploadedFile(chat_id=chat_id, filename=filename, file_type=file_type, content=content)
        with self._lock:
            self.files.append(record)
        return record.id
    
    def list_uploaded_files(self, chat_id: str) -> list[UploadedFile]:
        return [f for f in self.files if f.chat_id == chat_id]


def get_session_store(persistent: bool = False, db_path: Path | str | None = None) -> SessionStore:
    """
    Get a session store.
    
    Args:
        persistent: If True, use SQLite. If False, keep everything in memory.
        db_path: SQLite file path (only used when persistent=True).
        
    Returns:
        SessionStore instance.
    """
    if persistent:
        return SqliteSessionStore(db_path)
    return InMemorySessionStore()
