import logging
import time
import uuid
from collections.abc import Callable

from log_sentinel import models
from log_sentinel.conversation import Conversation, RequestState

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    def __init__(self, session_id: str):
        self.message = f"Session '{session_id}' not found"
        super().__init__(self.message)


class FileIndexError(Exception):
    def __init__(self, index: int, count: int):
        self.message = f"No file at index {index} ({count} attached)"
        super().__init__(self.message)


class Session:
    def __init__(self, session_id: str | None = None):
        self.id = session_id or uuid.uuid4().hex
        self.files: list[models.LogFile] = []
        self.repo_context = models.RepoContext()
        self.conversation = Conversation()
        self.last_access = 0.0

    def add_file(self, log_file: models.LogFile) -> None:
        self.files.append(log_file)

    def remove_file(self, index: int) -> models.LogFile:
        # Positional: every later file shifts down by one
        if not 0 <= index < len(self.files):
            raise FileIndexError(index, len(self.files))
        return self.files.pop(index)

    def replace_repo_context(self, repo_context: models.RepoContext) -> models.RepoContext:
        self.repo_context = repo_context.model_copy()
        return self.repo_context


class SessionStore:
    """Process-local sessions; everything is lost on restart.

    Sessions idle for longer than ``idle_ttl`` seconds are dropped, and once
    ``max_sessions`` is reached the least recently used idle session makes
    room for a new one. A session with a request in flight is never evicted.
    """

    def __init__(
        self,
        max_sessions: int = 200,
        idle_ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_sessions = max_sessions
        self.idle_ttl = idle_ttl
        self._clock = clock
        # Insertion order doubles as least-recently-used order
        self._sessions: dict[str, Session] = {}

    def create(self) -> Session:
        self.evict()
        while len(self) >= self.max_sessions:
            oldest = next((s for s in self._sessions.values() if _evictable(s)), None)
            if oldest is None:
                break
            self._drop(oldest.id, "capacity")

        session = Session()
        session.last_access = self._clock()
        self._sessions[session.id] = session
        logger.info(f"Created session {session.id} ({len(self)} active)")
        return session

    def get(self, session_id: str) -> Session:
        self.evict()
        try:
            session = self._sessions.pop(session_id)
        except KeyError:
            raise SessionNotFoundError(session_id) from None
        session.last_access = self._clock()
        self._sessions[session_id] = session
        return session

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)

    def evict(self) -> int:
        now = self._clock()
        expired = [
            s.id for s in self._sessions.values()
            if _evictable(s) and now - s.last_access > self.idle_ttl
        ]
        for session_id in expired:
            self._drop(session_id, "idle timeout")
        return len(expired)

    def _drop(self, session_id: str, reason: str) -> None:
        session = self._sessions.pop(session_id)
        logger.info(f"Evicted session {session_id} ({reason}, {len(session.files)} files)")

    def __len__(self) -> int:
        return len(self._sessions)


def _evictable(session: Session) -> bool:
    return session.conversation.state is RequestState.IDLE
