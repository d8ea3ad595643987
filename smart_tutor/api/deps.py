"""
FastAPI dependencies for the practice session registry.
"""

import time
from collections import OrderedDict
from functools import lru_cache
from typing import Annotated, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status

from smart_tutor.ai.question_generator import QuestionGenerator
from smart_tutor.config import Settings, get_settings
from smart_tutor.engines.practice.progress import InMemoryProgressSink
from smart_tutor.engines.practice.question_bank import QuestionBank
from smart_tutor.engines.practice.question_provider import QuestionProvider
from smart_tutor.logging_config import bind_session_id, get_logger
from smart_tutor.orchestration.session_coordinator import SessionCoordinator, SessionPreferences

logger = get_logger(__name__)


def build_question_bank(settings: Settings) -> QuestionBank:
    """Built-in pools, or the JSON bank named by QUESTION_BANK_PATH."""
    if settings.question_bank_path:
        return QuestionBank.from_json(settings.question_bank_path, default_subject=settings.default_subject)
    return QuestionBank(default_subject=settings.default_subject)


class SessionRegistry:
    """
    Live practice sessions held in process memory.

    Each session gets its own QuestionProvider (and used-question set);
    the bank and the progress sink are shared read-only/append-only.

    Sessions untouched for SESSION_IDLE_TTL_SECONDS are evicted, and at most
    MAX_LIVE_SESSIONS are kept (least recently used go first). Eviction
    abandons the session and drops its progress events.
    """

    def __init__(
        self,
        bank: QuestionBank,
        settings: Settings,
        generator_factory: Optional[Callable[[], Optional[QuestionGenerator]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.bank = bank
        self.settings = settings
        self.progress = InMemoryProgressSink()
        self._generator_factory = generator_factory or self._default_generator
        self._clock = clock
        # Least recently touched first
        self._sessions: "OrderedDict[str, SessionCoordinator]" = OrderedDict()
        self._touched: Dict[str, float] = {}

    def _default_generator(self) -> Optional[QuestionGenerator]:
        if not self.settings.generation_configured:
            return None
        return QuestionGenerator.from_settings(self.settings)

    def create(self, preferences: SessionPreferences) -> SessionCoordinator:
        self.sweep(reserve=1)
        provider = QuestionProvider(self.bank, generator=self._generator_factory())
        coordinator = SessionCoordinator(
            preferences,
            provider,
            progress_sink=self.progress,
            completion_threshold=self.settings.session_completion_threshold,
        )
        self._sessions[coordinator.session_id] = coordinator
        self._touched[coordinator.session_id] = self._clock()
        with bind_session_id(coordinator.session_id):
            logger.info("Session created", extra={"subject": preferences.subject})
        return coordinator

    def get(self, session_id: str) -> Optional[SessionCoordinator]:
        self.sweep()
        coordinator = self._sessions.get(session_id)
        if coordinator is not None:
            self._sessions.move_to_end(session_id)
            self._touched[session_id] = self._clock()
        return coordinator

    def remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._touched.pop(session_id, None)
        self.progress.discard(session_id)

    def sweep(self, reserve: int = 0) -> int:
        """
        Evict idle sessions, then the least recently used ones until
        `reserve` more fit under the limit. Returns the number evicted.
        """
        cutoff = self._clock() - self.settings.session_idle_ttl_seconds
        expired = [sid for sid, touched in self._touched.items() if touched <= cutoff]
        limit = max(self.settings.max_live_sessions - reserve, 0)
        overflow = max(len(self._sessions) - len(expired) - limit, 0)
        survivors = [sid for sid in self._sessions if sid not in expired]
        victims = expired + survivors[:overflow]

        for sid in victims:
            coordinator = self._sessions[sid]
            coordinator.abandon()
            self.remove(sid)
        if victims:
            logger.info("Evicted %d practice sessions", len(victims), extra={"live_sessions": len(self._sessions)})
        return len(victims)

    def __len__(self) -> int:
        return len(self._sessions)


@lru_cache
def get_session_registry() -> SessionRegistry:
    """Process-wide registry (overridden in tests)."""
    settings = get_settings()
    return SessionRegistry(build_question_bank(settings), settings)


Registry = Annotated[SessionRegistry, Depends(get_session_registry)]


def get_coordinator(session_id: str, registry: Registry) -> SessionCoordinator:
    """Resolve a live session or 404."""
    coordinator = registry.get(session_id)
    if coordinator is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return coordinator


Coordinator = Annotated[SessionCoordinator, Depends(get_coordinator)]
