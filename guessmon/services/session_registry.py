"""Session registry - in-memory sessions keyed by an opaque id"""
import functools
import logging
import random
import time
import uuid
from typing import Callable, Dict, Optional

from guessmon.core.session import QuizSession
from guessmon.core.timer import RoundTimer


logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Holds live QuizSession objects for the HTTP layer

    Sessions are dropped when they complete, when quit, or once nobody has
    touched them for `idle_timeout` seconds (checked on every create()).

    Args:
        tick_interval: Seconds per round-timer tick; None disables timers
        rng: Random source shared by new sessions (tests inject a seeded one)
        idle_timeout: Seconds an untouched session is kept
        clock: Monotonic time source (tests pass a fake)
    """

    def __init__(
        self,
        tick_interval: Optional[float] = 1.0,
        rng: Optional[random.Random] = None,
        idle_timeout: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.tick_interval = tick_interval
        self.rng = rng
        self.idle_timeout = idle_timeout
        self.clock = clock
        self._sessions: Dict[str, QuizSession] = {}
        self._last_touched: Dict[str, float] = {}

    def create(self) -> QuizSession:
        self.evict_idle()
        session_id = uuid.uuid4().hex
        factory = functools.partial(RoundTimer, self.tick_interval) if self.tick_interval else None
        session = QuizSession(rng=self.rng, timer_factory=factory, session_id=session_id)
        self._sessions[session_id] = session
        self._last_touched[session_id] = self.clock()
        return session

    def get(self, session_id: str) -> Optional[QuizSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._last_touched[session_id] = self.clock()
        return session

    def discard(self, session_id: str) -> Optional[QuizSession]:
        session = self._sessions.pop(session_id, None)
        self._last_touched.pop(session_id, None)
        if session is not None:
            session.quit()
        return session

    def evict_idle(self) -> int:
        """Drop sessions untouched for longer than idle_timeout"""
        cutoff = self.clock() - self.idle_timeout
        stale = [sid for sid, touched in self._last_touched.items() if touched < cutoff]
        for session_id in stale:
            self.discard(session_id)
        if stale:
            logger.info(f"🧹 Evicted {len(stale)} idle sessions")
        return len(stale)

    def clear(self) -> int:
        count = len(self._sessions)
        for session in self._sessions.values():
            session.quit()
        self._sessions.clear()
        self._last_touched.clear()
        return count

    def __len__(self) -> int:
        return len(self._sessions)
