"""
Round session state machine

Phases:
  idle -> active(1) -> revealed(1) -> active(2) -> ... -> revealed(N) -> complete

Invalid transitions are ignored (the method returns False / None) rather than
raising; callers check can_submit / can_use_hint / can_advance first.
"""
import logging
import random
import uuid
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from guessmon.core.pool import MIN_POOL_SIZE
from guessmon.core.scoring import score_round, milestone_label, rank_title
from guessmon.core.timer import RoundTimer
from guessmon.models import (
    Creature, DifficultyConfig, RoundRecord, SessionState, SessionSummary
)
from guessmon.normalizer import answers_match
from guessmon.utils import shuffled


logger = logging.getLogger(__name__)

TimerFactory = Callable[[Callable[[], None]], RoundTimer]


class Phase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    REVEALED = "revealed"
    COMPLETE = "complete"


class GameMode(str, Enum):
    """How the client presents the target; only zoom carries round state"""
    SILHOUETTE = "silhouette"
    ZOOM = "zoom"
    TYPE_CHALLENGE = "type-challenge"


# Zoom mode: magnification starts high and each hint steps it down
ZOOM_START = 8
ZOOM_STEP = 2
ZOOM_MIN = 2


class QuizSession:
    """
    One player's quiz session

    Args:
        rng: Random source for target/distractor draws (seed it in tests)
        timer_factory: Builds the per-round timer from a tick callback. When
            omitted, no timer runs and the caller drives tick() itself.
        session_id: Identifier used in logs
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        timer_factory: Optional[TimerFactory] = None,
        session_id: Optional[str] = None,
    ):
        self.rng = rng or random.Random()
        self.timer_factory = timer_factory
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self._round_token = 0
        self._reset()

    def _reset(self) -> None:
        self.phase = Phase.IDLE
        self.state = SessionState()
        self.pool: List[Creature] = []
        self.difficulty = DifficultyConfig()
        self.mode = GameMode.SILHOUETTE
        self.zoom_level: Optional[int] = None
        self.zoom_offset: Optional[Tuple[float, float]] = None
        self.target: Optional[Creature] = None
        self.choices: List[Creature] = []
        self.time_remaining = 0
        self.last_correct: Optional[bool] = None
        self.last_delta = 0
        self.milestone: Optional[str] = None
        self.summary: Optional[SessionSummary] = None
        self._timer: Optional[RoundTimer] = None

    # ------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------

    @property
    def can_submit(self) -> bool:
        return self.phase == Phase.ACTIVE

    @property
    def can_use_hint(self) -> bool:
        return (
            self.phase == Phase.ACTIVE
            and self.state.hints_used_this_round < self.difficulty.max_hints
        )

    @property
    def can_advance(self) -> bool:
        return self.phase == Phase.REVEALED

    # ------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------

    def start(
        self,
        pool: Sequence[Creature],
        total_rounds: int,
        difficulty: DifficultyConfig,
        mode: GameMode = GameMode.SILHOUETTE,
    ) -> bool:
        """
        Begin a new session at round 1

        Refused (state unchanged) when the pool has fewer than MIN_POOL_SIZE
        creatures or total_rounds < 1. The mode never changes scoring.

        Returns:
            True if the session started
        """
        if len(pool) < MIN_POOL_SIZE or total_rounds < 1:
            logger.info(
                f"❌ Session {self.session_id} refused: pool={len(pool)} rounds={total_rounds}"
            )
            return False

        self._cancel_timer()
        self._reset()
        self.pool = list(pool)
        self.difficulty = difficulty
        self.mode = GameMode(mode)
        self.state = SessionState(total_rounds=total_rounds)
        logger.info(
            f"✅ Session {self.session_id} started ({self.mode.value}): {total_rounds} rounds, "
            f"pool={len(self.pool)}, duration={difficulty.duration}s"
        )
        self._draw_round()
        return True

    def tick(self) -> bool:
        """
        One timer interval elapsed

        Reaching zero reveals the round as incorrect. A tick outside an active
        round is ignored.
        """
        if self.phase != Phase.ACTIVE:
            return False
        self.time_remaining = max(0, self.time_remaining - 1)
        if self.time_remaining == 0:
            logger.info(f"⏰ Session {self.session_id} round {self.state.round_index} timed out")
            self._resolve(False)
        return True

    def submit_guess(self, text: str) -> bool:
        """
        Typed guess, compared after normalization

        Blank input is ignored.

        Returns:
            True if the guess was accepted (see last_correct for the outcome)
        """
        if not self.can_submit or not text or not text.strip():
            return False
        self._resolve(answers_match(text.strip(), self.target.name))
        return True

    def submit_choice(self, creature_id: int) -> bool:
        """Multiple-choice guess; only ids among the offered choices are accepted"""
        if not self.can_submit or creature_id not in {c.id for c in self.choices}:
            return False
        self._resolve(creature_id == self.target.id)
        return True

    def use_hint(self) -> Optional[str]:
        """
        Reveal the next hint

        Returns:
            The newly revealed hint text, or None if no hint is available
        """
        if not self.can_use_hint:
            return None
        self.state.hints_used_this_round += 1
        if self.zoom_level is not None:
            self.zoom_level = max(ZOOM_MIN, self.zoom_level - ZOOM_STEP)
        return self.hints[-1]

    def advance(self) -> bool:
        """Move past a revealed round: next round, or complete after the last one"""
        if not self.can_advance:
            return False
        if self.state.round_index >= self.state.total_rounds:
            self.summary = self._build_summary()
            self.phase = Phase.COMPLETE
            logger.info(
                f"🏁 Session {self.session_id} complete: score={self.summary.score} "
                f"accuracy={self.summary.accuracy:.2f}"
            )
            return True
        self._draw_round()
        return True

    def quit(self) -> None:
        """Abandon the session from any phase; no summary is produced"""
        self._cancel_timer()
        self._reset()
        logger.info(f"🛑 Session {self.session_id} quit")

    # ------------------------------------------------------------
    # Round content
    # ------------------------------------------------------------

    @property
    def hints(self) -> List[str]:
        """Hint texts revealed so far this round, in fixed order"""
        if self.target is None:
            return []
        name = self.target.name
        all_hints = [
            "Type: " + " / ".join(self.target.tags),
            f"Starts with: {name[0].upper()}",
            f"{len(name)} letters: {name[0]}{'_' * (len(name) - 1)}",
        ]
        return all_hints[:self.state.hints_used_this_round]

    def view(self) -> Dict:
        """Serializable snapshot of the current round for the presentation layer"""
        revealed = self.phase in (Phase.REVEALED, Phase.COMPLETE)
        return {
            "session_id": self.session_id,
            "phase": self.phase.value,
            "mode": self.mode.value,
            "zoom_level": self.zoom_level if not revealed else None,
            "zoom_offset": list(self.zoom_offset) if self.zoom_offset and not revealed else None,
            "round": self.state.round_index,
            "total_rounds": self.state.total_rounds,
            "score": self.state.score,
            "streak": self.state.streak,
            "best_streak": self.state.best_streak,
            "time_remaining": self.time_remaining,
            "duration": self.difficulty.duration,
            "hints": self.hints,
            "hints_remaining": max(0, self.difficulty.max_hints - self.state.hints_used_this_round),
            "image": self.target.sprite_url if self.target else None,
            "choices": [{"id": c.id, "name": c.name, "icon": c.icon_url} for c in self.choices],
            "correct": self.last_correct if revealed else None,
            "points": self.last_delta if revealed else 0,
            "milestone": self.milestone if revealed else None,
            "answer": self.target.model_dump() if revealed and self.target else None,
        }

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _draw_round(self) -> None:
        order = shuffled(self.pool, self.rng)
        self.target = order[0]

        self.choices = []
        if self.difficulty.choice_count:
            others = list({c.id: c for c in order if c.id != self.target.id}.values())
            distractors = shuffled(others, self.rng)[:self.difficulty.choice_count - 1]
            self.choices = shuffled([self.target] + distractors, self.rng)

        if self.mode == GameMode.ZOOM:
            self.zoom_level = ZOOM_START
            self.zoom_offset = (0.2 + self.rng.random() * 0.6, 0.2 + self.rng.random() * 0.6)

        self.state.round_index += 1
        self.state.hints_used_this_round = 0
        self.time_remaining = self.difficulty.duration
        self.last_correct = None
        self.last_delta = 0
        self.milestone = None
        self.phase = Phase.ACTIVE
        self._start_timer()

    def _resolve(self, correct: bool) -> None:
        self._cancel_timer()
        self.state.history.append(RoundRecord(
            creature=self.target,
            correct=correct,
            elapsed_time=self.difficulty.duration - self.time_remaining,
        ))

        result = score_round(
            correct=correct,
            time_remaining=self.time_remaining,
            streak_before=self.state.streak,
            hints_used=self.state.hints_used_this_round,
            base_score=self.difficulty.base_score,
        )
        self.state.score = max(0, self.state.score + result.delta)
        self.state.streak = result.streak
        self.state.best_streak = max(self.state.best_streak, result.streak)

        self.last_correct = correct
        self.last_delta = result.delta
        self.milestone = milestone_label(result.streak) if correct else None
        self.phase = Phase.REVEALED

    def _build_summary(self) -> SessionSummary:
        history = list(self.state.history)
        correct_count = sum(1 for r in history if r.correct)
        accuracy = correct_count / self.state.total_rounds
        average = sum(r.elapsed_time for r in history) / len(history) if history else 0.0
        return SessionSummary(
            score=self.state.score,
            accuracy=accuracy,
            best_streak=self.state.best_streak,
            average_elapsed_time=round(average, 2),
            history=history,
            caught=[r.creature for r in history if r.correct],
            rank=rank_title(accuracy),
        )

    def _start_timer(self) -> None:
        self._round_token += 1
        if self.timer_factory is None:
            return
        token = self._round_token
        self._timer = self.timer_factory(lambda: self._on_timer(token)).start()

    def _on_timer(self, token: int) -> None:
        # Ticks from a previous round's timer are stale
        if token != self._round_token:
            return
        self.tick()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
