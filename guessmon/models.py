"""
Data models for the quiz service
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Dict, Optional, Tuple

from guessmon.utils import sprite_url, icon_url


class Creature(BaseModel):
    """One catalog entry. Identity is `id`; `name` is what players guess."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    name: str = Field(min_length=1)
    primary_tag: str
    secondary_tag: Optional[str] = None
    cohort: int = Field(gt=0)

    @property
    def tags(self) -> List[str]:
        return [t for t in (self.primary_tag, self.secondary_tag) if t]

    @property
    def sprite_url(self) -> str:
        return sprite_url(self.id)

    @property
    def icon_url(self) -> str:
        return icon_url(self.id)


class CohortInfo(BaseModel):
    """Display metadata for a cohort (generation)"""
    cohort: int
    display_name: str
    region_label: str
    short_label: str
    color: str
    icon: str
    id_range: Tuple[int, int]  # advisory [min_id, max_id], only ever widened

    @field_validator("id_range")
    @classmethod
    def _ordered_range(cls, value: Tuple[int, int]) -> Tuple[int, int]:
        if value[0] > value[1]:
            raise ValueError(f"id_range must satisfy min <= max, got {value}")
        return value

    def widened(self, creature_id: int) -> "CohortInfo":
        """Return a copy whose id_range also covers `creature_id`"""
        low, high = self.id_range
        if low <= creature_id <= high:
            return self
        return self.model_copy(update={"id_range": (min(low, creature_id), max(high, creature_id))})


class SyncResult(BaseModel):
    """Creatures and cohorts discovered by one catalog sync"""
    new_entities: List[Creature] = []
    new_cohorts: Dict[int, CohortInfo] = {}

    @property
    def is_empty(self) -> bool:
        return not self.new_entities


class DifficultyConfig(BaseModel):
    """Difficulty preset"""
    label: str = ""
    duration: int = Field(default=20, gt=0)        # seconds per round
    max_hints: int = Field(default=2, ge=0, le=3)  # only three hint kinds exist
    base_score: int = 100
    choice_count: int = 0                          # 0 = typed answer, 4 = multiple choice

    @field_validator("choice_count")
    @classmethod
    def _choice_count(cls, value: int) -> int:
        if value not in (0, 4):
            raise ValueError(f"choice_count must be 0 or 4, got {value}")
        return value


class RoundRecord(BaseModel):
    """Outcome of one resolved round"""
    model_config = ConfigDict(frozen=True)

    creature: Creature
    correct: bool
    elapsed_time: float = Field(ge=0)


class SessionState(BaseModel):
    """Per-session counters owned by the round state machine"""
    model_config = ConfigDict(validate_assignment=True)

    round_index: int = Field(default=0, ge=0)
    total_rounds: int = Field(default=0, ge=0)
    score: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    hints_used_this_round: int = Field(default=0, ge=0)
    history: List[RoundRecord] = []


class SessionSummary(BaseModel):
    """Final result handed to the presentation layer"""
    score: int
    accuracy: float               # correct_count / total_rounds
    best_streak: int
    average_elapsed_time: float
    history: List[RoundRecord]
    caught: List[Creature] = []   # creatures guessed correctly, in order
    rank: str = ""
