"""
Pool selection - eligible creatures for a set of cohorts
"""
from typing import Iterable, List, Sequence

from guessmon.core.catalog import CatalogStore
from guessmon.models import Creature

# A round needs the target plus three distinct distractors
MIN_POOL_SIZE = 4


def select_pool(catalog: CatalogStore, cohort_keys: Iterable[int]) -> List[Creature]:
    """
    All catalog creatures whose cohort is in `cohort_keys`, in id order

    Args:
        catalog: Catalog store (read only)
        cohort_keys: Selected cohorts

    Returns:
        List of creatures (may be empty)
    """
    keys = set(cohort_keys)
    return [c for c in catalog.creatures if c.cohort in keys]


def can_start(pool: Sequence[Creature]) -> bool:
    """True when the pool is large enough to start a session"""
    return len(pool) >= MIN_POOL_SIZE
