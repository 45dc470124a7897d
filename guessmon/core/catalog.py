"""
Catalog store - authoritative in-memory creatures and cohort index

The store starts from the bundled baseline and is written by a single sync
merge; everything else reads it.
"""
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from guessmon.catalog_loader import load_creatures, load_cohorts, load_cohort_styles
from guessmon.models import Creature, CohortInfo, SyncResult
from guessmon.utils import roman_numeral


logger = logging.getLogger(__name__)

# Bucket for ids past every known cohort range
FUTURE_COHORT = 10

DEFAULT_STYLE = {"color": "#00CFC1", "icon": "🌟", "region_label": "New Region"}


class CatalogStore:
    """Creatures ordered by id plus the cohort -> CohortInfo mapping"""

    def __init__(
        self,
        creatures: Iterable[Creature],
        cohorts: Mapping[int, CohortInfo],
        cohort_styles: Optional[Mapping[int, Mapping[str, str]]] = None,
        style_defaults: Optional[Mapping[str, str]] = None,
    ):
        by_id: Dict[int, Creature] = {}
        for creature in creatures:
            by_id.setdefault(creature.id, creature)
        self._creatures: Tuple[Creature, ...] = tuple(sorted(by_id.values(), key=lambda c: c.id))
        self._by_id = by_id
        self._cohorts: Dict[int, CohortInfo] = dict(cohorts)
        self._cohort_styles = {int(k): dict(v) for k, v in (cohort_styles or {}).items()}
        self._style_defaults = {**DEFAULT_STYLE, **(style_defaults or {})}

        # Static lookup table, frozen before any merge can widen ranges
        self._static_ranges: List[Tuple[int, int, int]] = sorted(
            (info.id_range[0], info.id_range[1], key) for key, info in self._cohorts.items()
        )
        self.static_cohorts = frozenset(self._cohorts)
        self.baseline_max_id = self._creatures[-1].id if self._creatures else 0
        self.merged = False

    @classmethod
    def from_bundled(cls) -> "CatalogStore":
        """Build a store from the CSV/YAML data shipped with the package"""
        styles, defaults = load_cohort_styles()
        return cls(load_creatures(), load_cohorts(), styles, defaults)

    # ------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------

    @property
    def creatures(self) -> Tuple[Creature, ...]:
        return self._creatures

    @property
    def cohorts(self) -> Mapping[int, CohortInfo]:
        return MappingProxyType(self._cohorts)

    def __len__(self) -> int:
        return len(self._creatures)

    def __contains__(self, creature_id: int) -> bool:
        return creature_id in self._by_id

    def get(self, creature_id: int) -> Optional[Creature]:
        return self._by_id.get(creature_id)

    def cohort_for_id(self, creature_id: int) -> int:
        """Cohort from the static id ranges; unknown ids land in FUTURE_COHORT"""
        for low, high, key in self._static_ranges:
            if low <= creature_id <= high:
                return key
        return FUTURE_COHORT

    def pool_sizes(self) -> Dict[int, int]:
        sizes = {key: 0 for key in self._cohorts}
        for creature in self._creatures:
            sizes[creature.cohort] = sizes.get(creature.cohort, 0) + 1
        return sizes

    def synthesize_cohort(self, cohort: int, ids: Iterable[int]) -> CohortInfo:
        """
        Build CohortInfo for a cohort that the bundled data does not know

        Args:
            cohort: Cohort key
            ids: Creature ids observed in that cohort (non-empty)

        Returns:
            CohortInfo spanning [min id, max id] with canonical or default styling
        """
        ids = list(ids)
        numeral = roman_numeral(cohort)
        style = {**self._style_defaults, **self._cohort_styles.get(cohort, {})}
        return CohortInfo(
            cohort=cohort,
            display_name=f"Generation {numeral}",
            region_label=style["region_label"],
            short_label=f"Gen {numeral}",
            color=style["color"],
            icon=style["icon"],
            id_range=(min(ids), max(ids)),
        )

    # ------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------

    def merge(self, result: SyncResult) -> int:
        """
        Apply a sync result

        Creatures whose id is already present are skipped, so merging the same
        result twice is the same as merging it once. Existing creatures are never
        removed. Known cohorts get their id_range widened; unknown ones get the
        synthesized CohortInfo from the result (or one built here).

        Args:
            result: Output of SyncEngine.sync()

        Returns:
            Number of creatures added
        """
        fresh = [c for c in result.new_entities if c.id not in self._by_id]
        if not fresh:
            return 0

        for creature in fresh:
            self._by_id[creature.id] = creature
        self._creatures = tuple(sorted(self._by_id.values(), key=lambda c: c.id))

        for creature in fresh:
            known = self._cohorts.get(creature.cohort)
            if known is not None:
                self._cohorts[creature.cohort] = known.widened(creature.id)
                continue
            info = result.new_cohorts.get(creature.cohort)
            if info is None:
                info = self.synthesize_cohort(
                    creature.cohort,
                    [c.id for c in fresh if c.cohort == creature.cohort],
                )
            self._cohorts[creature.cohort] = info.widened(creature.id)

        self.merged = True
        logger.info(f"✅ Merged {len(fresh)} new creatures (catalog size {len(self._creatures)})")
        return len(fresh)
