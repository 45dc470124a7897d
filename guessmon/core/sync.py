"""
Catalog synchronization engine

Discovers creatures published after the bundled baseline:

  1. GET species count; stop if nothing beyond the baseline
  2. GET the species list past the baseline offset
  3. For each batch of `batch_size` records, fetch detail (types) and species
     (generation) concurrently; a failed record is dropped, its siblings kept
  4. Synthesize CohortInfo for cohorts the bundled data does not know

The engine only reads the CatalogStore. Applying the result is the caller's job
(see services.catalog_sync), and a cancelled sync returns nothing to apply.
"""
import asyncio
import logging
import re
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

import httpx

from guessmon.config import SyncSettings
from guessmon.core.catalog import CatalogStore
from guessmon.models import Creature, SyncResult
from guessmon.normalizer import format_species_name


logger = logging.getLogger(__name__)

ProgressSink = Callable[[str], None]

_GENERATION_RE = re.compile(r"generation/(\d+)")


def species_id_from_url(url: str) -> int:
    """
    Extract the numeric id from a species resource URL

    Example:
        >>> species_id_from_url("https://pokeapi.co/api/v2/pokemon-species/1026/")
        1026
    """
    return int(url.rstrip("/").split("/")[-1])


def generation_from_species(species: Dict[str, Any]) -> Optional[int]:
    """Cohort number from a species record's generation reference, if parsable"""
    generation = species.get("generation") or {}
    match = _GENERATION_RE.search(generation.get("url") or "")
    return int(match.group(1)) if match else None


def tags_from_detail(detail: Dict[str, Any]) -> List[Optional[str]]:
    """(primary, secondary) type names ordered by slot; primary defaults to 'normal'"""
    types = sorted(detail.get("types") or [], key=lambda t: t.get("slot", 0))
    names = [((t.get("type") or {}).get("name")) for t in types]
    primary = names[0] if names and names[0] else "normal"
    secondary = names[1] if len(names) > 1 and names[1] else None
    return [primary, secondary]


class SyncEngine:
    """
    One-shot sync of the remote species catalog

    Args:
        store: Catalog whose baseline defines what counts as new (read-only here)
        settings: Base URL, batch size, timeout
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        store: CatalogStore,
        settings: Optional[SyncSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store = store
        self.settings = settings or SyncSettings()
        self.transport = transport

    async def sync(self, progress: Optional[ProgressSink] = None) -> SyncResult:
        """
        Fetch creatures beyond the local baseline

        Never raises for network or parse problems: those degrade to an empty
        result. asyncio.CancelledError propagates so the caller can drop the
        partial work.

        Args:
            progress: Optional sink for human-readable status messages

        Returns:
            SyncResult with new creatures (any order) and new cohorts
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                transport=self.transport,
            ) as client:
                return await self._run(client, progress)
        except Exception as e:
            logger.warning(f"⚠️ Catalog sync failed (offline mode): {type(e).__name__}: {e}")
            return SyncResult()

    async def _run(self, client: httpx.AsyncClient, progress: Optional[ProgressSink]) -> SyncResult:
        baseline = self.store.baseline_max_id

        r = await client.get("/pokemon-species/", params={"limit": 1})
        r.raise_for_status()
        total = int(r.json()["count"])

        if total <= baseline:
            logger.info(f"✅ Catalog up to date ({total} species remote, {baseline} bundled)")
            self._emit(progress, "Database is up to date")
            return SyncResult()

        new_count = total - baseline
        logger.info(f"🔄 Found {new_count} species beyond the bundled catalog")
        self._emit(progress, f"Found {new_count} new creatures...")

        r = await client.get("/pokemon-species/", params={"offset": baseline, "limit": new_count})
        r.raise_for_status()
        species = r.json()["results"]

        new_entities: List[Creature] = []
        batch_size = self.settings.batch_size

        for start in range(0, len(species), batch_size):
            batch = species[start:start + batch_size]
            results = await asyncio.gather(
                *(self._fetch_record(client, entry) for entry in batch),
                return_exceptions=True,
            )
            for entry, outcome in zip(batch, results):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                if isinstance(outcome, BaseException):
                    logger.debug(f"Skipping species {entry.get('name') if isinstance(entry, dict) else entry}: {outcome!r}")
                    continue
                new_entities.append(outcome)

            done = min(start + batch_size, len(species))
            self._emit(progress, f"Syncing... {done}/{len(species)}")

        result = SyncResult(new_entities=new_entities, new_cohorts=self._new_cohorts(new_entities))
        logger.info(
            f"✅ Sync fetched {len(new_entities)}/{len(species)} creatures, "
            f"{len(result.new_cohorts)} new cohorts"
        )
        return result

    async def _fetch_record(self, client: httpx.AsyncClient, entry: Dict[str, Any]) -> Creature:
        species_url = entry["url"]
        species_id = species_id_from_url(species_url)

        responses = await asyncio.gather(
            client.get(f"/pokemon/{species_id}"),
            client.get(species_url),
            return_exceptions=True,
        )
        for response in responses:
            if isinstance(response, BaseException):
                raise response
            response.raise_for_status()

        detail, species = (response.json() for response in responses)
        primary, secondary = tags_from_detail(detail)
        cohort = generation_from_species(species) or self.store.cohort_for_id(species_id)

        return Creature(
            id=species_id,
            name=format_species_name(detail["name"]),
            primary_tag=primary,
            secondary_tag=secondary,
            cohort=cohort,
        )

    def _new_cohorts(self, creatures: List[Creature]) -> Dict:
        ids_by_cohort = defaultdict(list)
        for creature in creatures:
            if creature.cohort not in self.store.static_cohorts:
                ids_by_cohort[creature.cohort].append(creature.id)
        return {
            cohort: self.store.synthesize_cohort(cohort, ids)
            for cohort, ids in sorted(ids_by_cohort.items())
        }

    @staticmethod
    def _emit(progress: Optional[ProgressSink], message: str) -> None:
        if progress is None:
            return
        try:
            progress(message)
        except Exception as e:
            logger.warning(f"Progress sink error ignored: {e}")
