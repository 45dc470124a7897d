"""
Tests for the catalog sync engine and the startup sync runner

The remote API is simulated with httpx.MockTransport.
"""
import asyncio

import httpx
import pytest

from guessmon.config import SyncSettings
from guessmon.core.catalog import FUTURE_COHORT
from guessmon.core.sync import SyncEngine, generation_from_species, species_id_from_url, tags_from_detail
from guessmon.services.catalog_sync import SyncStatus, run_startup_sync


BASE = "https://pokeapi.test/api/v2"


class FakePokeAPI:
    """Routes requests like the real API; individual records can be broken"""

    def __init__(self, total, generation=10, failing=(), malformed=(), no_generation=(), delay=0.0):
        self.total = total
        self.generation = generation
        self.failing = set(failing)
        self.malformed = set(malformed)
        self.no_generation = set(no_generation)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.requests = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self._route(request)
        finally:
            self.in_flight -= 1

    def _route(self, request):
        parts = request.url.path.strip("/").split("/")
        params = request.url.params

        if parts[-1] == "pokemon-species":
            if "offset" not in params:
                return httpx.Response(200, json={"count": self.total})
            offset, limit = int(params["offset"]), int(params["limit"])
            results = [
                {"name": f"mon-{i}", "url": f"{BASE}/pokemon-species/{i}/"}
                for i in range(offset + 1, min(self.total, offset + limit) + 1)
            ]
            return httpx.Response(200, json={"count": self.total, "results": results})

        creature_id = int(parts[-1])
        if creature_id in self.failing:
            return httpx.Response(500, json={"detail": "boom"})
        if creature_id in self.malformed:
            return httpx.Response(200, content=b"{not json")

        if parts[-2] == "pokemon":
            return httpx.Response(200, json={
                "name": f"iron-mon-{creature_id}",
                "types": [
                    {"slot": 2, "type": {"name": "psychic"}},
                    {"slot": 1, "type": {"name": "steel"}},
                ],
            })

        if creature_id in self.no_generation:
            return httpx.Response(200, json={"generation": None})
        return httpx.Response(200, json={
            "generation": {"name": "gen", "url": f"{BASE}/generation/{self.generation}/"},
        })


def _engine(store, api, batch_size=10):
    settings = SyncSettings(base_url=BASE, batch_size=batch_size)
    return SyncEngine(store, settings, transport=httpx.MockTransport(api))


def test_helpers():
    assert species_id_from_url(f"{BASE}/pokemon-species/1026/") == 1026
    assert species_id_from_url(f"{BASE}/pokemon-species/7") == 7
    assert generation_from_species({"generation": {"url": f"{BASE}/generation/9/"}}) == 9
    assert generation_from_species({"generation": None}) is None
    assert generation_from_species({}) is None
    assert tags_from_detail({"types": [{"slot": 1, "type": {"name": "fire"}}]}) == ["fire", None]
    assert tags_from_detail({"types": []}) == ["normal", None]


def test_sync_up_to_date(store):
    """Remote count at or below the baseline means nothing to fetch"""
    api = FakePokeAPI(total=10)
    messages = []
    result = asyncio.run(_engine(store, api).sync(messages.append))
    assert result.is_empty
    assert result.new_cohorts == {}
    assert len(api.requests) == 1
    assert messages == ["Database is up to date"]


def test_sync_fetches_new_creatures(store):
    api = FakePokeAPI(total=13)
    result = asyncio.run(_engine(store, api).sync())
    assert sorted(c.id for c in result.new_entities) == [11, 12, 13]
    creature = next(c for c in result.new_entities if c.id == 11)
    assert creature.name == "Iron-Mon-11"
    assert creature.primary_tag == "steel"
    assert creature.secondary_tag == "psychic"
    assert creature.cohort == 10
    # the store itself is untouched until merge
    assert len(store) == 10


def test_sync_synthesizes_unknown_cohort(store):
    api = FakePokeAPI(total=14, generation=10)
    result = asyncio.run(_engine(store, api).sync())
    info = result.new_cohorts[10]
    assert info.id_range == (11, 14)
    assert info.display_name == "Generation X"
    assert info.short_label == "Gen X"
    assert info.region_label == "New Region"
    assert info.color == "#00CFC1"


def test_sync_known_generation_not_synthesized(store):
    """New creatures in a bundled cohort only widen it at merge time"""
    api = FakePokeAPI(total=14, generation=2)
    result = asyncio.run(_engine(store, api).sync())
    assert result.new_cohorts == {}
    store.merge(result)
    assert store.cohorts[2].id_range == (7, 14)


def test_sync_generation_fallback(store):
    """Missing generation → static id range, else the future cohort"""
    api = FakePokeAPI(total=13, no_generation={11, 13})
    result = asyncio.run(_engine(store, api).sync())
    by_id = {c.id: c for c in result.new_entities}
    assert by_id[11].cohort == 2
    assert by_id[13].cohort == FUTURE_COHORT
    assert by_id[12].cohort == 10


def test_batch_fault_isolation(store):
    """Record 5 of a batch of 10 fails; the other 9 survive"""
    api = FakePokeAPI(total=20, failing={15})
    result = asyncio.run(_engine(store, api).sync())
    ids = sorted(c.id for c in result.new_entities)
    assert ids == [11, 12, 13, 14, 16, 17, 18, 19, 20]


def test_malformed_record_skipped(store):
    api = FakePokeAPI(total=12, malformed={12})
    result = asyncio.run(_engine(store, api).sync())
    assert [c.id for c in result.new_entities] == [11]


def test_batches_bound_in_flight_requests(store):
    """At most batch_size records (two requests each) in flight; progress per batch"""
    api = FakePokeAPI(total=35, delay=0.001)
    messages = []
    result = asyncio.run(_engine(store, api, batch_size=10).sync(messages.append))
    assert len(result.new_entities) == 25
    assert api.max_in_flight <= 20
    assert messages == [
        "Found 25 new creatures...",
        "Syncing... 10/25",
        "Syncing... 20/25",
        "Syncing... 25/25",
    ]


def test_offline_returns_empty(store):
    """Network failure at the top level degrades to no new data"""
    def handler(request):
        raise httpx.ConnectError("no route to host", request=request)

    engine = SyncEngine(store, SyncSettings(base_url=BASE), transport=httpx.MockTransport(handler))
    result = asyncio.run(engine.sync())
    assert result.is_empty


def test_count_endpoint_error_returns_empty(store):
    def handler(request):
        return httpx.Response(503)

    engine = SyncEngine(store, SyncSettings(base_url=BASE), transport=httpx.MockTransport(handler))
    assert asyncio.run(engine.sync()).is_empty


def test_broken_progress_sink_does_not_abort(store):
    def sink(message):
        raise RuntimeError("ui gone")

    result = asyncio.run(_engine(store, FakePokeAPI(total=12)).sync(sink))
    assert len(result.new_entities) == 2


def test_startup_sync_merges_once(store):
    api = FakePokeAPI(total=14)
    status = SyncStatus()
    added = asyncio.run(run_startup_sync(store, _engine(store, api), status))
    assert added == 4
    assert len(store) == 14
    assert 10 in store.cohorts
    assert status.as_dict() == {"status": "synced", "message": "+4 new creatures synced!", "new_count": 4}

    # a second run is skipped entirely
    requests_before = len(api.requests)
    assert asyncio.run(run_startup_sync(store, _engine(store, api))) == 0
    assert len(api.requests) == requests_before


def test_startup_sync_nothing_new(store):
    status = SyncStatus()
    assert asyncio.run(run_startup_sync(store, _engine(store, FakePokeAPI(total=10)), status)) == 0
    assert status.state == "synced"
    assert status.message == "Database is up to date"
    assert not store.merged


def test_cancelled_sync_merges_nothing(store):
    """Cancelling mid-sync leaves the store at its baseline"""
    api = FakePokeAPI(total=40, delay=0.05)
    status = SyncStatus()

    async def scenario():
        task = asyncio.create_task(run_startup_sync(store, _engine(store, api), status))
        while not any("/pokemon/" in url for url in api.requests):
            await asyncio.sleep(0.001)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert len(store) == 10
    assert not store.merged
    assert status.state == "cancelled"


def test_failed_merge_keeps_bundled_catalog(store, monkeypatch):
    """A merge error is logged and reported, never raised out of the task"""
    def broken_merge(result):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(store, "merge", broken_merge)
    status = SyncStatus()
    added = asyncio.run(run_startup_sync(store, _engine(store, FakePokeAPI(total=12)), status))
    assert added == 0
    assert status.state == "failed"
    assert status.new_count == 0
    assert len(store) == 10
    assert not store.merged
