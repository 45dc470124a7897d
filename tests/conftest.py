import os
import random
import sys
import pytest

# Ensure the project root (containing the `guessmon` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from guessmon.config import Settings, SyncSettings
from guessmon.core.catalog import CatalogStore
from guessmon.models import Creature, CohortInfo, DifficultyConfig


class IdentityRandom(random.Random):
    """Random source whose Fisher-Yates pass never moves anything"""

    def randint(self, a, b):
        return b


def make_creature(creature_id, name=None, cohort=1, primary="normal", secondary=None):
    return Creature(
        id=creature_id,
        name=name or f"Creature{creature_id}",
        primary_tag=primary,
        secondary_tag=secondary,
        cohort=cohort,
    )


def make_cohort(key, low, high):
    return CohortInfo(
        cohort=key,
        display_name=f"Generation {key}",
        region_label="Test",
        short_label=f"Gen {key}",
        color="#000000",
        icon="*",
        id_range=(low, high),
    )


@pytest.fixture()
def creatures():
    names = ["Bulbasaur", "Ivysaur", "Venusaur", "Mr. Mime", "Farfetch'd", "Pikachu",
             "Chikorita", "Bayleef", "Meganium", "Cyndaquil"]
    return [
        make_creature(i, name, cohort=1 if i <= 6 else 2, primary="grass", secondary="poison" if i <= 3 else None)
        for i, name in enumerate(names, start=1)
    ]


@pytest.fixture()
def store(creatures):
    # Cohort 2's advisory range reaches past the baseline on purpose
    cohorts = {1: make_cohort(1, 1, 6), 2: make_cohort(2, 7, 12)}
    styles = {10: {"color": "#00CFC1", "icon": "🌟"}}
    return CatalogStore(creatures, cohorts, styles, {"region_label": "New Region"})


@pytest.fixture()
def normal():
    return DifficultyConfig(label="Normal", duration=20, max_hints=2, base_score=100, choice_count=0)


@pytest.fixture()
def easy():
    return DifficultyConfig(label="Easy", duration=30, max_hints=3, base_score=50, choice_count=4)


@pytest.fixture()
def api_settings():
    # Timer ticks effectively never fire during a test
    return Settings(sync=SyncSettings(enabled=False), tick_interval=3600)


@pytest.fixture()
def client(api_settings):
    from fastapi.testclient import TestClient
    from guessmon.main import create_app

    application = create_app(api_settings)
    with TestClient(application) as test_client:
        yield test_client
