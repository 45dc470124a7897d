"""
Static catalog loader (CSV creatures + YAML cohort table)
"""
import csv
import logging
import yaml
from pathlib import Path
from typing import Dict, List, Tuple
from guessmon.models import Creature, CohortInfo


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
CREATURES_CSV = DATA_DIR / "creatures.csv"
COHORTS_YAML = DATA_DIR / "cohorts.yaml"


def load_creatures(csv_path: Path = CREATURES_CSV) -> List[Creature]:
    """
    Load the bundled creatures from CSV

    CSV format:
        id,name,primary_tag,secondary_tag,cohort
        1,Bulbasaur,grass,poison,1
        4,Charmander,fire,,1

    Args:
        csv_path: Path to CSV file

    Returns:
        Creatures in ascending id order

    Raises:
        FileNotFoundError: If CSV file not found
        ValueError: If ids are duplicated, out of order, or the file is empty
    """
    path = Path(csv_path)

    if not path.exists():
        raise FileNotFoundError(f"Creature catalog not found: {csv_path}")

    creatures = []
    last_id = 0

    with open(path, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            creature_id = int(row['id'])

            # Ids must be strictly ascending (also rules out duplicates)
            if creature_id <= last_id:
                raise ValueError(
                    f"Creature {creature_id}: ids must be unique and ascending (previous {last_id})"
                )
            last_id = creature_id

            creatures.append(Creature(
                id=creature_id,
                name=row['name'].strip(),
                primary_tag=row['primary_tag'].strip(),
                secondary_tag=row['secondary_tag'].strip() or None,
                cohort=int(row['cohort']),
            ))

    if not creatures:
        raise ValueError(f"No creatures loaded from {csv_path}")

    logger.info(f"✅ Loaded {len(creatures)} creatures from {path.name}")

    return creatures


def _read_cohort_yaml(yaml_path: Path) -> Dict:
    path = Path(yaml_path)

    if not path.exists():
        raise FileNotFoundError(f"Cohort table not found: {yaml_path}")

    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_cohorts(yaml_path: Path = COHORTS_YAML) -> Dict[int, CohortInfo]:
    """
    Load the bundled cohort table

    Returns:
        Mapping cohort key -> CohortInfo
    """
    data = _read_cohort_yaml(yaml_path)
    return {
        int(key): CohortInfo(cohort=int(key), **info)
        for key, info in data.get("cohorts", {}).items()
    }


def load_cohort_styles(yaml_path: Path = COHORTS_YAML) -> Tuple[Dict[int, Dict[str, str]], Dict[str, str]]:
    """
    Load canonical styling for not-yet-bundled cohorts

    Returns:
        (per-cohort {color, icon} overrides, fallback defaults)
    """
    data = _read_cohort_yaml(yaml_path)
    future = {int(key): dict(value) for key, value in data.get("future_cohorts", {}).items()}
    return future, dict(data.get("defaults", {}))
