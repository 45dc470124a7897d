"""
Configuration loader
"""
import logging
import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from guessmon.models import DifficultyConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/settings.yaml"
CONFIG_ENV_VAR = "GUESSMON_CONFIG"


def _default_difficulties() -> Dict[str, DifficultyConfig]:
    return {
        "easy": DifficultyConfig(label="Easy", duration=30, max_hints=3, base_score=50, choice_count=4),
        "normal": DifficultyConfig(label="Normal", duration=20, max_hints=2, base_score=100, choice_count=0),
        "hard": DifficultyConfig(label="Hard", duration=12, max_hints=1, base_score=200, choice_count=0),
    }


class SyncSettings(BaseModel):
    """Remote catalog sync parameters"""
    enabled: bool = True
    base_url: str = "https://pokeapi.co/api/v2"
    batch_size: int = Field(default=10, gt=0)   # max records in flight at once
    timeout: float = 15.0                       # per-request timeout (seconds)


class Settings(BaseModel):
    """Service settings"""
    sync: SyncSettings = SyncSettings()
    difficulties: Dict[str, DifficultyConfig] = Field(default_factory=_default_difficulties)
    default_difficulty: str = "normal"
    tick_interval: float = Field(default=1.0, gt=0)  # seconds per timer tick
    default_rounds: int = Field(default=10, gt=0)
    round_options: List[int] = [5, 10, 15, 20, 30]
    session_idle_timeout: float = Field(default=1800.0, gt=0)  # seconds before an untouched session is dropped

    def difficulty(self, name: Optional[str]) -> Optional[DifficultyConfig]:
        return self.difficulties.get(name or self.default_difficulty)


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from a YAML file

    Args:
        config_path: Path to config file. When omitted, $GUESSMON_CONFIG or
            config/settings.yaml is used if present, else built-in defaults.

    Returns:
        Settings object

    Raises:
        FileNotFoundError: If an explicitly given config file is missing
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)
        if config_path is None:
            if not Path(DEFAULT_CONFIG_PATH).exists():
                logger.info("No config file found, using built-in defaults")
                return Settings()
            config_path = DEFAULT_CONFIG_PATH

    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    logger.info(f"✅ Loaded settings from {config_path}")
    return Settings(**data)
