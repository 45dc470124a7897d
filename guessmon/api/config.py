"""
Configuration endpoints
"""
from fastapi import APIRouter, Request

from guessmon.core.session import GameMode


router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config(request: Request):
    """Difficulty presets, round options and game modes the client may offer"""
    settings = request.app.state.settings
    return {
        "default_difficulty": settings.default_difficulty,
        "difficulties": {name: preset.model_dump() for name, preset in settings.difficulties.items()},
        "default_rounds": settings.default_rounds,
        "round_options": settings.round_options,
        "tick_interval": settings.tick_interval,
        "modes": [mode.value for mode in GameMode],
    }
