"""
Quiz session endpoints
"""
from fastapi import APIRouter, HTTPException, Request
import logging

from guessmon.core.pool import MIN_POOL_SIZE, can_start, select_pool
from guessmon.core.session import GameMode, QuizSession


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_session(request: Request, session_id: str) -> QuizSession:
    session = request.app.state.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


def _conflict(session: QuizSession, action: str) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "error": "invalid_transition",
            "action": action,
            "phase": session.phase.value,
            "message": f"Cannot {action} while session is {session.phase.value}",
        },
    )


@router.post("")
async def start_session(request: Request, payload: dict):
    """
    Start a quiz session

    Request:
        {
            "cohorts": [1, 2],        # non-empty
            "total_rounds": 10,       # optional, default from settings
            "difficulty": "normal",   # optional, default from settings
            "mode": "zoom"            # optional: silhouette | zoom | type-challenge
        }
    """
    settings = request.app.state.settings

    cohorts = payload.get("cohorts")
    if not cohorts or not isinstance(cohorts, list):
        raise HTTPException(status_code=400, detail="cohorts must be a non-empty list")

    total_rounds = payload.get("total_rounds", settings.default_rounds)
    if not isinstance(total_rounds, int) or total_rounds < 1:
        raise HTTPException(status_code=400, detail="total_rounds must be a positive integer")

    difficulty_name = payload.get("difficulty") or settings.default_difficulty
    difficulty = settings.difficulty(difficulty_name)
    if difficulty is None:
        raise HTTPException(status_code=400, detail=f"Unknown difficulty: {difficulty_name}")

    try:
        mode = GameMode(payload.get("mode") or GameMode.SILHOUETTE.value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown mode: {payload.get('mode')}")

    try:
        keys = {int(key) for key in cohorts}
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid cohort list: {cohorts}")

    pool = select_pool(request.app.state.catalog, keys)
    if not can_start(pool):
        raise HTTPException(
            status_code=400,
            detail={
                "error": "pool_too_small",
                "pool_size": len(pool),
                "message": f"Need at least {MIN_POOL_SIZE} creatures in the selected cohorts",
            },
        )

    registry = request.app.state.sessions
    session = registry.create()
    session.start(pool, total_rounds, difficulty, mode)
    logger.info(f"📥 Session {session.session_id} | cohorts={sorted(keys)} | {difficulty_name} | {mode.value}")

    return session.view()


@router.get("/{session_id}")
async def get_session(request: Request, session_id: str):
    """Current round view"""
    return _get_session(request, session_id).view()


@router.post("/{session_id}/guess")
async def submit_guess(request: Request, session_id: str, payload: dict):
    """
    Submit a guess

    Request:
        {"text": "Mr. Mime"}   # typed mode
        {"choice_id": 122}     # multiple-choice mode
    """
    session = _get_session(request, session_id)

    if "choice_id" in payload:
        try:
            choice_id = int(payload["choice_id"])
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="choice_id must be an integer")
        accepted = session.submit_choice(choice_id)
    else:
        text = payload.get("text")
        if not isinstance(text, str) or not text.strip():
            raise HTTPException(status_code=400, detail="text or choice_id required")
        accepted = session.submit_guess(text)

    if not accepted:
        raise _conflict(session, "guess")

    logger.info(
        f"{'✅' if session.last_correct else '❌'} Session {session_id} | "
        f"round {session.state.round_index} | +{session.last_delta}"
    )
    return session.view()


@router.post("/{session_id}/hint")
async def use_hint(request: Request, session_id: str):
    """Reveal the next hint for the current round"""
    session = _get_session(request, session_id)
    hint = session.use_hint()
    if hint is None:
        raise _conflict(session, "use a hint")
    return {"hint": hint, **session.view()}


@router.post("/{session_id}/advance")
async def advance(request: Request, session_id: str):
    """Next round, or the final summary after the last round"""
    session = _get_session(request, session_id)
    if not session.advance():
        raise _conflict(session, "advance")

    if session.summary is not None:
        response = {**session.view(), "summary": session.summary.model_dump()}
        # A finished session lives on only in its summary
        request.app.state.sessions.discard(session_id)
        return response
    return session.view()


@router.delete("/{session_id}")
async def quit_session(request: Request, session_id: str):
    """Quit and discard a session"""
    _get_session(request, session_id)
    request.app.state.sessions.discard(session_id)
    return {"success": True, "message": f"Session {session_id} discarded"}
