from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List
from api.deps.db import get_db
from core.auth import get_current_user_id
from services.session_manager import create_session, rename_session, delete_session, list_recent_sessions
from services.scores_service import add_generic_round, set_category_score, add_team_round, get_session_view
from schemas.session import SessionCreate, SessionCreated, SessionRename, Session as SessionSchema, SessionSummary, SessionView
from schemas.scores import (
    GenericRoundCreate, CategoryScoreCreate, TeamRoundCreate,
    RoundCreated, CategoryScored, TeamRoundSaved
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post("", response_model=SessionCreated, status_code=201)
async def start_session(
    session_in: SessionCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a session for a game (or a generic one) and seat its players"""
    return create_session(db, user_id, **session_in.model_dump())


@router.get("", response_model=List[SessionSummary])
async def recent_sessions(
    limit: int = Query(None, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return list_recent_sessions(db, user_id, limit)


@router.get("/{session_id}", response_model=SessionView)
async def session_view(
    session_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Players, scores and everything derived from them"""
    return get_session_view(db, session_id, user_id)


@router.patch("/{session_id}", response_model=SessionSchema)
async def rename(
    session_id: int,
    payload: SessionRename,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return rename_session(db, session_id, user_id, payload.session_name)


@router.delete("/{session_id}", status_code=204)
async def remove_session(
    session_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    delete_session(db, session_id, user_id)
    return Response(status_code=204)


@router.post("/{session_id}/rounds", response_model=RoundCreated, status_code=201)
async def add_round(
    session_id: int,
    round_in: GenericRoundCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    round_number = add_generic_round(db, session_id, user_id, round_in.scores)
    return {"round_number": round_number}


@router.post("/{session_id}/categories", response_model=CategoryScored)
async def score_category(
    session_id: int,
    score_in: CategoryScoreCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Fill one scoresheet box; filled boxes need overwrite=true"""
    value = set_category_score(
        db, session_id, user_id, score_in.player_id, score_in.category, score_in.value, score_in.overwrite
    )
    return {"player_id": score_in.player_id, "category": score_in.category, "value": value}


@router.put("/{session_id}/team-rounds/{round_number}", response_model=TeamRoundSaved)
async def save_team_round(
    session_id: int,
    round_number: int,
    round_in: TeamRoundCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Store or replace one deal"""
    details = round_in.details.model_dump() if round_in.details else None
    stored = add_team_round(db, session_id, user_id, round_number, round_in.team_scores, details)
    return {"round_number": round_number, "stored": stored}
