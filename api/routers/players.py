from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from api.deps.db import get_db
from core.auth import get_current_user_id
from services.session_manager import suggest_players
from schemas.session import PlayerSuggestion

router = APIRouter(prefix="/players", tags=["Players"])


@router.get("", response_model=List[PlayerSuggestion])
async def player_suggestions(
    q: Optional[str] = Query(None, max_length=50, description="Name prefix"),
    limit: int = Query(10, ge=1, le=50),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Names entered in earlier sessions, most used first"""
    return suggest_players(db, user_id, q, limit)
