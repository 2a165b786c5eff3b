"""
Score entry and session read model.

Every write re-checks session ownership inside the same transaction as
the rows it touches, and locks the session row where the database
supports it.
"""
from sqlalchemy.orm import Session
from typing import Dict, Optional
from db import atomic
from models.game_session import ScoringKind
from api.crud.session_crud import get_session_players
from core.exceptions import ValidationError
from core.logging import logger
from core.validators import validate_owned_session
from services.scoring_engines import get_engine


def add_generic_round(db: Session, session_id: int, user_id: int, scores: Dict[int, object]) -> int:
    with atomic(db):
        db_session = validate_owned_session(db, session_id, user_id, for_update=True)
        round_number = get_engine(ScoringKind.GENERIC).add_round(db, db_session, scores)
    logger.info(f"Session {session_id}: round {round_number} added")
    return round_number


def set_category_score(
    db: Session,
    session_id: int,
    user_id: int,
    player_id: int,
    category_id: str,
    value,
    overwrite: bool = False
):
    """Fill one scoresheet box. Filled boxes stay locked unless `overwrite` is set."""
    engine = get_engine(ScoringKind.CATEGORIES)
    with atomic(db):
        db_session = validate_owned_session(db, session_id, user_id, for_update=True)
        engine.check_session(db_session)
        if not overwrite and engine.has_score(db, db_session, player_id, category_id):
            raise ValidationError(f"{category_id} is already scored for this player")
        entry = engine.set_category_score(db, db_session, player_id, category_id, value)
        score = entry.score_value
    logger.info(f"Session {session_id}: player {player_id} scored {score} in {category_id}")
    return score


def add_team_round(
    db: Session,
    session_id: int,
    user_id: int,
    round_number: int,
    team_scores: Dict[int, object],
    details: Optional[dict] = None
) -> Dict[int, list]:
    with atomic(db):
        db_session = validate_owned_session(db, session_id, user_id, for_update=True)
        stored = get_engine(ScoringKind.TEAM_ROUNDS).add_team_round(
            db, db_session, round_number, team_scores, details
        )
    logger.info(f"Session {session_id}: team round {round_number} saved {team_scores}")
    return stored


def get_session_view(db: Session, session_id: int, user_id: int) -> dict:
    """Session, players and everything derived from the stored entries"""
    db_session = validate_owned_session(db, session_id, user_id)
    players = get_session_players(db, db_session.id)

    view = {
        "id": db_session.id,
        "session_name": db_session.session_name,
        "game": db_session.game,
        "scoring_kind": db_session.scoring_kind,
        "score_direction": db_session.score_direction,
        "has_score_target": db_session.has_score_target,
        "score_target": db_session.score_target,
        "finish_current_round": db_session.finish_current_round,
        "date_played": db_session.date_played,
        "players": players,
    }
    view.update(get_engine(db_session.scoring_kind).build_view(db, db_session, players))
    return view
