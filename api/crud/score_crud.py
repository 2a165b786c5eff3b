from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Dict, List, Optional
from models.player import Player
from models.score_entry import ScoreEntry, ROUND_SCORE_TYPE, NO_ROUND


def get_next_round_number(db: Session, session_id: int) -> int:
    last_round = db.query(func.max(ScoreEntry.round_number)).filter(
        ScoreEntry.session_id == session_id
    ).scalar()
    return (last_round or 0) + 1


def add_round_entry(
    db: Session,
    session_id: int,
    player_id: int,
    round_number: int,
    score_value,
    details: dict = None
) -> ScoreEntry:
    entry = ScoreEntry(
        session_id=session_id,
        player_id=player_id,
        round_number=round_number,
        score_type=ROUND_SCORE_TYPE,
        score_value=score_value,
        details=details
    )
    db.add(entry)
    return entry


def delete_round_entries(db: Session, session_id: int, round_number: int) -> int:
    """Remove every entry of one round, returns the number of rows deleted"""
    deleted = db.query(ScoreEntry).filter(
        ScoreEntry.session_id == session_id,
        ScoreEntry.round_number == round_number
    ).delete(synchronize_session=False)
    db.flush()
    return deleted


def get_round_entries(db: Session, session_id: int) -> List[ScoreEntry]:
    return db.query(ScoreEntry).filter(
        ScoreEntry.session_id == session_id,
        ScoreEntry.score_type == ROUND_SCORE_TYPE
    ).order_by(ScoreEntry.round_number, ScoreEntry.player_id).all()


def get_player_total(db: Session, session_id: int, player_id: int, upto_round: Optional[int] = None):
    query = db.query(func.coalesce(func.sum(ScoreEntry.score_value), 0)).filter(
        ScoreEntry.session_id == session_id,
        ScoreEntry.player_id == player_id
    )
    if upto_round is not None:
        query = query.filter(ScoreEntry.round_number <= upto_round)
    return query.scalar()


def get_team_round_sums(db: Session, session_id: int, team_count: int = 2) -> List[tuple]:
    """
    Rebuild team totals per round straight from the per-player rows.

    Returns (round_number, team, total) rows. Players without an
    explicit team_index fall back to seat parity.
    """
    team = func.coalesce(Player.team_index, Player.position % team_count)
    return db.query(
        ScoreEntry.round_number,
        team.label("team"),
        func.sum(ScoreEntry.score_value).label("total")
    ).join(
        Player, ScoreEntry.player_id == Player.id
    ).filter(
        ScoreEntry.session_id == session_id,
        ScoreEntry.score_type == ROUND_SCORE_TYPE
    ).group_by(
        ScoreEntry.round_number, "team"
    ).order_by(ScoreEntry.round_number).all()


def get_round_details(db: Session, session_id: int) -> Dict[int, Optional[dict]]:
    """One details blob per round, every row of a round carries the same copy"""
    rows = db.query(
        ScoreEntry.round_number, ScoreEntry.details
    ).filter(
        ScoreEntry.session_id == session_id,
        ScoreEntry.score_type == ROUND_SCORE_TYPE
    ).order_by(ScoreEntry.round_number, ScoreEntry.id).all()

    details = {}
    for round_number, blob in rows:
        if round_number not in details:
            details[round_number] = blob
    return details


def get_category_entry(db: Session, session_id: int, player_id: int, category_id: str) -> Optional[ScoreEntry]:
    return db.query(ScoreEntry).filter(
        ScoreEntry.session_id == session_id,
        ScoreEntry.player_id == player_id,
        ScoreEntry.score_type == category_id
    ).first()


def upsert_category_entry(db: Session, session_id: int, player_id: int, category_id: str, score_value) -> ScoreEntry:
    entry = get_category_entry(db, session_id, player_id, category_id)
    if entry:
        entry.score_value = score_value
    else:
        entry = ScoreEntry(
            session_id=session_id,
            player_id=player_id,
            round_number=NO_ROUND,
            score_type=category_id,
            score_value=score_value
        )
        db.add(entry)
    db.flush()
    return entry


def get_category_entries(db: Session, session_id: int) -> List[ScoreEntry]:
    return db.query(ScoreEntry).filter(
        ScoreEntry.session_id == session_id,
        ScoreEntry.round_number == NO_ROUND
    ).all()
