from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from typing import Iterable, List
from models.user_player import UserPlayer


def track_player_name(db: Session, user_id: int, player_name: str) -> UserPlayer:
    """Insert the name or bump its counter"""
    record = db.query(UserPlayer).filter(
        UserPlayer.user_id == user_id,
        UserPlayer.player_name == player_name
    ).first()
    if record:
        record.games_played = (record.games_played or 0) + 1
        record.last_played = func.now()
    else:
        record = UserPlayer(user_id=user_id, player_name=player_name, games_played=1)
        db.add(record)
    return record


def track_player_names(db: Session, user_id: int, names: Iterable[str]) -> int:
    tracked = 0
    for name in dict.fromkeys(names):
        track_player_name(db, user_id, name)
        tracked += 1
    db.flush()
    return tracked


def suggest_player_names(db: Session, user_id: int, prefix: str = None, limit: int = 10) -> List[UserPlayer]:
    query = db.query(UserPlayer).filter(UserPlayer.user_id == user_id)
    if prefix:
        query = query.filter(UserPlayer.player_name.ilike(f"{prefix}%"))
    return query.order_by(
        UserPlayer.games_played.desc(),
        UserPlayer.last_played.desc()
    ).limit(limit).all()
