from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from typing import List, Optional
from models.game_session import GameSession
from models.player import Player
from models.score_entry import ScoreEntry


def create_game_session(db: Session, **fields) -> GameSession:
    db_session = GameSession(**fields)
    db.add(db_session)
    db.flush()
    return db_session


def add_player(db: Session, session_id: int, name: str, position: int, team_index: int = None) -> Player:
    player = Player(session_id=session_id, name=name, position=position, team_index=team_index)
    db.add(player)
    return player


def get_owned_session(db: Session, session_id: int, user_id: int, for_update: bool = False) -> Optional[GameSession]:
    """
    Load a session only if `user_id` owns it.

    Sessions of other users come back as None, exactly like missing ones.
    With for_update the row is locked until the surrounding transaction ends.
    """
    query = db.query(GameSession).options(joinedload(GameSession.game)).filter(
        GameSession.id == session_id,
        GameSession.user_id == user_id
    )
    if for_update:
        query = query.with_for_update(of=GameSession)
    return query.first()


def get_session_players(db: Session, session_id: int) -> List[Player]:
    return db.query(Player).filter(
        Player.session_id == session_id
    ).order_by(Player.position).all()


def delete_game_session(db: Session, db_session: GameSession):
    db.delete(db_session)
    db.flush()


def get_user_sessions(db: Session, user_id: int, limit: int = 10) -> List[GameSession]:
    return db.query(GameSession).options(
        joinedload(GameSession.game),
        joinedload(GameSession.players)
    ).filter(
        GameSession.user_id == user_id
    ).order_by(GameSession.date_played.desc(), GameSession.id.desc()).limit(limit).all()


def get_player_sums(db: Session, session_ids: List[int]) -> dict:
    """{player_id: SUM(score_value)} for every player of the given sessions"""
    if not session_ids:
        return {}
    rows = db.query(
        ScoreEntry.player_id,
        func.coalesce(func.sum(ScoreEntry.score_value), 0)
    ).filter(
        ScoreEntry.session_id.in_(session_ids)
    ).group_by(ScoreEntry.player_id).all()
    return {player_id: total for player_id, total in rows}
