from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from db import Base


class UserPlayer(Base):
    """Player names a user has entered before, for autocomplete"""
    __tablename__ = "user_players"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    player_name = Column(String, nullable=False)
    games_played = Column(Integer, default=1, nullable=False)
    last_played = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'player_name', name='unique_user_player_name'),
    )
