from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)  # 0-based seat order
    team_index = Column(Integer, nullable=True)  # NULL for non-team games

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("GameSession", back_populates="players")
    scores = relationship("ScoreEntry", back_populates="player", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('session_id', 'position', name='unique_session_position'),
    )

    @property
    def team(self) -> int:
        # Rows created before team_index existed: even seats vs odd seats
        if self.team_index is not None:
            return self.team_index
        return self.position % 2
