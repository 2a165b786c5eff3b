from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base
from models.game import ScoreDirection
import enum


class ScoringKind(enum.Enum):
    """Which scoring engine owns a session. Fixed when the session is created."""
    GENERIC = "generic"
    CATEGORIES = "categories"
    TEAM_ROUNDS = "team_rounds"


class GameSession(Base):
    __tablename__ = "game_sessions"

    id = Column(Integer, primary_key=True, index=True)
    # Opaque id handed over by the auth boundary, no FK on purpose
    user_id = Column(Integer, nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=True)  # NULL for generic sessions
    session_name = Column(String, nullable=False)

    scoring_kind = Column(Enum(ScoringKind), nullable=False)
    score_direction = Column(Enum(ScoreDirection), default=ScoreDirection.HIGHER, nullable=False)

    # Target settings
    has_score_target = Column(Boolean, default=False, nullable=False)
    score_target = Column(Integer, nullable=True)
    finish_current_round = Column(Boolean, default=False, nullable=False)

    date_played = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    game = relationship("Game", lazy='select')
    players = relationship(
        "Player",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Player.position",
        lazy='select'
    )
    scores = relationship("ScoreEntry", back_populates="session", cascade="all, delete-orphan", lazy='select')

    @property
    def target(self):
        """The configured target, or None when no valid target is set"""
        if self.has_score_target and self.score_target and self.score_target > 0:
            return self.score_target
        return None
