from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base
import enum


class ScoreType(enum.Enum):
    CATEGORIES = "categories"
    ROUNDS = "rounds"


class ScoreDirection(enum.Enum):
    HIGHER = "higher"
    LOWER = "lower"


class GameCategory(Base):
    __tablename__ = "game_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    games = relationship("Game", back_populates="category")


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    category_id = Column(Integer, ForeignKey("game_categories.id"), nullable=True)
    rules = Column(Text, nullable=True)

    # Scoring constraints
    is_implemented = Column(Boolean, default=False, nullable=False)
    score_type = Column(Enum(ScoreType), default=ScoreType.ROUNDS, nullable=False)
    team_based = Column(Boolean, default=False, nullable=False)
    min_players = Column(Integer, default=2, nullable=False)
    max_players = Column(Integer, default=6, nullable=False)
    score_direction = Column(Enum(ScoreDirection), default=ScoreDirection.HIGHER, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("GameCategory", back_populates="games", lazy='select')

    @property
    def category_name(self):
        return self.category.name if self.category else None
