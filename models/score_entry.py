from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base

ROUND_SCORE_TYPE = "round"
NO_ROUND = 0  # category entries are not tied to a round


class ScoreEntry(Base):
    __tablename__ = "score_entries"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)

    round_number = Column(Integer, nullable=False, default=NO_ROUND)
    score_type = Column(String(50), nullable=False, default=ROUND_SCORE_TYPE)  # 'round' or a category id
    score_value = Column(Float, nullable=False, default=0)
    details = Column(JSON, nullable=True)  # e.g. belote trump / contract, same blob on every row of a round

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    session = relationship("GameSession", back_populates="scores")
    player = relationship("Player", back_populates="scores")
