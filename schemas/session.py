from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Union
from datetime import datetime
from models.game import ScoreDirection
from models.game_session import ScoringKind
from schemas.game import GameRef

Score = Union[int, float]


class SessionCreate(BaseModel):
    game_slug: Optional[str] = Field(None, description="Omit for a generic session")
    session_name: Optional[str] = Field(None, max_length=100)
    players: Optional[List[str]] = None
    teams: Optional[List[List[str]]] = None
    has_score_target: Optional[bool] = None
    score_target: Optional[int] = None
    finish_current_round: bool = False
    score_direction: Optional[ScoreDirection] = Field(None, description="Generic sessions only")


class SessionRename(BaseModel):
    session_name: str = Field(..., min_length=1, max_length=100)


class Player(BaseModel):
    id: int
    name: str
    position: int
    team_index: Optional[int] = None

    class Config:
        from_attributes = True


class SessionCreated(BaseModel):
    id: int
    session_name: str
    scoring_kind: ScoringKind
    players: List[Player]

    class Config:
        from_attributes = True


class Session(BaseModel):
    id: int
    session_name: str
    scoring_kind: ScoringKind
    score_direction: ScoreDirection
    has_score_target: bool
    score_target: Optional[int] = None
    finish_current_round: bool
    date_played: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlayerSummary(BaseModel):
    id: int
    name: str
    team: Optional[int] = None
    total: Score


class SessionSummary(BaseModel):
    id: int
    session_name: str
    game_name: str
    game_slug: Optional[str] = None
    scoring_kind: ScoringKind
    date_played: Optional[datetime] = None
    player_count: int
    players: List[PlayerSummary]


class Ranking(BaseModel):
    player_id: int
    total: Score
    rank: int


class TeamRanking(BaseModel):
    team: int
    total: Score
    rank: int


class GenericRound(BaseModel):
    round_number: int
    scores: Dict[int, Score]


class TeamRound(BaseModel):
    round_number: int
    team_scores: Dict[int, Score]
    details: Optional[dict] = None
    warning: Optional[str] = None


class SessionView(BaseModel):
    id: int
    session_name: str
    game: Optional[GameRef] = None
    scoring_kind: ScoringKind
    score_direction: ScoreDirection
    has_score_target: bool
    score_target: Optional[int] = None
    finish_current_round: bool
    date_played: Optional[datetime] = None
    players: List[Player]
    finished: bool = False

    # generic and team rounds
    rounds: Optional[List[Union[TeamRound, GenericRound]]] = None
    current_round: Optional[int] = None

    # generic and categories
    totals: Optional[Dict[int, Score]] = None
    rankings: Optional[List[Ranking]] = None
    waiting_for_round_end: Optional[bool] = None
    finished_at_round: Optional[int] = None

    # categories
    categories: Optional[Dict[str, Dict[int, Score]]] = None
    upper_totals: Optional[Dict[int, Score]] = None
    bonuses: Optional[Dict[int, int]] = None
    completed: Optional[bool] = None

    # team rounds
    team_totals: Optional[Dict[int, Score]] = None
    team_rankings: Optional[List[TeamRanking]] = None
    winner: Optional[int] = None

    class Config:
        from_attributes = True


class PlayerSuggestion(BaseModel):
    name: str
    games_played: int
    last_played: Optional[datetime] = None
