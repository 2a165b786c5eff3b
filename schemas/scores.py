from pydantic import BaseModel, Field, validator
from typing import Dict, List, Optional, Union

Score = Union[int, float]


class GenericRoundCreate(BaseModel):
    scores: Dict[int, Optional[Score]] = Field(..., description="player_id -> score")


class CategoryScoreCreate(BaseModel):
    player_id: int
    category: str = Field(..., min_length=1, max_length=50)
    value: Score
    overwrite: bool = False


class BeloteRoundDetails(BaseModel):
    trump: Optional[str] = Field(None, max_length=20)
    taker_team: Optional[int] = Field(None, ge=0)
    contract: Optional[int] = Field(None, ge=0)
    made: Optional[bool] = None
    belote_rebelote: int = Field(0, ge=0)


class TeamRoundCreate(BaseModel):
    team_scores: Dict[int, int] = Field(..., description="team index -> points")
    details: Optional[BeloteRoundDetails] = None

    @validator('team_scores')
    def validate_team_scores(cls, v):
        for team, points in v.items():
            if team < 0:
                raise ValueError('Team indexes start at 0')
            if points < 0:
                raise ValueError('Team scores cannot be negative')
        return v


class RoundCreated(BaseModel):
    round_number: int


class CategoryScored(BaseModel):
    player_id: int
    category: str
    value: Score


class TeamRoundSaved(BaseModel):
    round_number: int
    stored: Dict[int, List[int]]
