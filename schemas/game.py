from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from models.game import ScoreDirection, ScoreType


class GameCategory(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class GameBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Game name")
    slug: Optional[str] = Field(None, max_length=100, description="Derived from the name when omitted")
    category_id: Optional[int] = None
    rules: Optional[str] = Field(None, max_length=5000)
    team_based: bool = False
    min_players: int = Field(2, ge=1, le=20)
    max_players: int = Field(6, ge=1, le=20)
    score_direction: ScoreDirection = ScoreDirection.HIGHER

    @validator('max_players')
    def validate_max_players(cls, v, values):
        if 'min_players' in values and v < values['min_players']:
            raise ValueError('max_players must be greater than or equal to min_players')
        return v


class CustomGameCreate(GameBase):
    pass


class GameCreate(GameBase):
    score_type: ScoreType = ScoreType.ROUNDS
    is_implemented: bool = True


class GameUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    category_id: Optional[int] = None
    rules: Optional[str] = Field(None, max_length=5000)
    is_implemented: Optional[bool] = None
    score_type: Optional[ScoreType] = None
    team_based: Optional[bool] = None
    min_players: Optional[int] = Field(None, ge=1, le=20)
    max_players: Optional[int] = Field(None, ge=1, le=20)
    score_direction: Optional[ScoreDirection] = None


class Game(BaseModel):
    id: int
    name: str
    slug: str
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    rules: Optional[str] = None
    is_implemented: bool
    score_type: ScoreType
    team_based: bool
    min_players: int
    max_players: int
    score_direction: ScoreDirection
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GameRef(BaseModel):
    slug: str
    name: str

    class Config:
        from_attributes = True
