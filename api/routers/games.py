from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from api.deps.db import get_db
from core.auth import get_current_user_id
from services.catalog_service import get_game, get_games, get_categories, create_custom_game
from schemas.game import Game, GameCategory, CustomGameCreate

router = APIRouter(tags=["Games"])


@router.get("/games", response_model=List[Game])
async def list_games(db: Session = Depends(get_db)):
    """Game catalog, grouped by category"""
    return get_games(db)


@router.get("/games/{slug}", response_model=Game)
async def get_game_detail(slug: str, db: Session = Depends(get_db)):
    return get_game(db, slug)


@router.post("/games/custom", response_model=Game, status_code=201)
async def create_game_for_user(
    game: CustomGameCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Add a round-scored game to the catalog"""
    return create_custom_game(db, user_id, **game.model_dump())


@router.get("/game-categories", response_model=List[GameCategory])
async def list_game_categories(db: Session = Depends(get_db)):
    return get_categories(db)
