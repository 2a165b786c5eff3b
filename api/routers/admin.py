"""
Admin routes: editing the game catalog
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from api.deps.db import get_db
from core.auth import require_admin
from models.user import User
from services.catalog_service import create_game, update_game
from schemas.game import Game, GameCreate, GameUpdate

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/games", response_model=Game, status_code=201)
async def admin_create_game(
    game: GameCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Add a game with any score type"""
    return create_game(db, **game.model_dump())


@router.patch("/games/{slug}", response_model=Game)
async def admin_update_game(
    slug: str,
    game_update: GameUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Edit a game definition; only the fields sent are changed"""
    return update_game(db, slug, game_update.model_dump(exclude_unset=True))
