from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from models.game import Game, GameCategory


def get_game_by_slug(db: Session, slug: str) -> Optional[Game]:
    return db.query(Game).options(joinedload(Game.category)).filter(Game.slug == slug).first()


def get_game_by_name(db: Session, name: str) -> Optional[Game]:
    return db.query(Game).filter(Game.name == name).first()


def list_games(db: Session) -> List[Game]:
    return db.query(Game).outerjoin(GameCategory).options(
        joinedload(Game.category)
    ).order_by(GameCategory.name, Game.name).all()


def get_category(db: Session, category_id: int) -> Optional[GameCategory]:
    return db.query(GameCategory).filter(GameCategory.id == category_id).first()


def get_category_by_name(db: Session, name: str) -> Optional[GameCategory]:
    return db.query(GameCategory).filter(GameCategory.name == name).first()


def list_categories(db: Session) -> List[GameCategory]:
    return db.query(GameCategory).order_by(GameCategory.name).all()


def add_category(db: Session, name: str, description: str = None) -> GameCategory:
    category = GameCategory(name=name, description=description)
    db.add(category)
    db.flush()
    return category


def add_game(db: Session, **fields) -> Game:
    db_game = Game(**fields)
    db.add(db_game)
    db.flush()
    return db_game


def update_game(db: Session, game: Game, update_data: dict) -> Game:
    for field, value in update_data.items():
        setattr(game, field, value)
    db.flush()
    return game
