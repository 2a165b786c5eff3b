import re
import unicodedata
from sqlalchemy.orm import Session
from typing import List, Optional
from db import atomic
from models.game import Game, GameCategory, ScoreDirection, ScoreType
from api.crud.game_crud import (
    get_game_by_slug, get_game_by_name, list_games, get_category,
    get_category_by_name, list_categories, add_category, add_game, update_game as update_game_row
)
from core.exceptions import GameNotFound, ValidationError
from core.logging import logger
from core.validators import validate_game_exists, validate_player_bounds

CARD_GAMES = "Card games"
DICE_GAMES = "Dice games"
BOARD_GAMES = "Board games"

DEFAULT_CATEGORIES = {
    CARD_GAMES: "Trick-taking and other card games",
    DICE_GAMES: "Games played with dice",
    BOARD_GAMES: "Board games",
}

BUILTIN_GAMES = [
    {
        "slug": "yams",
        "name": "Yams",
        "category": DICE_GAMES,
        "rules": "Roll five dice up to three times per turn and fill one box of the scoresheet. "
                 "An upper section of 63 or more earns a 35 point bonus.",
        "score_type": ScoreType.CATEGORIES,
        "team_based": False,
        "min_players": 1,
        "max_players": 8,
        "score_direction": ScoreDirection.HIGHER,
    },
    {
        "slug": "belote",
        "name": "Belote",
        "category": CARD_GAMES,
        "rules": "Two teams of two. Each deal hands out 162 points plus 20 for belote-rebelote. "
                 "The first team to reach the target wins.",
        "score_type": ScoreType.ROUNDS,
        "team_based": True,
        "min_players": 4,
        "max_players": 4,
        "score_direction": ScoreDirection.HIGHER,
    },
]


def slugify(name: str) -> str:
    value = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return value


def seed_catalog(db: Session) -> int:
    """Add missing categories and built-in games. Existing rows are never touched."""
    added = 0
    with atomic(db):
        categories = {}
        for name, description in DEFAULT_CATEGORIES.items():
            category = get_category_by_name(db, name)
            if not category:
                category = add_category(db, name, description)
            categories[name] = category

        for definition in BUILTIN_GAMES:
            if get_game_by_slug(db, definition["slug"]):
                continue
            fields = dict(definition)
            fields["category_id"] = categories[fields.pop("category")].id
            add_game(db, is_implemented=True, **fields)
            added += 1

    if added:
        logger.info(f"Game catalog seeded with {added} games")
    return added


def get_game(db: Session, slug: str) -> Game:
    return validate_game_exists(db, slug)


def get_games(db: Session) -> List[Game]:
    return list_games(db)


def get_categories(db: Session) -> List[GameCategory]:
    return list_categories(db)


def _check_unique(db: Session, name: str, slug: str, current: Optional[Game] = None):
    other = get_game_by_slug(db, slug)
    if other and other is not current:
        raise ValidationError(f"A game with slug '{slug}' already exists")
    other = get_game_by_name(db, name)
    if other and other is not current:
        raise ValidationError(f"A game named '{name}' already exists")


def _check_category(db: Session, category_id: Optional[int]):
    if category_id is not None and not get_category(db, category_id):
        raise ValidationError("Unknown game category")


def create_game(
    db: Session,
    name: str,
    slug: Optional[str] = None,
    category_id: Optional[int] = None,
    rules: Optional[str] = None,
    score_type: ScoreType = ScoreType.ROUNDS,
    team_based: bool = False,
    min_players: int = 2,
    max_players: int = 6,
    score_direction: ScoreDirection = ScoreDirection.HIGHER,
    is_implemented: bool = True
) -> Game:
    """Add a game definition (admin path, any score type)"""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Game name is required")
    slug = slugify(slug or name)
    if not slug:
        raise ValidationError("Game slug cannot be empty")

    with atomic(db):
        _check_unique(db, name, slug)
        _check_category(db, category_id)
        validate_player_bounds(min_players, max_players, team_based)
        add_game(
            db,
            name=name,
            slug=slug,
            category_id=category_id,
            rules=rules,
            score_type=score_type,
            team_based=team_based,
            min_players=min_players,
            max_players=max_players,
            score_direction=score_direction,
            is_implemented=is_implemented,
        )

    logger.info(f"Game '{slug}' added to the catalog")
    return get_game_by_slug(db, slug)


def create_custom_game(db: Session, user_id: int, **fields) -> Game:
    """Any signed-in user may add a round-scored game"""
    fields["score_type"] = ScoreType.ROUNDS
    fields["is_implemented"] = True
    game = create_game(db, **fields)
    logger.info(f"User {user_id} created custom game '{game.slug}'")
    return game


def update_game(db: Session, slug: str, update_data: dict) -> Game:
    """Admin edit of a game definition, the only way one changes"""
    with atomic(db):
        game = get_game_by_slug(db, slug)
        if not game:
            raise GameNotFound()

        if "name" in update_data or "slug" in update_data:
            name = (update_data.get("name") or game.name).strip()
            new_slug = slugify(update_data.get("slug") or game.slug)
            if not name or not new_slug:
                raise ValidationError("Game name and slug cannot be empty")
            _check_unique(db, name, new_slug, current=game)
            update_data = {**update_data, "name": name, "slug": new_slug}

        if "category_id" in update_data:
            _check_category(db, update_data["category_id"])

        validate_player_bounds(
            update_data.get("min_players", game.min_players),
            update_data.get("max_players", game.max_players),
            update_data.get("team_based", game.team_based)
        )
        update_game_row(db, game, update_data)
        new_slug = game.slug

    logger.info(f"Game '{slug}' updated: {sorted(update_data)}")
    return get_game_by_slug(db, new_slug)
