from sqlalchemy.orm import Session
from typing import List, Optional, Sequence
from models.game import Game
from models.game_session import GameSession
from core.exceptions import ValidationError, GameNotFound, SessionNotFound
from api.crud.game_crud import get_game_by_slug
from api.crud.session_crud import get_owned_session
from services.scoring_rules import BELOTE_TEAM_COUNT, BELOTE_TEAM_SIZE


def validate_game_exists(db: Session, slug: str) -> Game:
    """Validate game exists and return it"""
    game = get_game_by_slug(db, slug)
    if not game:
        raise GameNotFound()
    return game


def validate_game_playable(game: Game):
    """Validate scoring is available for this game"""
    if not game.is_implemented:
        raise ValidationError(f"Scoring for {game.name} is not available yet")


def validate_owned_session(db: Session, session_id: int, user_id: int, for_update: bool = False) -> GameSession:
    """Validate the session exists and belongs to the user, foreign sessions look missing"""
    db_session = get_owned_session(db, session_id, user_id, for_update=for_update)
    if not db_session:
        raise SessionNotFound()
    return db_session


def clean_names(names: Sequence[Optional[str]]) -> List[str]:
    """Strip names and drop blank ones, keeping input order"""
    return [name.strip() for name in names if name and name.strip()]


def validate_player_names(names: Sequence[Optional[str]], min_players: int, max_players: int) -> List[str]:
    """Validate the number of distinct named players and return the cleaned list"""
    cleaned = clean_names(names)
    if len(set(cleaned)) != len(cleaned):
        raise ValidationError("Player names must be unique")
    if len(cleaned) < min_players:
        raise ValidationError(f"At least {min_players} players are required")
    if len(cleaned) > max_players:
        raise ValidationError(f"At most {max_players} players are allowed")
    return cleaned


def validate_teams(teams: Sequence[Sequence[Optional[str]]], team_count: int, team_size: int = 2) -> List[List[str]]:
    """Validate team shape: exact team count, every team fully named"""
    if len(teams) != team_count:
        raise ValidationError(f"Exactly {team_count} teams are required")

    cleaned = []
    for index, team in enumerate(teams):
        members = clean_names(team)
        if len(members) != team_size:
            raise ValidationError(f"Team {index + 1} needs exactly {team_size} named players")
        cleaned.append(members)

    names = [name for members in cleaned for name in members]
    if len(set(names)) != len(names):
        raise ValidationError("Player names must be unique")
    return cleaned


def validate_score_target(has_score_target: bool, score_target: Optional[int]):
    """Validate target configuration"""
    if not has_score_target:
        return
    if score_target is None or isinstance(score_target, bool) or not isinstance(score_target, int) or score_target <= 0:
        raise ValidationError("Score target must be a positive whole number")


def validate_player_bounds(min_players: int, max_players: int, team_based: bool = False):
    """Validate player-count bounds of a game definition"""
    if min_players < 1:
        raise ValidationError("A game needs at least one player")
    if min_players > max_players:
        raise ValidationError("Minimum players cannot exceed maximum players")
    if team_based and max_players % BELOTE_TEAM_SIZE != 0:
        raise ValidationError("Team games need an even maximum number of players")
    if team_based and max_players < BELOTE_TEAM_COUNT * BELOTE_TEAM_SIZE:
        raise ValidationError(
            f"Team games need at least {BELOTE_TEAM_COUNT} teams of {BELOTE_TEAM_SIZE} players"
        )
