from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, List, Optional, Sequence
from db import atomic
from models.game import Game, ScoreDirection, ScoreType
from models.game_session import GameSession, ScoringKind
from api.crud.session_crud import (
    create_game_session, add_player, delete_game_session,
    get_user_sessions, get_player_sums
)
from api.crud.user_player_crud import track_player_names, suggest_player_names
from core.config import settings
from core.exceptions import ValidationError
from core.logging import logger
from core.validators import (
    validate_game_exists, validate_game_playable, validate_owned_session,
    validate_player_names, validate_teams, validate_score_target
)
from services import scoring_rules as rules
from services.scoring_engines import get_engine

GENERIC_SESSION_NAME = "Simple scores"


def scoring_kind_for(game: Optional[Game]) -> ScoringKind:
    """Pick the scoring engine from the catalog fields, once, at creation"""
    if game is None:
        return ScoringKind.GENERIC
    if game.score_type == ScoreType.CATEGORIES:
        return ScoringKind.CATEGORIES
    if game.team_based:
        return ScoringKind.TEAM_ROUNDS
    return ScoringKind.GENERIC


def _seat_players(
    game: Optional[Game],
    kind: ScoringKind,
    players: Optional[Sequence[str]],
    teams: Optional[Sequence[Sequence[str]]]
) -> List[tuple]:
    """Validate the roster and return (name, position, team_index) seats"""
    if kind == ScoringKind.TEAM_ROUNDS:
        if not teams:
            raise ValidationError("Teams are required for this game")
        team_count = game.max_players // rules.BELOTE_TEAM_SIZE
        cleaned = validate_teams(teams, team_count, rules.BELOTE_TEAM_SIZE)
        validate_player_names(
            [name for members in cleaned for name in members], game.min_players, game.max_players
        )
        seats = []
        for team_index, members in enumerate(cleaned):
            positions = rules.team_positions(team_index, team_count, rules.BELOTE_TEAM_SIZE)
            seats.extend((name, position, team_index) for name, position in zip(members, positions))
        return sorted(seats, key=lambda seat: seat[1])

    if teams and not players:
        raise ValidationError("This game is not played in teams")
    if game is None:
        min_players, max_players = settings.generic_min_players, settings.generic_max_players
    else:
        min_players, max_players = game.min_players, game.max_players
    cleaned = validate_player_names(players or [], min_players, max_players)
    return [(name, position, None) for position, name in enumerate(cleaned)]


def _target_config(
    kind: ScoringKind,
    has_score_target: Optional[bool],
    score_target: Optional[int],
    finish_current_round: bool
) -> Dict[str, object]:
    if kind == ScoringKind.CATEGORIES:
        # A Yams sheet ends when it is full, targets do not apply
        return {"has_score_target": False, "score_target": None, "finish_current_round": False}

    if has_score_target is None:
        if kind == ScoringKind.TEAM_ROUNDS:
            has_score_target = True
            score_target = score_target or settings.belote_default_target
        else:
            has_score_target = score_target is not None

    validate_score_target(has_score_target, score_target)
    if not has_score_target:
        return {"has_score_target": False, "score_target": None, "finish_current_round": False}
    return {
        "has_score_target": True,
        "score_target": score_target,
        "finish_current_round": bool(finish_current_round),
    }


def _track_names(db: Session, user_id: int, names: List[str]):
    """Best effort: a failure here never blocks the session itself"""
    try:
        with db.begin_nested():
            track_player_names(db, user_id, names)
    except SQLAlchemyError as e:
        logger.warning(f"Could not track player names for user {user_id}: {e}")


def create_session(
    db: Session,
    user_id: int,
    game_slug: Optional[str] = None,
    players: Optional[Sequence[str]] = None,
    teams: Optional[Sequence[Sequence[str]]] = None,
    has_score_target: Optional[bool] = None,
    score_target: Optional[int] = None,
    finish_current_round: bool = False,
    session_name: Optional[str] = None,
    score_direction: Optional[ScoreDirection] = None
) -> GameSession:
    """
    Create a session and seat its players.

    `game_slug=None` starts a generic session: players only, explicit
    score direction. Team games take `teams` (lists of names) instead of
    `players`; team i sits at positions i, i + team_count, ...
    """
    with atomic(db):
        game = None
        if game_slug:
            game = validate_game_exists(db, game_slug)
            validate_game_playable(game)

        kind = scoring_kind_for(game)
        seats = _seat_players(game, kind, players, teams)
        target = _target_config(kind, has_score_target, score_target, finish_current_round)

        if game is not None:
            direction = game.score_direction
            default_name = f"{game.name} game"
        else:
            direction = score_direction or ScoreDirection.HIGHER
            default_name = GENERIC_SESSION_NAME

        db_session = create_game_session(
            db,
            user_id=user_id,
            game_id=game.id if game else None,
            session_name=(session_name or "").strip() or default_name,
            scoring_kind=kind,
            score_direction=direction,
            **target
        )
        for name, position, team_index in seats:
            add_player(db, db_session.id, name, position, team_index)
        db.flush()

        _track_names(db, user_id, [seat[0] for seat in seats])

    logger.info(
        f"User {user_id} created session {db_session.id} "
        f"({game.slug if game else 'generic'}, {kind.value}, {len(seats)} players)"
    )
    return db_session


def rename_session(db: Session, session_id: int, user_id: int, session_name: str) -> GameSession:
    name = (session_name or "").strip()
    if not name:
        raise ValidationError("Session name cannot be empty")
    with atomic(db):
        db_session = validate_owned_session(db, session_id, user_id, for_update=True)
        db_session.session_name = name
    db.refresh(db_session)
    logger.info(f"User {user_id} renamed session {session_id}")
    return db_session


def delete_session(db: Session, session_id: int, user_id: int):
    """Delete a session with its players and scores. Foreign sessions raise NotFound."""
    with atomic(db):
        db_session = validate_owned_session(db, session_id, user_id, for_update=True)
        delete_game_session(db, db_session)
    logger.info(f"User {user_id} deleted session {session_id}")


def list_recent_sessions(db: Session, user_id: int, limit: Optional[int] = None) -> List[dict]:
    """Newest sessions first, with a per-player total summary from raw entries"""
    sessions = get_user_sessions(db, user_id, limit or settings.recent_sessions_limit)
    sums = get_player_sums(db, [s.id for s in sessions])

    summaries = []
    for db_session in sessions:
        team_game = db_session.scoring_kind == ScoringKind.TEAM_ROUNDS
        if db_session.scoring_kind == ScoringKind.CATEGORIES:
            # Sheet totals include the upper-section bonus
            totals = get_engine(db_session.scoring_kind).build_view(db, db_session, db_session.players)["totals"]
        elif team_game:
            # Stored rows are per-player shares, show each player the team score
            team_totals = get_engine(db_session.scoring_kind).build_view(db, db_session, db_session.players)["team_totals"]
            totals = {p.id: team_totals.get(p.team, 0) for p in db_session.players}
        else:
            totals = {p.id: rules.coerce_score(sums.get(p.id, 0)) for p in db_session.players}
        summaries.append({
            "id": db_session.id,
            "session_name": db_session.session_name,
            "game_name": db_session.game.name if db_session.game else GENERIC_SESSION_NAME,
            "game_slug": db_session.game.slug if db_session.game else None,
            "scoring_kind": db_session.scoring_kind,
            "date_played": db_session.date_played,
            "player_count": len(db_session.players),
            "players": [
                {"id": p.id, "name": p.name, "team": p.team if team_game else None, "total": totals[p.id]}
                for p in db_session.players
            ],
        })
    return summaries


def suggest_players(db: Session, user_id: int, prefix: Optional[str] = None, limit: int = 10) -> List[dict]:
    records = suggest_player_names(db, user_id, (prefix or "").strip() or None, limit)
    return [
        {"name": r.player_name, "games_played": r.games_played, "last_played": r.last_played}
        for r in records
    ]
