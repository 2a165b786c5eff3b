"""
Generic round scoring: running totals, termination and ranking
"""
import pytest

from core.exceptions import SessionNotFound, ValidationError, WrongScoringKind
from models.game import ScoreDirection
from services import scoring_rules as rules
from services.scoring_engines import get_engine
from services.session_manager import create_session
from services.scores_service import add_generic_round, add_team_round, get_session_view

USER_ID = 1


def start(db, **kwargs):
    game_session = create_session(db, USER_ID, players=["Ann", "Bob"], **kwargs)
    ann, bob = game_session.players
    return game_session, ann.id, bob.id


def test_rounds_are_numbered_in_order(db_session):
    game_session, ann, bob = start(db_session)
    assert add_generic_round(db_session, game_session.id, USER_ID, {ann: 10, bob: 4}) == 1
    assert add_generic_round(db_session, game_session.id, USER_ID, {ann: 3, bob: 8}) == 2

    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["current_round"] == 2
    assert view["rounds"] == [
        {"round_number": 1, "scores": {ann: 10, bob: 4}},
        {"round_number": 2, "scores": {ann: 3, bob: 8}},
    ]
    assert view["totals"] == {ann: 13, bob: 12}
    assert view["finished"] is False


def test_all_zero_round_is_rejected(db_session):
    game_session, ann, bob = start(db_session)
    with pytest.raises(ValidationError):
        add_generic_round(db_session, game_session.id, USER_ID, {ann: 0, bob: None})
    assert get_session_view(db_session, game_session.id, USER_ID)["rounds"] == []


def test_unknown_player_is_rejected(db_session):
    game_session, ann, bob = start(db_session)
    with pytest.raises(ValidationError):
        add_generic_round(db_session, game_session.id, USER_ID, {ann: 5, 9999: 5})


def test_garbage_scores_count_as_zero(db_session):
    game_session, ann, bob = start(db_session)
    add_generic_round(db_session, game_session.id, USER_ID, {ann: "abc", bob: "7"})
    engine = get_engine(game_session.scoring_kind)
    assert engine.get_total(db_session, game_session, ann) == 0
    assert engine.get_total(db_session, game_session, bob) == 7


def test_total_upto_round(db_session):
    game_session, ann, bob = start(db_session)
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 10, bob: 1})
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 20, bob: 2})
    engine = get_engine(game_session.scoring_kind)
    assert engine.get_total(db_session, game_session, ann, upto_round=1) == 10
    assert engine.get_total(db_session, game_session, ann) == 30


def test_finish_current_round_waits_for_everyone(db_session):
    game_session, ann, bob = start(
        db_session, has_score_target=True, score_target=100, finish_current_round=True
    )
    engine = get_engine(game_session.scoring_kind)
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 60, bob: 40})
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 50})

    assert engine.evaluate_termination(db_session, game_session, 2) is False
    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["finished"] is False
    assert view["waiting_for_round_end"] is True


def test_target_ends_session_immediately_without_finish_round(db_session):
    game_session, ann, bob = start(db_session, has_score_target=True, score_target=100)
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 100})

    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["finished"] is True
    assert view["waiting_for_round_end"] is False


def test_no_target_never_finishes(db_session):
    game_session, ann, bob = start(db_session)
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 10000, bob: 1})
    assert get_session_view(db_session, game_session.id, USER_ID)["finished"] is False


def test_lower_is_better_ranking(db_session):
    game_session, ann, bob = start(db_session, score_direction=ScoreDirection.LOWER)
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 30, bob: 10})

    rankings = get_engine(game_session.scoring_kind).rank(db_session, game_session)
    assert [r["player_id"] for r in rankings] == [bob, ann]
    assert [r["rank"] for r in rankings] == [1, 2]


def test_higher_is_better_ranking_with_ties(db_session):
    game_session = create_session(db_session, USER_ID, players=["Ann", "Bob", "Cid"])
    ann, bob, cid = [p.id for p in game_session.players]
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 5, bob: 9, cid: 5})

    rankings = get_session_view(db_session, game_session.id, USER_ID)["rankings"]
    assert [r["player_id"] for r in rankings] == [bob, ann, cid]
    assert [r["rank"] for r in rankings] == [1, 2, 2]


def test_other_users_cannot_score(db_session):
    game_session, ann, bob = start(db_session)
    with pytest.raises(SessionNotFound):
        add_generic_round(db_session, game_session.id, USER_ID + 1, {ann: 5})


def test_wrong_engine_for_session(db_session):
    game_session, ann, bob = start(db_session)
    with pytest.raises(WrongScoringKind):
        add_team_round(db_session, game_session.id, USER_ID, 1, {0: 100, 1: 62})


def test_finished_session_stays_finished(db_session):
    game_session, ann, bob = start(
        db_session, has_score_target=True, score_target=100, finish_current_round=True
    )
    add_generic_round(db_session, game_session.id, USER_ID, {ann: 110, bob: 5})
    assert get_session_view(db_session, game_session.id, USER_ID)["finished"] is True

    add_generic_round(db_session, game_session.id, USER_ID, {ann: 3})
    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["current_round"] == 2
    assert view["finished"] is True
    assert view["finished_at_round"] == 1
    assert view["waiting_for_round_end"] is False


def test_finishing_round_is_the_first_complete_one():
    rounds = {1: {1: 60, 2: 40}, 2: {1: 50}, 3: {2: 10, 1: 0}}
    assert rules.finishing_round(rounds, [1, 2], 100, True) == 3
    assert rules.finishing_round(rounds, [1, 2], 100, False) == 2
    assert rules.finishing_round(rounds, [1, 2], None, False) is None
