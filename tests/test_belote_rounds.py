"""
Belote team rounds: point conservation, re-edits and the winner
"""
import pytest

from core.exceptions import ValidationError
from models.player import Player
from models.score_entry import ScoreEntry
from services.scoring_engines import get_engine
from services.session_manager import create_session
from services.scores_service import add_team_round, get_session_view

USER_ID = 1


@pytest.fixture()
def belote(db_session):
    return create_session(db_session, USER_ID, "belote", teams=[["Ann", "Bob"], ["Cid", "Dee"]])


def stored_values(db, session_id):
    rows = db.query(Player.name, ScoreEntry.score_value).join(
        ScoreEntry, ScoreEntry.player_id == Player.id
    ).filter(ScoreEntry.session_id == session_id).all()
    return {name: value for name, value in rows}


def test_split_and_reconstruct(db_session, belote):
    stored = add_team_round(db_session, belote.id, USER_ID, 1, {0: 160, 1: 2})
    assert stored == {0: [80, 80], 1: [1, 1]}
    assert stored_values(db_session, belote.id) == {"Ann": 80, "Bob": 80, "Cid": 1, "Dee": 1}

    breakdown = get_engine(belote.scoring_kind).get_round_breakdown(db_session, belote)
    assert breakdown[0]["team_scores"] == {0: 160, 1: 2}


def test_point_conservation_for_every_deal_value(db_session, belote):
    engine = get_engine(belote.scoring_kind)
    for points in range(0, 163):
        add_team_round(db_session, belote.id, USER_ID, 1, {0: points, 1: 162 - points})
        breakdown = engine.get_round_breakdown(db_session, belote)
        assert len(breakdown) == 1
        assert breakdown[0]["team_scores"] == {0: points, 1: 162 - points}


def test_odd_score_gives_extra_point_to_first_seat(db_session, belote):
    add_team_round(db_session, belote.id, USER_ID, 1, {0: 81, 1: 81})
    assert stored_values(db_session, belote.id) == {"Ann": 41, "Bob": 40, "Cid": 41, "Dee": 40}


def test_round_edit_replaces_rows(db_session, belote):
    add_team_round(db_session, belote.id, USER_ID, 1, {0: 100, 1: 62})
    add_team_round(db_session, belote.id, USER_ID, 1, {0: 40, 1: 122})

    assert db_session.query(ScoreEntry).filter(ScoreEntry.session_id == belote.id).count() == 4
    view = get_session_view(db_session, belote.id, USER_ID)
    assert [r["team_scores"] for r in view["rounds"]] == [{0: 40, 1: 122}]
    assert view["team_totals"] == {0: 40, 1: 122}


def test_details_are_kept_once_per_round(db_session, belote):
    details = {"trump": "hearts", "taker_team": 0, "contract": 80, "made": True, "belote_rebelote": 20}
    add_team_round(db_session, belote.id, USER_ID, 1, {0: 120, 1: 62}, details)

    view = get_session_view(db_session, belote.id, USER_ID)
    assert view["rounds"][0]["details"] == details
    assert view["rounds"][0]["warning"] is None


def test_unusual_deal_total_is_flagged(db_session, belote):
    add_team_round(db_session, belote.id, USER_ID, 1, {0: 100, 1: 50}, {"trump": "spades"})
    add_team_round(db_session, belote.id, USER_ID, 2, {0: 100, 1: 50})

    rounds = get_session_view(db_session, belote.id, USER_ID)["rounds"]
    assert "150" in rounds[0]["warning"]
    assert rounds[1]["warning"] is None


def test_winner_at_target(db_session, belote):
    add_team_round(db_session, belote.id, USER_ID, 1, {0: 250, 1: 2})
    add_team_round(db_session, belote.id, USER_ID, 2, {0: 250, 1: 2})
    view = get_session_view(db_session, belote.id, USER_ID)
    assert view["winner"] is None
    assert view["finished"] is False

    add_team_round(db_session, belote.id, USER_ID, 3, {0: 1, 1: 161})
    view = get_session_view(db_session, belote.id, USER_ID)
    assert view["team_totals"] == {0: 501, 1: 165}
    assert view["winner"] == 0
    assert view["finished"] is True
    assert [r["team"] for r in view["team_rankings"]] == [0, 1]
    assert get_engine(belote.scoring_kind).winner(db_session, belote) == 0


def test_session_target_is_configurable(db_session):
    game_session = create_session(
        db_session, USER_ID, "belote", teams=[["Ann", "Bob"], ["Cid", "Dee"]],
        has_score_target=True, score_target=200
    )
    add_team_round(db_session, game_session.id, USER_ID, 1, {0: 40, 1: 122})
    add_team_round(db_session, game_session.id, USER_ID, 2, {0: 40, 1: 122})
    assert get_session_view(db_session, game_session.id, USER_ID)["winner"] == 1


def test_team_keys_must_match(db_session, belote):
    with pytest.raises(ValidationError):
        add_team_round(db_session, belote.id, USER_ID, 1, {0: 162})
    with pytest.raises(ValidationError):
        add_team_round(db_session, belote.id, USER_ID, 1, {0: 100, 1: 62, 2: 0})
    with pytest.raises(ValidationError):
        add_team_round(db_session, belote.id, USER_ID, 0, {0: 100, 1: 62})


def test_failed_round_keeps_previous_rows(db_session, belote):
    add_team_round(db_session, belote.id, USER_ID, 1, {0: 100, 1: 62})
    with pytest.raises(ValidationError):
        add_team_round(db_session, belote.id, USER_ID, 1, {0: 100.5, 1: 62})

    view = get_session_view(db_session, belote.id, USER_ID)
    assert view["rounds"][0]["team_scores"] == {0: 100, 1: 62}


def test_legacy_players_fall_back_to_seat_parity(db_session, belote):
    for player in belote.players:
        player.team_index = None
    db_session.commit()

    add_team_round(db_session, belote.id, USER_ID, 1, {0: 160, 1: 2})
    view = get_session_view(db_session, belote.id, USER_ID)
    assert view["rounds"][0]["team_scores"] == {0: 160, 1: 2}
    assert stored_values(db_session, belote.id) == {"Ann": 80, "Bob": 80, "Cid": 1, "Dee": 1}
