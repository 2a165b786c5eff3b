"""
Yams scoresheet: category writes, bonus and completion
"""
import pytest

from core.exceptions import ValidationError, WrongScoringKind
from services import scoring_rules as rules
from services.scoring_engines import get_engine
from services.session_manager import create_session
from services.scores_service import add_generic_round, set_category_score, get_session_view

USER_ID = 1


@pytest.fixture()
def yams(db_session):
    game_session = create_session(db_session, USER_ID, "yams", players=["Ann", "Bob"])
    ann, bob = [p.id for p in game_session.players]
    return game_session, ann, bob


def test_partial_sheet_totals(db_session, yams):
    game_session, ann, bob = yams
    set_category_score(db_session, game_session.id, USER_ID, ann, "ones", 5)
    set_category_score(db_session, game_session.id, USER_ID, ann, "twos", 10)
    set_category_score(db_session, game_session.id, USER_ID, ann, "full_house", 25)

    engine = get_engine(game_session.scoring_kind)
    assert engine.upper_section_total(db_session, game_session, ann) == 15
    assert engine.bonus(db_session, game_session, ann) == 0
    assert engine.grand_total(db_session, game_session, ann) == 40

    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["totals"] == {ann: 40, bob: 0}
    assert view["categories"]["full_house"] == {ann: 25}
    assert view["completed"] is False


@pytest.mark.parametrize("ones,bonus", [(2, 0), (3, 35)])
def test_bonus_boundary(db_session, yams, ones, bonus):
    game_session, ann, bob = yams
    # ones + 60 from the other upper boxes: 62 or 63
    for category, value in [("ones", ones), ("twos", 6), ("threes", 9), ("fours", 12), ("fives", 15), ("sixes", 18)]:
        set_category_score(db_session, game_session.id, USER_ID, ann, category, value)

    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["upper_totals"][ann] == 60 + ones
    assert view["bonuses"][ann] == bonus
    assert view["totals"][ann] == 60 + ones + bonus


def test_boxes_are_write_once(db_session, yams):
    game_session, ann, bob = yams
    set_category_score(db_session, game_session.id, USER_ID, ann, "chance", 20)
    with pytest.raises(ValidationError):
        set_category_score(db_session, game_session.id, USER_ID, ann, "chance", 25)

    set_category_score(db_session, game_session.id, USER_ID, ann, "chance", 25, overwrite=True)
    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["categories"]["chance"] == {ann: 25}


def test_engine_upserts_without_duplicates(db_session, yams):
    game_session, ann, bob = yams
    engine = get_engine(game_session.scoring_kind)
    engine.set_category_score(db_session, game_session, ann, "yams", 50)
    engine.set_category_score(db_session, game_session, ann, "yams", 0)
    db_session.commit()
    assert engine.get_scoresheet(db_session, game_session) == {ann: {"yams": 0}}
    assert engine.has_score(db_session, game_session, ann, "yams")


def test_invalid_values_are_rejected(db_session, yams):
    game_session, ann, bob = yams
    with pytest.raises(ValidationError):
        set_category_score(db_session, game_session.id, USER_ID, ann, "full_house", 24)
    with pytest.raises(ValidationError):
        set_category_score(db_session, game_session.id, USER_ID, ann, "bonus", 35)
    with pytest.raises(ValidationError):
        set_category_score(db_session, game_session.id, USER_ID, 9999, "ones", 1)


def test_complete_sheet(db_session, yams):
    game_session, ann, bob = yams
    for player_id in (ann, bob):
        for category in rules.YAMS_CATEGORIES:
            set_category_score(db_session, game_session.id, USER_ID, player_id, category, 0)

    view = get_session_view(db_session, game_session.id, USER_ID)
    assert view["completed"] is True
    assert view["finished"] is True


def test_rounds_are_not_for_yams(db_session, yams):
    game_session, ann, bob = yams
    with pytest.raises(WrongScoringKind):
        add_generic_round(db_session, game_session.id, USER_ID, {ann: 5})
