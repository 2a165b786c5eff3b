"""
Game scoring rules.

Pure functions only: nothing here touches the database. The engines in
services.scoring_engines load raw score rows and hand them to these
helpers, so every total, bonus and finish flag is derived from stored
entries on each read.
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from core.exceptions import ValidationError

Number = Union[int, float]


def coerce_score(value) -> Number:
    """Turn a stored or submitted value into a number, garbage becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
        try:
            return int(value)
        except ValueError:
            pass
    try:
        number = float(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    if number.is_integer():
        return int(number)
    return number


# ---------------------------------------------------------------------------
# Round accumulation (generic games)
# ---------------------------------------------------------------------------

RoundTable = Mapping[int, Mapping[int, object]]  # {round_number: {player_id: value}}


def player_total(rounds: RoundTable, player_id: int, upto_round: Optional[int] = None) -> Number:
    total = 0
    for round_number, scores in rounds.items():
        if upto_round is not None and round_number > upto_round:
            continue
        total += coerce_score(scores.get(player_id))
    return total


def player_totals(rounds: RoundTable, player_ids: Iterable[int], upto_round: Optional[int] = None) -> Dict[int, Number]:
    return {player_id: player_total(rounds, player_id, upto_round) for player_id in player_ids}


def round_is_complete(rounds: RoundTable, round_number: int, player_ids: Iterable[int]) -> bool:
    scores = rounds.get(round_number, {})
    return all(player_id in scores for player_id in player_ids)


def target_reached(totals: Mapping[int, Number], target: Optional[int]) -> bool:
    if not target or target <= 0:
        return False
    return any(total >= target for total in totals.values())


def evaluate_termination(
    rounds: RoundTable,
    player_ids: Sequence[int],
    target: Optional[int],
    finish_current_round: bool,
    upto_round: Optional[int],
) -> bool:
    """
    True once the session is over at `upto_round`.

    Needs a positive target and at least one player at or past it. With
    finish_current_round the round where that happened must also have an
    entry for every player, so everybody gets their turn.
    """
    if not upto_round:
        return False
    totals = player_totals(rounds, player_ids, upto_round)
    if not target_reached(totals, target):
        return False
    if finish_current_round:
        return round_is_complete(rounds, upto_round, player_ids)
    return True


def finishing_round(
    rounds: RoundTable,
    player_ids: Sequence[int],
    target: Optional[int],
    finish_current_round: bool,
) -> Optional[int]:
    """First round at which the session ended, None while it is still going"""
    for round_number in sorted(rounds):
        if evaluate_termination(rounds, player_ids, target, finish_current_round, round_number):
            return round_number
    return None


def rank_players(totals: Sequence[Tuple[int, Number]], direction: str = "higher") -> List[dict]:
    """
    Order (player_id, total) pairs best first.

    The sort is stable, so tied players keep their seat order. Ties share
    a rank and the next rank skips accordingly (1, 1, 3).
    """
    ordered = sorted(totals, key=lambda item: item[1], reverse=(direction == "higher"))
    rankings = []
    for index, (player_id, total) in enumerate(ordered):
        if index > 0 and total == ordered[index - 1][1]:
            rank = rankings[-1]["rank"]
        else:
            rank = index + 1
        rankings.append({"player_id": player_id, "total": total, "rank": rank})
    return rankings


# ---------------------------------------------------------------------------
# Yams (Yahtzee) categories
# ---------------------------------------------------------------------------

UPPER_FACE_VALUES = {
    "ones": 1,
    "twos": 2,
    "threes": 3,
    "fours": 4,
    "fives": 5,
    "sixes": 6,
}
YAMS_UPPER_CATEGORIES = tuple(UPPER_FACE_VALUES)
YAMS_LOWER_CATEGORIES = (
    "three_of_kind",
    "four_of_kind",
    "full_house",
    "small_straight",
    "large_straight",
    "yams",
    "chance",
)
YAMS_CATEGORIES = YAMS_UPPER_CATEGORIES + YAMS_LOWER_CATEGORIES

YAMS_FIXED_SCORES = {
    "full_house": 25,
    "small_straight": 30,
    "large_straight": 40,
    "yams": 50,
}

DICE_COUNT = 5
MAX_DICE_SUM = DICE_COUNT * 6

UPPER_SECTION_BONUS_THRESHOLD = 63
UPPER_SECTION_BONUS = 35


def upper_section_total(scores: Mapping[str, object]) -> Number:
    return sum(coerce_score(scores.get(category)) for category in YAMS_UPPER_CATEGORIES)


def upper_section_bonus(upper_total: Number) -> int:
    return UPPER_SECTION_BONUS if upper_total >= UPPER_SECTION_BONUS_THRESHOLD else 0


def lower_section_total(scores: Mapping[str, object]) -> Number:
    return sum(coerce_score(scores.get(category)) for category in YAMS_LOWER_CATEGORIES)


def grand_total(scores: Mapping[str, object]) -> Number:
    upper = upper_section_total(scores)
    return upper + upper_section_bonus(upper) + lower_section_total(scores)


def is_scoresheet_complete(scores: Mapping[str, object]) -> bool:
    return all(scores.get(category) is not None for category in YAMS_CATEGORIES)


def available_categories(scores: Mapping[str, object]) -> List[str]:
    return [category for category in YAMS_CATEGORIES if scores.get(category) is None]


def validate_category_score(category_id: str, value) -> int:
    """Check a value can be written in a Yams box and return it as an int."""
    if category_id not in YAMS_CATEGORIES:
        raise ValidationError(f"Unknown category: {category_id}")

    number = coerce_score(value)
    if isinstance(number, float):
        raise ValidationError("Yams scores must be whole numbers")
    if number < 0:
        raise ValidationError("Scores cannot be negative")

    if category_id in UPPER_FACE_VALUES:
        face = UPPER_FACE_VALUES[category_id]
        if number % face != 0 or number > face * DICE_COUNT:
            raise ValidationError(
                f"{category_id} must be a multiple of {face} between 0 and {face * DICE_COUNT}"
            )
    elif category_id in YAMS_FIXED_SCORES:
        fixed = YAMS_FIXED_SCORES[category_id]
        if number not in (0, fixed):
            raise ValidationError(f"{category_id} is worth either 0 or {fixed}")
    elif number > MAX_DICE_SUM:
        raise ValidationError(f"{category_id} cannot exceed {MAX_DICE_SUM}")

    return number


# ---------------------------------------------------------------------------
# Belote (two teams of two)
# ---------------------------------------------------------------------------

BELOTE_TEAM_COUNT = 2
BELOTE_TEAM_SIZE = 2
BELOTE_POINTS_PER_DEAL = 162
BELOTE_CAPOT_POINTS = 252
BELOTE_REBELOTE_BONUS = 20


def team_positions(team_index: int, team_count: int, team_size: int) -> List[int]:
    """Seats of a team: team i sits at i, i + team_count, i + 2*team_count..."""
    return [team_index + seat * team_count for seat in range(team_size)]


def split_team_score(team_score, members: int) -> List[int]:
    """
    Share a team score between its members so the shares add up exactly.

    Odd scores give the extra point to the first member (161 -> [81, 80]).
    Values are never scaled: 160 -> [80, 80], 2 -> [1, 1].
    """
    if members < 1:
        raise ValidationError("A team needs at least one player")
    number = coerce_score(team_score)
    if isinstance(number, float):
        raise ValidationError("Team scores must be whole numbers")
    base, remainder = divmod(number, members)
    return [base + 1] * remainder + [base] * (members - remainder)


def cumulative_team_totals(rounds: Sequence[Mapping], team_count: int = BELOTE_TEAM_COUNT) -> List[Dict[int, Number]]:
    """Cumulative team totals after each round, in round order."""
    totals = {team: 0 for team in range(team_count)}
    running = []
    for round_data in sorted(rounds, key=lambda r: r["round_number"]):
        for team in range(team_count):
            totals[team] += coerce_score(round_data["team_scores"].get(team))
        running.append(dict(totals))
    return running


def team_totals(rounds: Sequence[Mapping], team_count: int = BELOTE_TEAM_COUNT) -> Dict[int, Number]:
    running = cumulative_team_totals(rounds, team_count)
    return running[-1] if running else {team: 0 for team in range(team_count)}


def team_winner(rounds: Sequence[Mapping], target: Optional[int], team_count: int = BELOTE_TEAM_COUNT) -> Optional[int]:
    """
    The first team to reach the target.

    When both teams cross it in the same deal the higher total wins, and
    the lower team index breaks an exact tie.
    """
    if not target or target <= 0:
        return None
    for totals in cumulative_team_totals(rounds, team_count):
        reached = [team for team in range(team_count) if totals[team] >= target]
        if reached:
            return max(reached, key=lambda team: (totals[team], -team))
    return None


def is_standard_deal_total(team_a, team_b, belote_rebelote=0) -> bool:
    """A deal normally hands out 162 points (252 for a capot), plus any belote bonus."""
    total = coerce_score(team_a) + coerce_score(team_b)
    bonus = coerce_score(belote_rebelote)
    expected = {BELOTE_POINTS_PER_DEAL, BELOTE_CAPOT_POINTS}
    expected |= {points + bonus for points in expected}
    return total in expected
