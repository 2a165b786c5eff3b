from abc import ABC, abstractmethod
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from models.game_session import GameSession, ScoringKind
from models.player import Player
from api.crud.session_crud import get_session_players
from api.crud.score_crud import (
    get_next_round_number, add_round_entry, delete_round_entries, get_round_entries,
    get_player_total, get_team_round_sums, get_round_details,
    get_category_entry, upsert_category_entry, get_category_entries
)
from core.exceptions import ValidationError, WrongScoringKind
from core.logging import logger
from services import scoring_rules as rules


class ScoringEngine(ABC):
    """Abstract base class for the per-game scoring engines"""

    kind: ScoringKind

    def check_session(self, session: GameSession):
        if session.scoring_kind != self.kind:
            raise WrongScoringKind(self.label)

    @property
    @abstractmethod
    def label(self) -> str:
        """Human readable name used in error messages"""
        pass

    @abstractmethod
    def build_view(self, db: Session, session: GameSession, players: List[Player]) -> dict:
        """Derive rounds/categories, totals and finish state from stored entries"""
        pass


class GenericRoundsEngine(ScoringEngine):
    """One score per player per round, totals are running sums"""

    kind = ScoringKind.GENERIC
    label = "round"

    def add_round(self, db: Session, session: GameSession, scores: Dict[int, object]) -> int:
        """Append the next round. Returns its number."""
        self.check_session(session)
        players = get_session_players(db, session.id)
        player_ids = {p.id for p in players}

        unknown = [player_id for player_id in scores if player_id not in player_ids]
        if unknown:
            raise ValidationError(f"Player {unknown[0]} is not part of this session")

        values = {player_id: rules.coerce_score(value) for player_id, value in scores.items()}
        if not any(values.values()):
            # An all-zero round is almost always an empty form sent by mistake
            logger.warning(f"Session {session.id}: ignored empty round submission")
            raise ValidationError("Please enter at least one score")

        round_number = get_next_round_number(db, session.id)
        for player in players:
            if player.id in values:
                add_round_entry(db, session.id, player.id, round_number, values[player.id])
        db.flush()
        return round_number

    def get_rounds(self, db: Session, session: GameSession) -> Dict[int, Dict[int, object]]:
        rounds: Dict[int, Dict[int, object]] = {}
        for entry in get_round_entries(db, session.id):
            rounds.setdefault(entry.round_number, {})[entry.player_id] = rules.coerce_score(entry.score_value)
        return rounds

    def get_total(self, db: Session, session: GameSession, player_id: int, upto_round: Optional[int] = None):
        return rules.coerce_score(get_player_total(db, session.id, player_id, upto_round))

    def evaluate_termination(self, db: Session, session: GameSession, upto_round: int) -> bool:
        players = get_session_players(db, session.id)
        return rules.evaluate_termination(
            self.get_rounds(db, session),
            [p.id for p in players],
            session.target,
            session.finish_current_round,
            upto_round
        )

    def rank(self, db: Session, session: GameSession) -> List[dict]:
        players = get_session_players(db, session.id)
        rounds = self.get_rounds(db, session)
        totals = rules.player_totals(rounds, [p.id for p in players])
        return rules.rank_players([(p.id, totals[p.id]) for p in players], session.score_direction.value)

    def build_view(self, db: Session, session: GameSession, players: List[Player]) -> dict:
        player_ids = [p.id for p in players]
        rounds = self.get_rounds(db, session)
        totals = rules.player_totals(rounds, player_ids)
        current_round = max(rounds) if rounds else 0

        # Once over, later rounds never reopen the session
        finished_at = rules.finishing_round(rounds, player_ids, session.target, session.finish_current_round)
        finished = finished_at is not None
        waiting = (
            not finished
            and session.finish_current_round
            and rules.target_reached(rules.player_totals(rounds, player_ids, current_round), session.target)
        )

        return {
            "rounds": [
                {"round_number": number, "scores": rounds[number]}
                for number in sorted(rounds)
            ],
            "current_round": current_round,
            "totals": totals,
            "rankings": rules.rank_players([(pid, totals[pid]) for pid in player_ids], session.score_direction.value),
            "finished": finished,
            "finished_at_round": finished_at,
            "waiting_for_round_end": waiting,
        }


class CategoryEngine(ScoringEngine):
    """Yams scoresheet: one value per category per player, no rounds"""

    kind = ScoringKind.CATEGORIES
    label = "category"

    def _check_player(self, db: Session, session: GameSession, player_id: int):
        if player_id not in {p.id for p in get_session_players(db, session.id)}:
            raise ValidationError(f"Player {player_id} is not part of this session")

    def has_score(self, db: Session, session: GameSession, player_id: int, category_id: str) -> bool:
        return get_category_entry(db, session.id, player_id, category_id) is not None

    def set_category_score(self, db: Session, session: GameSession, player_id: int, category_id: str, value):
        """
        Upsert one category value.

        The engine itself overwrites; callers that want write-once boxes
        check has_score first.
        """
        self.check_session(session)
        self._check_player(db, session, player_id)
        score = rules.validate_category_score(category_id, value)
        return upsert_category_entry(db, session.id, player_id, category_id, score)

    def get_scoresheet(self, db: Session, session: GameSession) -> Dict[int, Dict[str, object]]:
        """{player_id: {category_id: value}}"""
        sheet: Dict[int, Dict[str, object]] = {}
        for entry in get_category_entries(db, session.id):
            sheet.setdefault(entry.player_id, {})[entry.score_type] = rules.coerce_score(entry.score_value)
        return sheet

    def upper_section_total(self, db: Session, session: GameSession, player_id: int):
        return rules.upper_section_total(self.get_scoresheet(db, session).get(player_id, {}))

    def bonus(self, db: Session, session: GameSession, player_id: int) -> int:
        return rules.upper_section_bonus(self.upper_section_total(db, session, player_id))

    def grand_total(self, db: Session, session: GameSession, player_id: int):
        return rules.grand_total(self.get_scoresheet(db, session).get(player_id, {}))

    def build_view(self, db: Session, session: GameSession, players: List[Player]) -> dict:
        sheet = self.get_scoresheet(db, session)

        categories = {category: {} for category in rules.YAMS_CATEGORIES}
        for player_id, scores in sheet.items():
            for category, value in scores.items():
                categories.setdefault(category, {})[player_id] = value

        upper_totals, bonuses, totals = {}, {}, {}
        for player in players:
            scores = sheet.get(player.id, {})
            upper_totals[player.id] = rules.upper_section_total(scores)
            bonuses[player.id] = rules.upper_section_bonus(upper_totals[player.id])
            totals[player.id] = rules.grand_total(scores)

        completed = bool(players) and all(
            rules.is_scoresheet_complete(sheet.get(p.id, {})) for p in players
        )

        return {
            "categories": categories,
            "upper_totals": upper_totals,
            "bonuses": bonuses,
            "totals": totals,
            "rankings": rules.rank_players([(p.id, totals[p.id]) for p in players], session.score_direction.value),
            "completed": completed,
            "finished": completed,
        }


class TeamRoundsEngine(ScoringEngine):
    """Belote-style: a score per team per deal, stored as per-player shares"""

    kind = ScoringKind.TEAM_ROUNDS
    label = "team round"
    team_size = rules.BELOTE_TEAM_SIZE

    def _teams(self, players: List[Player]) -> Dict[int, List[Player]]:
        teams: Dict[int, List[Player]] = {}
        for player in sorted(players, key=lambda p: p.position):
            teams.setdefault(player.team, []).append(player)
        return teams

    def team_count(self, players: List[Player]) -> int:
        return max(len(self._teams(players)), rules.BELOTE_TEAM_COUNT)

    def _check_shape(self, players: List[Player]) -> Dict[int, List[Player]]:
        teams = self._teams(players)
        team_count = len(teams)
        if team_count < rules.BELOTE_TEAM_COUNT or set(teams) != set(range(team_count)):
            raise ValidationError(f"At least {rules.BELOTE_TEAM_COUNT} teams are needed for this game")
        if any(len(members) != self.team_size for members in teams.values()):
            raise ValidationError(
                f"Exactly {team_count * self.team_size} players in teams of {self.team_size} are needed for this game"
            )
        return teams

    def add_team_round(
        self,
        db: Session,
        session: GameSession,
        round_number: int,
        team_scores: Dict[int, object],
        details: Optional[dict] = None
    ) -> Dict[int, List[int]]:
        """
        Write (or rewrite) one deal.

        Any existing rows of that round are removed first, so sending a
        corrected deal again replaces it. Returns the stored shares per team.
        """
        self.check_session(session)
        if round_number < 1:
            raise ValidationError("Round numbers start at 1")

        teams = self._check_shape(get_session_players(db, session.id))
        expected = set(teams)
        if set(team_scores) != expected:
            raise ValidationError(f"Scores are needed for teams {sorted(expected)}")

        delete_round_entries(db, session.id, round_number)

        stored = {}
        for team, members in teams.items():
            shares = rules.split_team_score(team_scores[team], len(members))
            for player, share in zip(members, shares):
                add_round_entry(db, session.id, player.id, round_number, share, details)
            stored[team] = shares
        db.flush()
        return stored

    def get_round_breakdown(self, db: Session, session: GameSession, team_count: Optional[int] = None) -> List[dict]:
        if team_count is None:
            team_count = self.team_count(get_session_players(db, session.id))

        rounds: Dict[int, Dict[int, object]] = {}
        for round_number, team, total in get_team_round_sums(db, session.id, team_count):
            rounds.setdefault(round_number, {})[team] = rules.coerce_score(total)

        details = get_round_details(db, session.id)
        breakdown = []
        for round_number in sorted(rounds):
            breakdown.append({
                "round_number": round_number,
                "team_scores": {team: rounds[round_number].get(team, 0) for team in range(team_count)},
                "details": details.get(round_number),
            })
        return breakdown

    def cumulative_totals(self, db: Session, session: GameSession) -> Dict[int, object]:
        team_count = self.team_count(get_session_players(db, session.id))
        return rules.team_totals(self.get_round_breakdown(db, session, team_count), team_count)

    def winner(self, db: Session, session: GameSession) -> Optional[int]:
        team_count = self.team_count(get_session_players(db, session.id))
        return rules.team_winner(self.get_round_breakdown(db, session, team_count), session.target, team_count)

    def deal_warning(self, round_data: dict) -> Optional[str]:
        """Flag two-team deals whose points do not add up to a normal deal"""
        details = round_data["details"]
        scores = round_data["team_scores"]
        if not details or len(scores) != rules.BELOTE_TEAM_COUNT:
            return None
        bonus = details.get("belote_rebelote") or 0
        if rules.is_standard_deal_total(scores[0], scores[1], bonus):
            return None
        return f"Deal total is {rules.coerce_score(scores[0]) + rules.coerce_score(scores[1])}, expected {rules.BELOTE_POINTS_PER_DEAL}"

    def build_view(self, db: Session, session: GameSession, players: List[Player]) -> dict:
        team_count = self.team_count(players)
        breakdown = self.get_round_breakdown(db, session, team_count)
        for round_data in breakdown:
            round_data["warning"] = self.deal_warning(round_data)

        totals = rules.team_totals(breakdown, team_count)
        winner = rules.team_winner(breakdown, session.target, team_count)
        return {
            "rounds": breakdown,
            "current_round": breakdown[-1]["round_number"] if breakdown else 0,
            "team_totals": totals,
            "team_rankings": [
                {"team": r["player_id"], "total": r["total"], "rank": r["rank"]}
                for r in rules.rank_players(
                    [(team, totals[team]) for team in range(team_count)],
                    session.score_direction.value
                )
            ],
            "winner": winner,
            "finished": winner is not None,
        }


ENGINES = {
    ScoringKind.GENERIC: GenericRoundsEngine(),
    ScoringKind.CATEGORIES: CategoryEngine(),
    ScoringKind.TEAM_ROUNDS: TeamRoundsEngine(),
}


def get_engine(kind: ScoringKind) -> ScoringEngine:
    return ENGINES[kind]
