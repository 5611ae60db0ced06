"""
Waiver claim processing for the Fantasy Roster Engine.
Resolves claims by rolling waiver priority or by FAAB blind bidding.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Dict, Optional, Tuple

from ..data.models import WaiverClaim, Team
from ..config.settings import LeagueRules


logger = logging.getLogger(__name__)


class WaiverMode(Enum):
    """How competing claims are resolved."""
    PRIORITY = "priority"
    FAAB = "faab"


class ClaimOutcome(Enum):
    WON = "won"
    LOST = "lost"


class LossReason(Enum):
    """Why a claim did not win."""
    OUTBID = "outbid"
    INSUFFICIENT_BUDGET = "insufficient_budget"
    LOWER_PRIORITY = "lower_priority"
    INVALID_BID = "invalid_bid"
    UNKNOWN_TEAM = "unknown_team"
    DUPLICATE_CLAIM = "duplicate_claim"
    ROSTER_FULL = "roster_full"


@dataclass
class ClaimResult:
    """Outcome of a single waiver claim."""
    claim: WaiverClaim
    outcome: ClaimOutcome
    reason: Optional[LossReason] = None
    winning_team_id: Optional[str] = None
    amount: Optional[int] = None

    @property
    def won(self) -> bool:
        return self.outcome == ClaimOutcome.WON


@dataclass
class WaiverProcessingResult:
    """All claim outcomes plus the updated priority and budget ledgers."""
    results: List[ClaimResult] = field(default_factory=list)
    priorities: Dict[str, int] = field(default_factory=dict)
    budgets: Dict[str, int] = field(default_factory=dict)

    def get_winners(self) -> List[ClaimResult]:
        return [r for r in self.results if r.won]


class WaiverProcessor:
    """Processes one waiver cycle."""

    def __init__(self, rules: Optional[LeagueRules] = None):
        self.rules = rules or LeagueRules()

    def process(self, claims: List[WaiverClaim], mode: Optional[WaiverMode] = None,
                budgets: Optional[Dict[str, int]] = None,
                priorities: Optional[Dict[str, int]] = None,
                records: Optional[Dict[str, Tuple[int, int]]] = None,
                roster_sizes: Optional[Dict[str, int]] = None) -> WaiverProcessingResult:
        """Resolve all claims in a single pass.

        Claims are grouped by player and each player is resolved in order of
        first appearance. Every player is ranked against the waiver order as it
        stood when the cycle started; winners are moved to the back of the
        returned order afterwards, in the order they won. FAAB budgets are
        spent as claims are awarded, so a later bid must fit what is left.

        ``priorities`` should cover every team in the league so a winner can
        be moved behind all of them; teams missing from it use the priority on
        their claim. ``records`` maps team ID to ``(wins, losses)`` for the
        ``record_inverse`` FAAB tiebreaker. ``roster_sizes`` maps team ID to
        active roster size; a team at the maximum needs a drop player on its
        claim.
        """
        mode = mode or WaiverMode(self.rules.waiver_mode)
        budgets = dict(budgets or {})
        priorities = dict(priorities or {})
        records = records or {}
        roster_sizes = dict(roster_sizes or {})

        for claim in claims:
            priorities.setdefault(claim.team_id, claim.priority)
        cycle_priorities = dict(priorities)

        claims_by_player: Dict[str, List[Tuple[int, WaiverClaim]]] = OrderedDict()
        for index, claim in enumerate(claims):
            claims_by_player.setdefault(claim.player_id, []).append((index, claim))

        logger.info(f"Processing {len(claims)} {mode.value} claim(s) for {len(claims_by_player)} player(s)")

        results: List[Optional[ClaimResult]] = [None] * len(claims)
        winners: List[str] = []
        for player_id, player_claims in claims_by_player.items():
            for index, result in self._resolve_player(player_id, player_claims, mode, budgets,
                                                      cycle_priorities, records, roster_sizes):
                results[index] = result
                if result.won:
                    winners.append(result.claim.team_id)

        for team_id in winners:
            self._move_to_back(team_id, priorities)

        return WaiverProcessingResult(results=results, priorities=priorities, budgets=budgets)

    def _resolve_player(self, player_id: str, player_claims: List[Tuple[int, WaiverClaim]],
                        mode: WaiverMode, budgets: Dict[str, int], priorities: Dict[str, int],
                        records: Dict[str, Tuple[int, int]],
                        roster_sizes: Dict[str, int]) -> List[Tuple[int, ClaimResult]]:
        """Resolve every claim on one player, charging the winner's budget and roster spot."""
        resolved: List[Tuple[int, ClaimResult]] = []
        contenders: List[Tuple[int, WaiverClaim]] = []
        seen_teams = set()

        for index, claim in player_claims:
            reason = None
            if claim.team_id in seen_teams:
                reason = LossReason.DUPLICATE_CLAIM
            elif self._roster_full(claim, roster_sizes):
                reason = LossReason.ROSTER_FULL
            elif mode == WaiverMode.FAAB:
                reason = self._check_bid(claim, budgets)
            seen_teams.add(claim.team_id)

            if reason is not None:
                resolved.append((index, ClaimResult(claim, ClaimOutcome.LOST, reason)))
            else:
                contenders.append((index, claim))

        contenders.sort(key=lambda item: self._sort_key(item, mode, priorities, records))

        if not contenders:
            logger.info(f"No valid claims for player {player_id}")
            return resolved

        winner_index, winner = contenders[0]
        amount = winner.bid_amount if mode == WaiverMode.FAAB else None
        if mode == WaiverMode.FAAB:
            budgets[winner.team_id] -= winner.bid_amount
        if winner.team_id in roster_sizes and winner.drop_player_id is None:
            roster_sizes[winner.team_id] += 1

        resolved.append((winner_index, ClaimResult(
            winner, ClaimOutcome.WON, winning_team_id=winner.team_id, amount=amount
        )))
        logger.info(
            f"Player {player_id} awarded to team {winner.team_id}"
            + (f" for ${amount}" if amount is not None else "")
        )

        for index, claim in contenders[1:]:
            if mode == WaiverMode.FAAB and claim.bid_amount < winner.bid_amount:
                reason = LossReason.OUTBID
            else:
                reason = LossReason.LOWER_PRIORITY
            resolved.append((index, ClaimResult(
                claim, ClaimOutcome.LOST, reason, winning_team_id=winner.team_id
            )))

        return resolved

    def _roster_full(self, claim: WaiverClaim, roster_sizes: Dict[str, int]) -> bool:
        if claim.drop_player_id is not None or claim.team_id not in roster_sizes:
            return False
        return roster_sizes[claim.team_id] >= self.rules.max_roster_size

    def _check_bid(self, claim: WaiverClaim, budgets: Dict[str, int]) -> Optional[LossReason]:
        if claim.team_id not in budgets:
            logger.warning(f"No FAAB budget for team {claim.team_id}")
            return LossReason.UNKNOWN_TEAM
        if claim.bid_amount < 0 or (claim.bid_amount == 0 and not self.rules.allow_zero_dollar_bids):
            return LossReason.INVALID_BID
        if claim.bid_amount > budgets[claim.team_id]:
            return LossReason.INSUFFICIENT_BUDGET
        return None

    def _sort_key(self, item: Tuple[int, WaiverClaim], mode: WaiverMode,
                  priorities: Dict[str, int], records: Dict[str, Tuple[int, int]]) -> tuple:
        """Sort key: best claim first. Input order is the last tiebreak."""
        index, claim = item
        submitted = claim.submitted_at or datetime.max
        priority = priorities.get(claim.team_id, claim.priority)

        if mode == WaiverMode.PRIORITY:
            return (priority, submitted, index)

        if self.rules.faab_tiebreaker == "record_inverse":
            wins, losses = records.get(claim.team_id, (0, 0))
            record_key = -(losses - wins)
        else:
            record_key = 0
        return (-claim.bid_amount, record_key, priority, submitted, index)

    def _move_to_back(self, team_id: str, priorities: Dict[str, int]) -> None:
        """Move a team to the back of the waiver order, shifting later teams up."""
        current = priorities[team_id]
        worst = max(priorities.values())
        for other_id, rank in priorities.items():
            if other_id != team_id and current < rank <= worst:
                priorities[other_id] = rank - 1
        priorities[team_id] = worst
        logger.debug(f"Team {team_id} waiver priority {current} -> {worst}")


def initial_waiver_priorities(teams: List[Team]) -> Dict[str, int]:
    """Build a reverse-standings waiver order; the worst record gets priority 1."""
    ordered = sorted(
        teams,
        key=lambda t: (-t.stats.losses, t.stats.wins, t.stats.points_for)
    )
    return {team.team_id: rank for rank, team in enumerate(ordered, start=1)}


def resolve_waivers(claims: List[WaiverClaim], mode: WaiverMode,
                    budgets: Optional[Dict[str, int]] = None,
                    priorities: Optional[Dict[str, int]] = None,
                    rules: Optional[LeagueRules] = None) -> List[ClaimResult]:
    """Resolve a waiver cycle and return the outcome of every claim, in input order."""
    return WaiverProcessor(rules).process(claims, mode, budgets, priorities).results
