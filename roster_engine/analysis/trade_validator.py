"""
Trade validation for the Fantasy Roster Engine.
Checks resulting roster sizes, injured reserve swaps and the trade deadline.
"""

import logging
from collections import Counter
from datetime import date, datetime
from typing import List, Optional, Union

from ..data.models import RosterPlayer, Team, TradeOffer, Violation, ViolationCode
from ..config.settings import LeagueRules


logger = logging.getLogger(__name__)


class TradeValidator:
    """Validates proposed trades against league rules."""

    def __init__(self, rules: Optional[LeagueRules] = None):
        self.rules = rules or LeagueRules()

    def validate(self, team_a_out: List[RosterPlayer], team_b_out: List[RosterPlayer],
                 team_a_size: int, team_b_size: int,
                 deadline: Union[date, datetime, None] = None,
                 now: Optional[datetime] = None) -> List[Violation]:
        """Validate a trade. An empty list means the trade may proceed.

        Sizes are active roster sizes, IR players excluded. ``deadline``
        falls back to the league rules. A plain date deadline allows trades
        through the end of that day.
        """
        if not team_a_out and not team_b_out:
            return [Violation(ViolationCode.EMPTY_TRADE, "trade has no players")]

        violations: List[Violation] = []
        violations.extend(self._check_duplicates(team_a_out + team_b_out))

        # IR players keep their IR slot and never count toward roster size
        a_active = len([rp for rp in team_a_out if not rp.is_on_ir])
        b_active = len([rp for rp in team_b_out if not rp.is_on_ir])
        violations.extend(self._check_roster_size("team A", team_a_size - a_active + b_active))
        violations.extend(self._check_roster_size("team B", team_b_size - b_active + a_active))
        violations.extend(self._check_ir_swap(team_a_out, team_b_out))
        violations.extend(self._check_ir_swap(team_b_out, team_a_out))

        deadline_violation = self._check_deadline(deadline or self.rules.trade_deadline, now or datetime.now())
        if deadline_violation:
            violations.append(deadline_violation)

        if violations:
            logger.warning(f"Trade rejected: {[str(v) for v in violations]}")
        return violations

    def validate_offer(self, offer: TradeOffer, team_a: Team, team_b: Team,
                       now: Optional[datetime] = None) -> List[Violation]:
        """Validate a trade offer against both teams' current rosters."""
        violations: List[Violation] = []
        violations.extend(self._check_ownership(offer.team_a_players, team_a, team_b))
        violations.extend(self._check_ownership(offer.team_b_players, team_b, team_a))
        if violations:
            logger.warning(f"Trade offer {offer.team_a_id} <-> {offer.team_b_id} rejected: "
                           f"{[str(v) for v in violations]}")
            return violations

        return self.validate(
            offer.team_a_players,
            offer.team_b_players,
            len(team_a.get_active_roster()),
            len(team_b.get_active_roster()),
            now=now or offer.proposed_at
        )

    def _check_ownership(self, outgoing: List[RosterPlayer], sender: Team,
                         receiver: Team) -> List[Violation]:
        violations = []
        for rp in outgoing:
            if not sender.has_player(rp.player_id):
                violations.append(Violation(
                    ViolationCode.PLAYER_NOT_FOUND,
                    f"{rp.player.name} not found on {sender.name}",
                    player_id=rp.player_id,
                    team_id=sender.team_id
                ))
            elif receiver.has_player(rp.player_id):
                violations.append(Violation(
                    ViolationCode.ALREADY_ON_ROSTER,
                    f"{rp.player.name} is already on {receiver.name}",
                    player_id=rp.player_id,
                    team_id=receiver.team_id
                ))
        return violations

    def _check_duplicates(self, players: List[RosterPlayer]) -> List[Violation]:
        counts = Counter(rp.player_id for rp in players)
        return [
            Violation(ViolationCode.DUPLICATE_PLAYER, f"player {player_id} listed more than once",
                      player_id=player_id)
            for player_id, count in counts.items()
            if count > 1
        ]

    def _check_roster_size(self, label: str, new_size: int) -> List[Violation]:
        if new_size < self.rules.min_roster_size:
            return [Violation(
                ViolationCode.ROSTER_TOO_SMALL,
                f"{label} roster would be too small ({new_size}, min {self.rules.min_roster_size})"
            )]
        if new_size > self.rules.max_roster_size:
            return [Violation(
                ViolationCode.ROSTER_TOO_LARGE,
                f"{label} roster would be too large ({new_size}, max {self.rules.max_roster_size})"
            )]
        return []

    def _check_ir_swap(self, outgoing: List[RosterPlayer], incoming: List[RosterPlayer]) -> List[Violation]:
        """IR players may only be traded for IR players."""
        if any(rp.is_on_ir for rp in incoming):
            return []
        return [
            Violation(
                ViolationCode.IR_FOR_ACTIVE,
                f"{rp.player.name} is on IR and cannot be traded for active players",
                player_id=rp.player_id
            )
            for rp in outgoing
            if rp.is_on_ir
        ]

    def _check_deadline(self, deadline: Union[date, datetime, None],
                        now: datetime) -> Optional[Violation]:
        if deadline is None:
            return None
        if isinstance(deadline, datetime):
            passed = now > deadline
        else:
            passed = now.date() > deadline
        if passed:
            return Violation(
                ViolationCode.TRADE_DEADLINE_PASSED,
                f"trade deadline has passed ({deadline.isoformat()})"
            )
        return None


def validate_trade(team_a_out: List[RosterPlayer], team_b_out: List[RosterPlayer],
                   team_a_size: int, team_b_size: int,
                   deadline: Union[date, datetime, None] = None,
                   now: Optional[datetime] = None,
                   rules: Optional[LeagueRules] = None) -> List[Violation]:
    """Validate a trade and return all violations found."""
    return TradeValidator(rules).validate(team_a_out, team_b_out, team_a_size, team_b_size, deadline, now)
