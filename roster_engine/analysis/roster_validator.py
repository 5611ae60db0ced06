"""
Roster validation for the Fantasy Roster Engine.
Checks roster composition, starting lineup slots and injured reserve usage.
"""

import logging
from collections import Counter
from typing import List, Dict, Optional, Iterable

from ..data.models import (
    RosterPlayer, Position, LineupSlot, Violation, ViolationCode,
    LINEUP_TEMPLATE, SLOT_ELIGIBILITY, is_eligible_for_slot,
)
from ..config.settings import LeagueRules


logger = logging.getLogger(__name__)


class RosterValidator:
    """Validates a team's roster against league rules."""

    def __init__(self, rules: Optional[LeagueRules] = None):
        self.rules = rules or LeagueRules()

    def validate(self, roster: List[RosterPlayer]) -> List[Violation]:
        """Validate a full roster. An empty list means the roster is valid."""
        if not roster:
            return [Violation(ViolationCode.EMPTY_ROSTER, "empty roster")]

        violations: List[Violation] = []
        violations.extend(self._check_duplicates(roster))

        position_violations = self._check_position_counts(roster)
        violations.extend(position_violations)
        missing_positions = {
            v.position for v in position_violations if v.code == ViolationCode.MISSING_POSITION
        }

        violations.extend(self._check_starting_lineup(roster, missing_positions))
        violations.extend(self._check_injured_reserve(roster))
        violations.extend(self._check_roster_size(roster))

        if violations:
            logger.debug(f"Roster has {len(violations)} violation(s): {[str(v) for v in violations]}")
        return violations

    def _check_duplicates(self, roster: List[RosterPlayer]) -> List[Violation]:
        counts = Counter(rp.player_id for rp in roster)
        return [
            Violation(ViolationCode.DUPLICATE_PLAYER, f"duplicate player {player_id}", player_id=player_id)
            for player_id, count in counts.items()
            if count > 1
        ]

    def _check_position_counts(self, roster: List[RosterPlayer]) -> List[Violation]:
        """Check position minimums and maximums across players not on IR."""
        counts = Counter(rp.position for rp in roster if not rp.is_on_ir)
        violations = []

        for position, (minimum, maximum) in self.rules.position_limits.items():
            actual = counts.get(position, 0)
            if actual < minimum:
                violations.append(Violation(
                    ViolationCode.MISSING_POSITION, f"missing {position.value}", position=position
                ))
            elif maximum is not None and actual > maximum:
                violations.append(Violation(
                    ViolationCode.TOO_MANY_AT_POSITION,
                    f"too many {position.value} ({actual}, max {maximum})",
                    position=position
                ))

        return violations

    def _check_starting_lineup(self, roster: List[RosterPlayer],
                               missing_positions: Iterable[Position]) -> List[Violation]:
        """Check that each lineup slot has exactly one eligible starter."""
        violations = []
        occupants: Dict[LineupSlot, List[RosterPlayer]] = {slot: [] for slot in LINEUP_TEMPLATE}

        for rp in roster:
            if not rp.is_starter:
                continue
            if rp.lineup_slot is None:
                violations.append(Violation(
                    ViolationCode.STARTER_WITHOUT_SLOT,
                    f"starter {rp.player.name} has no lineup slot",
                    player_id=rp.player_id
                ))
                continue
            occupants[rp.lineup_slot].append(rp)
            if not is_eligible_for_slot(rp.position, rp.lineup_slot):
                violations.append(Violation(
                    ViolationCode.INELIGIBLE_FOR_SLOT,
                    f"{rp.player.name} ({rp.position.value}) cannot play {rp.lineup_slot.value}",
                    player_id=rp.player_id,
                    position=rp.position,
                    slot=rp.lineup_slot
                ))

        for slot in LINEUP_TEMPLATE:
            count = len(occupants[slot])
            if count == 0:
                eligible = SLOT_ELIGIBILITY[slot]
                # Already explained by a missing-position violation
                if len(eligible) == 1 and eligible[0] in missing_positions:
                    continue
                violations.append(Violation(
                    ViolationCode.EMPTY_SLOT, f"empty {slot.value} slot", slot=slot
                ))
            elif count > 1:
                violations.append(Violation(
                    ViolationCode.OVERFILLED_SLOT,
                    f"{slot.value} slot has {count} players",
                    slot=slot
                ))

        return violations

    def _check_injured_reserve(self, roster: List[RosterPlayer]) -> List[Violation]:
        ir_players = [rp for rp in roster if rp.is_on_ir]
        violations = []

        if len(ir_players) > self.rules.max_ir_slots:
            violations.append(Violation(
                ViolationCode.TOO_MANY_IR,
                f"too many IR players ({len(ir_players)}, max {self.rules.max_ir_slots})"
            ))

        for rp in ir_players:
            if rp.player.injury_status not in self.rules.ir_eligible_statuses:
                violations.append(Violation(
                    ViolationCode.INELIGIBLE_FOR_IR,
                    f"{rp.player.name} is not eligible for IR ({rp.player.injury_status.value})",
                    player_id=rp.player_id
                ))

        return violations

    def _check_roster_size(self, roster: List[RosterPlayer]) -> List[Violation]:
        size = len([rp for rp in roster if not rp.is_on_ir])
        if size < self.rules.min_roster_size:
            return [Violation(
                ViolationCode.ROSTER_TOO_SMALL,
                f"roster too small ({size}, min {self.rules.min_roster_size})"
            )]
        if size > self.rules.max_roster_size:
            return [Violation(
                ViolationCode.ROSTER_TOO_LARGE,
                f"roster too large ({size}, max {self.rules.max_roster_size})"
            )]
        return []

    def can_add_player(self, roster: List[RosterPlayer]) -> bool:
        """Check if the active roster has room for another player."""
        return len([rp for rp in roster if not rp.is_on_ir]) < self.rules.max_roster_size

    def can_drop_player(self, roster: List[RosterPlayer]) -> bool:
        """Check if a player can be dropped without going under the minimum."""
        return len([rp for rp in roster if not rp.is_on_ir]) > self.rules.min_roster_size

    def validate_lineup_change(self, roster: List[RosterPlayer], player_id: str,
                               slot: LineupSlot) -> List[Violation]:
        """Validate moving a rostered player into a lineup slot."""
        roster_player = next((rp for rp in roster if rp.player_id == player_id), None)
        if roster_player is None:
            return [Violation(
                ViolationCode.PLAYER_NOT_FOUND, f"player {player_id} not found on roster",
                player_id=player_id
            )]

        violations = []
        if roster_player.is_on_ir:
            violations.append(Violation(
                ViolationCode.PLAYER_ON_IR,
                f"{roster_player.player.name} is on IR and cannot start",
                player_id=player_id
            ))
        if not is_eligible_for_slot(roster_player.position, slot):
            violations.append(Violation(
                ViolationCode.INELIGIBLE_FOR_SLOT,
                f"{roster_player.player.name} ({roster_player.position.value}) cannot play {slot.value}",
                player_id=player_id,
                position=roster_player.position,
                slot=slot
            ))
        return violations


def validate_roster(roster: List[RosterPlayer], rules: Optional[LeagueRules] = None) -> List[Violation]:
    """Validate a roster and return all violations found."""
    return RosterValidator(rules).validate(roster)
