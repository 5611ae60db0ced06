"""
Lineup optimization engine for the Fantasy Roster Engine.
Builds the highest-scoring starting lineup a roster allows for a given week.
"""

import logging
from typing import List, Dict, Optional, Set, Any
from dataclasses import dataclass, field, replace

from ..data.models import (
    RosterPlayer, LineupSlot, RosterStatus, LINEUP_TEMPLATE, is_eligible_for_slot,
)


logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    """Result of lineup optimization."""
    lineup: Dict[LineupSlot, Optional[RosterPlayer]]
    week: int
    total_points: float
    fallback_slots: List[LineupSlot] = field(default_factory=list)
    changes_made: List[Dict[str, Any]] = field(default_factory=list)
    reasoning: str = ""

    def get_starting_players(self) -> List[RosterPlayer]:
        """Get all players placed in the lineup."""
        return [rp for rp in self.lineup.values() if rp is not None]


class LineupOptimizer:
    """Selects starters slot by slot, best available player first."""

    def __init__(self, week_concluded: bool = False):
        self.week_concluded = week_concluded

    def optimize(self, roster: List[RosterPlayer], week: int) -> OptimizationResult:
        """Optimize the starting lineup for the given week."""
        lineup: Dict[LineupSlot, Optional[RosterPlayer]] = {}
        used_ids: Set[str] = set()
        fallback_slots: List[LineupSlot] = []

        # IR slots never start
        candidates = [rp for rp in roster if not rp.is_on_ir]

        for slot in LINEUP_TEMPLATE:
            chosen, fell_back = self._find_best_player_for_slot(slot, candidates, used_ids, week)
            lineup[slot] = chosen
            if chosen is None:
                logger.debug(f"No eligible player for {slot.value} in week {week}")
                continue
            used_ids.add(chosen.player_id)
            if fell_back:
                fallback_slots.append(slot)
                logger.warning(
                    f"Week {week}: no available player for {slot.value}, "
                    f"starting {chosen.player.name} (bye or injured)"
                )
            else:
                logger.debug(f"Week {week}: {slot.value} -> {chosen.player.name}")

        total_points = sum(self._points(rp, week) for rp in lineup.values() if rp is not None)
        changes_made = self._get_changes(roster, lineup, week)
        reasoning = self._generate_reasoning(changes_made, fallback_slots, total_points)

        logger.info(f"Built week {week} lineup: {total_points:.1f} points, {len(changes_made)} change(s)")
        return OptimizationResult(
            lineup=lineup,
            week=week,
            total_points=total_points,
            fallback_slots=fallback_slots,
            changes_made=changes_made,
            reasoning=reasoning
        )

    def _points(self, roster_player: RosterPlayer, week: int) -> float:
        return roster_player.player.points_for_week(week, self.week_concluded)

    def _find_best_player_for_slot(self, slot: LineupSlot, candidates: List[RosterPlayer],
                                   used_ids: Set[str], week: int):
        """Find the best player for a slot.

        Returns a ``(player, fell_back)`` tuple. Players on bye or ruled out
        are only chosen when no available player is eligible.
        """
        eligible = [
            rp for rp in candidates
            if rp.player_id not in used_ids and is_eligible_for_slot(rp.position, slot)
        ]
        if not eligible:
            return None, False

        available = [rp for rp in eligible if not rp.player.is_unavailable(week)]
        pool = available or eligible

        # max() keeps the first of equal scores, so ties go to roster order
        best = max(pool, key=lambda rp: self._points(rp, week))
        return best, not available

    def _get_changes(self, roster: List[RosterPlayer], lineup: Dict[LineupSlot, Optional[RosterPlayer]],
                     week: int) -> List[Dict[str, Any]]:
        """Compare the optimized lineup with the roster's current starters."""
        current = {rp.lineup_slot: rp for rp in roster if rp.is_starter and rp.lineup_slot is not None}
        changes = []

        for slot in LINEUP_TEMPLATE:
            new_player = lineup.get(slot)
            old_player = current.get(slot)
            old_id = old_player.player_id if old_player else None
            new_id = new_player.player_id if new_player else None
            if old_id == new_id:
                continue
            old_points = self._points(old_player, week) if old_player else 0.0
            new_points = self._points(new_player, week) if new_player else 0.0
            changes.append({
                'slot': slot.value,
                'old_player': old_player.player.name if old_player else 'Empty',
                'new_player': new_player.player.name if new_player else 'Empty',
                'score_improvement': new_points - old_points
            })

        return changes

    def _generate_reasoning(self, changes_made: List[Dict[str, Any]],
                            fallback_slots: List[LineupSlot], total_points: float) -> str:
        """Generate reasoning for the optimization decisions."""
        reasons = []
        for change in changes_made:
            improvement = change['score_improvement']
            verb = "Upgraded" if improvement > 0 else "Changed"
            reasons.append(
                f"{verb} {change['slot']}: {change['old_player']} → "
                f"{change['new_player']} ({improvement:+.1f} points)"
            )
        for slot in fallback_slots:
            reasons.append(f"{slot.value} filled by a bye-week or injured player")

        if not reasons:
            return f"No changes needed - current lineup is optimal ({total_points:.1f} points)"
        return f"Projected total: {total_points:.1f} points; {'; '.join(reasons)}"


def apply_lineup(roster: List[RosterPlayer],
                 lineup: Dict[LineupSlot, Optional[RosterPlayer]]) -> List[RosterPlayer]:
    """Return a copy of the roster with starters and bench set from a lineup.

    IR entries are left untouched.
    """
    slot_by_player = {rp.player_id: slot for slot, rp in lineup.items() if rp is not None}
    updated = []
    for rp in roster:
        if rp.is_on_ir:
            updated.append(replace(rp))
        elif rp.player_id in slot_by_player:
            updated.append(replace(rp, status=RosterStatus.STARTER, lineup_slot=slot_by_player[rp.player_id]))
        else:
            updated.append(replace(rp, status=RosterStatus.BENCH, lineup_slot=None))
    return updated


def optimize_lineup(roster: List[RosterPlayer], week: int,
                    week_concluded: bool = False) -> Dict[LineupSlot, Optional[RosterPlayer]]:
    """Build the optimal slot-to-player mapping for a week."""
    return LineupOptimizer(week_concluded).optimize(roster, week).lineup
