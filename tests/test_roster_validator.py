"""
Tests for the RosterValidator module.
"""

import pytest

from roster_engine.data.models import (
    Position, InjuryStatus, RosterStatus, LineupSlot, ViolationCode,
)
from roster_engine.config.settings import LeagueRules
from roster_engine.analysis.roster_validator import RosterValidator, validate_roster

from factories import make_valid_roster, make_roster_player


def messages(violations):
    return [str(v) for v in violations]


class TestRosterValidator:
    """Test cases for RosterValidator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.validator = RosterValidator()
        self.roster = make_valid_roster()

    def test_valid_roster(self):
        """A complete 16-player roster has no violations."""
        assert len(self.roster) == 16
        assert self.validator.validate(self.roster) == []

    def test_missing_kicker(self):
        """Removing the only K reports just the missing position."""
        roster = [rp for rp in self.roster if rp.position != Position.K]

        assert messages(validate_roster(roster)) == ["missing K"]

    def test_missing_running_back(self):
        """Too few RBs names the position."""
        rbs = [rp for rp in self.roster if rp.position == Position.RB]
        roster = [rp for rp in self.roster if rp not in rbs[1:]]
        roster.extend(make_roster_player(Position.WR) for _ in range(len(rbs) - 1))

        violations = self.validator.validate(roster)

        assert "missing RB" in messages(violations)
        assert any(v.position == Position.RB for v in violations)

    def test_empty_roster(self):
        violations = self.validator.validate([])

        assert len(violations) == 1
        assert violations[0].code == ViolationCode.EMPTY_ROSTER

    def test_duplicate_players(self):
        """The same player twice on a roster is flagged."""
        duplicate = self.roster[-1]
        roster = self.roster[:-1] + [duplicate, duplicate]

        violations = self.validator.validate(roster)

        assert any(v.code == ViolationCode.DUPLICATE_PLAYER and v.player_id == duplicate.player_id
                   for v in violations)

    def test_two_kickers(self):
        """K is capped at one."""
        bench = [rp for rp in self.roster if rp.status == RosterStatus.BENCH]
        roster = [rp for rp in self.roster if rp is not bench[0]] + [make_roster_player(Position.K)]

        assert "too many K (2, max 1)" in messages(self.validator.validate(roster))

    def test_flex_rejects_quarterback(self):
        """Only RB/WR/TE may start at FLEX."""
        flex = next(rp for rp in self.roster if rp.lineup_slot == LineupSlot.FLEX)
        flex.status = RosterStatus.BENCH
        flex.lineup_slot = None
        bench_qb = next(rp for rp in self.roster
                        if rp.position == Position.QB and rp.status == RosterStatus.BENCH)
        bench_qb.status = RosterStatus.STARTER
        bench_qb.lineup_slot = LineupSlot.FLEX

        violations = self.validator.validate(self.roster)

        assert [v.code for v in violations] == [ViolationCode.INELIGIBLE_FOR_SLOT]
        assert violations[0].slot == LineupSlot.FLEX

    def test_overfilled_and_empty_slots(self):
        """Two players at RB1 leaves RB2 empty."""
        rb2 = next(rp for rp in self.roster if rp.lineup_slot == LineupSlot.RB2)
        rb2.lineup_slot = LineupSlot.RB1

        codes = [v.code for v in self.validator.validate(self.roster)]

        assert ViolationCode.OVERFILLED_SLOT in codes
        assert ViolationCode.EMPTY_SLOT in codes

    def test_starter_without_slot(self):
        starter = self.roster[0]
        starter.lineup_slot = None

        codes = [v.code for v in self.validator.validate(self.roster)]

        assert ViolationCode.STARTER_WITHOUT_SLOT in codes

    def test_injured_reserve_allowed(self):
        """IR players with IR or OUT status do not count against roster size."""
        roster = self.roster + [
            make_roster_player(Position.WR, RosterStatus.IR, injury_status=InjuryStatus.IR),
            make_roster_player(Position.RB, RosterStatus.IR, injury_status=InjuryStatus.OUT),
        ]

        assert self.validator.validate(roster) == []

    def test_too_many_ir_players(self):
        roster = self.roster + [
            make_roster_player(Position.WR, RosterStatus.IR, injury_status=InjuryStatus.IR)
            for _ in range(3)
        ]

        assert messages(self.validator.validate(roster)) == ["too many IR players (3, max 2)"]

    def test_healthy_player_on_ir(self):
        """Only injury-flagged players may occupy IR."""
        roster = self.roster + [
            make_roster_player(Position.TE, RosterStatus.IR, injury_status=InjuryStatus.QUESTIONABLE)
        ]

        violations = self.validator.validate(roster)

        assert [v.code for v in violations] == [ViolationCode.INELIGIBLE_FOR_IR]

    def test_roster_size_limits(self):
        too_large = self.roster + [make_roster_player(Position.WR)]
        assert [v.code for v in self.validator.validate(too_large)] == [ViolationCode.ROSTER_TOO_LARGE]

        too_small = [rp for rp in self.roster if rp.status == RosterStatus.STARTER]
        assert [v.code for v in self.validator.validate(too_small)] == [ViolationCode.ROSTER_TOO_SMALL]

    def test_custom_rules(self):
        """Position limits come from the league rules."""
        rules = LeagueRules(min_roster_size=9, max_roster_size=20)
        rules.position_limits[Position.QB] = (2, None)
        starters = [rp for rp in self.roster if rp.status == RosterStatus.STARTER]

        assert messages(RosterValidator(rules).validate(starters)) == ["missing QB"]


class TestRosterTransactions:
    """Test cases for add/drop and lineup change checks."""

    def setup_method(self):
        """Set up test fixtures."""
        self.validator = RosterValidator()
        self.roster = make_valid_roster()

    def test_can_add_and_drop(self):
        """A full 16-man roster can drop but not add."""
        assert self.validator.can_add_player(self.roster) is False
        assert self.validator.can_drop_player(self.roster) is True

        roster = self.roster[:15]
        assert self.validator.can_add_player(roster) is True
        assert self.validator.can_drop_player(roster) is False

    def test_ir_players_do_not_block_adds(self):
        roster = self.roster[:15] + [
            make_roster_player(Position.RB, RosterStatus.IR, injury_status=InjuryStatus.IR)
        ]

        assert self.validator.can_add_player(roster) is True

    def test_lineup_change_valid(self):
        bench_wr = next(rp for rp in self.roster
                        if rp.position == Position.WR and rp.status == RosterStatus.BENCH)

        assert self.validator.validate_lineup_change(self.roster, bench_wr.player_id, LineupSlot.FLEX) == []

    def test_lineup_change_unknown_player(self):
        violations = self.validator.validate_lineup_change(self.roster, "non-existent-player", LineupSlot.QB)

        assert [v.code for v in violations] == [ViolationCode.PLAYER_NOT_FOUND]

    @pytest.mark.parametrize("slot", [LineupSlot.QB, LineupSlot.TE, LineupSlot.K])
    def test_lineup_change_ineligible(self, slot):
        bench_wr = next(rp for rp in self.roster
                        if rp.position == Position.WR and rp.status == RosterStatus.BENCH)

        violations = self.validator.validate_lineup_change(self.roster, bench_wr.player_id, slot)

        assert [v.code for v in violations] == [ViolationCode.INELIGIBLE_FOR_SLOT]

    def test_lineup_change_from_ir(self):
        ir_player = make_roster_player(Position.RB, RosterStatus.IR, injury_status=InjuryStatus.IR)
        roster = self.roster + [ir_player]

        violations = self.validator.validate_lineup_change(roster, ir_player.player_id, LineupSlot.RB1)

        assert [v.code for v in violations] == [ViolationCode.PLAYER_ON_IR]
