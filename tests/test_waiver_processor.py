"""
Tests for the WaiverProcessor module.
"""

from datetime import datetime

import pytest

from roster_engine.data.models import WaiverClaim
from roster_engine.config.settings import LeagueRules
from roster_engine.analysis.waiver_processor import (
    WaiverProcessor, WaiverMode, ClaimOutcome, LossReason, resolve_waivers, initial_waiver_priorities,
)

from factories import make_team


class TestPriorityWaivers:
    """Test cases for rolling priority waivers."""

    def setup_method(self):
        """Set up test fixtures."""
        self.processor = WaiverProcessor()
        self.priorities = {f"team-{i}": i for i in range(1, 11)}

    def test_lowest_priority_wins(self):
        claims = [
            WaiverClaim(team_id="team-6", player_id="player-1", priority=6),
            WaiverClaim(team_id="team-3", player_id="player-1", priority=3),
            WaiverClaim(team_id="team-9", player_id="player-1", priority=9),
        ]

        results = resolve_waivers(claims, WaiverMode.PRIORITY)

        assert [r.outcome for r in results] == [ClaimOutcome.LOST, ClaimOutcome.WON, ClaimOutcome.LOST]
        assert results[1].claim.team_id == "team-3"
        assert results[0].reason == LossReason.LOWER_PRIORITY
        assert results[0].winning_team_id == "team-3"
        assert results[1].amount is None

    def test_winner_moves_to_back(self):
        claims = [WaiverClaim(team_id="team-3", player_id="player-1", priority=3)]

        result = self.processor.process(claims, WaiverMode.PRIORITY, priorities=self.priorities)

        assert result.priorities["team-3"] == 10
        assert result.priorities["team-4"] == 3
        assert result.priorities["team-10"] == 9
        assert result.priorities["team-1"] == 1
        assert sorted(result.priorities.values()) == list(range(1, 11))

    def test_players_ranked_by_cycle_order(self):
        """Every player goes to the best-placed claimant in the order the cycle started with."""
        claims = [
            WaiverClaim(team_id="team-1", player_id="player-1", priority=1),
            WaiverClaim(team_id="team-1", player_id="player-2", priority=1),
            WaiverClaim(team_id="team-2", player_id="player-2", priority=2),
        ]

        result = self.processor.process(claims, WaiverMode.PRIORITY, priorities=self.priorities)

        assert [r.won for r in result.results] == [True, True, False]
        assert result.results[2].reason == LossReason.LOWER_PRIORITY
        assert result.results[2].winning_team_id == "team-1"
        assert result.priorities["team-1"] == 10
        assert result.priorities["team-2"] == 1

    def test_winners_move_to_back_in_winning_order(self):
        claims = [
            WaiverClaim(team_id="team-3", player_id="player-1"),
            WaiverClaim(team_id="team-5", player_id="player-2"),
        ]

        result = self.processor.process(claims, WaiverMode.PRIORITY, priorities=self.priorities)

        assert result.priorities["team-3"] == 9
        assert result.priorities["team-5"] == 10
        assert result.priorities["team-4"] == 3
        assert result.priorities["team-6"] == 4
        assert sorted(result.priorities.values()) == list(range(1, 11))

    def test_full_roster_needs_drop_player(self):
        claims = [
            WaiverClaim(team_id="team-1", player_id="player-1"),
            WaiverClaim(team_id="team-2", player_id="player-1"),
        ]

        result = self.processor.process(claims, WaiverMode.PRIORITY, priorities=self.priorities,
                                        roster_sizes={"team-1": 16, "team-2": 15})

        assert result.results[0].reason == LossReason.ROSTER_FULL
        assert result.results[1].won

    def test_drop_player_frees_roster_spot(self):
        claims = [WaiverClaim(team_id="team-1", player_id="player-1", drop_player_id="player-9")]

        result = self.processor.process(claims, WaiverMode.PRIORITY, priorities=self.priorities,
                                        roster_sizes={"team-1": 16})

        assert result.results[0].won

    def test_won_claim_fills_roster_spot(self):
        claims = [
            WaiverClaim(team_id="team-2", player_id="player-1"),
            WaiverClaim(team_id="team-2", player_id="player-2"),
        ]

        result = self.processor.process(claims, WaiverMode.PRIORITY, priorities=self.priorities,
                                        roster_sizes={"team-2": 15})

        assert result.results[0].won
        assert result.results[1].reason == LossReason.ROSTER_FULL

    def test_submission_time_breaks_ties(self):
        claims = [
            WaiverClaim(team_id="team-a", player_id="player-1", priority=2, submitted_at=datetime(2024, 10, 2)),
            WaiverClaim(team_id="team-b", player_id="player-1", priority=2, submitted_at=datetime(2024, 10, 1)),
        ]

        results = resolve_waivers(claims, WaiverMode.PRIORITY)

        assert results[1].won

    def test_duplicate_claim(self):
        claims = [
            WaiverClaim(team_id="team-5", player_id="player-1", priority=5),
            WaiverClaim(team_id="team-5", player_id="player-1", priority=5),
        ]

        results = resolve_waivers(claims, WaiverMode.PRIORITY)

        assert results[0].won
        assert results[1].reason == LossReason.DUPLICATE_CLAIM

    def test_inputs_not_mutated(self):
        priorities = dict(self.priorities)
        claims = [WaiverClaim(team_id="team-1", player_id="player-1")]

        self.processor.process(claims, WaiverMode.PRIORITY, priorities=priorities)

        assert priorities == self.priorities

    def test_no_claims(self):
        result = self.processor.process([], WaiverMode.PRIORITY)

        assert result.results == []
        assert result.get_winners() == []


class TestFaabWaivers:
    """Test cases for FAAB blind bidding."""

    def setup_method(self):
        """Set up test fixtures."""
        self.processor = WaiverProcessor()
        self.budgets = {"team-1": 85, "team-2": 100, "team-3": 20}
        self.priorities = {"team-1": 1, "team-2": 2, "team-3": 3}

    def test_highest_bid_wins(self):
        claims = [
            WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=25),
            WaiverClaim(team_id="team-2", player_id="player-1", bid_amount=40),
        ]

        result = self.processor.process(claims, WaiverMode.FAAB, self.budgets, self.priorities)

        assert result.results[1].won
        assert result.results[1].amount == 40
        assert result.results[0].reason == LossReason.OUTBID
        assert result.budgets["team-2"] == 60
        assert result.budgets["team-1"] == 85
        assert result.priorities["team-2"] == 3

    def test_bid_over_budget_skipped(self):
        """The highest bid the team can afford wins."""
        claims = [
            WaiverClaim(team_id="team-3", player_id="player-1", bid_amount=50),
            WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=25),
        ]

        results = resolve_waivers(claims, WaiverMode.FAAB, self.budgets)

        assert results[0].reason == LossReason.INSUFFICIENT_BUDGET
        assert results[1].won

    def test_all_bids_over_budget(self):
        claims = [
            WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=100),
            WaiverClaim(team_id="team-3", player_id="player-1", bid_amount=21),
        ]

        results = resolve_waivers(claims, WaiverMode.FAAB, self.budgets)

        assert not any(r.won for r in results)
        assert all(r.reason == LossReason.INSUFFICIENT_BUDGET for r in results)

    def test_full_budget_bid_allowed(self):
        claims = [WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=85)]

        result = self.processor.process(claims, WaiverMode.FAAB, self.budgets)

        assert result.results[0].won
        assert result.budgets["team-1"] == 0

    def test_tied_bids_use_priority(self):
        claims = [
            WaiverClaim(team_id="team-2", player_id="player-1", bid_amount=10),
            WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=10),
        ]

        results = resolve_waivers(claims, WaiverMode.FAAB, self.budgets, self.priorities)

        assert results[1].won
        assert results[0].reason == LossReason.LOWER_PRIORITY

    def test_record_inverse_tiebreaker(self):
        """Worse record wins tied bids."""
        processor = WaiverProcessor(LeagueRules(faab_tiebreaker="record_inverse"))
        claims = [
            WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=10),
            WaiverClaim(team_id="team-2", player_id="player-1", bid_amount=10),
        ]
        records = {"team-1": (6, 2), "team-2": (2, 6)}

        result = processor.process(claims, WaiverMode.FAAB, self.budgets, self.priorities, records)

        assert result.results[1].won

    def test_budget_carries_between_players(self):
        claims = [
            WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=80),
            WaiverClaim(team_id="team-1", player_id="player-2", bid_amount=10),
        ]

        results = resolve_waivers(claims, WaiverMode.FAAB, self.budgets)

        assert results[0].won
        assert results[1].reason == LossReason.INSUFFICIENT_BUDGET
        assert results[1].winning_team_id is None

    def test_unknown_team(self):
        claims = [WaiverClaim(team_id="team-99", player_id="player-1", bid_amount=5)]

        results = resolve_waivers(claims, WaiverMode.FAAB, self.budgets)

        assert results[0].reason == LossReason.UNKNOWN_TEAM

    @pytest.mark.parametrize("bid, allow_zero, expected", [
        (-1, True, LossReason.INVALID_BID),
        (0, False, LossReason.INVALID_BID),
        (0, True, None),
    ])
    def test_bid_validation(self, bid, allow_zero, expected):
        processor = WaiverProcessor(LeagueRules(allow_zero_dollar_bids=allow_zero))
        claims = [WaiverClaim(team_id="team-1", player_id="player-1", bid_amount=bid)]

        result = processor.process(claims, WaiverMode.FAAB, self.budgets).results[0]

        assert result.reason == expected

    def test_mode_defaults_to_rules(self):
        processor = WaiverProcessor(LeagueRules(waiver_mode="faab"))
        claims = [
            WaiverClaim(team_id="team-1", player_id="player-1", priority=1, bid_amount=1),
            WaiverClaim(team_id="team-2", player_id="player-1", priority=2, bid_amount=2),
        ]

        result = processor.process(claims, budgets=self.budgets)

        assert result.results[1].won


class TestInitialWaiverPriorities:
    """Test cases for reverse-standings waiver order."""

    def test_worst_record_first(self):
        teams = [
            make_team("team-a", roster=[], wins=8, losses=2),
            make_team("team-b", roster=[], wins=2, losses=8),
            make_team("team-c", roster=[], wins=5, losses=5),
        ]

        priorities = initial_waiver_priorities(teams)

        assert priorities == {"team-b": 1, "team-c": 2, "team-a": 3}
