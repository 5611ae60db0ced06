"""
Data models for the Fantasy Roster Engine.
Defines the structure for players, roster entries, teams, waiver claims and trades.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
from enum import Enum
from datetime import datetime


class Position(Enum):
    """Fantasy football positions."""
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DST = "DST"


class InjuryStatus(Enum):
    """Player injury status."""
    HEALTHY = "healthy"
    QUESTIONABLE = "questionable"
    DOUBTFUL = "doubtful"
    OUT = "out"
    IR = "ir"


class RosterStatus(Enum):
    """Where a player sits on a fantasy roster."""
    STARTER = "STARTER"
    BENCH = "BENCH"
    IR = "IR"


class LineupSlot(Enum):
    """Starting lineup slots."""
    QB = "QB"
    RB1 = "RB1"
    RB2 = "RB2"
    WR1 = "WR1"
    WR2 = "WR2"
    TE = "TE"
    FLEX = "FLEX"
    K = "K"
    DST = "DST"


class AcquisitionMethod(Enum):
    """How a player joined the roster."""
    DRAFT = "DRAFT"
    WAIVER = "WAIVER"
    TRADE = "TRADE"
    FREE_AGENT = "FREE_AGENT"


FLEX_POSITIONS = (Position.RB, Position.WR, Position.TE)

# Fixed slots in fill order; FLEX is always filled last
LINEUP_TEMPLATE = [
    LineupSlot.QB,
    LineupSlot.RB1,
    LineupSlot.RB2,
    LineupSlot.WR1,
    LineupSlot.WR2,
    LineupSlot.TE,
    LineupSlot.K,
    LineupSlot.DST,
    LineupSlot.FLEX,
]

SLOT_ELIGIBILITY: Dict[LineupSlot, tuple] = {
    LineupSlot.QB: (Position.QB,),
    LineupSlot.RB1: (Position.RB,),
    LineupSlot.RB2: (Position.RB,),
    LineupSlot.WR1: (Position.WR,),
    LineupSlot.WR2: (Position.WR,),
    LineupSlot.TE: (Position.TE,),
    LineupSlot.FLEX: FLEX_POSITIONS,
    LineupSlot.K: (Position.K,),
    LineupSlot.DST: (Position.DST,),
}


def is_eligible_for_slot(position: Position, slot: LineupSlot) -> bool:
    """Check whether a position may occupy a lineup slot."""
    return position in SLOT_ELIGIBILITY[slot]


@dataclass
class Player:
    """NFL player information."""
    player_id: str
    name: str
    position: Position
    nfl_team: str = ""
    bye_week: Optional[int] = None
    injury_status: InjuryStatus = InjuryStatus.HEALTHY
    weekly_points: Dict[int, float] = field(default_factory=dict)  # actual, by week
    projected_points: Dict[int, float] = field(default_factory=dict)

    def is_on_bye(self, week: int) -> bool:
        """Check if the player's NFL team is on bye in the given week."""
        return self.bye_week is not None and self.bye_week == week

    def is_injured(self) -> bool:
        """Check if the player carries any injury designation."""
        return self.injury_status != InjuryStatus.HEALTHY

    def is_unavailable(self, week: int) -> bool:
        """Check if the player is not expected to play in the given week."""
        return self.is_on_bye(week) or self.injury_status in (InjuryStatus.OUT, InjuryStatus.IR)

    def points_for_week(self, week: int, week_concluded: bool = False) -> float:
        """Get the points value used for lineup decisions.

        Actual points are used once the week has concluded. Before that the
        projection is used, falling back to any recorded points.
        """
        if not week_concluded and week in self.projected_points:
            return self.projected_points[week]
        return self.weekly_points.get(week, 0.0)

    def get_average_points(self) -> float:
        """Get average actual points over all recorded weeks."""
        if not self.weekly_points:
            return 0.0
        return sum(self.weekly_points.values()) / len(self.weekly_points)


@dataclass
class RosterPlayer:
    """A player's entry on a fantasy team's roster."""
    player: Player
    team_id: str = ""
    status: RosterStatus = RosterStatus.BENCH
    lineup_slot: Optional[LineupSlot] = None
    acquired_via: AcquisitionMethod = AcquisitionMethod.DRAFT

    @property
    def player_id(self) -> str:
        return self.player.player_id

    @property
    def position(self) -> Position:
        return self.player.position

    @property
    def is_starter(self) -> bool:
        return self.status == RosterStatus.STARTER

    @property
    def is_on_ir(self) -> bool:
        return self.status == RosterStatus.IR


@dataclass
class TeamStats:
    """Aggregate season results for a fantasy team."""
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties


@dataclass
class TeamSettings:
    """Per-team league settings."""
    waiver_priority: int = 1
    faab_budget: int = 100  # remaining
    auto_lineup: bool = False


@dataclass
class Team:
    """Fantasy team with its roster."""
    team_id: str
    name: str
    roster: List[RosterPlayer] = field(default_factory=list)
    stats: TeamStats = field(default_factory=TeamStats)
    settings: TeamSettings = field(default_factory=TeamSettings)

    def get_player(self, player_id: str) -> Optional[RosterPlayer]:
        """Get a roster entry by player ID."""
        for roster_player in self.roster:
            if roster_player.player_id == player_id:
                return roster_player
        return None

    def has_player(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    def get_starters(self) -> List[RosterPlayer]:
        """Get all players currently in the starting lineup."""
        return [rp for rp in self.roster if rp.is_starter]

    def get_active_roster(self) -> List[RosterPlayer]:
        """Get all players that count against roster limits (everyone not on IR)."""
        return [rp for rp in self.roster if not rp.is_on_ir]

    def get_ir_players(self) -> List[RosterPlayer]:
        return [rp for rp in self.roster if rp.is_on_ir]


@dataclass
class WaiverClaim:
    """A team's claim on a player for the current waiver cycle."""
    team_id: str
    player_id: str
    priority: int = 0
    bid_amount: int = 0
    submitted_at: Optional[datetime] = None
    drop_player_id: Optional[str] = None


@dataclass
class TradeOffer:
    """Players exchanged between two fantasy teams."""
    team_a_id: str
    team_b_id: str
    team_a_players: List[RosterPlayer] = field(default_factory=list)  # sent by team A
    team_b_players: List[RosterPlayer] = field(default_factory=list)  # sent by team B
    proposed_at: Optional[datetime] = None


class ViolationCode(Enum):
    """Machine-readable rule violation codes."""
    EMPTY_ROSTER = "empty_roster"
    DUPLICATE_PLAYER = "duplicate_player"
    MISSING_POSITION = "missing_position"
    TOO_MANY_AT_POSITION = "too_many_at_position"
    STARTER_WITHOUT_SLOT = "starter_without_slot"
    EMPTY_SLOT = "empty_slot"
    OVERFILLED_SLOT = "overfilled_slot"
    INELIGIBLE_FOR_SLOT = "ineligible_for_slot"
    TOO_MANY_IR = "too_many_ir"
    INELIGIBLE_FOR_IR = "ineligible_for_ir"
    ROSTER_TOO_SMALL = "roster_too_small"
    ROSTER_TOO_LARGE = "roster_too_large"
    PLAYER_NOT_FOUND = "player_not_found"
    PLAYER_ON_IR = "player_on_ir"
    EMPTY_TRADE = "empty_trade"
    ALREADY_ON_ROSTER = "already_on_roster"
    IR_FOR_ACTIVE = "ir_for_active"
    TRADE_DEADLINE_PASSED = "trade_deadline_passed"


@dataclass
class Violation:
    """A single rule violation. ``str()`` gives the display message."""
    code: ViolationCode
    message: str
    player_id: Optional[str] = None
    position: Optional[Position] = None
    slot: Optional[LineupSlot] = None
    team_id: Optional[str] = None

    def __str__(self) -> str:
        return self.message
