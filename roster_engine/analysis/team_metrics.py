"""
Season performance metrics and roster strength analysis.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional

from ..data.models import Team, RosterPlayer, Position


@dataclass
class TeamMetrics:
    """Per-week averages and efficiency figures for a team."""
    avg_points_for: float
    avg_points_against: float
    win_percentage: float
    points_differential: float
    efficiency: float  # wins per 100 points scored


@dataclass
class RosterStrengths:
    """Per-position point totals with the strongest and weakest positions."""
    position_strengths: Dict[Position, float] = field(default_factory=dict)
    strongest: Optional[Position] = None
    weakest: Optional[Position] = None


def calculate_team_metrics(team: Team, weeks_played: int) -> TeamMetrics:
    """Calculate season metrics for a team. Ties count as half a win."""
    stats = team.stats
    games = stats.games_played

    avg_for = stats.points_for / weeks_played if weeks_played > 0 else 0.0
    avg_against = stats.points_against / weeks_played if weeks_played > 0 else 0.0
    win_pct = (stats.wins + 0.5 * stats.ties) / games if games > 0 else 0.0
    efficiency = stats.wins / (stats.points_for / 100) if stats.points_for > 0 else 0.0

    return TeamMetrics(
        avg_points_for=avg_for,
        avg_points_against=avg_against,
        win_percentage=win_pct,
        points_differential=stats.points_for - stats.points_against,
        efficiency=efficiency
    )


def analyze_roster_strengths(roster: List[RosterPlayer]) -> RosterStrengths:
    """Sum average weekly points by position and find the extremes."""
    strengths: Dict[Position, float] = {}
    for rp in roster:
        strengths[rp.position] = strengths.get(rp.position, 0.0) + rp.player.get_average_points()

    if not strengths:
        return RosterStrengths()

    return RosterStrengths(
        position_strengths=strengths,
        strongest=max(strengths, key=strengths.get),
        weakest=min(strengths, key=strengths.get)
    )
