"""
Fantasy Roster Engine

Roster and lineup rules for fantasy football leagues: roster validation,
optimal lineup selection, waiver claim processing, trade validation and team
metrics.
"""

__version__ = "1.0.0"
__author__ = "Fantasy Roster Engine Team"
__description__ = "Roster, lineup, waiver and trade rules for fantasy football leagues"

from .analysis.roster_validator import validate_roster
from .analysis.lineup_optimizer import optimize_lineup
from .analysis.waiver_processor import resolve_waivers, WaiverMode
from .analysis.trade_validator import validate_trade
from .analysis.team_metrics import calculate_team_metrics, analyze_roster_strengths
from .engine import RosterEngine

__all__ = [
    "validate_roster",
    "optimize_lineup",
    "resolve_waivers",
    "validate_trade",
    "calculate_team_metrics",
    "analyze_roster_strengths",
    "WaiverMode",
    "RosterEngine",
]
