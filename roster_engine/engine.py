"""
Roster engine facade for the Fantasy Roster Engine.
Binds the validators, lineup optimizer, waiver processor and team metrics to
one set of league rules and works directly on Team records.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from typing import List, Dict, Optional

from .config.settings import EngineConfig, LoggingConfig, get_config
from .data.models import Team, TradeOffer, WaiverClaim, Violation
from .analysis.roster_validator import RosterValidator
from .analysis.lineup_optimizer import LineupOptimizer, OptimizationResult, apply_lineup
from .analysis.waiver_processor import WaiverProcessor, WaiverMode, WaiverProcessingResult
from .analysis.trade_validator import TradeValidator
from .analysis.team_metrics import TeamMetrics, RosterStrengths, calculate_team_metrics, analyze_roster_strengths


logger = logging.getLogger(__name__)

_HANDLER_NAME = "roster_engine"


def setup_logging(log_config: LoggingConfig) -> None:
    """Setup logging configuration.

    Installs a rotating file handler and a console handler on the root
    logger. Calling it again replaces the handlers installed earlier.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_config.level.upper()))

    for handler in list(root.handlers):
        if getattr(handler, "name", None) == _HANDLER_NAME:
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # File handler with rotation
    file_handler = logging.handlers.RotatingFileHandler(
        log_config.file,
        maxBytes=log_config.max_size_mb * 1024 * 1024,
        backupCount=log_config.backup_count
    )
    file_handler.setFormatter(formatter)
    file_handler.name = _HANDLER_NAME
    root.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.name = _HANDLER_NAME
    root.addHandler(console_handler)


class RosterEngine:
    """Runs roster, lineup, waiver and trade rules for one league."""

    def __init__(self, config: Optional[EngineConfig] = None, configure_logging: bool = False):
        self.config = config or get_config()
        if configure_logging:
            setup_logging(self.config.logging)

        self.rules = self.config.rules
        self.roster_validator = RosterValidator(self.rules)
        self.waiver_processor = WaiverProcessor(self.rules)
        self.trade_validator = TradeValidator(self.rules)

        logger.info(f"Roster engine initialized ({self.rules.waiver_mode} waivers)")

    def validate_team(self, team: Team) -> List[Violation]:
        """Validate a team's roster."""
        violations = self.roster_validator.validate(team.roster)
        if violations:
            logger.info(f"Team {team.name} has {len(violations)} roster violation(s)")
        return violations

    def optimize_team_lineup(self, team: Team, week: int, week_concluded: bool = False,
                             apply: bool = False) -> OptimizationResult:
        """Optimize a team's lineup, optionally writing it back to the roster."""
        result = LineupOptimizer(week_concluded).optimize(team.roster, week)
        if apply:
            team.roster = apply_lineup(team.roster, result.lineup)
            logger.info(f"Applied week {week} lineup to {team.name}")
        return result

    def run_auto_lineups(self, teams: List[Team], week: int) -> Dict[str, OptimizationResult]:
        """Set optimal lineups for every team that has auto-lineup enabled."""
        results = {}
        for team in teams:
            if team.settings.auto_lineup:
                results[team.team_id] = self.optimize_team_lineup(team, week, apply=True)
        logger.info(f"Auto-lineup set for {len(results)} of {len(teams)} team(s)")
        return results

    def process_waivers(self, claims: List[WaiverClaim], teams: List[Team],
                        apply: bool = False) -> WaiverProcessingResult:
        """Process a waiver cycle using each team's stored priority and budget.

        With ``apply`` the updated priorities and budgets are written back to
        the team settings. Roster changes stay with the caller.
        """
        mode = WaiverMode(self.rules.waiver_mode)
        priorities = {team.team_id: team.settings.waiver_priority for team in teams}
        budgets = {team.team_id: team.settings.faab_budget for team in teams}
        records = {team.team_id: (team.stats.wins, team.stats.losses) for team in teams}
        roster_sizes = {team.team_id: len(team.get_active_roster()) for team in teams}

        result = self.waiver_processor.process(claims, mode, budgets, priorities, records, roster_sizes)

        if apply:
            for team in teams:
                team.settings.waiver_priority = result.priorities.get(team.team_id, team.settings.waiver_priority)
                team.settings.faab_budget = result.budgets.get(team.team_id, team.settings.faab_budget)
        return result

    def validate_trade(self, offer: TradeOffer, team_a: Team, team_b: Team,
                       now: Optional[datetime] = None) -> List[Violation]:
        """Validate a trade offer between two teams."""
        return self.trade_validator.validate_offer(offer, team_a, team_b, now)

    def team_metrics(self, team: Team, weeks_played: int) -> TeamMetrics:
        """Season performance metrics for a team."""
        return calculate_team_metrics(team, weeks_played)

    def roster_strengths(self, team: Team) -> RosterStrengths:
        return analyze_roster_strengths(team.roster)
