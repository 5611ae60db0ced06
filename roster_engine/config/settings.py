"""
Configuration management for the Fantasy Roster Engine.
Handles loading, validation, and access to league rules and logging settings.
"""

import os
import yaml
from typing import Dict, Any, Optional, List, Tuple
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from ..data.models import Position, InjuryStatus


WAIVER_MODES = ("priority", "faab")
FAAB_TIEBREAKERS = ("priority", "record_inverse")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_position_limits() -> Dict[Position, Tuple[int, Optional[int]]]:
    return {
        Position.QB: (1, None),
        Position.RB: (2, None),
        Position.WR: (2, None),
        Position.TE: (1, None),
        Position.K: (1, 1),
        Position.DST: (1, 1),
    }


@dataclass
class LeagueRules:
    """Roster, waiver and trade rules for a league."""
    min_roster_size: int = 15
    max_roster_size: int = 16
    max_ir_slots: int = 2
    ir_eligible_statuses: List[InjuryStatus] = field(
        default_factory=lambda: [InjuryStatus.IR, InjuryStatus.OUT]
    )
    # position -> (minimum, maximum or None for unbounded)
    position_limits: Dict[Position, Tuple[int, Optional[int]]] = field(
        default_factory=_default_position_limits
    )
    waiver_mode: str = "priority"
    faab_budget: int = 100
    allow_zero_dollar_bids: bool = True
    faab_tiebreaker: str = "priority"
    trade_deadline: Optional[date] = None


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "INFO"
    file: str = "roster_engine.log"
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class EngineConfig:
    """Top-level engine configuration."""
    rules: LeagueRules = field(default_factory=LeagueRules)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _parse_position_limits(data: Dict[str, Any]) -> Dict[Position, Tuple[int, Optional[int]]]:
    limits = _default_position_limits()
    for name, bounds in data.items():
        try:
            position = Position(str(name).upper())
        except ValueError:
            raise ValueError(f"Unknown position in position_limits: {name}")
        bounds = bounds or {}
        minimum = bounds.get('min', 0)
        maximum = bounds.get('max')
        if maximum is not None and minimum > maximum:
            raise ValueError(f"position_limits for {position.value}: min {minimum} exceeds max {maximum}")
        limits[position] = (minimum, maximum)
    return limits


def validate_rules(rules: LeagueRules) -> None:
    """Raise ValueError if the rules are inconsistent."""
    if rules.min_roster_size < 0 or rules.min_roster_size > rules.max_roster_size:
        raise ValueError(
            f"Invalid roster size bounds: min {rules.min_roster_size}, max {rules.max_roster_size}"
        )
    if rules.max_ir_slots < 0:
        raise ValueError("max_ir_slots must not be negative")
    if rules.faab_budget < 0:
        raise ValueError("faab_budget must not be negative")
    if rules.waiver_mode not in WAIVER_MODES:
        raise ValueError(f"Unknown waiver_mode: {rules.waiver_mode}")
    if rules.faab_tiebreaker not in FAAB_TIEBREAKERS:
        raise ValueError(f"Unknown faab_tiebreaker: {rules.faab_tiebreaker}")


class ConfigManager:
    """Manages application configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or os.environ.get("ROSTER_ENGINE_CONFIG", "config.yaml"))
        self._config: Optional[EngineConfig] = None

    def load_config(self) -> EngineConfig:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as file:
            config_data = yaml.safe_load(file) or {}

        self._config = self.parse_config(config_data)
        return self._config

    @staticmethod
    def parse_config(config_data: Dict[str, Any]) -> EngineConfig:
        """Build an EngineConfig from already-loaded YAML data."""
        league_data = config_data.get('league', {}) or {}
        waiver_data = config_data.get('waivers', {}) or {}
        trade_data = config_data.get('trades', {}) or {}
        logging_data = config_data.get('logging', {}) or {}

        defaults = LeagueRules()

        ir_statuses = league_data.get('ir_eligible_statuses')
        if ir_statuses is not None:
            try:
                ir_statuses = [InjuryStatus(str(s).lower()) for s in ir_statuses]
            except ValueError as e:
                raise ValueError(f"Unknown injury status in ir_eligible_statuses: {e}")
        else:
            ir_statuses = defaults.ir_eligible_statuses

        rules = LeagueRules(
            min_roster_size=league_data.get('min_roster_size', defaults.min_roster_size),
            max_roster_size=league_data.get('max_roster_size', defaults.max_roster_size),
            max_ir_slots=league_data.get('max_ir_slots', defaults.max_ir_slots),
            ir_eligible_statuses=ir_statuses,
            position_limits=_parse_position_limits(league_data.get('position_limits', {}) or {}),
            waiver_mode=str(waiver_data.get('mode', defaults.waiver_mode)).lower(),
            faab_budget=waiver_data.get('faab_budget', defaults.faab_budget),
            allow_zero_dollar_bids=waiver_data.get('allow_zero_dollar_bids', defaults.allow_zero_dollar_bids),
            faab_tiebreaker=str(waiver_data.get('faab_tiebreaker', defaults.faab_tiebreaker)).lower(),
            trade_deadline=_parse_date(trade_data.get('deadline')),
        )
        validate_rules(rules)

        level = str(logging_data.get('level', 'INFO')).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown logging level: {logging_data.get('level')}")

        logging_config = LoggingConfig(
            level=level,
            file=logging_data.get('file', 'roster_engine.log'),
            max_size_mb=logging_data.get('max_size_mb', 10),
            backup_count=logging_data.get('backup_count', 5)
        )

        return EngineConfig(rules=rules, logging=logging_config)

    def get_config(self) -> EngineConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def reload_config(self) -> EngineConfig:
        """Reload configuration from file."""
        self._config = None
        return self.get_config()


# Global config instance
config_manager = ConfigManager()


def get_config() -> EngineConfig:
    """Get the current application configuration."""
    return config_manager.get_config()
