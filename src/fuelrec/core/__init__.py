"""
Core Utilities Package

Shared primitives used by every other package:
- Money and currency helpers with integer-cent arithmetic
- FinancialDate calendar days and QuarterWindow ranges
- Environment-driven configuration
- JSON output helpers
"""

from .config import Config, DatabaseConfig, Environment, MatchingConfig, get_config, reload_config
from .currency import cents_to_dollars_str, decimal_to_cents, format_cents, parse_dollars_to_cents
from .dates import FinancialDate, parse_timestamp
from .json_utils import format_json, read_json, write_json
from .money import Money
from .quarters import QuarterWindow, current_quarter_string

__all__ = [
    # Configuration
    "Config",
    "DatabaseConfig",
    "Environment",
    "MatchingConfig",
    "get_config",
    "reload_config",
    # Primitives
    "FinancialDate",
    "Money",
    "QuarterWindow",
    "current_quarter_string",
    "parse_timestamp",
    # Currency utilities
    "cents_to_dollars_str",
    "decimal_to_cents",
    "format_cents",
    "parse_dollars_to_cents",
    # JSON
    "format_json",
    "read_json",
    "write_json",
]
