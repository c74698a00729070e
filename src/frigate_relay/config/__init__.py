"""
Configuration loading, validation, and schedule resolution.

- load_config: Find, parse and validate the config file
- ScheduleResolver: Effective per-(camera, group) alert rules
- format_config_summary / print_config_summary: Startup summary

Pydantic schemas available for type-safe validation:
- Config: Complete configuration schema
- validate_config_pydantic: Validate and parse config to Pydantic model
"""

from .loader import (
    ConfigError,
    apply_env_fallbacks,
    find_config_file,
    load_config,
    parse_config,
)
from .resolver import (
    ScheduleLayer,
    ScheduleResolver,
    is_within_window,
    resolve_layers,
)
from .schemas import (
    CameraConfig,
    Config,
    DefaultScheduleConfig,
    GroupConfig,
    GroupScheduleOverride,
    TimeWindowConfig,
    validate_config_pydantic,
)
from .summary import (
    format_config_summary,
    print_config_summary,
    print_validation_result,
)

__all__ = [
    "CameraConfig",
    # Pydantic validation
    "Config",
    # Exception
    "ConfigError",
    "DefaultScheduleConfig",
    "GroupConfig",
    "GroupScheduleOverride",
    # Schedules
    "ScheduleLayer",
    "ScheduleResolver",
    "TimeWindowConfig",
    # Config loading
    "apply_env_fallbacks",
    "find_config_file",
    # Display
    "format_config_summary",
    "is_within_window",
    "load_config",
    "parse_config",
    "print_config_summary",
    "print_validation_result",
    "resolve_layers",
    "validate_config_pydantic",
]
