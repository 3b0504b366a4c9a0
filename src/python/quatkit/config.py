"""
===============================================================================
QUATKIT - Configuration
===============================================================================
YAML configuration for the quatkit command line tool. The library functions
take no configuration; this only controls logging, angle units, output
precision, and whether the checked operations are used.

Default file: ``config/quatkit.yaml`` relative to the working directory,
then the same path in the source checkout (an installed package has none).
Every key is optional and falls back to the defaults of QuatkitConfig.
===============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

# Searched in order; the first existing file wins
DEFAULT_CONFIG_PATHS = (
    Path('config') / 'quatkit.yaml',
    Path(__file__).resolve().parent.parent.parent.parent / 'config' / 'quatkit.yaml',
)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
ANGLE_UNITS = ('radians', 'degrees')


class ConfigError(ValueError):
    """Raised when a configuration file holds an invalid value."""


@dataclass
class QuatkitConfig:
    """
    Settings for the quatkit CLI.

    Attributes:
        log_level: Name of the root logging level (DEBUG ... CRITICAL).
        log_file: Optional path of a log file written next to stderr output.
        angle_units: 'radians' or 'degrees' for Euler angle input/output.
        precision: Number of decimals printed for every number.
        checked: Use the checked operations (raise on degenerate input).
    """
    log_level: str = 'WARNING'
    log_file: Optional[str] = None
    angle_units: str = 'radians'
    precision: int = 9
    checked: bool = False

    def __post_init__(self) -> None:
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"Unknown logging level '{self.log_level}', expected one of {LOG_LEVELS}"
            )
        if self.angle_units not in ANGLE_UNITS:
            raise ConfigError(
                f"Unknown angle units '{self.angle_units}', expected one of {ANGLE_UNITS}"
            )
        if isinstance(self.precision, bool) or not isinstance(self.precision, int) \
                or self.precision < 0:
            raise ConfigError(f"precision must be a non-negative integer, got {self.precision!r}")
        if not isinstance(self.checked, bool):
            raise ConfigError(f"checked must be true or false, got {self.checked!r}")

    @property
    def degrees(self) -> bool:
        return self.angle_units == 'degrees'

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuatkitConfig':
        """Build a config from the nested mapping read from YAML."""
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

        logging_section = _section(data, 'logging')
        angles_section = _section(data, 'angles')
        output_section = _section(data, 'output')

        defaults = cls()
        return cls(
            log_level=logging_section.get('level', defaults.log_level),
            log_file=logging_section.get('file', defaults.log_file),
            angle_units=angles_section.get('units', defaults.angle_units),
            precision=output_section.get('precision', defaults.precision),
            checked=data.get('checked', defaults.checked),
        )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_config(config_path: Union[str, Path, None] = None) -> QuatkitConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to a YAML config. Defaults to the first existing
                     entry of DEFAULT_CONFIG_PATHS (./config/quatkit.yaml,
                     then the source checkout's copy); if neither exists
                     the built-in defaults are returned.

    Returns:
        Parsed QuatkitConfig.

    Raises:
        FileNotFoundError: An explicit ``config_path`` does not exist.
        ConfigError: The file holds invalid values.
    """
    if config_path is None:
        config_path = next((p for p in DEFAULT_CONFIG_PATHS if p.is_file()), None)
        if config_path is None:
            logger.debug("No config in %s, using defaults",
                         [str(p) for p in DEFAULT_CONFIG_PATHS])
            return QuatkitConfig()

    logger.debug("Loading configuration from: %s", config_path)
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    # An empty file parses to None
    return QuatkitConfig.from_dict(data or {})
