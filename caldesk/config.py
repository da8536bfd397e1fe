"""
Configuration parser for caldesk.

Reads a TOML file naming the calendars to create at startup, the
default timezone, where exports are written, and whether debug output
is on.
"""

import tomllib
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from .debug import debug_print, set_debug
from .timezone_utils import DEFAULT_TIMEZONE, get_timezone


def _debug_print(msg: str) -> None:
    debug_print("CONFIG", msg)


@dataclass
class CalendarConfig:
    """A calendar to create at startup."""
    name: str
    timezone: str = DEFAULT_TIMEZONE


@dataclass
class ExportConfig:
    """Configuration for CSV / iCal exports."""
    directory: Path = Path("exports")
    prodid: str = "-//caldesk//Calendar Application//EN"


@dataclass
class Config:
    """Main configuration container for caldesk."""

    default_timezone: str = DEFAULT_TIMEZONE
    default_calendar: Optional[str] = None
    debug: bool = False
    export: ExportConfig = field(default_factory=ExportConfig)
    calendars: list[CalendarConfig] = field(default_factory=list)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'caldesk' / 'caldesk.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from a TOML file.

        Raises:
            FileNotFoundError: if the file does not exist.
            InvalidTimezoneError: if a timezone in the file is unknown.
        """
        if config_path is None:
            config_path = cls.get_default_config_path()
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a Config from already-parsed TOML data."""
        general = data.get('General', {})
        debug = bool(general.get('debug', False))
        if debug:
            set_debug(True)

        default_timezone = general.get('default_timezone', DEFAULT_TIMEZONE)
        get_timezone(default_timezone)
        default_calendar = general.get('default_calendar') or None

        # Supports both [Calendars.Name] and [Calendars] with nested sub-tables
        calendars = []
        for key, value in data.items():
            if key.startswith('Calendars.') and isinstance(value, dict):
                calendars.append(_calendar_config(key.split('.', 1)[1], value, default_timezone))
            elif key == 'Calendars' and isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    if isinstance(sub_value, dict):
                        calendars.append(_calendar_config(sub_key, sub_value, default_timezone))
        _debug_print(f"Total calendars found: {len(calendars)}")

        if default_calendar and default_calendar not in {c.name for c in calendars}:
            # An unlisted default calendar is created in the default zone
            calendars.append(CalendarConfig(name=default_calendar, timezone=default_timezone))

        export_data = data.get('Export', {})
        export = ExportConfig(
            directory=Path(os.path.expanduser(export_data.get('directory', str(ExportConfig.directory)))),
            prodid=export_data.get('prodid', ExportConfig.prodid),
        )

        return cls(
            default_timezone=default_timezone,
            default_calendar=default_calendar,
            debug=debug,
            export=export,
            calendars=calendars,
        )


def _calendar_config(name: str, value: dict, default_timezone: str) -> CalendarConfig:
    timezone = value.get('timezone', default_timezone)
    get_timezone(timezone)
    _debug_print(f"Found calendar: {name} ({timezone})")
    return CalendarConfig(name=name, timezone=timezone)
