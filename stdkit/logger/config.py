"""Process-wide logger configuration."""

from __future__ import annotations

import argparse
import copy
import threading
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, List, Union


class Level(IntEnum):
    """Logging levels, from the most severe to the most verbose."""

    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5


class FormatterType(str, Enum):
    """Output formats the logger supports."""

    JSON = "json"
    TEXT = "text"
    GCP = "gcp"


@dataclass
class FormatterConfig:
    """How log entries are formatted."""

    type: Union[FormatterType, str] = FormatterType.JSON


@dataclass
class Config:
    """Global logger configuration."""

    include_source_code: bool = False
    mute: bool = False
    level: int = Level.INFO
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    def get_flag_set(self, prefix: str = "") -> argparse.ArgumentParser:
        """Return a parser with one flag per setting, defaulting to the default config."""
        defaults = _DEFAULT_CONFIG
        parser = argparse.ArgumentParser(prog="Config", add_help=False, allow_abbrev=False)
        parser.add_argument(
            f"--{prefix}show-source",
            dest=f"{prefix}show-source",
            type=_parse_bool,
            nargs="?",
            const=True,
            default=defaults.include_source_code,
            help="Includes source code location in logs.",
        )
        parser.add_argument(
            f"--{prefix}mute",
            dest=f"{prefix}mute",
            type=_parse_bool,
            nargs="?",
            const=True,
            default=defaults.mute,
            help="Mutes all logs regardless of severity. Intended for benchmarks/tests only.",
        )
        parser.add_argument(
            f"--{prefix}level",
            dest=f"{prefix}level",
            type=int,
            default=int(defaults.level),
            help="Sets the minimum logging level.",
        )
        parser.add_argument(
            f"--{prefix}formatter.type",
            dest=f"{prefix}formatter.type",
            type=str,
            default=_type_name(defaults.formatter.type),
            help="Sets logging format type.",
        )
        return parser

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration keyed by its serialised field names."""
        return {
            "show-source": bool(self.include_source_code),
            "mute": bool(self.mute),
            "level": int(self.level),
            "formatter": {"type": _type_name(self.formatter.type)},
        }


_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


def _parse_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"invalid boolean value {text!r}")


_parse_bool.__name__ = "bool"


def _type_name(value: Union[FormatterType, str]) -> str:
    return value.value if isinstance(value, FormatterType) else str(value)


_DEFAULT_CONFIG = Config()

_lock = threading.Lock()
_current = copy.deepcopy(_DEFAULT_CONFIG)
_subscribers: List[Callable[[Config], None]] = []


def set_config(cfg: Config) -> None:
    """Replace the global config and notify subscribers."""
    global _current
    if not isinstance(cfg, Config):
        raise TypeError(f"expected a Config, got {type(cfg).__name__}")
    with _lock:
        _current = copy.deepcopy(cfg)
        stored = _current
        subscribers = list(_subscribers)
    for callback in subscribers:
        callback(stored)


def get_config() -> Config:
    """Return the global config."""
    with _lock:
        return _current


def subscribe(callback: Callable[[Config], None]) -> Callable[[], None]:
    """Call ``callback`` with each new config; return a function that unsubscribes it."""
    with _lock:
        _subscribers.append(callback)

    def unsubscribe() -> None:
        with _lock:
            if callback in _subscribers:
                _subscribers.remove(callback)

    return unsubscribe