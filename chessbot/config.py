"""
Engine options for a single move selection.

Only three options are recognised by the front ends: difficulty, base search
depth and time budget. Two further switches select optional search stages.
"""

import enum
from dataclasses import dataclass, replace
from typing import Any, Mapping

from chessbot.constants import DEFAULT_BASE_DEPTH, TIME_BUDGET_MS


class Difficulty(enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: "str | Difficulty") -> "Difficulty":
        """Accept a Difficulty or its name in any case ("Hard", "easy", ...)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(d.value for d in cls)
            raise ValueError(f"unknown difficulty {value!r} (expected one of: {choices})") from None


# Option names as sent by clients, mapped to EngineConfig field names.
_OPTION_ALIASES: dict[str, str] = {
    "difficulty": "difficulty",
    "basedepth": "base_depth",
    "base_depth": "base_depth",
    "depth": "base_depth",
    "timebudgetms": "time_budget_ms",
    "time_budget_ms": "time_budget_ms",
    "timebudget": "time_budget_ms",
    "quiescence": "quiescence",
    "scaledecisive": "scale_decisive",
    "scale_decisive": "scale_decisive",
}

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class EngineConfig:
    """
    Options that drive one call to the move selector.

    Attributes:
        difficulty:     EASY plays shallow and often at random, MEDIUM
                        searches base_depth plies, HARD two plies deeper.
        base_depth:     Nominal search depth in plies (>= 1).
        time_budget_ms: Wall-clock budget for the whole selection (>= 1).
        quiescence:     Resolve captures at the horizon.
        scale_decisive: Search one ply deeper when material is lopsided.
    """

    difficulty: Difficulty = Difficulty.MEDIUM
    base_depth: int = DEFAULT_BASE_DEPTH
    time_budget_ms: int = TIME_BUDGET_MS
    quiescence: bool = True
    scale_decisive: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.difficulty, Difficulty):
            object.__setattr__(self, "difficulty", Difficulty.parse(self.difficulty))
        if self.base_depth < 1:
            raise ValueError(f"base_depth must be >= 1, got {self.base_depth}")
        if self.time_budget_ms < 1:
            raise ValueError(f"time_budget_ms must be >= 1, got {self.time_budget_ms}")

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "EngineConfig":
        """
        Build a config from loosely typed client options.

        Keys may be camelCase (``baseDepth``, ``timeBudgetMs``) or snake_case;
        values may be strings, as they arrive from UCI ``setoption``.
        Unknown keys raise ValueError, as do values that do not parse.
        """
        fields: dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key.replace("-", "_").lower())
            if name is None:
                raise ValueError(f"unknown engine option {key!r}")
            if name == "difficulty":
                fields[name] = Difficulty.parse(value)
            elif name in ("base_depth", "time_budget_ms"):
                fields[name] = _parse_int(key, value)
            else:
                fields[name] = _parse_bool(key, value)
        return cls(**fields)

    def with_option(self, key: str, value: Any) -> "EngineConfig":
        """Return a copy with one option changed (same parsing as from_options)."""
        changed = EngineConfig.from_options({key: value})
        name = _OPTION_ALIASES[key.replace("-", "_").lower()]
        return replace(self, **{name: getattr(changed, name)})
