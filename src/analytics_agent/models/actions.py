"""
Action steps parsed from a row's action script
"""
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ClickStep:
    """Forced click on an element that must exist"""
    locator: str
    kind: str = "click"


@dataclass(frozen=True)
class TypeStep:
    """Type literal text into an element that must be visible"""
    locator: str
    value: str
    kind: str = "type"


@dataclass(frozen=True)
class SelectStep:
    """Choose the option equal to `value`"""
    locator: str
    value: str
    kind: str = "select"


@dataclass(frozen=True)
class UnknownStep:
    """A token that could not be parsed into a step; skipped at execution"""
    raw: str
    kind: str = "unknown"


ActionStep = Union[ClickStep, TypeStep, SelectStep, UnknownStep]
