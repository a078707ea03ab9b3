"""
Type checks shared by the settings dataclasses.

Values from YAML files and JSON requests arrive untyped, so each field is
checked before any range comparison.
"""

import numbers
from typing import Any

from ..exceptions import InvalidSettingsError


def check_int(name: str, value: Any) -> None:
    """Require an integer (bool is rejected)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidSettingsError(f"{name} must be an integer, got {value!r}")


def check_number(name: str, value: Any) -> None:
    """Require a real number (bool is rejected)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidSettingsError(f"{name} must be a number, got {value!r}")


def check_bool(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise InvalidSettingsError(f"{name} must be true or false, got {value!r}")


def check_mapping(name: str, value: Any) -> None:
    if not isinstance(value, dict):
        raise InvalidSettingsError(
            f"{name} must be a mapping, got {type(value).__name__}"
        )
