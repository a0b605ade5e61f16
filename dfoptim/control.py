"""Control parameters for the Simplex and Brent optimizers."""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional, Union

from .core import ConfigError


def _require_finite(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigError(
            f"Invalid control parameter: '{name}' must be a real number, "
            f"got {type(value).__name__}"
        )
    if not math.isfinite(value):
        raise ConfigError(f"Invalid control parameter: '{name}' must be finite")


def _require_positive_tolerance(tolerance: float) -> None:
    _require_finite("tolerance", tolerance)
    if tolerance <= 0:
        raise ConfigError(
            "Invalid control parameter: 'tolerance' must be strictly positive"
        )


@dataclass(frozen=True)
class SimplexControl:
    """
    Control parameters for :class:`~dfoptim.simplex.Simplex`.

    Args:
        delta_non_zero: Relative perturbation used to build the initial
            simplex. A non-zero coordinate ``x`` becomes
            ``x * (1 + delta_non_zero)``.
        delta_zero: Absolute value used in place of a zero coordinate when
            building the initial simplex.
        tolerance: Tolerance for both convergence tests (spread of objective
            values and size of the simplex). Very small values run into
            floating point limits and slow the final steps down.
        tolerates_evaluation_failure: If True, an objective that raises
            (after the starting point has been evaluated) is treated as
            returning ``+inf``, which can be used to impose bounds. If False
            the exception propagates out of ``step()``.
    """

    delta_non_zero: float = 0.05
    delta_zero: float = 0.001
    tolerance: float = 1e-5
    tolerates_evaluation_failure: bool = False

    def __post_init__(self) -> None:
        _require_finite("delta_non_zero", self.delta_non_zero)
        _require_finite("delta_zero", self.delta_zero)
        if self.delta_non_zero == 0:
            raise ConfigError(
                "Invalid control parameter: 'delta_non_zero' must be non-zero"
            )
        if self.delta_zero == 0:
            raise ConfigError("Invalid control parameter: 'delta_zero' must be non-zero")
        _require_positive_tolerance(self.tolerance)


@dataclass(frozen=True)
class BrentControl:
    """
    Control parameters for :class:`~dfoptim.brent.Brent`.

    Args:
        find_maximum: Search for a maximum instead of a minimum.
        tolerance: Convergence tolerance on the width of the bracket.
    """

    find_maximum: bool = False
    tolerance: float = 1e-6

    def __post_init__(self) -> None:
        _require_positive_tolerance(self.tolerance)


ControlLike = Union[None, SimplexControl, BrentControl, Mapping[str, Any]]


def _build(cls: type, control: ControlLike, overrides: Mapping[str, Any]) -> Any:
    if isinstance(control, cls) and not overrides:
        return control
    if control is None:
        params: dict[str, Any] = {}
    elif isinstance(control, cls):
        params = asdict(control)
    elif isinstance(control, Mapping):
        params = dict(control)
    else:
        raise ConfigError(
            f"Expected {cls.__name__}, a mapping or None, got {type(control).__name__}"
        )
    params.update(overrides)
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(params) - known)
    if unknown:
        raise ConfigError(
            f"Unknown control parameter(s) for {cls.__name__}: {', '.join(unknown)}"
        )
    return cls(**params)


def simplex_control(
    control: Optional[Union[SimplexControl, Mapping[str, Any]]] = None,
    **overrides: Any,
) -> SimplexControl:
    """Resolve ``control`` into a validated :class:`SimplexControl`.

    Missing fields take their defaults; keyword ``overrides`` win over the
    values in ``control``.

    Raises:
        ConfigError: If a field is unknown or a value is invalid.

    Example
    -------
    >>> simplex_control({"delta_non_zero": 0.5}).delta_zero
    0.001
    """
    return _build(SimplexControl, control, overrides)


def brent_control(
    control: Optional[Union[BrentControl, Mapping[str, Any]]] = None,
    **overrides: Any,
) -> BrentControl:
    """Resolve ``control`` into a validated :class:`BrentControl`."""
    return _build(BrentControl, control, overrides)


__all__ = ["SimplexControl", "BrentControl", "simplex_control", "brent_control"]
