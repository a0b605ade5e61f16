"""dfoptim - derivative-free optimization with step-wise engines.

Two minimizers are provided: the Nelder-Mead :class:`Simplex` method for
n-dimensional problems and :class:`Brent`'s method for one-dimensional
problems on a bracket. Both advance one step per call so that callers can
interleave optimization with other work.

Example
-------
>>> from dfoptim import fit_brent, fit_simplex
>>> res = fit_simplex(lambda x: float(x @ x), [2.0, 4.0])
>>> res.converged
True
>>> round(fit_brent(lambda x: x * x, -3, 3).location, 4)
0.0
"""

__version__ = "0.1.0"

from .brent import Brent, BrentState, brent_converged, brent_init, brent_step, fit_brent
from .control import BrentControl, SimplexControl, brent_control, simplex_control
from .core import (
    ConfigError,
    EvaluationError,
    FitResult,
    Point,
    Result,
    normalize_result,
)
from .simplex import (
    Simplex,
    SimplexState,
    fit_simplex,
    simplex_converged,
    simplex_init,
    simplex_step,
)
from .utils import Err, Ok, evaluate, invert, protect, recover

__all__ = [
    "__version__",
    # Core types
    "ConfigError",
    "EvaluationError",
    "FitResult",
    "Point",
    "Result",
    "normalize_result",
    # Evaluation helpers
    "Ok",
    "Err",
    "evaluate",
    "recover",
    "protect",
    "invert",
    # Control
    "SimplexControl",
    "BrentControl",
    "simplex_control",
    "brent_control",
    # Simplex
    "Simplex",
    "SimplexState",
    "fit_simplex",
    "simplex_init",
    "simplex_step",
    "simplex_converged",
    # Brent
    "Brent",
    "BrentState",
    "fit_brent",
    "brent_init",
    "brent_step",
    "brent_converged",
]
