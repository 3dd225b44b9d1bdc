from __future__ import annotations
from dataclasses import dataclass
from numbers import Real

from .errors import DomainError


# ---------------------------------------------------------------------------
# Payoff descriptors
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Payoff:
    """European payoff carrying a strike.

    The engine dispatches on the concrete subclass; a payoff has no
    behaviour of its own.  A zero strike is allowed and priced as the
    limiting "free asset" case.
    """
    strike: float

    is_call = True
    is_digital = False

    def __post_init__(self):
        if not self.strike >= 0:
            raise DomainError(f"strike must be non-negative, got {self.strike}")


@dataclass(frozen=True)
class Call(Payoff):
    """Pays ``max(F - k, 0)``."""


@dataclass(frozen=True)
class Put(Payoff):
    """Pays ``max(k - F, 0)``."""
    is_call = False


@dataclass(frozen=True)
class DigitalCall(Payoff):
    """Pays 1 when ``F > k``."""
    is_digital = True


@dataclass(frozen=True)
class DigitalPut(Payoff):
    """Pays 1 when ``F <= k``."""
    is_call = False
    is_digital = True


def as_payoff(k: Payoff | float) -> Payoff:
    """Resolve a payoff or a signed strike.

    A bare number is a call strike when ``k >= 0`` and a put with strike
    ``-k`` when ``k < 0``.
    """
    if isinstance(k, Payoff):
        return k
    if not isinstance(k, Real):
        raise TypeError(f"expected a Payoff or a signed strike, got {type(k).__name__}")
    if k < 0:
        return Put(-k)
    return Call(k)


# ---------------------------------------------------------------------------
# Solver configuration
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SolverConfig:
    """Newton-Raphson settings for implied volatility.

    Parameters
    ----------
    tol : float
        Stopping threshold on ``|s_{i+1} - s_i|``.  Zero (default) selects
        ``sqrt(eps)`` of the engine dtype; anything below ``10 * eps`` is
        raised to that floor.
    max_iter : int
        Maximum number of Newton steps.
    s0 : float
        Initial volatility.  Zero (default) derives a guess from the target
        price and moneyness.
    """
    tol: float = 0.0
    max_iter: int = 100
    s0: float = 0.0

    def __post_init__(self):
        if self.tol < 0:
            raise DomainError(f"tol must be non-negative, got {self.tol}")
        if self.max_iter < 1:
            raise DomainError(f"max_iter must be at least 1, got {self.max_iter}")
        if self.s0 < 0:
            raise DomainError(f"s0 must be non-negative, got {self.s0}")
