"""Variate contract.

A variate is a real random variable ``X`` described by two functions:

* ``cumulant(s, n)`` -- the n-th derivative of ``kappa(s) = log E[exp(s X)]``;
* ``cdf(x, s, n)`` -- the n-th ``x``-derivative of the Esscher transformed
  distribution ``F_s(x) = E[1(X <= x) exp(s X - kappa(s))]``.

Any object providing both qualifies; inheriting from :class:`VariateBase`
is optional and only adds conveniences.  Models must be immutable so a
single instance can be shared by concurrent pricers.

A model whose cumulant is finite only for ``0 <= s < s_max`` advertises the
limit as an ``s_max`` attribute; see :func:`tilt_bound`.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

import numpy as np
from scipy.integrate import quad

__all__ = ["Variate", "VariateBase", "Standardized", "edf", "tilt_bound"]


@runtime_checkable
class Variate(Protocol):
    def cumulant(self, s, n: int = 0): ...

    def cdf(self, x, s=0.0, n: int = 0): ...


class VariateBase(ABC):
    """Base class supplying ``pdf`` and a generic ``edf``."""

    # supremum of the positive s with a finite cumulant
    s_max = math.inf

    @abstractmethod
    def cumulant(self, s, n: int = 0):
        ...

    @abstractmethod
    def cdf(self, x, s=0.0, n: int = 0):
        ...

    def pdf(self, x, s=0.0):
        """Esscher transformed density ``F_s'(x)``."""
        return self.cdf(x, s, 1)

    def edf(self, x, s):
        """Derivative of ``F_s(x)`` with respect to ``s`` at fixed ``x``.

        Differentiating under the expectation gives
        ``E_s[(X - kappa'(s)) 1(X <= x)]``, integrated here against the
        transformed density.  Models with a closed form override this.
        """
        return _edf_quad(self, x, s)


def _edf_quad(m, x, s) -> float:
    mean = float(m.cumulant(s, 1))
    integrand = lambda y: (y - mean) * float(m.cdf(y, s, 1))
    val, _ = quad(integrand, -np.inf, float(x), limit=200)
    return val


def edf(m, x, s):
    """``dF_s(x)/ds`` using the model's own formula when it has one."""
    fn = getattr(m, "edf", None)
    if fn is not None:
        return fn(x, s)
    return _edf_quad(m, x, s)


def tilt_bound(m) -> float:
    """Exclusive upper limit on ``s``; ``inf`` unless the model sets ``s_max``."""
    return float(getattr(m, "s_max", math.inf))


class Standardized(VariateBase):
    """Rescale a variate to mean 0 and variance 1.

    With ``mu = kappa'(0)`` and ``sigma**2 = kappa''(0)`` of the wrapped
    model, ``Y = (X - mu)/sigma`` has ``kappa_Y(s) = kappa_X(s/sigma) - s mu/sigma``
    and ``F^Y_s(y) = F^X_{s/sigma}(mu + sigma y)``.
    """

    def __init__(self, m):
        self.m = m
        self.mu = float(m.cumulant(0.0, 1))
        self.sigma = math.sqrt(float(m.cumulant(0.0, 2)))
        # s is passed to the wrapped model as s/sigma
        self.s_max = self.sigma * tilt_bound(m)

    def __repr__(self):
        return f"Standardized({self.m!r})"

    def cdf(self, x, s=0.0, n: int = 0):
        return self.m.cdf(self.mu + self.sigma * x, s / self.sigma, n) * self.sigma ** n

    def cumulant(self, s, n: int = 0):
        k = self.m.cumulant(s / self.sigma, n) / self.sigma ** n
        if n == 0:
            return k - s * self.mu / self.sigma
        if n == 1:
            return k - self.mu / self.sigma
        return k

    def edf(self, x, s):
        return edf(self.m, self.mu + self.sigma * x, s / self.sigma) / self.sigma
