"""Normal variate.

For a standard normal ``Z`` the cumulant is ``s**2/2`` and the Esscher
transform shifts the mean: ``P_s(Z <= z) = Phi(z - s)``.  For
``N = mu + sigma Z`` this gives ``kappa(s) = mu s + sigma**2 s**2/2`` and
``F_s(x) = Phi((x - mu)/sigma - sigma s)``.

Derivatives of the density use ``phi^(n)(z) = (-1)^n phi(z) H_n(z)`` where
``H_n`` are the probabilists' Hermite polynomials.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.special import erf

from .errors import DomainError
from .variate import VariateBase

__all__ = ["Normal", "hermite"]

_SQRT2 = math.sqrt(2.0)
_SQRT2PI = math.sqrt(2.0 * math.pi)


def hermite(n: int, x):
    """Probabilists' Hermite polynomial ``H_n(x)``.

    ``H_0 = 1``, ``H_1 = x``, ``H_{k+1} = x H_k - k H_{k-1}``.
    """
    if n < 0:
        raise DomainError(f"Hermite degree must be non-negative, got {n}")
    h0, h1 = x * 0 + 1, x
    if n == 0:
        return h0
    for k in range(1, n):
        h0, h1 = h1, x * h1 - k * h0
    return h1


class Normal(VariateBase):
    """Normal variate with mean ``mu`` and standard deviation ``sigma``.

    A ``sigma`` of zero is replaced by 1.

    The tilt acts on ``X`` itself, so ``kappa(s) = mu s + sigma**2 s**2/2``
    and ``F_s(x) = Phi((x - mu)/sigma - sigma s)``.  Both reduce to the
    textbook ``Phi(x - s)`` and ``s**2/2`` only when ``sigma == 1``; with any
    ``sigma`` the engine reproduces Black with total volatility ``sigma s``.
    """

    def __init__(self, mu: float = 0.0, sigma: float = 1.0):
        if sigma < 0:
            raise DomainError(f"sigma must be non-negative, got {sigma}")
        self.mu = float(mu)
        self.sigma = float(sigma) if sigma != 0 else 1.0

    def __repr__(self):
        return f"Normal(mu={self.mu}, sigma={self.sigma})"

    def __eq__(self, other):
        if not isinstance(other, Normal):
            return NotImplemented
        return (self.mu, self.sigma) == (other.mu, other.sigma)

    def __hash__(self):
        return hash((Normal, self.mu, self.sigma))

    def _z(self, x, s):
        return (x - self.mu) / self.sigma - self.sigma * s

    def cdf(self, x, s=0.0, n: int = 0):
        z = self._z(x, s)
        if n == 0:
            return (1 + erf(z / _SQRT2)) / 2
        phi = np.exp(-z * z / 2) / (self.sigma * _SQRT2PI)
        return phi * hermite(n - 1, z) / (-self.sigma) ** (n - 1)

    def cumulant(self, s, n: int = 0):
        if n == 0:
            return self.mu * s + self.sigma * self.sigma * s * s / 2
        if n == 1:
            return self.mu + self.sigma * self.sigma * s
        if n == 2:
            return s * 0 + self.sigma * self.sigma
        return s * 0

    def edf(self, x, s):
        # d/ds Phi(z - sigma s) = -sigma phi(z - sigma s)
        return -self.sigma * self.sigma * self.cdf(x, s, 1)
