"""Logistic variate with unit variance.

``F(x) = 1/(1 + exp(-x/a))`` with ``a = sqrt(3)/pi``.  Substituting
``u = F(x)`` gives ``exp(x) = u^a (1 - u)^-a`` so

    E[exp(s X)] = B(1 + a s, 1 - a s),   kappa(s) = lnGamma(1 + a s) + lnGamma(1 - a s),

finite for ``|a s| < 1``.  The transformed distribution is the regularized
incomplete beta function ``I_u(1 + a s, 1 - a s)``.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.special import betainc, expit, gammaln, polygamma

from .errors import DomainError
from .variate import VariateBase

__all__ = ["Logistic"]


class Logistic(VariateBase):
    """Standard logistic variate: mean 0, variance 1."""

    a = math.sqrt(3.0) / math.pi
    s_max = math.pi / math.sqrt(3.0)

    def __repr__(self):
        return "Logistic()"

    def _check(self, s):
        if not abs(self.a * s) < 1:
            raise DomainError(f"logistic cumulant is finite only for |s| < {1 / self.a:.6g}, got {s}")

    def cdf(self, x, s=0.0, n: int = 0):
        self._check(s)
        u = expit(x / self.a)
        if n == 0:
            if s == 0:
                return u
            return betainc(1 + self.a * s, 1 - self.a * s, u)

        # log(u (1 - u)) = -|t| - 2 log(1 + exp(-|t|)), finite in both tails
        t = np.abs(x / self.a)
        f = np.exp(s * x - self.cumulant(s) - t - 2 * np.log1p(np.exp(-t))) / self.a
        if n == 1:
            return f
        if n == 2:
            return f * (s + (1 - 2 * u) / self.a)

        return x * np.nan

    def cumulant(self, s, n: int = 0):
        self._check(s)
        a = self.a
        if n == 0:
            return gammaln(1 + a * s) + gammaln(1 - a * s)
        return a ** n * (polygamma(n - 1, 1 + a * s) + (-1) ** n * polygamma(n - 1, 1 - a * s))
