"""Discrete variate on finitely many atoms.

The transformed weights are ``w_i(s) = p_i exp(s x_i - kappa(s))``; the
distribution ``F_s`` is a step function so its ``x``-derivatives are point
masses at the atoms.
"""

from __future__ import annotations

import numpy as np
from scipy.special import logsumexp

from .errors import DomainError
from .variate import VariateBase

__all__ = ["Discrete"]


class Discrete(VariateBase):
    """Variate taking value ``xs[i]`` with probability ``ps[i]``.

    Parameters
    ----------
    xs : array-like
        Atoms (need not be sorted).
    ps : array-like
        Non-negative probabilities summing to 1.
    """

    def __init__(self, xs, ps):
        xs = np.asarray(xs, dtype=float)
        ps = np.asarray(ps, dtype=float)
        if xs.ndim != 1 or xs.shape != ps.shape or xs.size == 0:
            raise DomainError("xs and ps must be non-empty 1-d arrays of equal length")
        if np.any(ps < 0):
            raise DomainError("probabilities must be non-negative")
        if abs(ps.sum() - 1.0) > np.sqrt(np.finfo(float).eps):
            raise DomainError(f"probabilities must sum to 1, got {ps.sum()}")
        order = np.argsort(xs, kind="stable")
        self.xs = xs[order]
        self.ps = ps[order]
        self.xs.setflags(write=False)
        self.ps.setflags(write=False)

    def __repr__(self):
        return f"Discrete(xs={self.xs.tolist()}, ps={self.ps.tolist()})"

    def _weights(self, s):
        return self.ps * np.exp(s * self.xs - self.cumulant(s))

    def cdf(self, x, s=0.0, n: int = 0):
        if n == 0:
            below = self.xs <= x
            return self._weights(s)[below].sum()
        if not np.any(self.xs == x):
            return 0.0
        return np.inf if n == 1 else np.nan

    def cumulant(self, s, n: int = 0):
        if n == 0:
            return logsumexp(s * self.xs, b=self.ps)
        w = self._weights(s)
        m = np.dot(w, self.xs)
        if n == 1:
            return m
        d = self.xs - m
        if n == 2:
            return np.dot(w, d ** 2)
        if n == 3:
            return np.dot(w, d ** 3)
        if n == 4:
            return np.dot(w, d ** 4) - 3 * np.dot(w, d ** 2) ** 2

        return np.nan

    def edf(self, x, s):
        w = self._weights(s)
        below = self.xs <= x
        return np.dot(w[below], self.xs[below] - self.cumulant(s, 1))
