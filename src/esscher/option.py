"""European option values and Greeks for an exponential-Levy underlying.

The underlying at expiration is ``F = f exp(s X - kappa(s))`` where
``kappa(s) = log E[exp(s X)]`` is the cumulant of the variate ``X``, ``f``
the forward and ``s`` the total volatility.  Note ``E[F] = f`` and
``Var(log F) = s**2`` when ``E[X] = 0`` and ``E[X**2] = 1``; the Black model
is ``X`` standard normal with ``s = sigma sqrt(t)``.

Since ``F <= k`` iff ``X <= x`` with ``x = (log(k/f) + kappa(s))/s``,

    E[max{k - F, 0}] = k P(X <= x) - f P_s(X <= x),

where ``dP_s/dP = exp(s X - kappa(s))``.  Every formula below is a
transformed probability evaluated through the variate's ``cdf``.
"""

from __future__ import annotations

import math

import numpy as np
from loguru import logger

from .core import Payoff, SolverConfig, as_payoff
from .errors import ConvergenceError, DomainError
from .normal import Normal
from .variate import Variate, edf, tilt_bound

__all__ = [
    "Option",
    "moneyness", "value", "delta", "gamma", "vega", "greeks", "implied",
]


class Option:
    """Pricing engine bound to one variate.

    Parameters
    ----------
    variate : Variate, optional
        Distribution of ``X``.  Defaults to the standard normal (Black model).
    dtype : numpy floating type
        Floating type of every result, ``np.float64`` (default) or
        ``np.float32``.  Inputs are cast to it on entry.
    solver : SolverConfig, optional
        Defaults for :meth:`implied`.

    Every method taking ``k`` accepts a :class:`~esscher.core.Payoff` or a
    signed strike: ``k >= 0`` is a call, ``k < 0`` a put struck at ``-k``.
    """

    def __init__(self, variate: Variate | None = None, dtype=np.float64,
                 solver: SolverConfig | None = None):
        if variate is None:
            variate = Normal()
        if not isinstance(variate, Variate):
            raise TypeError(f"{variate!r} does not provide cumulant() and cdf()")
        self.variate = variate
        self.dtype = np.dtype(dtype).type
        if not issubclass(self.dtype, np.floating):
            raise TypeError(f"dtype must be a floating type, got {np.dtype(dtype)}")
        self.eps = np.finfo(self.dtype).eps
        self.solver = solver if solver is not None else SolverConfig()

    def __repr__(self):
        return f"Option({self.variate!r}, dtype={np.dtype(self.dtype).name})"

    # ------------------------------------------------------------------
    # Argument handling
    # ------------------------------------------------------------------
    def _args(self, f, s, k) -> tuple[Payoff, np.floating, np.floating, np.floating]:
        p = as_payoff(k)
        f, s, k = self.dtype(f), self.dtype(s), self.dtype(p.strike)
        if not f >= 0:
            raise DomainError(f"forward must be non-negative, got {f}")
        if not s >= 0:
            raise DomainError(f"volatility must be non-negative, got {s}")
        return p, f, s, k

    def _x(self, f, s, k):
        return (np.log(k / f) + self.dtype(self.variate.cumulant(s))) / s

    def moneyness(self, f: float, s: float, k: Payoff | float) -> float:
        """Threshold ``x`` with ``F <= k`` iff ``X <= x``.

        Requires ``f``, ``s`` and the strike to be strictly positive.
        """
        p = as_payoff(k)
        f, s, k = self.dtype(f), self.dtype(s), self.dtype(p.strike)
        if not f > 0:
            raise DomainError(f"forward must be positive, got {f}")
        if not s > 0:
            raise DomainError(f"volatility must be positive, got {s}")
        if not k > 0:
            raise DomainError(f"strike must be positive, got {k}")
        return self.dtype(self._x(f, s, k))

    # ------------------------------------------------------------------
    # Value
    # ------------------------------------------------------------------
    def value(self, f: float, s: float, k: Payoff | float) -> float:
        """Forward value of the payoff.

        Degenerate inputs are limits, checked in order: zero forward, zero
        volatility (intrinsic value), zero strike.
        """
        p, f, s, k = self._args(f, s, k)
        if p.is_digital:
            return self._digital_value(p, f, s, k)

        if f == 0:
            return self.dtype(0)
        if s == 0:
            return self.dtype(max(f - k, 0) if p.is_call else max(k - f, 0))
        if k == 0:
            return f if p.is_call else self.dtype(0)

        m = self.variate
        x = self._x(f, s, k)
        if p.is_call:
            return self.dtype(f * (1 - m.cdf(x, s)) - k * (1 - m.cdf(x, 0.0)))
        # E[(k - F) 1(F <= k)] = k P(F <= k) - f P_s(F <= k)
        return self.dtype(k * m.cdf(x, 0.0) - f * m.cdf(x, s))

    def _digital_value(self, p, f, s, k):
        if f == 0 or s == 0:
            # F = f with certainty
            itm = f > k
        elif k == 0:
            itm = True
        else:
            P = self.variate.cdf(self._x(f, s, k), 0.0)
            return self.dtype(1 - P if p.is_call else P)
        return self.dtype(itm if p.is_call else not itm)

    # ------------------------------------------------------------------
    # Greeks
    # ------------------------------------------------------------------
    def delta(self, f: float, s: float, k: Payoff | float) -> float:
        """Derivative of value with respect to the forward.

        (d/df) E[max{k - F, 0}] = E[-exp(s X - kappa(s)) 1(F <= k)] = -P_s(F <= k)
        and put-call parity gives the call delta as put delta + 1.
        """
        p, f, s, k = self._args(f, s, k)
        if p.is_digital:
            return self._digital_delta(p, f, s, k)

        if f == 0:
            return self.dtype(0)
        if s == 0:
            if p.is_call:
                return self.dtype(1 if f > k else 0)
            return self.dtype(-1 if f <= k else 0)
        if k == 0:
            return self.dtype(p.is_call)

        Ps = self.variate.cdf(self._x(f, s, k), s)
        return self.dtype(1 - Ps if p.is_call else -Ps)

    def _digital_delta(self, p, f, s, k):
        sign = 1 if p.is_call else -1
        if f == 0 or k == 0:
            return self.dtype(0)
        if s == 0:
            return self.dtype(sign * np.inf if f == k else 0)
        # dx/df = -1/(f s)
        dens = self.variate.cdf(self._x(f, s, k), 0.0, 1)
        return self.dtype(sign * dens / (f * s))

    def gamma(self, f: float, s: float, k: Payoff | float) -> float:
        """Second derivative of value with respect to the forward.

        Calls and puts share gamma.  At zero volatility the at-the-money
        gamma is ``inf``, the limit of a point mass.
        """
        p, f, s, k = self._args(f, s, k)
        if p.is_digital:
            return self._digital_gamma(p, f, s, k)

        if f == 0 or k == 0:
            return self.dtype(0)
        if s == 0:
            return self.dtype(np.inf if f == k else 0)

        return self.dtype(self.variate.cdf(self._x(f, s, k), s, 1) / (f * s))

    def _digital_gamma(self, p, f, s, k):
        sign = 1 if p.is_call else -1
        if f == 0 or k == 0:
            return self.dtype(0)
        if s == 0:
            return self.dtype(np.nan if f == k else 0)
        m = self.variate
        x = self._x(f, s, k)
        d1, d2 = m.cdf(x, 0.0, 1), m.cdf(x, 0.0, 2)
        return self.dtype(-sign * (d2 / s + d1) / (f * f * s))

    def vega(self, f: float, s: float, k: Payoff | float) -> float:
        """Derivative of value with respect to the total volatility.

        The terms through ``dx/ds`` cancel because the transformed density
        satisfies ``f F_s'(x) = k F_0'(x)`` at the moneyness ``x``, leaving
        ``-f dF_s(x)/ds``.  Calls and puts share vega.
        """
        p, f, s, k = self._args(f, s, k)
        if p.is_digital:
            return self._digital_vega(p, f, s, k)

        m = self.variate
        if f == 0 or k == 0:
            return self.dtype(0)
        if s == 0:
            if f != k:
                return self.dtype(0)
            # x -> kappa'(0) as s -> 0 at the money
            return self.dtype(-f * edf(m, m.cumulant(0.0, 1), 0.0))

        return self.dtype(-f * edf(m, self._x(f, s, k), s))

    def _digital_vega(self, p, f, s, k):
        sign = 1 if p.is_call else -1
        m = self.variate
        if f == 0 or k == 0:
            return self.dtype(0)
        if s == 0:
            if f != k:
                return self.dtype(0)
            # (x - kappa'(s))/s -> -kappa''(0)/2
            mu = m.cumulant(0.0, 1)
            return self.dtype(-sign * m.cdf(mu, 0.0, 1) * m.cumulant(0.0, 2) / 2)
        # dx/ds = (kappa'(s) - x)/s
        x = self._x(f, s, k)
        return self.dtype(sign * m.cdf(x, 0.0, 1) * (x - m.cumulant(s, 1)) / s)

    def greeks(self, f: float, s: float, k: Payoff | float) -> dict[str, float]:
        """Value, delta, gamma and vega in one dict."""
        return {
            "value": self.value(f, s, k),
            "delta": self.delta(f, s, k),
            "gamma": self.gamma(f, s, k),
            "vega": self.vega(f, s, k),
        }

    # ------------------------------------------------------------------
    # Implied volatility
    # ------------------------------------------------------------------
    def implied(self, f: float, price: float, k: Payoff | float, s0: float | None = None,
                max_iter: int | None = None, tol: float | None = None) -> float:
        """Total volatility reproducing ``price`` by Newton-Raphson on vega.

        Parameters
        ----------
        f : float
            Forward, strictly positive.
        price : float
            Target value; must lie strictly inside the no-arbitrage band
            ``(intrinsic, upper)`` where ``upper`` is ``f`` for calls and the
            strike for puts.
        k : Payoff or float
            Call or put (digitals are not supported).
        s0, max_iter, tol : optional
            Override the engine's :class:`SolverConfig`.

        Raises
        ------
        DomainError
            Arguments for which no finite positive volatility exists.
        ConvergenceError
            The iteration cap was reached, vega vanished, or the model
            rejected an iterate.  Iterates are kept below the variate's
            ``s_max`` so the last case only arises for models that do not
            declare their limit.
        """
        p = as_payoff(k)
        if p.is_digital:
            raise DomainError("implied volatility is defined for calls and puts only")
        cfg = self.solver
        s0 = cfg.s0 if s0 is None else s0
        max_iter = cfg.max_iter if max_iter is None else max_iter
        tol = cfg.tol if tol is None else tol

        f, price, k = self.dtype(f), self.dtype(price), self.dtype(p.strike)
        if not f > 0:
            raise DomainError(f"forward must be positive, got {f}")
        if not k > 0:
            raise DomainError(f"strike must be positive, got {k}")
        if not price > 0:
            raise DomainError(f"price must be positive, got {price}")
        intrinsic = max(f - k, 0) if p.is_call else max(k - f, 0)
        upper = f if p.is_call else k
        if not intrinsic < price < upper:
            raise DomainError(
                f"price {price} outside the no-arbitrage band ({intrinsic}, {upper})"
            )

        if tol <= 0:
            tol = math.sqrt(self.eps)
        tol = max(tol, 10 * self.eps)
        # iterates stay inside (0, bound) where the cumulant is finite
        bound = tilt_bound(self.variate)
        if s0 <= 0:
            # vega peaks at sqrt(2|log(k/f)|) for the Black model; at the
            # money the value is about f s/sqrt(2 pi)
            s0 = max(math.sqrt(2 * abs(math.log(k / f))), 2.5 * (price - intrinsic) / f)
        if not s0 < bound:
            s0 = bound / 2

        s = self.dtype(s0)
        ds = self.dtype(np.inf)
        n = 0
        logger.debug("implied: f={} price={} k={} s0={} bound={} tol={}", f, price, k, s, bound, tol)
        while not abs(ds) <= tol:
            if n == max_iter:
                logger.warning("implied: no convergence after {} iterations, s={} ds={}", n, s, ds)
                raise ConvergenceError(
                    f"implied volatility did not converge in {n} iterations",
                    iterations=n, estimate=float(s), step=float(ds),
                )
            try:
                v = self.vega(f, s, p)
                err = self.value(f, s, p) - price
            except DomainError as e:
                logger.warning("implied: model undefined at s={}: {}", s, e)
                raise ConvergenceError(
                    f"model undefined at s={s}", iterations=n, estimate=float(s), step=float(ds),
                ) from e
            if not (v > 0 and np.isfinite(v)):
                raise ConvergenceError(
                    f"vega vanished at s={s}", iterations=n, estimate=float(s), step=float(ds),
                )
            s_ = s - err / v
            if not np.isfinite(s_):
                raise ConvergenceError(
                    f"non-finite iterate from s={s}", iterations=n, estimate=float(s), step=float(ds),
                )
            # damp steps leaving (0, bound) halfway back to the last iterate
            if s_ <= 0:
                s_ = s / 2
            elif not s_ < bound:
                s_ = (s + bound) / 2
            ds = self.dtype(s_ - s)
            s = self.dtype(s_)
            n += 1
            logger.debug("implied: iteration {} s={} ds={}", n, s, ds)

        logger.debug("implied: converged to s={} in {} iterations", s, n)
        return s


# ---------------------------------------------------------------------------
# Black model conveniences (standard normal, double precision)
# ---------------------------------------------------------------------------
_black = Option()

moneyness = _black.moneyness
value = _black.value
delta = _black.delta
gamma = _black.gamma
vega = _black.vega
greeks = _black.greeks
implied = _black.implied
