"""Exception types raised by the pricing engine and the variate models."""

from __future__ import annotations


class PricingError(ValueError):
    """Base class for every error raised by ``esscher``."""


class DomainError(PricingError):
    """An argument lies outside the domain of the formula being evaluated."""


class ConvergenceError(PricingError):
    """The implied-volatility solver stopped without converging.

    Attributes
    ----------
    iterations : int
        Number of Newton steps taken before giving up.
    estimate : float
        Last volatility iterate (not a solution).
    step : float
        Size of the last Newton step.
    """

    def __init__(self, message: str, *, iterations: int, estimate: float, step: float):
        super().__init__(message)
        self.iterations = iterations
        self.estimate = estimate
        self.step = step
