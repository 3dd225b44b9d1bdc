"""Tests for the Newton-Raphson implied volatility solver."""

import math

import numpy as np
import pytest
from loguru import logger

from esscher.core import Call, Put, DigitalCall, SolverConfig
from esscher.errors import ConvergenceError, DomainError, PricingError
from esscher.logistic import Logistic
from esscher.option import Option

BLACK = Option()


class UndeclaredLogistic(Logistic):
    s_max = math.inf


class TestRoundTrip:
    @pytest.mark.parametrize("s", [0.05, 0.1, 0.2, 0.5])
    @pytest.mark.parametrize("k", [100.0, -100.0])
    def test_at_the_money(self, s, k):
        px = BLACK.value(100, s, k)
        assert abs(BLACK.implied(100, px, k) - s) < 1e-8

    @pytest.mark.parametrize("k", [80.0, 120.0, 150.0, -80.0, -120.0])
    @pytest.mark.parametrize("s", [0.1, 0.3])
    def test_away_from_the_money(self, s, k):
        px = BLACK.value(100, s, k)
        assert abs(BLACK.implied(100, px, k) - s) < 1e-8

    def test_explicit_initial_guess(self):
        px = BLACK.value(100, 0.25, 110)
        assert abs(BLACK.implied(100, px, 110, s0=0.6) - 0.25) < 1e-8

    def test_logistic(self):
        engine = Option(Logistic())
        for k in (95.0, 100.0, -105.0):
            px = engine.value(100, 0.2, k)
            assert abs(engine.implied(100, px, k) - 0.2) < 1e-7

    @pytest.mark.parametrize("s, k", [(0.3, 1000.0), (0.8, 1000.0), (1.6, 100.0)])
    def test_logistic_near_cumulant_limit(self, s, k):
        # the Black initial guess at k=1000 and the first Newton step at
        # s=1.6 both fall past the logistic limit pi/sqrt(3)
        engine = Option(Logistic())
        px = engine.value(100, s, k)
        assert abs(engine.implied(100, px, k) - s) < 1e-6

    def test_logistic_initial_guess_past_limit(self):
        engine = Option(Logistic())
        px = engine.value(100, 0.5, 100)
        assert abs(engine.implied(100, px, 100, s0=5.0) - 0.5) < 1e-6

    def test_float32(self):
        engine = Option(dtype=np.float32)
        px = engine.value(100, 0.2, 100)
        s = engine.implied(100, px, 100)
        assert s.dtype == np.float32
        assert abs(s - 0.2) < 1e-3

    def test_accepts_payoffs(self):
        px = BLACK.value(100, 0.2, Put(90))
        assert abs(BLACK.implied(100, px, Put(90)) - 0.2) < 1e-8


class TestNonConvergence:
    def test_iteration_cap(self):
        px = BLACK.value(100, 0.1, 100)
        with pytest.raises(ConvergenceError) as info:
            BLACK.implied(100, px, 100, s0=1.0, max_iter=1)
        assert info.value.iterations == 1
        assert info.value.estimate > 0
        assert abs(info.value.step) > 0

    def test_engine_solver_config(self):
        engine = Option(solver=SolverConfig(max_iter=2, s0=2.0))
        px = engine.value(100, 0.1, 100)
        with pytest.raises(ConvergenceError):
            engine.implied(100, px, 100)
        # explicit arguments override the configuration
        assert abs(engine.implied(100, px, 100, s0=0.0, max_iter=100) - 0.1) < 1e-8

    def test_is_a_pricing_error(self):
        assert issubclass(ConvergenceError, PricingError)

    def test_model_without_declared_limit(self):
        # same model, but the solver is not told where its cumulant ends
        engine = Option(UndeclaredLogistic())
        px = engine.value(100, 0.3, 1000)
        with pytest.raises(ConvergenceError) as info:
            engine.implied(100, px, 1000)
        assert isinstance(info.value.__cause__, DomainError)
        assert info.value.iterations == 0


class TestTolerance:
    @staticmethod
    def _logged_tol(engine, **kwargs):
        records = []
        logger.enable("esscher")
        handler = logger.add(records.append, level="DEBUG", format="{message}")
        try:
            px = engine.value(100, 0.2, 100)
            s = engine.implied(100, px, 100, **kwargs)
        finally:
            logger.remove(handler)
            logger.disable("esscher")
        start = next(str(r) for r in records if "tol=" in str(r))
        return s, float(start.rsplit("tol=", 1)[1])

    @pytest.mark.parametrize("dtype", [np.float64, np.float32])
    def test_default_follows_dtype(self, dtype):
        s, tol = self._logged_tol(Option(dtype=dtype))
        assert tol == pytest.approx(math.sqrt(np.finfo(dtype).eps), rel=1e-6)
        assert abs(s - 0.2) < 1e-3

    @pytest.mark.parametrize("dtype", [np.float64, np.float32])
    def test_floor_at_ten_eps(self, dtype):
        eps = np.finfo(dtype).eps
        s, tol = self._logged_tol(Option(dtype=dtype), tol=1e-300)
        assert tol == pytest.approx(10 * eps, rel=1e-6)
        assert s.dtype == dtype
        assert abs(s - 0.2) < 1e3 * eps

    def test_configured_tolerance(self):
        engine = Option(solver=SolverConfig(tol=1e-4))
        _, tol = self._logged_tol(engine)
        assert tol == pytest.approx(1e-4)


class TestDomain:
    @pytest.mark.parametrize("px", [0.0, -1.0])
    def test_non_positive_price(self, px):
        with pytest.raises(DomainError):
            BLACK.implied(100, px, 100)

    def test_price_above_forward(self):
        with pytest.raises(DomainError):
            BLACK.implied(100, 100.0, 100)

    def test_put_price_above_strike(self):
        with pytest.raises(DomainError):
            BLACK.implied(100, 90.0, -90)

    def test_price_below_intrinsic(self):
        with pytest.raises(DomainError):
            BLACK.implied(100, 9.0, 90)

    def test_forward_and_strike(self):
        with pytest.raises(DomainError):
            BLACK.implied(0, 1.0, 100)
        with pytest.raises(DomainError):
            BLACK.implied(100, 1.0, Call(0))

    def test_digital(self):
        with pytest.raises(DomainError):
            BLACK.implied(100, 0.5, DigitalCall(100))


class TestLogging:
    def test_debug_records(self):
        records = []
        logger.enable("esscher")
        handler = logger.add(records.append, level="DEBUG", format="{message}")
        try:
            px = BLACK.value(100, 0.2, 100)
            BLACK.implied(100, px, 100)
        finally:
            logger.remove(handler)
            logger.disable("esscher")
        assert any("converged" in str(r) for r in records)

    def test_warning_on_failure(self):
        records = []
        logger.enable("esscher")
        handler = logger.add(records.append, level="WARNING", format="{message}")
        try:
            with pytest.raises(ConvergenceError):
                BLACK.implied(100, 4.0, 100, s0=1.0, max_iter=1)
        finally:
            logger.remove(handler)
            logger.disable("esscher")
        assert len(records) == 1
