"""Tests for the variate contract and the standardizing wrapper."""

import math
import numpy as np
import pytest
from statistics import NormalDist

from esscher.variate import Variate, VariateBase, Standardized, edf, tilt_bound
from esscher.normal import Normal
from esscher.logistic import Logistic
from esscher.discrete import Discrete

_nd = NormalDist()


class DuckNormal:
    """Standard normal written against the bare contract, without edf."""

    def cumulant(self, s, n=0):
        return [s * s / 2, s, 1.0][n] if n < 3 else 0.0

    def cdf(self, x, s=0.0, n=0):
        if n == 0:
            return _nd.cdf(x - s)
        if n == 1:
            return _nd.pdf(x - s)
        return math.nan


class TestContract:
    @pytest.mark.parametrize("m", [Normal(), Logistic(), Discrete([0.0, 1.0], [0.5, 0.5]), DuckNormal()])
    def test_models_satisfy_protocol(self, m):
        assert isinstance(m, Variate)

    def test_non_variate(self):
        assert not isinstance(object(), Variate)

    def test_base_is_abstract(self):
        with pytest.raises(TypeError):
            VariateBase()

    @pytest.mark.parametrize("m", [Normal(), Logistic(), Discrete([-1.0, 1.0], [0.5, 0.5])])
    def test_cumulant_vanishes_at_zero(self, m):
        assert m.cumulant(0.0) == pytest.approx(0.0, abs=1e-15)


class TestEdf:
    def test_generic_integral_without_model_formula(self):
        ref = Normal()
        for s in (0.0, 0.2, 0.7):
            for x in (-1.0, 0.05, 1.3):
                assert edf(DuckNormal(), x, s) == pytest.approx(ref.edf(x, s), abs=1e-8)

    def test_model_formula_used_when_present(self):
        m = Normal(0.5, 2.0)
        assert edf(m, 0.3, 0.1) == m.edf(0.3, 0.1)

    def test_base_default_matches_closed_form(self):
        m = Normal(0.5, 2.0)
        for s in (0.0, 0.3):
            for x in (-1.0, 0.5, 2.0):
                assert VariateBase.edf(m, x, s) == pytest.approx(m.edf(x, s), abs=1e-8)


class TestStandardized:
    M = Standardized(Normal(1.0, 2.0))

    def test_matches_standard_normal_cdf(self):
        ref = Normal()
        for n in (0, 1, 2):
            for s in (0.0, 0.4):
                for x in np.linspace(-2, 2, 9):
                    assert self.M.cdf(x, s, n) == pytest.approx(ref.cdf(x, s, n), abs=1e-14)

    def test_matches_standard_normal_cumulant(self):
        ref = Normal()
        for n in (0, 1, 2, 3):
            for s in (-0.3, 0.0, 0.6):
                assert self.M.cumulant(s, n) == pytest.approx(ref.cumulant(s, n), abs=1e-14)

    def test_edf(self):
        ref = Normal()
        for x in (-1.0, 0.0, 1.5):
            assert self.M.edf(x, 0.25) == pytest.approx(ref.edf(x, 0.25), abs=1e-14)

    def test_standardizes_discrete(self):
        m = Standardized(Discrete([0.0, 1.0, 3.0], [0.2, 0.5, 0.3]))
        assert m.cumulant(0.0) == pytest.approx(0.0, abs=1e-15)
        assert m.cumulant(0.0, 1) == pytest.approx(0.0, abs=1e-15)
        assert m.cumulant(0.0, 2) == pytest.approx(1.0)
        assert m.cdf(50.0, 0.3) == pytest.approx(1.0)


class TestTiltBound:
    def test_unbounded_models(self):
        assert tilt_bound(Normal()) == math.inf
        assert tilt_bound(Discrete([-1.0, 1.0], [0.5, 0.5])) == math.inf
        assert tilt_bound(DuckNormal()) == math.inf

    def test_logistic(self):
        assert tilt_bound(Logistic()) == pytest.approx(math.pi / math.sqrt(3))

    def test_standardized_scales_with_sigma(self):
        # Var(2X) = 4, so Y = 2X/2 is tilted by s/2 inside the wrapped model
        class Wide(Logistic):
            s_max = Logistic.s_max / 2

            def cumulant(self, s, n=0):
                return super().cumulant(2 * s, n) * 2 ** n

            def cdf(self, x, s=0.0, n=0):
                return super().cdf(x / 2, 2 * s, n) / 2 ** n

        m = Standardized(Wide())
        assert m.sigma == pytest.approx(2.0)
        assert m.s_max == pytest.approx(Logistic.s_max)
