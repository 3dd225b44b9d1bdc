"""Bump-and-reprice risk.

Central finite differences on an engine's ``value`` give model-free
estimates of delta, gamma and vega, used to check the analytic Greeks of
any variate, and a scenario grid evaluates value across forwards and vols.
"""

from __future__ import annotations

import numpy as np

from .core import Payoff
from .option import Option

__all__ = [
    "numerical_greeks",
    "scenario_grid",
]


# ---------------------------------------------------------------------------
# Numerical Greeks
# ---------------------------------------------------------------------------

def numerical_greeks(
    engine: Option,
    f: float,
    s: float,
    k: Payoff | float,
    *,
    bump_pct: float = 1e-4,
) -> dict[str, float]:
    """Compute Greeks via central finite differences of ``engine.value``.

    Parameters
    ----------
    engine : Option
        Pricing engine.
    f, s : float
        Forward and total volatility, both positive.
    k : Payoff or float
        Payoff or signed strike.
    bump_pct : float
        Relative bump size for forward and vol (default 1e-4).

    Returns
    -------
    dict[str, float]
        Keys: ``delta``, ``gamma``, ``vega``.
    """
    P0 = float(engine.value(f, s, k))

    # --- Delta & Gamma (forward bump) ---
    eps_f = bump_pct * f
    P_up = float(engine.value(f + eps_f, s, k))
    P_dn = float(engine.value(f - eps_f, s, k))
    delta = (P_up - P_dn) / (2.0 * eps_f)
    gamma = (P_up - 2.0 * P0 + P_dn) / (eps_f ** 2)

    # --- Vega (vol bump) ---
    eps_v = bump_pct * s
    P_vup = float(engine.value(f, s + eps_v, k))
    P_vdn = float(engine.value(f, s - eps_v, k))
    vega = (P_vup - P_vdn) / (2.0 * eps_v)

    return {
        "delta": float(delta),
        "gamma": float(gamma),
        "vega": float(vega),
    }


# ---------------------------------------------------------------------------
# Scenario grid
# ---------------------------------------------------------------------------

def scenario_grid(
    engine: Option,
    k: Payoff | float,
    forward_range: np.ndarray,
    vol_range: np.ndarray,
) -> dict:
    """Evaluate an option across a 2-D (forward × vol) scenario grid.

    Parameters
    ----------
    forward_range : array, shape (n_fwd,)
        Forward values to evaluate.
    vol_range : array, shape (n_vol,)
        Total volatilities to evaluate.

    Returns
    -------
    dict
        ``"forward_values"``, ``"vol_values"``, ``"values"`` (shape n_fwd×n_vol).
    """
    forward_range = np.asarray(forward_range, dtype=float)
    vol_range = np.asarray(vol_range, dtype=float)
    values = np.empty((len(forward_range), len(vol_range)), dtype=engine.dtype)

    for i, f in enumerate(forward_range):
        for j, s in enumerate(vol_range):
            values[i, j] = engine.value(float(f), float(s), k)

    return {
        "forward_values": forward_range.copy(),
        "vol_values": vol_range.copy(),
        "values": values,
    }
