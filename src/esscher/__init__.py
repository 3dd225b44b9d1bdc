# esscher: option values and Greeks under Esscher transformed variates
# Public API

from loguru import logger

# Payoffs and configuration
from .core import Payoff, Call, Put, DigitalCall, DigitalPut, as_payoff, SolverConfig
from .errors import PricingError, DomainError, ConvergenceError

# Variates
from .variate import Variate, VariateBase, Standardized, edf, tilt_bound
from .normal import Normal, hermite
from .logistic import Logistic
from .discrete import Discrete

# Engine (module-level functions use the Black model)
from .option import Option, moneyness, value, delta, gamma, vega, greeks, implied

# Risk
from .risk import numerical_greeks, scenario_grid

__all__ = [
    # Payoffs and configuration
    "Payoff", "Call", "Put", "DigitalCall", "DigitalPut", "as_payoff",
    "SolverConfig",
    # Errors
    "PricingError", "DomainError", "ConvergenceError",
    # Variates
    "Variate", "VariateBase", "Standardized", "edf", "tilt_bound",
    "Normal", "hermite", "Logistic", "Discrete",
    # Engine
    "Option", "moneyness", "value", "delta", "gamma", "vega", "greeks", "implied",
    # Risk
    "numerical_greeks", "scenario_grid",
]

__version__ = "0.1.0"

logger.disable("esscher")
