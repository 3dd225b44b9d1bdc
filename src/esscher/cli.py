import argparse
import sys

import numpy as np
from loguru import logger

from .core import DigitalCall, DigitalPut, as_payoff
from .errors import PricingError
from .logistic import Logistic
from .normal import Normal
from .option import Option

MODELS = {
    "normal": Normal,
    "logistic": Logistic,
}

DTYPES = {
    "float64": np.float64,
    "float32": np.float32,
}


def _payoff(args):
    p = as_payoff(args.k)
    if args.digital:
        return DigitalCall(p.strike) if p.is_call else DigitalPut(p.strike)
    return p


def _engine(args):
    return Option(MODELS[args.model](), dtype=DTYPES[args.dtype])


def add_common(parser: argparse.ArgumentParser):
    parser.add_argument("--f", type=float, required=True, help="forward")
    parser.add_argument("--k", type=float, required=True, help="strike; negative for a put")
    parser.add_argument("--model", choices=sorted(MODELS), default="normal")
    parser.add_argument("--dtype", choices=sorted(DTYPES), default="float64")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")


def cmd_value(args):
    px = _engine(args).value(args.f, args.s, _payoff(args))
    print(f"{px:.10f}")


def cmd_greeks(args):
    g = _engine(args).greeks(args.f, args.s, _payoff(args))
    for key, val in g.items():
        print(f"{key:<6} {val:.10f}")


def cmd_implied(args):
    s = _engine(args).implied(args.f, args.price, as_payoff(args.k),
                              s0=args.s0, max_iter=args.max_iter, tol=args.tol)
    print(f"{s:.10f}")


def main(argv=None):
    p = argparse.ArgumentParser(prog="esscher", description="Option values under Esscher transformed variates")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_val = sub.add_parser("value", help="option value")
    add_common(p_val)
    p_val.add_argument("--s", type=float, required=True, help="total volatility")
    p_val.add_argument("--digital", action="store_true")
    p_val.set_defaults(func=cmd_value)

    p_gr = sub.add_parser("greeks", help="value, delta, gamma and vega")
    add_common(p_gr)
    p_gr.add_argument("--s", type=float, required=True, help="total volatility")
    p_gr.add_argument("--digital", action="store_true")
    p_gr.set_defaults(func=cmd_greeks)

    p_iv = sub.add_parser("implied", help="implied total volatility")
    add_common(p_iv)
    p_iv.add_argument("--price", type=float, required=True)
    p_iv.add_argument("--s0", type=float, default=None, help="initial guess")
    p_iv.add_argument("--tol", type=float, default=None)
    p_iv.add_argument("--max-iter", dest="max_iter", type=int, default=None)
    p_iv.set_defaults(func=cmd_implied)

    args = p.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")
    logger.enable("esscher")
    try:
        args.func(args)
    except PricingError as e:
        p.error(str(e))
    finally:
        logger.disable("esscher")

if __name__ == "__main__":
    main()
