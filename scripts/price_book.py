#!/usr/bin/env python3
"""Value a book of European options and back out implied volatilities.

Usage
-----
    python scripts/price_book.py --input book.csv --output marks.csv
    python scripts/price_book.py --input book.csv --output marks.json --greeks

Input CSV format
----------------
    id,f,k,kind,model,s,price
    1,100,100,call,normal,0.1,
    2,100,95,put,logistic,0.2,
    3,100,105,digital_call,normal,0.1,
    4,100,100,put,normal,,3.98776
    5,100,110,call,normal,0.2,4.1

``s`` is total volatility and ``price`` a quoted value; each row needs at
least one of them.  A row with a price gets an ``implied`` column.  Greeks
are taken at ``s`` when given, otherwise at the implied volatility, and a
row carrying both reports ``price - value`` as ``edge``.

Output
------
    CSV or JSON with columns: id, model, kind, value, implied, edge,
    delta, gamma, vega, error
"""

from __future__ import annotations
import argparse
import csv
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from esscher import (
    Option, Normal, Logistic, Call, Put, DigitalCall, DigitalPut, PricingError,
)

PAYOFFS = {
    "call": Call,
    "put": Put,
    "digital_call": DigitalCall,
    "digital_put": DigitalPut,
}

ENGINES = {
    "normal": Option(Normal()),
    "logistic": Option(Logistic()),
}

FIELDS = ("id", "model", "kind", "value", "implied", "edge", "delta", "gamma", "vega", "error")


def _field(row: dict, name: str) -> float | None:
    text = (row.get(name) or "").strip()
    return float(text) if text else None


def mark_row(row: dict, compute_greeks: bool) -> dict:
    """Mark one book row; raises on bad input or a failed solve."""
    kind = (row.get("kind") or "call").strip().lower()
    model = (row.get("model") or "normal").strip().lower()
    if kind not in PAYOFFS:
        raise ValueError(f"unknown kind {kind!r}")
    if model not in ENGINES:
        raise ValueError(f"unknown model {model!r}")
    engine = ENGINES[model]
    payoff = PAYOFFS[kind](float(row["k"]))
    f = float(row["f"])
    s = _field(row, "s")
    price = _field(row, "price")
    if s is None and price is None:
        raise ValueError("row needs a volatility, a price, or both")

    mark = {"id": row.get("id", ""), "model": model, "kind": kind}
    if price is not None:
        mark["implied"] = float(engine.implied(f, price, payoff))
    if s is not None:
        mark["value"] = float(engine.value(f, s, payoff))
        if price is not None:
            mark["edge"] = price - mark["value"]
    else:
        mark["value"] = price

    if compute_greeks:
        at = s if s is not None else mark["implied"]
        g = engine.greeks(f, at, payoff)
        mark.update({key: float(g[key]) for key in ("delta", "gamma", "vega")})
    return mark


def mark_book(rows: list[dict], compute_greeks: bool) -> list[dict]:
    marks = []
    for i, row in enumerate(rows):
        try:
            marks.append(mark_row(row, compute_greeks))
        except (PricingError, ValueError, KeyError) as e:
            print(f"  row {i} (id={row.get('id', '?')}): {type(e).__name__}: {e}")
            marks.append({"id": row.get("id", ""), "error": str(e)})
    return marks


def write_marks(marks: list[dict], path: Path) -> None:
    if path.suffix == ".json":
        with open(path, "w") as out:
            json.dump(marks, out, indent=2)
        return
    # only the columns some row filled in, in FIELDS order
    used = [name for name in FIELDS if any(name in m for m in marks)]
    with open(path, "w", newline="") as out:
        writer = csv.DictWriter(out, fieldnames=used)
        writer.writeheader()
        writer.writerows(marks)


def main():
    parser = argparse.ArgumentParser(
        description="Value a book of European options and back out implied volatilities."
    )
    parser.add_argument("--input", required=True, help="Path to book CSV")
    parser.add_argument("--output", required=True, help="Output path (.csv or .json)")
    parser.add_argument("--greeks", action="store_true", help="Add delta, gamma and vega")
    args = parser.parse_args()

    with open(args.input, newline="") as book:
        rows = list(csv.DictReader(book))
    print(f"Marking {len(rows)} positions...")

    marks = mark_book(rows, args.greeks)
    write_marks(marks, Path(args.output))

    failed = sum("error" in m for m in marks)
    solved = sum("implied" in m for m in marks)
    print(f"Wrote {args.output}: {len(marks) - failed} marked, {solved} implied, {failed} failed")


if __name__ == "__main__":
    main()
