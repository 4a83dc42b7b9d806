# src/phasefield/cli.py
"""Command line entry point: ``phasefield check|eval|analyze``."""
from __future__ import annotations
import argparse
import sys
from typing import List, Sequence

from phasefield.analysis.fixed_points import FixedPointResult, locate
from phasefield.analysis.linearize import format_eigenvalue, format_number
from phasefield.dsl.expr import parse
from phasefield.dsl.system import load_system
from phasefield.errors import PhasefieldError
from phasefield.runtime.config import with_overrides
from phasefield.runtime.evaluator import evaluate

__all__ = ["main", "build_parser"]


def _err(msg: str) -> None:
    print(msg, file=sys.stderr)


def _cmd_check(args) -> int:
    code = 0
    for text in args.formulas:
        try:
            expr = parse(text)
        except PhasefieldError as exc:
            _err(f"Error: {exc}")
            code = 1
            continue
        names = ", ".join(sorted(expr.names())) or "-"
        print(f"OK  {expr.source}  (uses: {names})")
    return code


def _cmd_eval(args) -> int:
    try:
        expr = parse(args.formula)
    except PhasefieldError as exc:
        _err(f"Error: {exc}")
        return 1
    print(evaluate(expr, args.x, args.y, args.a, args.b))
    return 0


def format_result(result: FixedPointResult) -> List[str]:
    """Render a FixedPointResult as text lines."""
    if result.error:
        return [f"Error: {result.error}"]
    lines = []
    for i, fp in enumerate(result.points, 1):
        if fp.eigenvalues is None:
            eig = "NaN, NaN"
        else:
            eig = ", ".join(format_eigenvalue(lam) for lam in fp.eigenvalues)
        lines.append(
            f"{i:>3}  ({format_number(fp.x)}, {format_number(fp.y)})  "
            f"eig: {eig}  {fp.stability}"
        )
    if result.note:
        lines.append(result.note)
    return lines


def _cmd_analyze(args) -> int:
    try:
        spec = load_system(args.system)
        cfg = spec.analysis
        if args.grid_size is not None:
            cfg = with_overrides(cfg, {"grid_size": args.grid_size}, where="--grid-size")
    except PhasefieldError as exc:
        _err(f"Error: {exc}")
        return 1

    system = spec.system
    title = system.label or "system"
    print(f"{title}: dx = {system.dx.source}, dy = {system.dy.source}, a = {system.a}, b = {system.b}")
    d = system.domain
    print(f"domain: x in [{d.x_min}, {d.x_max}], y in [{d.y_min}, {d.y_max}]")
    result = locate(system, cfg)
    for line in format_result(result):
        print(line)
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phasefield", description="Planar vector field tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="parse formulas and report errors")
    p_check.add_argument("formulas", nargs="+", metavar="FORMULA")
    p_check.set_defaults(func=_cmd_check)

    p_eval = sub.add_parser("eval", help="evaluate a formula at one point")
    p_eval.add_argument("formula", metavar="FORMULA")
    p_eval.add_argument("--x", type=float, default=0.0)
    p_eval.add_argument("--y", type=float, default=0.0)
    p_eval.add_argument("--a", type=float, default=0.0)
    p_eval.add_argument("--b", type=float, default=0.0)
    p_eval.set_defaults(func=_cmd_eval)

    p_an = sub.add_parser("analyze", help="locate and classify fixed points")
    p_an.add_argument("system", metavar="SYSTEM", help="TOML path or 'inline:...'")
    p_an.add_argument("--grid-size", type=int, default=None)
    p_an.set_defaults(func=_cmd_analyze)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))
