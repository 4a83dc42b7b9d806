# src/phasefield/compiler/codegen/emitter.py
from __future__ import annotations
from typing import Callable, Dict
import ast

import numpy as np

from phasefield.dsl.expr import Expression, Node, Num, Var, Neg, BinOp, Call, VARIABLES

__all__ = ["lower_node", "emit_expression"]

# Binary operators lowered to numpy ufuncs: they accept scalars and arrays and
# return inf/nan on arithmetic faults instead of raising.
_BINOPS = {
    "+": "add",
    "-": "subtract",
    "*": "multiply",
    "/": "divide",
    "^": "power",
}

# Map DSL math names -> np.<fn> (Numba-friendly)
_MATH_FUNCS = {
    "sin": "sin",
    "cos": "cos",
    "tan": "tan",
    "exp": "exp",
    "sqrt": "sqrt",
}


def _np_call(fn: str, *args: ast.expr) -> ast.expr:
    return ast.Call(
        func=ast.Attribute(value=ast.Name(id="np", ctx=ast.Load()), attr=fn, ctx=ast.Load()),
        args=list(args),
        keywords=[],
    )


def lower_node(node: Node) -> ast.expr:
    """Return a Python AST expression computing ``node`` over x, y, a, b."""
    if isinstance(node, Num):
        return ast.Constant(value=float(node.value))
    if isinstance(node, Var):
        return ast.Name(id=node.name, ctx=ast.Load())
    if isinstance(node, Neg):
        return _np_call("negative", lower_node(node.operand))
    if isinstance(node, BinOp):
        return _np_call(_BINOPS[node.op], lower_node(node.left), lower_node(node.right))
    if isinstance(node, Call):
        return _np_call(_MATH_FUNCS[node.func], lower_node(node.arg))
    raise TypeError(f"Unknown expression node: {node!r}")


def emit_expression(expr: Expression, *, name: str = "_expr") -> Callable:
    """
    Emit a single function:
        def _expr(x, y, a, b): return <lowered tree>

    The function is pure; callers are expected to pass floats or float arrays
    and to suppress numpy floating-point warnings.
    """
    # placeholder body is swapped for the lowered tree
    mod = ast.parse(f"def {name}({', '.join(VARIABLES)}):\n    return 0.0\n")
    mod.body[0].body[0].value = lower_node(expr.root)
    ast.fix_missing_locations(mod)
    ns: Dict[str, object] = {"np": np}
    exec(compile(mod, f"<formula {expr.source}>", "exec"), ns, ns)
    fn = ns[name]
    fn.__doc__ = expr.source
    return fn
