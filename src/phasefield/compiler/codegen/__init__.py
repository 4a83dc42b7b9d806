# src/phasefield/compiler/codegen/__init__.py
from .emitter import emit_expression, lower_node

__all__ = ["emit_expression", "lower_node"]
