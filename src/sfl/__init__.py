"""Hindley-Milner type inference for a small functional language.

Submodules:
- sfl_ast: immutable AST with source locations and JSON dumping
- lexer, parser: ply front end producing the AST
- type_defs: type terms, schemes, fresh variables and type printing
- substitution, unify, environment: the unification toolkit
- annotations: surface type annotations to types
- inference: Algorithm W over every node kind
- type_checker: whole-program driver with per-definition error collection
- interpreter: evaluator for checked programs
- sfl: options, toolchain facade and CLI

Python 3.10+
"""

from . import errors
from . import sfl_ast as ast
from . import type_defs
from . import substitution
from . import unify
from . import environment
from . import annotations
from . import inference
from . import type_checker
from . import interpreter

__all__ = [
    "errors",
    "ast",
    "type_defs",
    "substitution",
    "unify",
    "environment",
    "annotations",
    "inference",
    "type_checker",
    "interpreter",
]
