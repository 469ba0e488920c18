"""AST for the small functional language.

Nodes are frozen and compare by identity, so a parsed tree can be used as a
read-only key space for side tables (see `type_checker.TypeTable`). Every
node carries an optional `SourceLocation` supplied by the parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional, Tuple, Union
import json

from sfl.errors import SourceLocation


@dataclass(frozen=True, eq=False)
class Node:
    location: Optional[SourceLocation] = field(default=None, kw_only=True)


# Type annotations

@dataclass(frozen=True, eq=False)
class TypeExpression(Node):
    pass


@dataclass(frozen=True, eq=False)
class TypeName(TypeExpression):
    """A nullary type constructor such as `number`"""
    name: str


@dataclass(frozen=True, eq=False)
class TypeVariableName(TypeExpression):
    """A named type variable written `'a`"""
    name: str


@dataclass(frozen=True, eq=False)
class FunctionTypeExpression(TypeExpression):
    params: Tuple[TypeExpression, ...]
    result: TypeExpression


# Expressions

@dataclass(frozen=True, eq=False)
class Expression(Node):
    pass


@dataclass(frozen=True, eq=False)
class IntLiteral(Expression):
    value: int


@dataclass(frozen=True, eq=False)
class BoolLiteral(Expression):
    value: bool


@dataclass(frozen=True, eq=False)
class Identifier(Expression):
    name: str


@dataclass(frozen=True, eq=False)
class BinaryOperation(Expression):
    left: Expression
    operator: str
    right: Expression


@dataclass(frozen=True, eq=False)
class FunctionCall(Expression):
    callee: Expression
    arguments: Tuple[Expression, ...]


@dataclass(frozen=True, eq=False)
class Parameter(Node):
    name: str
    type_annotation: Optional[TypeExpression] = None


@dataclass(frozen=True, eq=False)
class Lambda(Expression):
    params: Tuple[Parameter, ...]
    body: Expression


@dataclass(frozen=True, eq=False)
class Block(Expression):
    """Statements followed by an optional trailing expression.

    The block's value is the trailing expression; without one it is unit.
    """
    statements: Tuple[Statement, ...]
    result: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class IfExpression(Expression):
    condition: Expression
    then_branch: Block
    else_branch: Union[Block, IfExpression]


# Statements

@dataclass(frozen=True, eq=False)
class Statement(Node):
    pass


@dataclass(frozen=True, eq=False)
class LetStatement(Statement):
    name: str
    value: Expression
    type_annotation: Optional[TypeExpression] = None


@dataclass(frozen=True, eq=False)
class FunctionDefinition(Statement):
    name: str
    params: Tuple[Parameter, ...]
    return_type: Optional[TypeExpression]
    body: Block


@dataclass(frozen=True, eq=False)
class ExpressionStatement(Statement):
    expression: Expression


@dataclass(frozen=True, eq=False)
class Program(Node):
    """A source file: top-level items and an optional entry expression"""
    statements: Tuple[Statement, ...]
    result: Optional[Expression] = None
    source_file: str = "<unknown>"


def children(node: Node) -> Tuple[Node, ...]:
    """Direct child nodes in source order"""
    kids = []
    for f in fields(node):
        if f.name == 'location':
            continue
        value = getattr(node, f.name)
        if isinstance(value, Node):
            kids.append(value)
        elif isinstance(value, tuple):
            kids.extend(v for v in value if isinstance(v, Node))
    return tuple(kids)


def walk(node: Node):
    """Yield `node` and all of its descendants, parents first"""
    yield node
    for child in children(node):
        yield from walk(child)


def to_json_obj(node: Any) -> Any:
    if isinstance(node, Node):
        obj = {"kind": node.__class__.__name__}
        if node.location is not None:
            obj["location"] = {"line": node.location.line, "column": node.location.column}
        for f in fields(node):
            if f.name in ('location', 'source_file'):
                continue
            obj[f.name] = to_json_obj(getattr(node, f.name))
        return obj
    if isinstance(node, tuple):
        return [to_json_obj(v) for v in node]
    return node


def dump_ast_json(root: Node) -> str:
    """Pretty JSON, used by `--dump-ast` and golden comparisons in tests."""
    return json.dumps(to_json_obj(root), indent=2, sort_keys=True)
