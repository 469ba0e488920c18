"""
Tree-walking evaluator for checked programs.

Values are Python ints (`number`), bools (`bool`), None (unit) and
`Closure` objects. The evaluator assumes the program passed type checking
and only guards against failures no type can rule out, such as division by
zero.
"""

import logging
from collections import ChainMap
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Sequence, Tuple

import sfl.sfl_ast as ast
from sfl.errors import EvaluationError

logger = logging.getLogger(__name__)

Scope = ChainMap


@dataclass(eq=False)
class Closure:
    name: str
    params: Tuple[str, ...]
    body: ast.Expression
    scope: Scope

    def __repr__(self) -> str:
        return f"<function {self.name}/{len(self.params)}>"


def _divide(left: int, right: int, node: ast.Node) -> int:
    if right == 0:
        raise EvaluationError("division by zero", node)
    return left // right


BINARY_OPERATORS: Mapping[str, Callable[[Any, Any], Any]] = {
    '+': lambda a, b: a + b,
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
}


def format_value(value: Any) -> str:
    if value is None:
        return "()"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value) if not isinstance(value, Closure) else repr(value)


class Interpreter:
    def run(self, program: ast.Program) -> Any:
        """Evaluate every top-level item, then the program's entry point.

        The entry point is the trailing expression if there is one, else a
        call to a zero-parameter `main`; a program with neither yields unit.
        """
        scope: Scope = ChainMap({})
        for stmt in program.statements:
            scope = self.execute(stmt, scope)

        if program.result is not None:
            return self.evaluate(program.result, scope)
        main = scope.get('main')
        if isinstance(main, Closure) and not main.params:
            logger.debug("no trailing expression, calling main()")
            return self.apply(main, (), program)
        return None

    # Statements

    def execute(self, stmt: ast.Statement, scope: Scope) -> Scope:
        """Run one statement and return the scope visible to the statements after it.

        Bindings extend `scope` with a new child instead of writing into it, so
        closures created earlier keep seeing the bindings they were created with.
        """
        if isinstance(stmt, ast.LetStatement):
            return scope.new_child({stmt.name: self.evaluate(stmt.value, scope)})
        if isinstance(stmt, ast.FunctionDefinition):
            # The closure captures its own frame, so it sees itself
            frame: Dict[str, Any] = {}
            inner = scope.new_child(frame)
            frame[stmt.name] = Closure(stmt.name, tuple(p.name for p in stmt.params), stmt.body, inner)
            return inner
        if isinstance(stmt, ast.ExpressionStatement):
            self.evaluate(stmt.expression, scope)
            return scope
        raise TypeError(f"cannot execute {stmt.__class__.__name__}")

    # Expressions

    def evaluate(self, expr: ast.Expression, scope: Scope) -> Any:
        method = getattr(self, f"eval_{expr.__class__.__name__}", None)
        if method is None:
            raise TypeError(f"cannot evaluate {expr.__class__.__name__}")
        return method(expr, scope)

    def eval_IntLiteral(self, node: ast.IntLiteral, scope: Scope) -> int:
        return node.value

    def eval_BoolLiteral(self, node: ast.BoolLiteral, scope: Scope) -> bool:
        return node.value

    def eval_Identifier(self, node: ast.Identifier, scope: Scope) -> Any:
        try:
            return scope[node.name]
        except KeyError:
            raise EvaluationError(f"'{node.name}' is not defined here", node) from None

    def eval_BinaryOperation(self, node: ast.BinaryOperation, scope: Scope) -> Any:
        left = self.evaluate(node.left, scope)
        right = self.evaluate(node.right, scope)
        if node.operator == '/':
            return _divide(left, right, node)
        return BINARY_OPERATORS[node.operator](left, right)

    def eval_FunctionCall(self, node: ast.FunctionCall, scope: Scope) -> Any:
        callee = self.evaluate(node.callee, scope)
        args = tuple(self.evaluate(arg, scope) for arg in node.arguments)
        return self.apply(callee, args, node)

    def eval_Lambda(self, node: ast.Lambda, scope: Scope) -> Closure:
        return Closure("<lambda>", tuple(p.name for p in node.params), node.body, scope)

    def eval_IfExpression(self, node: ast.IfExpression, scope: Scope) -> Any:
        if self.evaluate(node.condition, scope):
            return self.evaluate(node.then_branch, scope)
        return self.evaluate(node.else_branch, scope)

    def eval_Block(self, node: ast.Block, scope: Scope) -> Any:
        inner = scope
        for stmt in node.statements:
            inner = self.execute(stmt, inner)
        if node.result is None:
            return None
        return self.evaluate(node.result, inner)

    def apply(self, callee: Any, args: Sequence[Any], node: ast.Node) -> Any:
        if not isinstance(callee, Closure):
            raise EvaluationError(f"{format_value(callee)} is not a function", node)
        if len(args) != len(callee.params):
            raise EvaluationError(
                f"{callee.name} takes {len(callee.params)} argument(s) but got {len(args)}", node)

        frame: Dict[str, Any] = dict(zip(callee.params, args))
        return self.evaluate(callee.body, callee.scope.new_child(frame))


def run_program(program: ast.Program) -> Any:
    try:
        return Interpreter().run(program)
    except RecursionError:
        raise EvaluationError("maximum recursion depth exceeded", program) from None
