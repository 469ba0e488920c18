"""
Algorithm W over the AST.

`Inferencer.infer` returns a substitution and a type for an expression;
`Inferencer.check_statement` returns a substitution and the environment
the statement leaves behind for whatever follows it. All mutable state
(the fresh-variable supply and the per-node type log) lives on the
inferencer, one instance per inference run.
"""

import logging
from typing import AbstractSet, Dict, Mapping, Optional, Sequence, Tuple

import sfl.sfl_ast as ast
from sfl.annotations import AnnotationResolver
from sfl.environment import TypeEnv, generalize, instantiate
from sfl.errors import BranchMismatch, InferenceError, ReturnTypeMismatch, UnboundIdentifier
from sfl.substitution import EMPTY, Substitution
from sfl.type_defs import (
    BASE_TYPES, BOOL, NUMBER, UNIT, FreshVarSupply, Scheme, Type, TypeFun, TypeVar,
)
from sfl.unify import unify

logger = logging.getLogger(__name__)

_EQ = TypeVar(-1)

OPERATOR_SCHEMES: Mapping[str, Scheme] = {
    '+': Scheme.mono(TypeFun((NUMBER, NUMBER), NUMBER)),
    '-': Scheme.mono(TypeFun((NUMBER, NUMBER), NUMBER)),
    '*': Scheme.mono(TypeFun((NUMBER, NUMBER), NUMBER)),
    '/': Scheme.mono(TypeFun((NUMBER, NUMBER), NUMBER)),
    '<': Scheme.mono(TypeFun((NUMBER, NUMBER), BOOL)),
    '<=': Scheme.mono(TypeFun((NUMBER, NUMBER), BOOL)),
    '>': Scheme.mono(TypeFun((NUMBER, NUMBER), BOOL)),
    '>=': Scheme.mono(TypeFun((NUMBER, NUMBER), BOOL)),
    '==': Scheme(frozenset({_EQ}), TypeFun((_EQ, _EQ), BOOL)),
    '!=': Scheme(frozenset({_EQ}), TypeFun((_EQ, _EQ), BOOL)),
}

Inferred = Tuple[Substitution, Type]


class Inferencer:
    def __init__(self, base_types: AbstractSet[str] = BASE_TYPES,
                 supply: Optional[FreshVarSupply] = None,
                 operators: Mapping[str, Scheme] = OPERATOR_SCHEMES):
        self.supply = supply or FreshVarSupply()
        self.annotations = AnnotationResolver(base_types, self.supply)
        self.operators = operators
        # Types as inferred, before the enclosing item's final substitution
        self.node_types: Dict[ast.Node, Type] = {}

    def take_node_types(self) -> Dict[ast.Node, Type]:
        """Return the types logged since the last call and start a new log"""
        logged, self.node_types = self.node_types, {}
        return logged

    def record(self, node: ast.Node, t: Type) -> None:
        self.node_types[node] = t

    def _unify(self, expected: Type, actual: Type, node: ast.Node) -> Substitution:
        try:
            return unify(expected, actual)
        except InferenceError as err:
            raise err.at(node)

    # Expressions

    def infer(self, expr: ast.Expression, env: TypeEnv) -> Inferred:
        method = getattr(self, f"infer_{expr.__class__.__name__}", None)
        if method is None:
            raise TypeError(f"cannot infer the type of {expr.__class__.__name__}")
        subst, t = method(expr, env)
        self.record(expr, t)
        return subst, t

    def infer_IntLiteral(self, node: ast.IntLiteral, env: TypeEnv) -> Inferred:
        return EMPTY, NUMBER

    def infer_BoolLiteral(self, node: ast.BoolLiteral, env: TypeEnv) -> Inferred:
        return EMPTY, BOOL

    def infer_Identifier(self, node: ast.Identifier, env: TypeEnv) -> Inferred:
        scheme = env.lookup(node.name, node)
        return EMPTY, instantiate(scheme, self.supply)

    def infer_BinaryOperation(self, node: ast.BinaryOperation, env: TypeEnv) -> Inferred:
        scheme = self.operators.get(node.operator)
        if scheme is None:
            raise UnboundIdentifier(node.operator, node)
        op_type = instantiate(scheme, self.supply)
        subst = self._infer_arguments((node.left, node.right), op_type.params, EMPTY, env)
        return subst, subst.apply(op_type.result)

    def infer_FunctionCall(self, node: ast.FunctionCall, env: TypeEnv) -> Inferred:
        s1, callee_type = self.infer(node.callee, env)
        # Pin the arity first so a wrong argument count is reported as such
        params = self.supply.fresh_many(len(node.arguments))
        result = self.supply.fresh()
        s2 = self._unify(callee_type, TypeFun(params, result), node)
        subst = self._infer_arguments(node.arguments, params, s2.compose(s1), env)
        return subst, subst.apply(result)

    def _infer_arguments(self, arguments: Sequence[ast.Expression], param_types: Sequence[Type],
                         subst: Substitution, env: TypeEnv) -> Substitution:
        """Infer each argument left to right and unify it with its parameter"""
        for arg, param in zip(arguments, param_types):
            s, arg_type = self.infer(arg, subst.apply_env(env))
            subst = s.compose(subst)
            s = self._unify(subst.apply(param), arg_type, arg)
            subst = s.compose(subst)
        return subst

    def infer_Lambda(self, node: ast.Lambda, env: TypeEnv) -> Inferred:
        scope: Dict[str, TypeVar] = {}
        param_types = tuple(self.annotations.resolve(p.type_annotation, scope) for p in node.params)
        inner = env.extend_many({p.name: Scheme.mono(t) for p, t in zip(node.params, param_types)})
        for param, t in zip(node.params, param_types):
            self.record(param, t)
        subst, body_type = self.infer(node.body, inner)
        return subst, TypeFun(subst.apply_all(param_types), body_type)

    def infer_IfExpression(self, node: ast.IfExpression, env: TypeEnv) -> Inferred:
        s, cond_type = self.infer(node.condition, env)
        subst = self._unify(BOOL, cond_type, node.condition).compose(s)

        s, then_type = self.infer(node.then_branch, subst.apply_env(env))
        subst = s.compose(subst)
        s, else_type = self.infer(node.else_branch, subst.apply_env(env))
        subst = s.compose(subst)

        then_type = subst.apply(then_type)
        try:
            s = unify(then_type, else_type)
        except InferenceError as err:
            raise BranchMismatch(then_type, else_type, node) from err
        subst = s.compose(subst)
        return subst, subst.apply(then_type)

    def infer_Block(self, node: ast.Block, env: TypeEnv) -> Inferred:
        subst = EMPTY
        for stmt in node.statements:
            s, env = self.check_statement(stmt, env)
            subst = s.compose(subst)
        if node.result is None:
            return subst, UNIT
        s, t = self.infer(node.result, env)
        return s.compose(subst), t

    # Statements

    def check_statement(self, stmt: ast.Statement, env: TypeEnv) -> Tuple[Substitution, TypeEnv]:
        method = getattr(self, f"check_{stmt.__class__.__name__}", None)
        if method is None:
            raise TypeError(f"cannot check {stmt.__class__.__name__}")
        return method(stmt, env)

    def check_ExpressionStatement(self, node: ast.ExpressionStatement,
                                  env: TypeEnv) -> Tuple[Substitution, TypeEnv]:
        subst, t = self.infer(node.expression, env)
        self.record(node, t)
        return subst, subst.apply_env(env)

    def check_LetStatement(self, node: ast.LetStatement, env: TypeEnv) -> Tuple[Substitution, TypeEnv]:
        subst, t = self.infer(node.value, env)
        if node.type_annotation is not None:
            declared = self.annotations.resolve(node.type_annotation, {})
            s = self._unify(declared, t, node.value)
            subst = s.compose(subst)
            t = s.apply(t)

        outer = subst.apply_env(env)
        scheme = generalize(outer, t)
        self.record(node, t)
        logger.debug("let %s : %s", node.name, scheme)
        return subst, outer.extend(node.name, scheme)

    def signature(self, node: ast.FunctionDefinition) -> TypeFun:
        """Function type from the annotations; omitted positions get fresh variables"""
        scope: Dict[str, TypeVar] = {}
        params = tuple(self.annotations.resolve(p.type_annotation, scope) for p in node.params)
        return TypeFun(params, self.annotations.resolve(node.return_type, scope))

    def check_FunctionDefinition(self, node: ast.FunctionDefinition,
                                 env: TypeEnv) -> Tuple[Substitution, TypeEnv]:
        fn_type = self.signature(node)

        # The function is monomorphic inside its own body
        inner = env.extend(node.name, Scheme.mono(fn_type))
        inner = inner.extend_many({p.name: Scheme.mono(t) for p, t in zip(node.params, fn_type.params)})
        for param, t in zip(node.params, fn_type.params):
            self.record(param, t)

        subst, body_type = self.infer(node.body, inner)
        declared = subst.apply(fn_type.result)
        try:
            s = unify(declared, body_type)
        except InferenceError as err:
            raise ReturnTypeMismatch(declared, body_type, node.body.result or node) from err
        subst = s.compose(subst)

        # Generalize against the environment the definition appears in
        outer = subst.apply_env(env)
        final = subst.apply(fn_type)
        scheme = generalize(outer, final)
        self.record(node, final)
        logger.debug("def %s : %s", node.name, scheme)
        return subst, outer.extend(node.name, scheme)
