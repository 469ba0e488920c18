"""
Unification for the Hindley-Milner type system
"""

import logging

from sfl.errors import ArityMismatch, InfiniteType, TypeMismatch
from sfl.substitution import EMPTY, Substitution
from sfl.type_defs import Type, TypeCon, TypeFun, TypeVar, occurs_in

logger = logging.getLogger(__name__)


def bind(var: TypeVar, t: Type) -> Substitution:
    """Bind `var` to `t` after the occurs check"""
    if t == var:
        return EMPTY
    if occurs_in(var, t):
        raise InfiniteType(var, t)
    return Substitution.singleton(var, t)


def unify(expected: Type, actual: Type) -> Substitution:
    """Most general unifier of two types.

    Raises `TypeMismatch`, `ArityMismatch` or `InfiniteType`; errors are
    reported with `expected` and `actual` in the order given.
    """
    logger.debug("unify %s ~ %s", expected, actual)

    if isinstance(expected, TypeVar):
        return bind(expected, actual)
    if isinstance(actual, TypeVar):
        return bind(actual, expected)

    if isinstance(expected, TypeCon) and isinstance(actual, TypeCon):
        if expected.name == actual.name:
            return EMPTY
        raise TypeMismatch(expected, actual)

    if isinstance(expected, TypeFun) and isinstance(actual, TypeFun):
        if expected.arity != actual.arity:
            raise ArityMismatch(expected.arity, actual.arity)
        subst = EMPTY
        for p1, p2 in zip(expected.params, actual.params):
            s = unify(subst.apply(p1), subst.apply(p2))
            subst = s.compose(subst)
        s = unify(subst.apply(expected.result), subst.apply(actual.result))
        return s.compose(subst)

    raise TypeMismatch(expected, actual)
