"""Unifier properties, written as plain pytest functions."""

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).parent.parent / 'src'))

from sfl.errors import ArityMismatch, InfiniteType, TypeMismatch
from sfl.type_defs import BOOL, NUMBER, UNIT, TypeCon, TypeFun, TypeVar
from sfl.unify import unify

a, b, c = TypeVar(0), TypeVar(1), TypeVar(2)

PAIRS = [
    (a, NUMBER),
    (NUMBER, a),
    (TypeFun((a, NUMBER), b), TypeFun((BOOL, c), c)),
    (TypeFun((a,), a), TypeFun((b,), TypeFun((), UNIT))),
    (TypeFun((TypeFun((a,), b),), b), TypeFun((TypeFun((NUMBER,), c),), BOOL)),
]


@pytest.mark.parametrize("t1, t2", PAIRS)
def test_unifier_makes_types_equal(t1, t2):
    s = unify(t1, t2)
    assert s.apply(t1) == s.apply(t2)


@pytest.mark.parametrize("t1, t2", PAIRS)
def test_unification_is_symmetric(t1, t2):
    s1 = unify(t1, t2)
    s2 = unify(t2, t1)
    assert s1.apply(t1) == s2.apply(t1)


def test_identical_types_need_no_bindings():
    assert len(unify(TypeFun((a, NUMBER), a), TypeFun((a, NUMBER), a))) == 0
    assert len(unify(a, a)) == 0


def test_constant_mismatch():
    with pytest.raises(TypeMismatch) as info:
        unify(NUMBER, BOOL)
    assert info.value.expected == NUMBER
    assert info.value.actual == BOOL
    assert info.value.node is None


def test_function_against_constant():
    with pytest.raises(TypeMismatch):
        unify(TypeFun((), NUMBER), NUMBER)


def test_arity_mismatch_reports_counts():
    with pytest.raises(ArityMismatch) as info:
        unify(TypeFun((NUMBER, NUMBER), NUMBER), TypeFun((a,), b))
    assert (info.value.expected, info.value.actual) == (2, 1)


def test_occurs_check():
    with pytest.raises(InfiniteType) as info:
        unify(a, TypeFun((a,), NUMBER))
    assert info.value.var == a


def test_occurs_check_through_earlier_bindings():
    # a := b from the first parameter turns the second into b ~ (b) -> b
    with pytest.raises(InfiniteType):
        unify(TypeFun((a, b), b), TypeFun((b, TypeFun((a,), a)), b))


def test_substitution_threads_through_parameters():
    s = unify(TypeFun((a, a), a), TypeFun((NUMBER, b), c))
    assert s.apply(b) == NUMBER
    assert s.apply(c) == NUMBER


def test_distinct_constructor_names():
    with pytest.raises(TypeMismatch):
        unify(TypeCon("string"), TypeCon("number"))
