import unittest
from pathlib import Path
import sys
sys.path.append(str(Path(__file__).parent.parent / 'src'))

from sfl.environment import TypeEnv, generalize, instantiate
from sfl.errors import UnboundIdentifier
from sfl.type_defs import (
    BOOL, NUMBER, FreshVarSupply, Scheme, TypeFun, TypeVar, free_type_vars, pretty,
)

a, b = TypeVar(0), TypeVar(1)


class TestTypeEnv(unittest.TestCase):
    def test_lookup_unbound(self):
        with self.assertRaises(UnboundIdentifier) as cm:
            TypeEnv().lookup('undefinedName')
        self.assertEqual(cm.exception.name, 'undefinedName')

    def test_extend_shadows_without_mutating(self):
        outer = TypeEnv({'x': Scheme.mono(NUMBER)})
        inner = outer.extend('x', Scheme.mono(BOOL))
        self.assertEqual(inner.lookup('x').body, BOOL)
        self.assertEqual(outer.lookup('x').body, NUMBER)

    def test_extend_many(self):
        env = TypeEnv().extend_many({'a': Scheme.mono(NUMBER), 'b': Scheme.mono(BOOL)})
        self.assertEqual(sorted(env), ['a', 'b'])
        self.assertEqual(len(env), 2)
        self.assertIn('a', env)

    def test_free_type_vars_skip_quantified(self):
        env = TypeEnv({
            'x': Scheme.mono(a),
            'id': Scheme(frozenset({b}), TypeFun((b,), b)),
        })
        self.assertEqual(env.free_type_vars(), {a})


class TestGeneralization(unittest.TestCase):
    def setUp(self):
        self.supply = FreshVarSupply(seed=100)

    def test_generalize_quantifies_only_variables_free_in_type(self):
        env = TypeEnv({'x': Scheme.mono(a)})
        scheme = generalize(env, TypeFun((a, b), b))
        self.assertEqual(scheme.quantified, frozenset({b}))

    def test_generalize_closed_type_is_monomorphic(self):
        scheme = generalize(TypeEnv(), TypeFun((NUMBER,), NUMBER))
        self.assertTrue(scheme.is_monomorphic)
        self.assertEqual(str(scheme), "(number) -> number")

    def test_instantiate_monomorphic_returns_body(self):
        self.assertEqual(instantiate(Scheme.mono(a), self.supply), a)

    def test_instantiations_are_disjoint(self):
        scheme = Scheme(frozenset({a, b}), TypeFun((a,), b))
        first = instantiate(scheme, self.supply)
        second = instantiate(scheme, self.supply)
        self.assertFalse(free_type_vars(first) & free_type_vars(second))
        self.assertFalse(free_type_vars(first) & {a, b})

    def test_round_trip_is_alpha_equivalent(self):
        t = TypeFun((a, TypeFun((b,), a)), b)
        scheme = generalize(TypeEnv(), t)
        instance = instantiate(scheme, self.supply)
        self.assertEqual(pretty(instance), pretty(t))
        self.assertEqual(str(scheme), "forall 'a 'b. ('a, ('b) -> 'a) -> 'b")

    def test_seeded_supply_is_deterministic(self):
        scheme = Scheme(frozenset({a, b}), TypeFun((a,), b))
        t1 = instantiate(scheme, FreshVarSupply(seed=7))
        t2 = instantiate(scheme, FreshVarSupply(seed=7))
        self.assertEqual(t1, t2)
        self.assertEqual(t1, TypeFun((TypeVar(7),), TypeVar(8)))


if __name__ == '__main__':
    unittest.main()
