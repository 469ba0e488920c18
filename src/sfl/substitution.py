"""Persistent substitutions from type variables to types."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from sfl.type_defs import Scheme, Type, TypeCon, TypeFun, TypeVar


class Substitution(Mapping[TypeVar, Type]):
    """Immutable mapping from type variables to types.

    Substitutions are kept idempotent by `compose`, which applies the later
    substitution to every image of the earlier one before taking the union.
    """

    __slots__ = ('_bindings',)

    def __init__(self, bindings: Optional[Mapping[TypeVar, Type]] = None):
        self._bindings = MappingProxyType(dict(bindings or {}))

    @classmethod
    def singleton(cls, var: TypeVar, t: Type) -> 'Substitution':
        return cls({var: t})

    def __getitem__(self, var: TypeVar) -> Type:
        return self._bindings[var]

    def __iter__(self) -> Iterator[TypeVar]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        items = ", ".join(f"{k} := {v}" for k, v in sorted(self._bindings.items(), key=lambda kv: kv[0].id))
        return f"Substitution({{{items}}})"

    def apply(self, t: Type) -> Type:
        """Replace every bound variable in `t` by its image.

        Images are themselves substituted, so chained bindings resolve fully.
        """
        if not self._bindings:
            return t
        if isinstance(t, TypeVar):
            image = self._bindings.get(t)
            if image is None or image == t:
                return t
            return self.apply(image)
        if isinstance(t, TypeCon):
            return t
        if isinstance(t, TypeFun):
            return TypeFun(tuple(self.apply(p) for p in t.params), self.apply(t.result))
        raise TypeError(f"not a type: {t!r}")

    def apply_scheme(self, scheme: Scheme) -> Scheme:
        """Apply to the free variables of `scheme` only; quantified ones are bound."""
        restricted = self.without(scheme.quantified)
        if not restricted:
            return scheme
        return Scheme(scheme.quantified, restricted.apply(scheme.body))

    def apply_env(self, env):
        """Apply to every scheme of a `TypeEnv`, returning a new environment"""
        if not self._bindings:
            return env
        return env.map_schemes(self.apply_scheme)

    def apply_all(self, types: Tuple[Type, ...]) -> Tuple[Type, ...]:
        return tuple(self.apply(t) for t in types)

    def without(self, variables) -> 'Substitution':
        if not any(v in self._bindings for v in variables):
            return self
        return Substitution({k: v for k, v in self._bindings.items() if k not in variables})

    def compose(self, earlier: 'Substitution') -> 'Substitution':
        """Substitution equivalent to applying `earlier` and then `self`.

        On a key collision the binding of `self` wins.
        """
        if not earlier:
            return self
        if not self._bindings:
            return earlier
        bindings: Dict[TypeVar, Type] = {k: self.apply(v) for k, v in earlier.items()}
        bindings.update(self._bindings)
        return Substitution(bindings)


EMPTY = Substitution()


def compose(s1: Substitution, s2: Substitution) -> Substitution:
    """Apply `s2` then `s1`"""
    return s1.compose(s2)
