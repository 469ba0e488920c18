"""Type environments, instantiation and generalization."""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Optional, Set

from sfl.errors import UnboundIdentifier
from sfl.substitution import Substitution
from sfl.type_defs import FreshVarSupply, Scheme, Type, TypeVar, free_type_vars


class TypeEnv:
    """Persistent mapping from identifiers to type schemes.

    `extend` returns a new environment that shadows outer bindings; the
    receiver is never modified, so environments can be shared freely.
    """

    __slots__ = ('_bindings',)

    def __init__(self, bindings: Optional[Mapping[str, Scheme]] = None):
        self._bindings = MappingProxyType(dict(bindings or {}))

    def lookup(self, name: str, node=None) -> Scheme:
        try:
            return self._bindings[name]
        except KeyError:
            raise UnboundIdentifier(name, node) from None

    def extend(self, name: str, scheme: Scheme) -> 'TypeEnv':
        bindings = dict(self._bindings)
        bindings[name] = scheme
        return TypeEnv(bindings)

    def extend_many(self, new_bindings: Mapping[str, Scheme]) -> 'TypeEnv':
        if not new_bindings:
            return self
        bindings = dict(self._bindings)
        bindings.update(new_bindings)
        return TypeEnv(bindings)

    def map_schemes(self, fn: Callable[[Scheme], Scheme]) -> 'TypeEnv':
        return TypeEnv({name: fn(scheme) for name, scheme in self._bindings.items()})

    def free_type_vars(self) -> Set[TypeVar]:
        result: Set[TypeVar] = set()
        for scheme in self._bindings.values():
            result |= scheme.free_type_vars()
        return result

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        items = ", ".join(f"{name}: {scheme}" for name, scheme in self._bindings.items())
        return f"TypeEnv({{{items}}})"


def instantiate(scheme: Scheme, supply: FreshVarSupply) -> Type:
    """Replace each quantified variable with a fresh one.

    Every call draws new variables from `supply`, so two instantiations of
    the same scheme never share variables.
    """
    if scheme.is_monomorphic:
        return scheme.body
    # Sorting keeps fresh ids deterministic for a seeded supply
    fresh: Dict[TypeVar, Type] = {v: supply.fresh() for v in sorted(scheme.quantified, key=lambda v: v.id)}
    return Substitution(fresh).apply(scheme.body)


def generalize(env: TypeEnv, t: Type) -> Scheme:
    """Quantify the variables of `t` that are not free in `env`.

    `env` must be the environment as it stood before the binding being
    generalized was added.
    """
    quantified = free_type_vars(t) - env.free_type_vars()
    return Scheme(frozenset(quantified), t)
