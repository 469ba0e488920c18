"""Type terms and type schemes.

Types are immutable value trees: `TypeVar`, `TypeCon` and `TypeFun`.
A `Scheme` quantifies a set of type variables over a body type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple, Union


@dataclass(frozen=True, slots=True)
class TypeVar:
    """Inference placeholder, unique within one inference run"""
    id: int

    def __str__(self) -> str:
        return f"t{self.id}"


@dataclass(frozen=True, slots=True)
class TypeCon:
    """Nullary base type such as `number` or `bool`"""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class TypeFun:
    params: Tuple[Type, ...]
    result: Type

    @property
    def arity(self) -> int:
        return len(self.params)

    def __str__(self) -> str:
        return format_type(self)


Type = Union[TypeVar, TypeCon, TypeFun]

NUMBER = TypeCon("number")
BOOL = TypeCon("bool")
UNIT = TypeCon("unit")

BASE_TYPES: FrozenSet[str] = frozenset({NUMBER.name, BOOL.name, UNIT.name})


@dataclass(frozen=True, slots=True)
class Scheme:
    """A type with universally quantified variables.

    An empty `quantified` set makes the scheme monomorphic.
    """
    quantified: FrozenSet[TypeVar]
    body: Type

    @classmethod
    def mono(cls, body: Type) -> 'Scheme':
        return cls(frozenset(), body)

    @property
    def is_monomorphic(self) -> bool:
        return not self.quantified

    def free_type_vars(self) -> Set[TypeVar]:
        return free_type_vars(self.body) - self.quantified

    def __str__(self) -> str:
        names = _pretty_names(_ordered_vars(self.body))
        body = format_type(self.body, names)
        if not self.quantified:
            return body
        bound = " ".join(f"'{names[v]}" for v in _ordered_vars(self.body) if v in self.quantified)
        return f"forall {bound}. {body}"


def free_type_vars(t: Type) -> Set[TypeVar]:
    """Type variables occurring in `t`"""
    if isinstance(t, TypeVar):
        return {t}
    if isinstance(t, TypeFun):
        result = free_type_vars(t.result)
        for param in t.params:
            result |= free_type_vars(param)
        return result
    return set()


def occurs_in(var: TypeVar, t: Type) -> bool:
    if isinstance(t, TypeVar):
        return t == var
    if isinstance(t, TypeFun):
        return any(occurs_in(var, p) for p in t.params) or occurs_in(var, t.result)
    return False


class FreshVarSupply:
    """Fresh type-variable counter owned by a single inference run.

    Two supplies never share state, so independent runs cannot alias each
    other's variables; seeding makes generated ids deterministic.
    """

    def __init__(self, seed: int = 0):
        self.next_id = seed

    def fresh(self) -> TypeVar:
        var = TypeVar(self.next_id)
        self.next_id += 1
        return var

    def fresh_many(self, count: int) -> Tuple[TypeVar, ...]:
        return tuple(self.fresh() for _ in range(count))


def _ordered_vars(t: Type, seen: Optional[list] = None) -> list:
    """Type variables of `t` in order of first appearance"""
    seen = [] if seen is None else seen
    if isinstance(t, TypeVar):
        if t not in seen:
            seen.append(t)
    elif isinstance(t, TypeFun):
        for p in t.params:
            _ordered_vars(p, seen)
        _ordered_vars(t.result, seen)
    return seen


def _pretty_names(variables: Iterable[TypeVar]) -> Dict[TypeVar, str]:
    names = {}
    for index, var in enumerate(variables):
        letter = chr(ord('a') + index % 26)
        names[var] = letter if index < 26 else f"{letter}{index // 26}"
    return names


def format_type(t: Type, names: Optional[Dict[TypeVar, str]] = None) -> str:
    """Render a type in annotation syntax, e.g. `(number, 'a) -> 'a`.

    Without `names`, variables are printed by id (`t3`).
    """
    if isinstance(t, TypeVar):
        if names is not None and t in names:
            return f"'{names[t]}"
        return str(t)
    if isinstance(t, TypeCon):
        return t.name
    params = ", ".join(format_type(p, names) for p in t.params)
    return f"({params}) -> {format_type(t.result, names)}"


def pretty(t: Type) -> str:
    """Render a type with variables renamed to 'a, 'b, ... in order of appearance"""
    return format_type(t, _pretty_names(_ordered_vars(t)))
