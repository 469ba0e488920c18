from typing import AbstractSet, Dict, Optional

import sfl.sfl_ast as ast
from sfl.errors import UnknownType
from sfl.type_defs import FreshVarSupply, Type, TypeCon, TypeFun, TypeVar


class AnnotationResolver:
    """Turns surface type annotations into types.

    Nullary constructors are looked up in `base_types`, so new base types
    need no changes here or in the unifier. Named type variables (`'a`) are
    interned per signature through the `scope` dict passed by the caller.
    """

    def __init__(self, base_types: AbstractSet[str], supply: FreshVarSupply):
        self.base_types = base_types
        self.supply = supply

    def resolve(self, annotation: Optional[ast.TypeExpression],
                scope: Optional[Dict[str, TypeVar]] = None) -> Type:
        """Resolve `annotation`, allocating a fresh variable when it is absent"""
        if annotation is None:
            return self.supply.fresh()
        scope = {} if scope is None else scope

        if isinstance(annotation, ast.TypeName):
            if annotation.name not in self.base_types:
                raise UnknownType(annotation.name, annotation)
            return TypeCon(annotation.name)
        if isinstance(annotation, ast.TypeVariableName):
            if annotation.name not in scope:
                scope[annotation.name] = self.supply.fresh()
            return scope[annotation.name]
        if isinstance(annotation, ast.FunctionTypeExpression):
            params = tuple(self.resolve(p, scope) for p in annotation.params)
            return TypeFun(params, self.resolve(annotation.result, scope))
        raise TypeError(f"not a type annotation: {annotation!r}")
