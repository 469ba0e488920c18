import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Iterator, List, Mapping, Optional, Tuple

import sfl.sfl_ast as ast
from sfl.environment import TypeEnv, generalize
from sfl.errors import InferenceError
from sfl.inference import Inferencer
from sfl.substitution import Substitution
from sfl.type_defs import BASE_TYPES, UNIT, FreshVarSupply, Scheme, Type, pretty

logger = logging.getLogger(__name__)


class TypeTable:
    """Final type of every checked AST node, keyed by node identity"""

    def __init__(self):
        self._types: Dict[ast.Node, Type] = {}

    def update(self, logged: Mapping[ast.Node, Type], subst: Substitution) -> None:
        for node, t in logged.items():
            self._types[node] = subst.apply(t)

    def __getitem__(self, node: ast.Node) -> Type:
        return self._types[node]

    def get(self, node: ast.Node, default: Optional[Type] = None) -> Optional[Type]:
        return self._types.get(node, default)

    def __contains__(self, node: ast.Node) -> bool:
        return node in self._types

    def __len__(self) -> int:
        return len(self._types)

    def items(self) -> Iterator[Tuple[ast.Node, Type]]:
        return iter(self._types.items())


@dataclass
class CheckResult:
    program: ast.Program
    schemes: Dict[str, Scheme] = field(default_factory=dict)
    errors: List[InferenceError] = field(default_factory=list)
    node_types: TypeTable = field(default_factory=TypeTable)
    program_type: Optional[Type] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def describe(self) -> List[str]:
        """One `name : type` line per top-level binding"""
        lines = [f"{name} : {scheme}" for name, scheme in self.schemes.items()]
        if self.program.result is not None and self.program_type is not None:
            lines.append(f"<program> : {pretty(self.program_type)}")
        return lines


class TypeChecker:
    """Checks whole programs.

    One call to `check_program` is one inference run: it owns a fresh
    variable supply and a root environment, and infers every top-level item
    in file order against the environment left by the items before it. In
    resilient mode an item that fails contributes one error and checking
    resumes with the next item; otherwise the first error ends the run.
    """

    def __init__(self, base_types: AbstractSet[str] = BASE_TYPES, resilient: bool = True,
                 seed: int = 0, prelude: Optional[Mapping[str, Scheme]] = None):
        self.base_types = base_types
        self.resilient = resilient
        self.seed = seed
        self.prelude = dict(prelude or {})

    def check_program(self, program: ast.Program) -> CheckResult:
        result = CheckResult(program)
        inferencer = Inferencer(self.base_types, FreshVarSupply(self.seed))
        env = TypeEnv(self.prelude)

        for stmt in program.statements:
            try:
                subst, env = inferencer.check_statement(stmt, env)
            except InferenceError as err:
                logger.debug("error in top-level item: %s", err.message)
                result.errors.append(err)
                inferencer.take_node_types()
                if not self.resilient:
                    return result
                env = self._recover(stmt, env, inferencer)
                continue

            result.node_types.update(inferencer.take_node_types(), subst)
            name = getattr(stmt, 'name', None)
            if name is not None:
                result.schemes[name] = env.lookup(name)
                logger.debug("%s : %s", name, result.schemes[name])

        if program.result is not None:
            try:
                subst, t = inferencer.infer(program.result, env)
            except InferenceError as err:
                result.errors.append(err)
                inferencer.take_node_types()
            else:
                result.node_types.update(inferencer.take_node_types(), subst)
                result.program_type = subst.apply(t)
        else:
            result.program_type = UNIT
        return result

    def _recover(self, stmt: ast.Statement, env: TypeEnv, inferencer: Inferencer) -> TypeEnv:
        """Bind a failed definition to its declared type so later items can use it"""
        try:
            if isinstance(stmt, ast.FunctionDefinition):
                declared = inferencer.signature(stmt)
            elif isinstance(stmt, ast.LetStatement) and stmt.type_annotation is not None:
                declared = inferencer.annotations.resolve(stmt.type_annotation, {})
            else:
                return env
        except InferenceError:
            return env
        return env.extend(stmt.name, generalize(env, declared))
