import traceback
from dataclasses import dataclass, field
from typing import List, Optional, Any


@dataclass
class SourceLocation:
    """Location in source code"""
    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class CompileError(Exception):
    """Detailed compile error with source location and context"""
    message: str
    error_type: str = "CompilationError"  # e.g. "LexError", "ParseError", "TypeError"
    location: Optional[SourceLocation] = None
    node: Optional[Any] = None  # AST node if available
    context: Optional[str] = None
    notes: List[str] = field(default_factory=list)  # Additional notes/hints

    def __str__(self) -> str:
        parts = []

        # Error type and location
        loc = str(self.location) if self.location else "unknown location"
        parts.append(f"{self.error_type} at {loc}: {self.message}")

        # Source context if available
        if self.context:
            parts.append("\nContext:")
            parts.append(self.context)
            if self.location and self.location.column:
                parts.append(" " * (CONTEXT_GUTTER + self.location.column - 1) + "^")

        # Additional notes
        if self.notes:
            parts.append("\nNotes:")
            parts.extend(f"  - {note}" for note in self.notes)

        return "\n".join(parts)

    @classmethod
    def from_exception(cls, e: Exception, location: Optional[SourceLocation] = None) -> 'InternalError':
        """Wrap an unexpected Python exception, keeping its traceback"""
        return InternalError(e, location)


class InternalError(CompileError):
    """A failure of the checker itself rather than of the checked program"""

    def __init__(self, cause: Exception, location: Optional[SourceLocation] = None):
        super().__init__(message=str(cause), error_type="InternalError", location=location,
                         notes=["This may be a bug in the checker - please report it"])
        self.cause = cause
        self.traceback = "".join(
            traceback.format_exception(type(cause), cause, cause.__traceback__))

    def __str__(self) -> str:
        return f"{super().__str__()}\n\nPython traceback:\n{self.traceback}"


class LexError(CompileError):
    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message=message, error_type="LexError", location=location)


class ParseError(CompileError):
    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 notes: Optional[List[str]] = None):
        super().__init__(message=message, error_type="ParseError", location=location,
                         notes=list(notes or []))


class EvaluationError(CompileError):
    """Raised by the interpreter for failures a type check cannot rule out"""
    def __init__(self, message: str, node: Optional[Any] = None):
        super().__init__(message=message, error_type="RuntimeError", node=node,
                         location=getattr(node, 'location', None))


class InferenceError(CompileError):
    """Base class for every error produced while inferring types.

    Errors raised by the unifier are created without a node; the inference
    algorithm attaches the offending node with `at()` before propagating.
    """

    def __init__(self, message: str, node: Optional[Any] = None):
        super().__init__(message=message, error_type="TypeError", node=node,
                         location=getattr(node, 'location', None))

    def at(self, node: Any) -> 'InferenceError':
        """Attribute this error to `node` unless it is already attributed"""
        if self.node is None and node is not None:
            self.node = node
            self.location = getattr(node, 'location', None)
        return self


class UnboundIdentifier(InferenceError):
    def __init__(self, name: str, node: Optional[Any] = None):
        super().__init__(f"'{name}' is not defined here", node)
        self.name = name


class UnknownType(InferenceError):
    def __init__(self, name: str, node: Optional[Any] = None):
        super().__init__(f"unknown type '{name}'", node)
        self.name = name


class TypeMismatch(InferenceError):
    def __init__(self, expected: Any, actual: Any, node: Optional[Any] = None):
        super().__init__(f"expected '{expected}' but found '{actual}'", node)
        self.expected = expected
        self.actual = actual


class ArityMismatch(InferenceError):
    def __init__(self, expected: int, actual: int, node: Optional[Any] = None):
        super().__init__(f"expected {expected} argument(s) but found {actual}", node)
        self.expected = expected
        self.actual = actual


class InfiniteType(InferenceError):
    def __init__(self, var: Any, type: Any, node: Optional[Any] = None):
        super().__init__(f"cannot construct the infinite type {var} = {type}", node)
        self.var = var
        self.type = type


class BranchMismatch(InferenceError):
    def __init__(self, then_type: Any, else_type: Any, node: Optional[Any] = None):
        super().__init__(
            f"'if' branches have different types: '{then_type}' and '{else_type}'", node)
        self.then_type = then_type
        self.else_type = else_type


class ReturnTypeMismatch(InferenceError):
    def __init__(self, declared: Any, inferred: Any, node: Optional[Any] = None):
        super().__init__(
            f"function is declared to return '{declared}' but its body has type '{inferred}'", node)
        self.declared = declared
        self.inferred = inferred


# Width of the "> 1234 | " prefix produced by source_context
CONTEXT_GUTTER = 9


def source_context(source: str, line: int, context_lines: int = 2) -> Optional[str]:
    """Get the source lines leading up to and including `line`"""
    lines = source.splitlines()
    if not 1 <= line <= len(lines):
        return None

    start = max(0, line - context_lines - 1)
    end = line

    context = []
    for i in range(start, end):
        line_num = i + 1
        prefix = '> ' if line_num == line else '  '
        context.append(f"{prefix}{line_num:4d} | {lines[i].rstrip()}")

    return '\n'.join(context)
