from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union
import argparse
import logging
import sys
from sfl.errors import CompileError, SourceLocation, source_context
from sfl.parser import Parser
from sfl.type_checker import CheckResult, TypeChecker
from sfl.interpreter import format_value, run_program
from sfl.type_defs import pretty
import sfl.sfl_ast as ast

logger = logging.getLogger(__name__)


@dataclass
class CheckOptions:
    """Options for checking (and optionally running) programs"""
    resilient: bool = True  # keep going after a failed top-level item
    dump_ast: bool = False
    dump_types: bool = False
    run: bool = False
    debug: bool = False


class Toolchain:
    """Main interface: parse, type check and run source programs"""

    def __init__(self, options: Optional[CheckOptions] = None):
        self.options = options or CheckOptions()
        self.parser = Parser()
        self.type_checker = TypeChecker(resilient=self.options.resilient)

    def parse(self, source: str, source_path: str = "<string>") -> ast.Program:
        return self.parser.parse(source, file_path=source_path)

    def check(self, program: ast.Program) -> CheckResult:
        return self.type_checker.check_program(program)

    def check_source(self, source: str, source_path: str = "<string>") -> CheckResult:
        """Parse and type check a string of source code"""
        program = self.parse(source, source_path)
        if self.options.dump_ast:
            print(ast.dump_ast_json(program))
        return self.check(program)

    def run(self, program: ast.Program) -> Any:
        return run_program(program)


def with_context(error: CompileError, source: str) -> CompileError:
    """Attach the source lines around the error's location"""
    if error.context is None and error.location is not None:
        error.context = source_context(source, error.location.line)
    return error


def dump_types(result: CheckResult) -> List[str]:
    lines = []
    for node, t in result.node_types.items():
        loc = node.location
        where = f"{loc.line}:{loc.column}" if loc else "?"
        lines.append(f"{where:>8} {node.__class__.__name__:<20} {pretty(t)}")
    return lines


def process_file(toolchain: Toolchain, filepath: Union[str, Path]) -> bool:
    """Check one file, printing results to stdout and errors to stderr"""
    path = Path(filepath)
    source = ""
    try:
        source = path.read_text()
        result = toolchain.check_source(source, str(path))

        for line in result.describe():
            print(line)
        if toolchain.options.dump_types:
            for line in dump_types(result):
                print(line)
        for error in result.errors:
            print(str(with_context(error, source)), file=sys.stderr)
        if not result.ok:
            return False

        if toolchain.options.run:
            value = toolchain.run(result.program)
            print(format_value(value))
        return True

    except CompileError as e:
        print(str(with_context(e, source)), file=sys.stderr)
        return False
    except OSError as e:
        print(f"Cannot read {filepath}: {e}", file=sys.stderr)
        return False
    except Exception as e:
        # Unexpected error - wrap it as an InternalError with the full traceback
        error = CompileError.from_exception(e, location=SourceLocation(str(filepath), 1, 1))
        print("Internal Error:", file=sys.stderr)
        print(str(error), file=sys.stderr)
        return False


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point"""
    parser = argparse.ArgumentParser(description="Type checker for a small functional language")
    parser.add_argument('files', nargs='+', help='Source files to check')
    parser.add_argument('--run', action='store_true',
                        help='Evaluate each program after it type checks')
    parser.add_argument('--dump-ast', action='store_true',
                        help='Dump AST as JSON')
    parser.add_argument('--dump-types', action='store_true',
                        help='Dump the inferred type of every node')
    parser.add_argument('--stop-on-first-error', action='store_true',
                        help='Stop checking a program at its first type error')
    parser.add_argument('--debug', '-g', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(name)s - %(levelname)s - %(message)s',
    )

    options = CheckOptions(
        resilient=not args.stop_on_first_error,
        dump_ast=args.dump_ast,
        dump_types=args.dump_types,
        run=args.run,
        debug=args.debug,
    )
    toolchain = Toolchain(options)

    failed = 0
    for filepath in args.files:
        if len(args.files) > 1:
            print(f"== {filepath}")
        if not process_file(toolchain, filepath):
            failed += 1

    if failed:
        logger.debug("%d of %d file(s) failed", failed, len(args.files))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
