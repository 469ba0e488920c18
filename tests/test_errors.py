import unittest
from pathlib import Path
import sys
sys.path.append(str(Path(__file__).parent.parent / 'src'))

from sfl.errors import (
    CONTEXT_GUTTER, CompileError, InternalError, SourceLocation, TypeMismatch, source_context,
)
from sfl.type_defs import BOOL, NUMBER


class TestCompileError(unittest.TestCase):
    def test_type_error_rendering(self):
        source = "let a = 1;\nlet b = a + true;\n"
        err = TypeMismatch(NUMBER, BOOL)
        err.location = SourceLocation("t.sfl", 2, 13)
        err.context = source_context(source, 2)
        lines = str(err).splitlines()
        self.assertEqual(lines[0], "TypeError at t.sfl:2:13: expected 'number' but found 'bool'")
        self.assertEqual(lines[-2], ">    2 | let b = a + true;")
        caret = lines[-1]
        self.assertEqual(len(caret) - 1, CONTEXT_GUTTER + 12)
        self.assertEqual(lines[-2][caret.index("^")], "t")
        self.assertNotIn("traceback", str(err))
        self.assertFalse(hasattr(err, "traceback"))

    def test_internal_error_keeps_traceback(self):
        try:
            {}['missing']
        except KeyError as e:
            err = CompileError.from_exception(e, SourceLocation("t.sfl", 1, 1))
        self.assertIsInstance(err, InternalError)
        self.assertEqual(err.error_type, "InternalError")
        self.assertIsInstance(err.cause, KeyError)
        self.assertIn("KeyError", err.traceback)
        self.assertIn("Python traceback:", str(err))

    def test_source_context_out_of_range(self):
        self.assertIsNone(source_context("one line", 5))


if __name__ == '__main__':
    unittest.main()
