import unittest
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent / 'src'))
from sfl.parser import Parser
from sfl.interpreter import Closure, Interpreter, format_value, run_program
from sfl.errors import EvaluationError
from sfl.type_checker import TypeChecker
from sfl.type_defs import NUMBER

EXAMPLES = Path(__file__).parent.parent / 'examples'


class TestInterpreter(unittest.TestCase):
    def setUp(self):
        self.parser = Parser()

    def run_code(self, code):
        return run_program(self.parser.parse(code))

    def test_arithmetic(self):
        self.assertEqual(self.run_code("1 + 2 * 3 - 4"), 3)
        self.assertEqual(self.run_code("7 / 2"), 3)

    def test_comparisons(self):
        self.assertIs(self.run_code("1 < 2"), True)
        self.assertIs(self.run_code("true == false"), False)
        self.assertIs(self.run_code("3 != 3"), False)

    def test_if_expression(self):
        self.assertEqual(self.run_code("if 3 > 2 { 10 } else { 20 }"), 10)
        self.assertEqual(self.run_code("if false { 1 } else if false { 2 } else { 3 }"), 3)

    def test_entry_point_is_main(self):
        with open(EXAMPLES / 'main.sfl') as f:
            program = self.parser.parse(f.read())
        self.assertEqual(run_program(program), 6)

    def test_trailing_expression_wins_over_main(self):
        self.assertEqual(self.run_code("def main(): number { 1 } 2"), 2)

    def test_no_entry_point_is_unit(self):
        self.assertIsNone(self.run_code("let x = 1;"))

    def test_recursion(self):
        with open(EXAMPLES / 'recursion.sfl') as f:
            self.assertEqual(run_program(self.parser.parse(f.read())), 175)

    def test_closures_capture_their_scope(self):
        code = r"""
        def adder(n: number): (number) -> number { \x -> x + n }
        let add2 = adder(2);
        let n = 100;
        add2(1)
        """
        self.assertEqual(self.run_code(code), 3)

    def test_higher_order_and_polymorphism(self):
        with open(EXAMPLES / 'polymorphism.sfl') as f:
            self.assertEqual(run_program(self.parser.parse(f.read())), 20)

    def test_block_scoping(self):
        self.assertEqual(self.run_code("let x = 1; let y = { let x = 5; x }; x + y"), 6)

    def test_shadowing_does_not_leak_into_definitions(self):
        code = "let x = 1; def f(): number { x } let x = false; f()"
        self.assertEqual(self.run_code(code), 1)

    def test_shadowing_does_not_leak_into_lambdas(self):
        code = r"def g(): number { let x = 2; let h = \y -> x; let x = true; h(0) + 1 } g()"
        self.assertEqual(self.run_code(code), 3)

    def test_checked_type_matches_value_after_shadowing(self):
        program = self.parser.parse("let x = 1; def f(): number { x } let x = false; f()")
        result = TypeChecker().check_program(program)
        self.assertEqual(result.program_type, NUMBER)
        self.assertIsInstance(run_program(program), int)

    def test_division_by_zero(self):
        with self.assertRaises(EvaluationError) as cm:
            self.run_code("let z = 0;\n10 / z")
        self.assertEqual(cm.exception.error_type, "RuntimeError")
        self.assertEqual(cm.exception.location.line, 2)

    def test_unbounded_recursion(self):
        with self.assertRaises(EvaluationError):
            self.run_code("def loop(n: number): number { loop(n + 1) }\nloop(0)")

    def test_lambda_value(self):
        value = Interpreter().run(self.parser.parse(r"\x -> x"))
        self.assertIsInstance(value, Closure)
        self.assertEqual(format_value(value), "<function <lambda>/1>")

    def test_format_value(self):
        self.assertEqual(format_value(None), "()")
        self.assertEqual(format_value(True), "true")
        self.assertEqual(format_value(42), "42")


if __name__ == '__main__':
    unittest.main()
