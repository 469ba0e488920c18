"""
doit tasks for testing sfl.
Run with: doit
"""

import sys
from pathlib import Path

# Directories
EXAMPLES_DIR = 'examples'

# Python test files
PYTHON_TESTS = [
    'tests/test_errors.py',
    'tests/test_parsing.py',
    'tests/test_substitution.py',
    'tests/test_unify.py',
    'tests/test_environment.py',
    'tests/test_type_inference.py',
    'tests/test_type_checker.py',
    'tests/test_interpreter.py',
    'tests/test_cli.py',
]

# Sample programs that must type check
EXAMPLE_PROGRAMS = sorted(
    str(p) for p in Path(EXAMPLES_DIR).glob('*.sfl') if not p.name.startswith('error_')
)


def task_test_python():
    """Run Python tests"""
    def run_python_tests():
        import pytest
        return pytest.main(['-v'] + PYTHON_TESTS) == 0

    return {
        'actions': [run_python_tests],
        'file_dep': PYTHON_TESTS,
        'verbosity': 2,
    }


def task_check_examples():
    """Type check and run the example programs"""
    for program in EXAMPLE_PROGRAMS:
        yield {
            'name': Path(program).stem,
            'actions': [f'{sys.executable} -m sfl.sfl --run {program}'],
            'file_dep': [program],
            'verbosity': 2,
        }


def task_test():
    """Run all tests"""
    return {
        'actions': None,
        'task_dep': ['test_python', 'check_examples'],
    }
