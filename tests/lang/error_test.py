import io
import unittest
from contextlib import redirect_stdout

from arrowcalc.lang.error import (ArrowAtStart, DesugarError, ErrorHandler, GenericException, LimitExceeded,
                                  MalformedInput, StepLimitExceeded)


class GenericExceptionTestCase(unittest.TestCase):

    def test_init(self):
        error = GenericException("'{}' has stray '{}'", ["a => b", "=>"], start=2, end=4)
        self.assertEqual("'a => b' has stray '=>'", error.plain)
        self.assertEqual("'a => b' has stray '=>'", str(error))
        self.assertEqual("a => b", error.expr)
        self.assertEqual((2, 4), (error.start, error.end))

        error = GenericException("'{}' is bad", "abc")
        self.assertEqual(3, error.end)

        error = GenericException("keyboard interrupt")
        self.assertEqual("", error.expr)
        self.assertEqual(["diagnosis", "end", "expr", "internal", "msg", "plain", "start"], sorted(vars(error)))

    def test_hierarchy(self):
        self.assertTrue(issubclass(ArrowAtStart, DesugarError))
        self.assertTrue(issubclass(StepLimitExceeded, LimitExceeded))
        self.assertTrue(issubclass(MalformedInput, GenericException))

        error = StepLimitExceeded("'{}' was not reduced within {} passes", ["x", 3], limit=3)
        self.assertEqual(3, error.limit)
        self.assertFalse(error.diagnosis)
        self.assertEqual("'x' was not reduced within 3 passes", error.plain)


class ErrorHandlerTestCase(unittest.TestCase):

    def test_diagnose(self):
        error = GenericException("'{}' is bad", '["=>", "a"]', start=1, end=5)
        diagnosis = ErrorHandler.diagnose(error)
        self.assertIn('"=>"', diagnosis)
        self.assertTrue(diagnosis.splitlines()[1].startswith("   "))
        self.assertIn("^~~~", diagnosis)

    def test_throw_fatal(self):
        error_handler = ErrorHandler()
        output = io.StringIO()
        with redirect_stdout(output), self.assertRaises(SystemExit):
            with error_handler:
                raise MalformedInput("'{}' is neither a sequence nor a string", "1", diagnosis=False)

        self.assertIn("error: ", output.getvalue())
        self.assertIn("is neither a sequence nor a string", output.getvalue())

    def test_throw_not_fatal(self):
        error_handler = ErrorHandler(fatal=False)
        error_handler.register_file("prog.json")
        error_handler.register_line("prog.json", '["=>"]', 3)

        output = io.StringIO()
        with redirect_stdout(output):
            with error_handler:
                raise ArrowAtStart("'{}' cannot start an expression", '["=>"]', start=1, end=5)

        printed = output.getvalue()
        self.assertIn("File 'prog.json', line 3", printed)
        self.assertIn("cannot start an expression", printed)
        self.assertEqual(1, len(error_handler.errors))
        self.assertEqual({"prog.json": (None, None)}, error_handler.traceback)

    def test_recursion_error(self):
        output = io.StringIO()
        with redirect_stdout(output):
            with ErrorHandler(fatal=False):
                raise RecursionError("maximum recursion depth exceeded")
        self.assertIn("maximum recursion depth", output.getvalue())

    def test_internal_error(self):
        output = io.StringIO()
        with redirect_stdout(output), self.assertRaises(KeyError):
            with ErrorHandler(fatal=False):
                raise KeyError("{oops}")
        self.assertIn("[internal]", output.getvalue())
        self.assertIn("unknown error", output.getvalue())

    def test_warn(self):
        error_handler = ErrorHandler()
        error_handler.register_file("prog.json")
        error_handler.register_line("prog.json", '[["a", "=>", "a", "a"], ["a", "=>", "a", "a"]]', 7)

        output = io.StringIO()
        with redirect_stdout(output):
            error_handler.warn("'{}' does not have a beta-normal form", "[[a => [a a]] [a => [a a]]]", diagnosis=False)

        printed = output.getvalue()
        self.assertIn("prog.json:7:0: ", printed)
        self.assertIn("warning: ", printed)
        self.assertIn("does not have a beta-normal form", printed)

    def test_register_step(self):
        output = io.StringIO()
        with redirect_stdout(output):
            ErrorHandler().register_step("β", "x")
            ErrorHandler(trace=True).register_step("β", "[f x]")
        self.assertNotIn(" x\n", output.getvalue())
        self.assertIn("[f x]", output.getvalue())


if __name__ == '__main__':
    unittest.main()
