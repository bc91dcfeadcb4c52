import io
import unittest

from lox.lang.error import (EX_DATAERR, EX_NOINPUT, EX_OK, EX_SOFTWARE, ErrorHandler, LoxError, LoxRuntimeError,
                            RunResult, SourceError)
from lox.syntax.tokens import Token, TokenType


class RunResultTestCase(unittest.TestCase):

    def test_exit_status(self):
        cases = {
            RunResult(): EX_OK,
            RunResult(had_error=True): EX_DATAERR,
            RunResult(had_runtime_error=True): EX_SOFTWARE,
            RunResult(True, True): EX_DATAERR,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, case.exit_status, case)

        self.assertEqual((65, 70), (EX_DATAERR, EX_SOFTWARE))


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.error_handler = ErrorHandler(stream=self.stream)

    def test_static_errors(self):
        self.error_handler.error(3, "Unexpected character.")
        self.error_handler.token_error(Token(TokenType.SEMICOLON, ";", None, 4), "Expect expression.")
        self.error_handler.token_error(Token(TokenType.EOF, "", None, 5), "Expect ';' after value.")

        self.assertEqual("[line 3] Error: Unexpected character.\n"
                         "[line 4] Error at ';': Expect expression.\n"
                         "[line 5] Error at end: Expect ';' after value.\n", self.stream.getvalue())
        self.assertEqual(RunResult(had_error=True), self.error_handler.result())

    def test_runtime_error(self):
        token = Token(TokenType.SLASH, "/", None, 9)
        self.error_handler.runtime_error(LoxRuntimeError(token, "Division by zero."))

        self.assertEqual("Division by zero.\n[line 9]\n", self.stream.getvalue())
        self.assertEqual(RunResult(had_runtime_error=True), self.error_handler.result())

    def test_reset(self):
        self.error_handler.error(1, "first")
        self.error_handler.runtime_error(LoxRuntimeError(Token(TokenType.MINUS, "-", None, 1), "second"))

        self.error_handler.reset()
        self.assertEqual(RunResult(had_runtime_error=True), self.error_handler.result())

        self.error_handler.reset(runtime=True)
        self.assertEqual(RunResult(), self.error_handler.result())

    def test_color_keeps_message(self):
        error_handler = ErrorHandler(stream=self.stream, color=True)
        error_handler.error(2, "Unterminated string.")

        self.assertIn("Unterminated string.", self.stream.getvalue())
        self.assertIn("[line 2] Error", self.stream.getvalue())

    def test_context_manager(self):
        self.error_handler.fatal = False
        with self.error_handler:
            raise SourceError("'missing.lox' could not be read")
        self.assertEqual("error: 'missing.lox' could not be read\n", self.stream.getvalue())

    def test_context_manager_fatal(self):
        with self.assertRaises(SystemExit) as context:
            with self.error_handler:
                raise SourceError("'missing.lox' could not be read")
        self.assertEqual(EX_NOINPUT, context.exception.code)

        with self.assertRaises(SystemExit) as context:
            with self.error_handler:
                raise LoxError("generic")
        self.assertEqual(1, context.exception.code)

    def test_internal_errors_propagate(self):
        self.error_handler.fatal = False
        with self.assertRaises(ZeroDivisionError):
            with self.error_handler:
                raise ZeroDivisionError("boom")
        self.assertIn("[internal] error: unknown error: 'ZeroDivisionError: boom'", self.stream.getvalue())

    def test_keyboard_interrupt(self):
        self.error_handler.fatal = False
        with self.error_handler:
            raise KeyboardInterrupt()
        self.assertEqual("error: keyboard interrupt\n", self.stream.getvalue())


if __name__ == '__main__':
    unittest.main()
