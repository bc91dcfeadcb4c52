"""Error handling for Lox. Errors produced by the pipeline itself are LoxErrors: if another type of error makes it all
the way to ErrorHandler, it is assumed to be an internal issue.

Lox distinguishes three kinds of errors:
    1. Lexical errors: reported by the lexer with the current line, scanning continues
    2. Syntax errors: ParseFaults, reported with the offending token, the parser synchronizes to the next statement
    3. Runtime errors: LoxRuntimeErrors, reported with the offending token's line, the current run stops

None of them terminates the process: ErrorHandler only records that they occurred, and the caller turns the RunResult
into an exit status.
"""

import sys
from dataclasses import dataclass

from termcolor import colored

from lox.syntax.tokens import TokenType

EX_OK = 0
EX_DATAERR = 65   # static (lexical or syntax) error in a script
EX_NOINPUT = 66   # script could not be read
EX_SOFTWARE = 70  # runtime error in a script


class LoxError(Exception):
    """Superclass for every error raised on purpose by the Lox pipeline."""
    status = 1  # exit status when the error is fatal

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class SourceError(LoxError):
    """Raised when a script cannot be read."""
    status = EX_NOINPUT


class ParseFault(LoxError):
    """Structured syntax error: a required token was missing or unexpected. Carries the offending token."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token


class LoxRuntimeError(LoxError):
    """Operand type mismatch, division by zero or undefined variable. Carries the offending token."""
    status = EX_SOFTWARE

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token


@dataclass(frozen=True)
class RunResult:
    """Error flags of one pipeline run (a file, or one REPL line)."""
    had_error: bool = False
    had_runtime_error: bool = False

    @property
    def exit_status(self):
        """Static errors take precedence over runtime errors."""
        if self.had_error:
            return EX_DATAERR
        if self.had_runtime_error:
            return EX_SOFTWARE
        return EX_OK


class ErrorHandler:
    """Reports Lox errors to stream (stderr by default) and records which kinds occurred. Also a context manager that
    reports LoxErrors escaping a session instead of letting Python print a traceback.
    """
    ERROR = "red"

    def __init__(self, stream=None, color=False, fatal=True):
        self.stream = stream if stream is not None else sys.stderr
        self.color = color
        self.fatal = fatal  # whether a LoxError escaping the context manager ends the process

        self.had_error = False
        self.had_runtime_error = False

    def error(self, line, message, where=""):
        """Reports a static error at line. where is empty, " at end" or " at '<lexeme>'"."""
        self.had_error = True
        self._print(self._highlight(f"[line {line}] Error{where}:") + f" {message}")

    def token_error(self, token, message):
        """Reports a static error located at token."""
        if token.type is TokenType.EOF:
            self.error(token.line, message, " at end")
        else:
            self.error(token.line, message, f" at '{token.lexeme}'")

    def runtime_error(self, error):
        """Reports a LoxRuntimeError: message first, then the line of the offending token."""
        self.had_runtime_error = True
        self._print(f"{self._highlight(error.message)}\n[line {error.token.line}]")

    def reset(self, runtime=False):
        """Clears the static error flag (and the runtime one if runtime). Called by the REPL between lines."""
        self.had_error = False
        if runtime:
            self.had_runtime_error = False

    def result(self):
        return RunResult(self.had_error, self.had_runtime_error)

    def throw(self, error, internal=False):
        """Reports an error that ended a session early. Exits with error.status if self.fatal."""
        prefix = self._highlight("[internal] ") if internal else ""
        self._print(prefix + self._highlight("error: ") + error.message)

        if self.fatal:
            sys.exit(error.status)

    def _highlight(self, text):
        return colored(text, ErrorHandler.ERROR, attrs=["bold"]) if self.color else text

    def _print(self, text):
        print(text, file=self.stream)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or issubclass(exc_type, SystemExit):
            return False

        if issubclass(exc_type, KeyboardInterrupt):
            self.throw(LoxError("keyboard interrupt"))
        elif issubclass(exc_type, RecursionError):
            self.throw(LoxRuntimeError(None, "maximum recursion depth exceeded (program nested too deeply)"))
        elif issubclass(exc_type, LoxError):
            self.throw(exc_val)
        else:
            self.throw(LoxError(f"unknown error: '{exc_type.__name__}: {exc_val}'"), internal=True)
            return False  # internal errors keep their traceback
        return True
