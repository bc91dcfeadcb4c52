"""Session control for Lox: runs source text through the lexer, parser and interpreter, either a whole file at a
time or one command-line (REPL) line at a time.
"""

import sys

from lox.lang.error import ErrorHandler, SourceError
from lox.runtime.interpreter import Interpreter
from lox.syntax.lexical import Lexer
from lox.syntax.parser import Parser
from lox.syntax.printer import AstPrinter
from lox.syntax.tokens import TokenType


class Session:
    """Governs a Lox session. The interpreter, and with it the global scope, lives as long as the session."""
    # first tokens that mark a REPL line as statements rather than a bare expression
    STATEMENT_STARTS = {
        TokenType.VAR, TokenType.PRINT, TokenType.LEFT_BRACE,
        TokenType.IF, TokenType.WHILE, TokenType.FOR,
    }

    def __init__(self, error_handler=None, out=None, debug_ast=False):
        self.error_handler = error_handler if error_handler is not None else ErrorHandler()
        self.out = out if out is not None else sys.stdout
        self.debug_ast = debug_ast  # print each parsed statement before running it

        self.interpreter = Interpreter(self.out)

    def run(self, source):
        """Runs source as a program. Nothing is executed if it has lexical or syntax errors. Returns the RunResult
        of the session so far.
        """
        return self.run_tokens(Lexer(source, self.error_handler).scan())

    def run_tokens(self, tokens):
        """Parses and runs already scanned tokens."""
        statements = Parser(tokens, self.error_handler).parse()

        if self.error_handler.had_error:
            return self.error_handler.result()

        if self.debug_ast:
            printer = AstPrinter()
            for stmt in statements:
                print(printer.print(stmt), file=self.out)

        outcome = self.interpreter.interpret(statements)
        if not outcome.ok:
            self.error_handler.runtime_error(outcome.error)

        return self.error_handler.result()

    def run_file(self, path):
        """Runs the script at path."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                source = file.read()
        except (OSError, UnicodeDecodeError):
            raise SourceError(f"'{path}' could not be read")

        return self.run(source)

    def run_line(self, line):
        """Runs one REPL line. Error flags are cleared first so that one bad line does not taint the next. A line
        that is a bare expression (no trailing ";") has its value printed.
        """
        self.error_handler.reset(runtime=True)

        tokens = Lexer(line, self.error_handler).scan()
        if not Session.is_bare_expression(tokens):
            return self.run_tokens(tokens)

        expr = Parser(tokens, self.error_handler).parse_expression()
        if self.error_handler.had_error:
            return self.error_handler.result()

        outcome = self.interpreter.evaluate_line(expr)
        if outcome.ok:
            print(outcome.value, file=self.out)
        else:
            self.error_handler.runtime_error(outcome.error)

        return self.error_handler.result()

    @staticmethod
    def is_bare_expression(tokens):
        """Whether tokens (ending in EOF) look like an expression rather than a list of statements."""
        if len(tokens) < 2:
            return False
        first, last = tokens[0], tokens[-2]
        return first.type not in Session.STATEMENT_STARTS and last.type not in (TokenType.SEMICOLON,
                                                                                TokenType.RIGHT_BRACE)
