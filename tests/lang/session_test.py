import contextlib
import io
import os
import tempfile
import unittest

from lox.lang.error import ErrorHandler, RunResult, SourceError
from lox.lang.session import Session
from lox.lang.shell import Shell
from lox.syntax.lexical import Lexer
from lox.main import main


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.sess = Session(ErrorHandler(stream=self.err), out=self.out)

    def test_run(self):
        result = self.sess.run('var greeting = "hello"; print greeting + " world";')

        self.assertEqual(RunResult(), result)
        self.assertEqual("hello world\n", self.out.getvalue())
        self.assertEqual("", self.err.getvalue())

    def test_static_error_skips_execution(self):
        result = self.sess.run("print 1;\nprint (;")

        self.assertEqual(65, result.exit_status)
        self.assertEqual("", self.out.getvalue())
        self.assertEqual("[line 2] Error at ';': Expect expression.\n", self.err.getvalue())

    def test_lexical_error_skips_execution(self):
        result = self.sess.run("print 1; @")

        self.assertTrue(result.had_error)
        self.assertEqual("", self.out.getvalue())
        self.assertEqual("[line 1] Error: Unexpected character.\n", self.err.getvalue())

    def test_runtime_error(self):
        result = self.sess.run('print "before";\nprint -"x";\nprint "after";')

        self.assertEqual(RunResult(had_runtime_error=True), result)
        self.assertEqual(70, result.exit_status)
        self.assertEqual("before\n", self.out.getvalue())
        self.assertEqual("Operand must be a number.\n[line 2]\n", self.err.getvalue())

    def test_independent_sessions(self):
        other = Session(ErrorHandler(stream=io.StringIO()), out=io.StringIO())
        other.run("var a = 1; print -nil;")

        self.assertEqual(RunResult(), self.sess.run("var a = 2;"))
        self.sess.run_line("print a;")
        self.assertEqual("2\n", self.out.getvalue())

    def test_debug_ast(self):
        sess = Session(ErrorHandler(stream=self.err), out=self.out, debug_ast=True)
        sess.run("var a = 1 + 2; print a;")

        self.assertEqual("(var a = (+ 1.0 2.0))\n(print (var a))\n3\n", self.out.getvalue())

    def test_run_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "script.lox")
            with open(path, "w", encoding="utf-8") as file:
                file.write("// comment\nvar n = 3;\nwhile (n > 0) { print n; n = n - 1; }\n")

            self.assertEqual(RunResult(), self.sess.run_file(path))

            self.assertRaises(SourceError, self.sess.run_file, os.path.join(directory, "missing.lox"))

        self.assertEqual("3\n2\n1\n", self.out.getvalue())


class ReplTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.sess = Session(ErrorHandler(stream=self.err), out=self.out)

    def test_bindings_persist(self):
        self.sess.run_line("var a = 1;")
        self.sess.run_line("{ a = a + 1; }")
        self.sess.run_line("print a;")

        self.assertEqual("2\n", self.out.getvalue())

    def test_bare_expression_is_printed(self):
        cases = {
            "1 + 2": "3\n",
            '"n = " + 5': "n = 5\n",
            "nil": "nil\n",
            "1 < 2 and 3": "3\n",
        }
        for case, expected in cases.items():
            self.setUp()
            self.sess.run_line(case)
            self.assertEqual(expected, self.out.getvalue(), case)

        self.setUp()
        self.sess.run_line("var b = 2;")
        self.sess.run_line("b = b * 21")
        self.assertEqual("42\n", self.out.getvalue())

    def test_statement_lines_are_not_echoed(self):
        self.sess.run_line("1 + 2;")
        self.sess.run_line("var a = 1;")
        self.sess.run_line("{ a; }")

        self.assertEqual("", self.out.getvalue())

    def test_bad_line_does_not_end_session(self):
        first = self.sess.run_line("print ;")
        second = self.sess.run_line("print 1 / 0;")
        third = self.sess.run_line("print 3;")

        self.assertEqual(RunResult(had_error=True), first)
        self.assertEqual(RunResult(had_runtime_error=True), second)
        self.assertEqual(RunResult(), third)
        self.assertEqual("3\n", self.out.getvalue())
        self.assertEqual("[line 1] Error at ';': Expect expression.\nDivision by zero.\n[line 1]\n",
                         self.err.getvalue())

    def test_bare_expression_errors(self):
        self.assertTrue(self.sess.run_line("1 +").had_error)
        self.assertTrue(self.sess.run_line("undefined").had_runtime_error)
        self.assertEqual("", self.out.getvalue())
        self.assertEqual("[line 1] Error at end: Expect expression.\nUndefined variable 'undefined'.\n[line 1]\n",
                         self.err.getvalue())

    def test_is_bare_expression(self):
        should_fail = ["", "print 1", "var a", "{ 1 }", "1;", "if (a) b", "while (a) b", "for (;;) a"]
        for case in should_fail:
            tokens = self.sess_tokens(case)
            self.assertFalse(Session.is_bare_expression(tokens), case)

        should_pass = ["1", "a = 2", "(1 + 2) * 3", "a or b"]
        for case in should_pass:
            tokens = self.sess_tokens(case)
            self.assertTrue(Session.is_bare_expression(tokens), case)

    def sess_tokens(self, source):
        return Lexer(source, self.sess.error_handler).scan()


class ShellTestCase(unittest.TestCase):

    def run_shell(self, lines):
        out = io.StringIO()
        err = io.StringIO()
        shell = Shell(Session(ErrorHandler(stream=err), out=out), stdin=io.StringIO(lines), stdout=io.StringIO())
        shell.use_rawinput = False
        shell.cmdloop(intro="")
        return out.getvalue(), err.getvalue(), shell

    def test_lines(self):
        out, err, __ = self.run_shell('var a = 2;\n\nprint a * 3;\na + 1\nprint "x" -;\nprint a;\n')

        self.assertEqual("6\n3\n2\n", out)
        self.assertEqual("[line 1] Error at ';': Expect expression.\n", err)

    def test_exit(self):
        out, __, shell = self.run_shell("print 1;\nexit\nprint 2;\n")

        self.assertEqual("1\n", out)
        self.assertFalse(shell.sess.error_handler.fatal)

    def test_help(self):
        __, __, shell = self.run_shell("help\n")
        self.assertIn("Welcome to the Lox interpreter!", shell.stdout.getvalue())


class MainTestCase(unittest.TestCase):

    def run_main(self, source, *flags):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "script.lox")
            with open(path, "w", encoding="utf-8") as file:
                file.write(source)

            out, err = io.StringIO(), io.StringIO()
            with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
                status = main([path, *flags])
        return status, out.getvalue(), err.getvalue()

    def test_exit_statuses(self):
        cases = {
            "print 1;": (0, "1\n", ""),
            "print 1": (65, "", "[line 1] Error at end: Expect ';' after value.\n"),
            "print 1;\nprint nil * 2;": (70, "1\n", "Operands must be numbers.\n[line 2]\n"),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.run_main(case, "--no-color"), case)

    def test_ast_flag(self):
        status, out, __ = self.run_main("print 1 + 2;", "--ast")
        self.assertEqual(0, status)
        self.assertEqual("(print (+ 1.0 2.0))\n3\n", out)

    def test_missing_script(self):
        err = io.StringIO()
        with contextlib.redirect_stderr(err), self.assertRaises(SystemExit) as context:
            main([os.path.join(tempfile.gettempdir(), "does-not-exist.lox")])

        self.assertEqual(66, context.exception.code)
        self.assertIn("could not be read", err.getvalue())


if __name__ == '__main__':
    unittest.main()
