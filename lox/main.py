"""Runs the Lox interpreter on a script, or in command-line mode when no script is given. Called from the lox console
script.

Exit statuses follow sysexits: 65 when the script has lexical or syntax errors, 70 when it stopped on a runtime error,
66 when it could not be read.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="lox", description="Tree-walking interpreter for the Lox language.")
    parser.add_argument("script", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree of each statement before running it")
    parser.add_argument("--no-color", dest="color", action="store_false", help="do not color error messages")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs lox interpreter. Returns the process exit status."""
    args = parse_args(argv)

    with ErrorHandler(color=args.color and sys.stderr.isatty()) as error_handler:
        sess = Session(error_handler, debug_ast=args.ast)

        if args.script is not None:
            return sess.run_file(args.script).exit_status

        Shell(sess).cmdloop()

    return 0  # also reached when the shell is interrupted


if __name__ == "__main__":
    sys.exit(main())
