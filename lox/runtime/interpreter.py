"""Tree-walking evaluator for Lox.

Runtime values are plain Python objects:

```
number  -> float
string  -> str
boolean -> bool
nil     -> None
(none)  -> UNASSIGNED   ; value of `var x;`, see runtime/environment.py
```

Expressions raise LoxRuntimeError when they go wrong. That error never travels further than the statement being
executed: execute turns it into a failed Outcome, and statement sequences stop at the first failed Outcome and hand it
back to their caller.
"""

import sys
from dataclasses import dataclass
from typing import Optional

from lox.lang.error import LoxRuntimeError
from lox.runtime.environment import UNASSIGNED, Environment
from lox.syntax import tree
from lox.syntax.tokens import TokenType


@dataclass(frozen=True)
class Outcome:
    """Result of executing statements (or evaluating a REPL expression): completed, or stopped by error."""
    value: object = None
    error: Optional[LoxRuntimeError] = None

    @property
    def ok(self):
        return self.error is None


COMPLETED = Outcome()


def is_truthy(value):
    """nil and false are falsy, everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Value equality. Values of different types are never equal, so true != 1 and nil only equals nil."""
    return type(left) is type(right) and left == right


def stringify(value):
    """Display form of a value, as written by print."""
    if value is None or value is UNASSIGNED:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


class Interpreter:
    """Executes statements against a global scope that persists between calls to interpret."""

    def __init__(self, out=None):
        self.out = out if out is not None else sys.stdout
        self.environment = Environment()
        self.scope = Environment.GLOBAL  # handle of the current scope

        self._evaluators = {
            tree.Literal: self.evaluate_literal,
            tree.Grouping: self.evaluate_grouping,
            tree.Variable: self.evaluate_variable,
            tree.Assign: self.evaluate_assign,
            tree.Logical: self.evaluate_logical,
            tree.Unary: self.evaluate_unary,
            tree.Binary: self.evaluate_binary,
        }
        self._executors = {
            tree.Expression: self.execute_expression,
            tree.Print: self.execute_print,
            tree.Var: self.execute_var,
            tree.Block: self.execute_block,
            tree.If: self.execute_if,
            tree.While: self.execute_while,
        }

    def interpret(self, statements):
        """Executes statements in order. Returns COMPLETED, or the failed Outcome of the statement that stopped the
        run. Side effects of the statements before it are kept.
        """
        return self.execute_all(statements)

    def evaluate_line(self, expr):
        """Evaluates a bare expression typed at the REPL. The Outcome's value is the result's display form."""
        try:
            return Outcome(value=stringify(self.evaluate(expr)))
        except LoxRuntimeError as error:
            return Outcome(error=error)

    # ----------------------------------------------------------------------------------------------------------------
    # statements

    def execute_all(self, statements):
        for statement in statements:
            outcome = self.execute(statement)
            if not outcome.ok:
                return outcome
        return COMPLETED

    def execute(self, stmt):
        try:
            executor = self._executors[type(stmt)]
        except KeyError:
            raise TypeError(f"cannot execute '{type(stmt).__name__}'") from None

        try:
            return executor(stmt)
        except LoxRuntimeError as error:
            return Outcome(error=error)

    def execute_expression(self, stmt):
        self.evaluate(stmt.expression)
        return COMPLETED

    def execute_print(self, stmt):
        value = self.evaluate(stmt.expression)
        print(stringify(value), file=self.out)
        return COMPLETED

    def execute_var(self, stmt):
        value = UNASSIGNED
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)

        self.environment.define(self.scope, stmt.name.lexeme, value)
        return COMPLETED

    def execute_block(self, stmt):
        """Runs the block in a fresh child scope. The enclosing scope is restored however the block ends."""
        previous = self.scope
        self.scope = self.environment.push(previous)
        try:
            return self.execute_all(stmt.statements)
        finally:
            self.environment.pop(self.scope)
            self.scope = previous

    def execute_if(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return COMPLETED

    def execute_while(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            outcome = self.execute(stmt.body)
            if not outcome.ok:
                return outcome
        return COMPLETED

    # ----------------------------------------------------------------------------------------------------------------
    # expressions

    def evaluate(self, expr):
        try:
            evaluator = self._evaluators[type(expr)]
        except KeyError:
            raise TypeError(f"cannot evaluate '{type(expr).__name__}'") from None
        return evaluator(expr)

    def evaluate_literal(self, expr):
        return expr.value

    def evaluate_grouping(self, expr):
        return self.evaluate(expr.expression)

    def evaluate_variable(self, expr):
        return self.environment.get(self.scope, expr.name)

    def evaluate_assign(self, expr):
        value = self.evaluate(expr.value)
        self.environment.assign(self.scope, expr.name, value)
        return value

    def evaluate_logical(self, expr):
        """Short-circuits: the right operand is only evaluated if the left one does not decide the result."""
        left = self.evaluate(expr.left)

        if expr.operator.type is TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def evaluate_unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type is TokenType.BANG:
            return not is_truthy(right)

        Interpreter.check_number_operand(expr.operator, right)
        return -right

    def evaluate_binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        kind = operator.type

        if kind is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if kind is TokenType.PLUS:
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or at least one string.")

        Interpreter.check_number_operands(operator, left, right)

        if kind is TokenType.MINUS:
            return left - right
        if kind is TokenType.STAR:
            return left * right
        if kind is TokenType.SLASH:
            if right == 0:
                raise LoxRuntimeError(operator, "Division by zero.")
            return left / right
        if kind is TokenType.GREATER:
            return left > right
        if kind is TokenType.GREATER_EQUAL:
            return left >= right
        if kind is TokenType.LESS:
            return left < right
        if kind is TokenType.LESS_EQUAL:
            return left <= right

        raise TypeError(f"unknown binary operator '{operator.lexeme}'")

    @staticmethod
    def check_number_operand(operator, operand):
        if not isinstance(operand, float):
            raise LoxRuntimeError(operator, "Operand must be a number.")

    @staticmethod
    def check_number_operands(operator, left, right):
        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError(operator, "Operands must be numbers.")
