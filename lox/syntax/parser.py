"""Recursive descent parser for Lox. Converts a list of Tokens into a list of statements (see syntax/tree.py).

Grammar, from lowest to highest precedence:

```
<program>     ::= <declaration>* EOF
<declaration> ::= <var_decl> | <statement>
<var_decl>    ::= "var" IDENTIFIER ( "=" <expression> )? ";"
<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <while_stmt> | <block>
<for_stmt>    ::= "for" "(" ( <var_decl> | <expr_stmt> | ";" ) <expression>? ";" <expression>? ")" <statement>
<if_stmt>     ::= "if" "(" <expression> ")" <statement> ( "else" <statement> )?  ; else binds to the nearest if
<while_stmt>  ::= "while" "(" <expression> ")" <statement>
<block>       ::= "{" <declaration>* "}"

<expression>  ::= <assignment>
<assignment>  ::= IDENTIFIER "=" <assignment> | <logic_or>           ; right-associative
<logic_or>    ::= <logic_and> ( "or" <logic_and> )*
<logic_and>   ::= <equality> ( "and" <equality> )*
<equality>    ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison>  ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>        ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>      ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>       ::= ( "!" | "-" ) <unary> | <primary>
<primary>     ::= NUMBER | STRING | "true" | "false" | "nil" | IDENTIFIER | "(" <expression> ")"
```

Error recovery is panic-mode: within one declaration a missing token raises a ParseFault, which is turned into a failed
ParseOutcome at the declaration boundary. The declaration loop reports it, synchronizes to the next statement boundary
and carries on, so each broken statement costs exactly one error.
"""

from dataclasses import dataclass
from typing import Optional

from lox.lang.error import ParseFault
from lox.syntax import tree
from lox.syntax.tokens import TokenType


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing one rule: either the node it produced or the fault that stopped it."""
    node: Optional[object] = None
    fault: Optional[ParseFault] = None

    @property
    def ok(self):
        return self.fault is None


class Parser:
    """Parses one token list. Instances are single-use."""
    # tokens that begin a new statement, used as synchronization points
    BOUNDARIES = {
        TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
        TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
    }

    # operators of each left-associative binary tier
    EQUALITY = (TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)
    COMPARISON = (TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL)
    TERM = (TokenType.MINUS, TokenType.PLUS)
    FACTOR = (TokenType.SLASH, TokenType.STAR)

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

    def parse(self):
        """Returns every statement that parsed. Broken declarations are reported and skipped."""
        statements = []
        while not self.is_at_end():
            stmt = self.recover(self.declaration)
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_expression(self):
        """Parses tokens as a single bare expression (used by the REPL). Returns None if it does not parse."""
        outcome = self.attempt(self.expression_line)
        if not outcome.ok:
            self.report(outcome.fault)
        return outcome.node

    def attempt(self, rule):
        """Runs rule and wraps its result (or the ParseFault it raised) in a ParseOutcome."""
        try:
            return ParseOutcome(node=rule())
        except ParseFault as fault:
            return ParseOutcome(fault=fault)

    def recover(self, rule):
        """Recovery point: runs rule, and on failure reports the fault and synchronizes. Returns the statement or
        None.
        """
        outcome = self.attempt(rule)
        if outcome.ok:
            return outcome.node

        self.report(outcome.fault)
        self.synchronize()
        return None

    def report(self, fault):
        self.error_handler.token_error(fault.token, fault.message)

    # ----------------------------------------------------------------------------------------------------------------
    # statements

    def declaration(self):
        if self.match(TokenType.VAR):
            return self.var_declaration()
        return self.statement()

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return tree.Var(name, initializer)

    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return tree.Block(self.block())
        return self.expression_statement()

    def for_statement(self):
        """for loops have no node of their own: they are desugared into a While inside a Block."""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = tree.Block((body, tree.Expression(increment)))
        if condition is None:
            condition = tree.Literal(True)
        body = tree.While(condition, body)
        if initializer is not None:
            body = tree.Block((initializer, body))

        return body

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return tree.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return tree.Print(value)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return tree.While(condition, self.statement())

    def block(self):
        """Returns the declarations up to the closing brace. Broken inner declarations recover like top-level ones."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.recover(self.declaration)
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return tuple(statements)

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return tree.Expression(expr)

    def expression_line(self):
        expr = self.expression()
        self.consume(TokenType.EOF, "Expect end of input after expression.")
        return expr

    # ----------------------------------------------------------------------------------------------------------------
    # expressions

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logic_or()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, tree.Variable):
                return tree.Assign(expr.name, value)

            # reported, but not raised: the parser is not confused, so there is no need to synchronize
            self.report(ParseFault(equals, "Invalid assignment target."))

        return expr

    def logic_or(self):
        expr = self.logic_and()
        while self.match(TokenType.OR):
            operator = self.previous()
            expr = tree.Logical(expr, operator, self.logic_and())
        return expr

    def logic_and(self):
        expr = self.equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            expr = tree.Logical(expr, operator, self.equality())
        return expr

    def equality(self):
        return self.binary(Parser.EQUALITY, self.comparison)

    def comparison(self):
        return self.binary(Parser.COMPARISON, self.term)

    def term(self):
        return self.binary(Parser.TERM, self.factor)

    def factor(self):
        return self.binary(Parser.FACTOR, self.unary)

    def binary(self, operators, operand):
        """Left-associative binary tier: folds `a op b op c` into ((a op b) op c)."""
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            expr = tree.Binary(expr, operator, operand())
        return expr

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return tree.Unary(operator, self.unary())
        return self.primary()

    def primary(self):
        if self.match(TokenType.FALSE):
            return tree.Literal(False)
        if self.match(TokenType.TRUE):
            return tree.Literal(True)
        if self.match(TokenType.NIL):
            return tree.Literal(None)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return tree.Literal(self.previous().literal)

        if self.match(TokenType.IDENTIFIER):
            return tree.Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return tree.Grouping(expr)

        raise ParseFault(self.peek(), "Expect expression.")

    # ----------------------------------------------------------------------------------------------------------------
    # token helpers

    def synchronize(self):
        """Discards tokens until a statement boundary: just past a ";" or right before a statement keyword."""
        self.advance()

        while not self.is_at_end():
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in Parser.BOUNDARIES:
                return
            self.advance()

    def match(self, *token_types):
        """Consumes the current token if it is any of token_types."""
        for token_type in token_types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type, message):
        if self.check(token_type):
            return self.advance()
        raise ParseFault(self.peek(), message)

    def check(self, token_type):
        if self.is_at_end():
            return token_type is TokenType.EOF
        return self.peek().type is token_type

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().type is TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

