"""Lexical analysis for Lox. Converts raw source text into a list of Tokens in a single forward pass.

Lexical grammar can be loosely defined as follows:

```
<number>     ::= <digit>+ ( "." <digit>+ )?     ; a trailing "." is not part of the number
<string>     ::= '"' <char>* '"'                ; may span lines, no escape sequences
<identifier> ::= <alpha> ( <alpha> | <digit> )*  ; <alpha> is a-z, A-Z or "_"
<comment>    ::= "//" <char>* <newline>
               | "/*" ( <char> | <comment> )* "*/"  ; block comments nest
```

Lexical errors never abort scanning: they are reported and the lexer moves on, so several independent errors can be
surfaced in one pass. The token list always ends with an EOF token.
"""

from lox.syntax.tokens import KEYWORDS, Token, TokenType


class Lexer:
    """Scans a single source string. Instances are single-use: call scan once."""
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "{": TokenType.LEFT_BRACE,
        "}": TokenType.RIGHT_BRACE,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
    }
    # char: (type if followed by "=", type otherwise)
    DOUBLE = {
        "!": (TokenType.BANG_EQUAL, TokenType.BANG),
        "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": (TokenType.LESS_EQUAL, TokenType.LESS),
        ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }
    WHITESPACE = " \r\t"

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler
        self.tokens = []

        self.start = 0    # first character of the lexeme being scanned
        self.current = 0  # character currently being considered
        self.line = 1

    def scan(self):
        """Returns the list of tokens in self.source, terminated by an EOF token."""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in Lexer.SINGLE:
            self.add_token(Lexer.SINGLE[char])
        elif char in Lexer.DOUBLE:
            matched, single = Lexer.DOUBLE[char]
            self.add_token(matched if self.match("=") else single)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            elif self.match("*"):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)
        elif char in Lexer.WHITESPACE:
            pass
        elif char == "\n":
            self.line += 1
        elif char == '"':
            self.string()
        elif Lexer.is_digit(char):
            self.number()
        elif Lexer.is_alpha(char):
            self.identifier()
        else:
            # already consumed, so scanning simply continues with the next character
            self.error_handler.error(self.line, "Unexpected character.")

    def block_comment(self):
        """Consumes a (possibly nested) block comment. The opening "/*" has already been consumed."""
        depth = 1
        while depth > 0:
            if self.is_at_end():
                self.error_handler.error(self.line, "Unterminated block comment.")
                return

            char, next_char = self.peek(), self.peek_next()
            if char == "*" and next_char == "/":
                self.current += 2
                depth -= 1
            elif char == "/" and next_char == "*":
                self.current += 2
                depth += 1
            else:
                if char == "\n":
                    self.line += 1
                self.advance()

    def string(self):
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error_handler.error(self.line, "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while Lexer.is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and Lexer.is_digit(self.peek_next()):
            self.advance()
            while Lexer.is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while Lexer.is_alpha(self.peek()) or Lexer.is_digit(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def match(self, expected):
        """Consumes the current character only if it is expected."""
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "" if self.is_at_end() else self.source[self.current]

    def peek_next(self):
        return "" if self.current + 1 >= len(self.source) else self.source[self.current + 1]

    def advance(self):
        self.current += 1
        return self.source[self.current - 1]

    def is_at_end(self):
        return self.current >= len(self.source)

    def add_token(self, token_type, literal=None):
        self.tokens.append(Token(token_type, self.source[self.start:self.current], literal, self.line))

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"

    @staticmethod
    def is_alpha(char):
        return char == "_" or "a" <= char <= "z" or "A" <= char <= "Z"

