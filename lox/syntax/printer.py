"""Debug rendering of syntax trees as parenthesized prefix strings, e.g. `1 + 2 * 3` -> `(+ 1 (* 2 3))`."""

from lox.syntax import tree


class AstPrinter:
    """Renders Expr and Stmt nodes. Used by the --ast command line flag."""

    def __init__(self):
        self._renderers = {
            tree.Literal: self.literal,
            tree.Grouping: lambda node: self.parenthesize("group", node.expression),
            tree.Variable: lambda node: f"(var {node.name.lexeme})",
            tree.Assign: lambda node: self.parenthesize(f"= {node.name.lexeme}", node.value),
            tree.Logical: lambda node: self.parenthesize(node.operator.lexeme, node.left, node.right),
            tree.Unary: lambda node: self.parenthesize(node.operator.lexeme, node.right),
            tree.Binary: lambda node: self.parenthesize(node.operator.lexeme, node.left, node.right),
            tree.Expression: lambda node: self.parenthesize(";", node.expression),
            tree.Print: lambda node: self.parenthesize("print", node.expression),
            tree.Var: self.var,
            tree.Block: lambda node: self.parenthesize("block", *node.statements),
            tree.If: self.if_,
            tree.While: lambda node: self.parenthesize("while", node.condition, node.body),
        }

    def print(self, node):
        """Returns the parenthesized form of node."""
        try:
            renderer = self._renderers[type(node)]
        except KeyError:
            raise TypeError(f"cannot print '{type(node).__name__}'") from None
        return renderer(node)

    def literal(self, node):
        if node.value is None:
            return "nil"
        if isinstance(node.value, bool):
            return str(node.value).lower()
        if isinstance(node.value, str):
            return f'"{node.value}"'
        return str(node.value)

    def var(self, node):
        if node.initializer is None:
            return f"(var {node.name.lexeme})"
        return self.parenthesize(f"var {node.name.lexeme} =", node.initializer)

    def if_(self, node):
        if node.else_branch is None:
            return self.parenthesize("if", node.condition, node.then_branch)
        return self.parenthesize("if-else", node.condition, node.then_branch, node.else_branch)

    def parenthesize(self, name, *nodes):
        return "(" + " ".join([name] + [self.print(node) for node in nodes]) + ")"
