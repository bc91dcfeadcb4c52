"""Variable scopes for the Lox interpreter.

Scopes live in an arena: Environment keeps every live scope in a list, and a scope is referred to by its index (its
handle). Each scope records the handle of its enclosing scope, so a lookup walks parent handles up to the global scope
(handle 0). Block scopes are created on block entry and discarded on block exit, innermost first, which makes the arena
a stack.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from lox.lang.error import LoxRuntimeError


class _Unassigned:
    """Type of UNASSIGNED, the value of a variable declared without an initializer. Distinct from nil."""

    def __repr__(self):
        return "UNASSIGNED"


UNASSIGNED = _Unassigned()


@dataclass
class Scope:
    parent: Optional[int]
    values: Dict[str, object] = field(default_factory=dict)


class Environment:
    """Arena of scopes. Names are str, lookups and assignments take the name's Token for error reporting."""
    GLOBAL = 0

    def __init__(self):
        self.scopes = [Scope(None)]

    def push(self, parent):
        """Creates a scope enclosed by parent and returns its handle."""
        self.scopes.append(Scope(parent))
        return len(self.scopes) - 1

    def pop(self, handle):
        """Discards the scope at handle, which must be the most recently created one. The global scope is never
        discarded.
        """
        if handle == Environment.GLOBAL or handle != len(self.scopes) - 1:
            raise ValueError(f"scope {handle} is not the innermost block scope")
        self.scopes.pop()

    def define(self, handle, name, value):
        """Binds name in the scope at handle. Redefinition simply replaces the previous value."""
        self.scopes[handle].values[name] = value

    def get(self, handle, name):
        """Returns the value of the nearest binding of name (a Token) visible from handle."""
        scope = self.resolve(handle, name)
        return scope.values[name.lexeme]

    def assign(self, handle, name, value):
        """Rebinds the nearest existing binding of name visible from handle. Never creates a binding."""
        scope = self.resolve(handle, name)
        scope.values[name.lexeme] = value

    def resolve(self, handle, name):
        """Returns the innermost scope visible from handle that binds name."""
        while handle is not None:
            scope = self.scopes[handle]
            if name.lexeme in scope.values:
                return scope
            handle = scope.parent

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def __len__(self):
        return len(self.scopes)
