"""Runtime scopes. An Environment is one lexical scope: a dict of bindings plus a reference to the enclosing scope.

Environments are shared, never copied. A closure keeps a reference to the environment it was defined in, so that
scope outlives the call that created it, and two closures defined in the same scope see each other's assignments.
"""

from pylox.lang.error import LoxRuntimeError


class Environment:

    def __init__(self, enclosing=None):
        self.enclosing = enclosing  # None for the global environment
        self.values = {}

    def define(self, name, value):
        """Binds name in this scope, replacing any previous binding of name here."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a Token) up through the chain of scopes. Raises LoxRuntimeError if no scope binds it."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Rebinds name (a Token) in the nearest scope that binds it. Never creates a binding."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        """Returns the environment distance links up the chain (0 is self)."""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name (a Token) straight from the scope the resolver found it in."""
        values = self.ancestor(distance).values
        if name.lexeme not in values:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
        return values[name.lexeme]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment({self.values!r}, enclosing={self.enclosing!r})"
