"""Callable Lox values: user-defined functions (closures) and native functions provided by the host."""

import time
from abc import ABC, abstractmethod

from pylox.environment import Environment


class LoxCallable(ABC):
    """Anything that can appear on the left of a call expression. Compared by identity only."""

    @abstractmethod
    def arity(self):
        """Number of arguments the callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls with arguments (already evaluated, len(arguments) == arity()). Returns a Lox value."""


class LoxFunction(LoxCallable):
    """A function declaration paired with the environment it was declared in."""

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure  # fixed at creation, never reassigned

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        # chained to the defining scope, not the caller's: this is what makes closures lexical
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)
        return completion.value if completion is not None else None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self):
        return f"LoxFunction({self.declaration.name.lexeme!r})"


class NativeFunction(LoxCallable):
    """Function implemented in Python. function is called as function(interpreter, arguments)."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(interpreter, arguments)

    def __str__(self):
        return "<native fn>"

    def __repr__(self):
        return f"NativeFunction({self.name!r})"


def clock():
    """The `clock()` native: seconds from a monotonic clock, for timing Lox code."""
    return NativeFunction("clock", 0, lambda interpreter, arguments: time.monotonic())
