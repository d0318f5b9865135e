"""Static scope resolution. A single walk over the syntax tree that, for every Variable and Assign node, counts the
scopes between the reference and the scope that declares the name (its hop distance). References that no scope on
the stack declares are left out of the result: the interpreter looks them up by name in the global environment.

The walk also reports the static errors of the language: redeclaring a name in the same local scope, reading a
local variable inside its own initializer, and returning from top-level code. It never evaluates anything.
"""

from enum import Enum

from pylox.grammar import nodes
from pylox.lang.error import Diagnostic, GenericException


class FunctionType(Enum):
    NONE = "none"
    FUNCTION = "function"


class Resolver:
    """Walks statements with a stack of scopes. Each scope maps name: whether its initializer has been resolved."""

    def __init__(self):
        self.scopes = []
        self.current_function = FunctionType.NONE

        self.locals = {}  # Variable/Assign node: hop distance
        self.diagnostics = []

    def resolve(self, statements):
        """Resolves statements. Returns self.locals; errors are collected in self.diagnostics."""
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.locals

    def resolve_stmt(self, stmt):
        if isinstance(stmt, nodes.Block):
            self.begin_scope()
            self.resolve(stmt.statements)
            self.end_scope()

        elif isinstance(stmt, nodes.Var):
            # declare before the initializer and define after it: `var a = a;` must not see the new `a`
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)

        elif isinstance(stmt, nodes.Function):
            # defined eagerly so the body can refer to the function itself
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)

        elif isinstance(stmt, (nodes.Expression, nodes.Print)):
            self.resolve_expr(stmt.expression)

        elif isinstance(stmt, nodes.If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)

        elif isinstance(stmt, nodes.While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)

        elif isinstance(stmt, nodes.Return):
            if self.current_function is FunctionType.NONE:
                self.error(stmt.keyword, "Cannot return from top-level code.")
            if stmt.value is not None:
                self.resolve_expr(stmt.value)

        else:
            raise GenericException(f"cannot resolve {type(stmt).__name__}", internal=True)

    def resolve_expr(self, expr):
        if isinstance(expr, nodes.Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.error(expr.name, "Cannot read local variable in its own initializer.")
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, nodes.Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, (nodes.Binary, nodes.Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)

        elif isinstance(expr, nodes.Unary):
            self.resolve_expr(expr.right)

        elif isinstance(expr, nodes.Grouping):
            self.resolve_expr(expr.expression)

        elif isinstance(expr, nodes.Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)

        elif isinstance(expr, nodes.Literal):
            pass

        else:
            raise GenericException(f"cannot resolve {type(expr).__name__}", internal=True)

    def resolve_function(self, function, function_type):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_local(self, expr, name):
        """Records expr's hop distance if name is declared in any scope on the stack, innermost first."""
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = depth
                return

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        """Globals are not tracked: redeclaring a global is allowed."""
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, "Variable with this name already declared in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def error(self, token, message):
        self.diagnostics.append(Diagnostic.at_token(token, message, Diagnostic.STATIC))


def resolve(statements):
    """Returns (locals, diagnostics) for statements."""
    resolver = Resolver()
    return resolver.resolve(statements), resolver.diagnostics
