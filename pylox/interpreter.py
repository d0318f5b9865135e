"""Tree-walking evaluator for Lox. Basic program flow:
    1. Scanner (grammar/scanner.py): source text to tokens
    2. Parser (grammar/parser.py): tokens to a list of statement nodes, `for` loops desugared on the way
    3. Resolver (resolver.py): hop distance of every local variable reference, plus static errors
    4. Interpreter (this module): executes the statements against a chain of Environments

Values are plain Python objects: None (nil), bool, float, str, and LoxCallable. Executing a statement returns None,
or a Completion when a `return` was hit; the Completion is handed back up through blocks, ifs and loops until the
function call that owns it. Runtime errors are raised as LoxRuntimeError and end the whole program.
"""

import math
import sys
from dataclasses import dataclass

from pylox.callable import LoxCallable, LoxFunction, clock
from pylox.environment import Environment
from pylox.grammar import nodes
from pylox.grammar.tokens import TokenType
from pylox.lang.error import GenericException, LoxRuntimeError


@dataclass(frozen=True)
class Completion:
    """A `return` in progress. Not an error: it is how a function call ends early."""
    value: object


def is_truthy(value):
    """nil and false are falsy, everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """No coercion across kinds: `true == 1` is false even though Python says True == 1."""
    # NaN != NaN here (IEEE), while jlox compares with Double.equals and prints true for `n == n` when n is NaN
    if type(left) is not type(right):
        return False
    if isinstance(left, LoxCallable):
        return left is right
    return left == right


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = str(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


def divide(left, right):
    """IEEE division: x/0 is +-inf and 0/0 is nan, like the doubles Lox numbers are."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


class Interpreter:
    """Executes statements. Global bindings persist across calls to interpret, so a shell can feed it line by line.

    :param out: sink for `print` output, called with one line of text per print statement (defaults to print)
    """
    RECURSION_LIMIT = 10000  # each Lox call costs about seven Python frames

    ARITHMETIC = {
        TokenType.MINUS: lambda left, right: left - right,
        TokenType.STAR: lambda left, right: left * right,
        TokenType.SLASH: divide,
        TokenType.GREATER: lambda left, right: left > right,
        TokenType.GREATER_EQUAL: lambda left, right: left >= right,
        TokenType.LESS: lambda left, right: left < right,
        TokenType.LESS_EQUAL: lambda left, right: left <= right,
    }

    def __init__(self, out=None):
        if sys.getrecursionlimit() < Interpreter.RECURSION_LIMIT:
            sys.setrecursionlimit(Interpreter.RECURSION_LIMIT)

        self.out = out if out is not None else print

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # Variable/Assign node: hop distance, filled by resolve

        self.globals.define("clock", clock())

    def resolve(self, locals_):
        """Records the hop distances computed by the Resolver."""
        self.locals.update(locals_)

    def interpret(self, statements):
        """Executes statements in order. A LoxRuntimeError stops execution and propagates to the caller."""
        for stmt in statements:
            self.execute(stmt)

    # ---------------------------------------------------------------------------------------------------- statements

    def execute(self, stmt):
        """Executes stmt. Returns a Completion if a `return` was executed, else None."""
        if isinstance(stmt, nodes.Expression):
            self.evaluate(stmt.expression)

        elif isinstance(stmt, nodes.Print):
            self.out(stringify(self.evaluate(stmt.expression)))

        elif isinstance(stmt, nodes.Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)

        elif isinstance(stmt, nodes.Block):
            return self.execute_block(stmt.statements, Environment(self.environment))

        elif isinstance(stmt, nodes.If):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                return self.execute(stmt.else_branch)

        elif isinstance(stmt, nodes.While):
            while is_truthy(self.evaluate(stmt.condition)):
                completion = self.execute(stmt.body)
                if completion is not None:
                    return completion

        elif isinstance(stmt, nodes.Function):
            self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))

        elif isinstance(stmt, nodes.Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return Completion(value)

        else:
            raise GenericException(f"cannot execute {type(stmt).__name__}", internal=True)

        return None

    def execute_block(self, statements, environment):
        """Executes statements with environment as the current scope. The previous scope is always restored."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                completion = self.execute(stmt)
                if completion is not None:
                    return completion
        finally:
            self.environment = previous
        return None

    # --------------------------------------------------------------------------------------------------- expressions

    def evaluate(self, expr):
        if isinstance(expr, nodes.Literal):
            return expr.value

        elif isinstance(expr, nodes.Grouping):
            return self.evaluate(expr.expression)

        elif isinstance(expr, nodes.Unary):
            right = self.evaluate(expr.right)
            if expr.operator.type is TokenType.BANG:
                return not is_truthy(right)
            Interpreter.check_number_operand(expr.operator, right)
            return -right

        elif isinstance(expr, nodes.Binary):
            return self.evaluate_binary(expr)

        elif isinstance(expr, nodes.Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type is TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        elif isinstance(expr, nodes.Variable):
            return self.look_up_variable(expr.name, expr)

        elif isinstance(expr, nodes.Assign):
            value = self.evaluate(expr.value)
            if expr in self.locals:
                self.environment.assign_at(self.locals[expr], expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value

        elif isinstance(expr, nodes.Call):
            return self.evaluate_call(expr)

        raise GenericException(f"cannot evaluate {type(expr).__name__}", internal=True)

    def evaluate_binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator

        if operator.type is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if operator.type is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if operator.type is TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        Interpreter.check_number_operands(operator, left, right)
        return Interpreter.ARITHMETIC[operator.type](left, right)

    def evaluate_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        return callee.call(self, arguments)

    def look_up_variable(self, name, expr):
        """Resolved references go straight to their scope; anything else must be a global."""
        if expr in self.locals:
            return self.environment.get_at(self.locals[expr], name)
        return self.globals.get(name)

    @staticmethod
    def check_number_operand(operator, operand):
        if not isinstance(operand, float):
            raise LoxRuntimeError(operator, "Operand must be a number.")

    @staticmethod
    def check_number_operands(operator, left, right):
        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError(operator, "Operands must be numbers.")
