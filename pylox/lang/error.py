"""Error handling for the Lox language. Scanning, parsing and resolution never raise: they collect Diagnostics and
hand them back with their result. Only GenericExceptions should be raised while running a program: if another type
of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys
from dataclasses import dataclass

from termcolor import colored

from pylox.grammar.tokens import TokenType


@dataclass(frozen=True)
class Diagnostic:
    """A static (scan, parse or resolution) error. where is "", " at end" or " at '<lexeme>'"."""
    SYNTAX = "syntax"
    STATIC = "static"

    kind: str
    line: int
    where: str
    message: str

    @classmethod
    def at_line(cls, line, message):
        """Lexical errors have a line but no token to point at."""
        return cls(cls.SYNTAX, line, "", message)

    @classmethod
    def at_token(cls, token, message, kind=SYNTAX):
        where = " at end" if token.type is TokenType.EOF else f" at '{token.lexeme}'"
        return cls(kind, token.line, where, message)

    def __str__(self):
        return f"[line {self.line}] Error{self.where}: {self.message}"


class GenericException(Exception):
    """Base of every error raised while running Lox code. exit_code is the process status used in fatal mode."""
    exit_code = 70

    def __init__(self, msg, token=None, internal=False, exit_code=None):
        super().__init__(msg)
        self.msg = msg
        self.token = token  # offending token, if any
        self.internal = internal

        if exit_code is not None:
            self.exit_code = exit_code

    @property
    def line(self):
        return self.token.line if self.token is not None else None

    def __str__(self):
        if self.token is None:
            return self.msg
        return f"[line {self.token.line}] Error at '{self.token.lexeme}': {self.msg}"


class LoxRuntimeError(GenericException):
    """Type mismatch, undefined variable, bad call... Aborts the rest of the program being interpreted."""

    def __init__(self, token, msg):
        super().__init__(msg, token)


class ErrorHandler:
    """Context manager that reports Diagnostics and GenericExceptions, and turns any other Python error into an
    internal Lox error. In fatal mode (running a file) the first report ends the process with a status that tells
    static errors (EX_DATAERR) apart from runtime errors (EX_SOFTWARE).
    """
    ERROR = "red"
    EX_DATAERR = 65
    EX_NOINPUT = 66
    EX_SOFTWARE = 70

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream  # None means sys.stderr at print time

        self.had_error = False
        self.had_runtime_error = False

    def _print(self, msg):
        print(msg, file=self.stream if self.stream is not None else sys.stderr)

    def report(self, diagnostics):
        """Prints every diagnostic. Returns whether there was anything to report."""
        for diagnostic in diagnostics:
            prefix = colored(f"[line {diagnostic.line}] ", attrs=["bold"])
            error_msg = colored(f"Error{diagnostic.where}: ", ErrorHandler.ERROR, attrs=["bold"])
            self._print(prefix + error_msg + diagnostic.message)
            self.had_error = True

        if diagnostics and self.fatal:
            sys.exit(ErrorHandler.EX_DATAERR)
        return bool(diagnostics)

    def throw(self, error):
        """Prints error, which must be a GenericException. Exits with error.exit_code if fatal."""
        error_msg = ""
        if error.line is not None:
            error_msg += colored(f"[line {error.line}] ", attrs=["bold"])
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        where = f" at '{error.token.lexeme}'" if error.token is not None else ""
        error_msg += colored(f"Error{where}: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(error_msg)

        self.had_runtime_error = True
        if self.fatal:
            sys.exit(error.exit_code)

    def reset(self):
        """Forgets past errors. Used between lines of the interactive shell."""
        self.had_error = False
        self.had_runtime_error = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("Stack overflow."))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
