"""Session control for the Lox language: runs source text through scanner, parser, resolver and interpreter, either
once for a whole file or line by line from the interactive shell.
"""

from pylox.grammar.parser import parse
from pylox.grammar.printer import AstPrinter
from pylox.grammar.scanner import scan
from pylox.interpreter import Interpreter
from pylox.lang.error import ErrorHandler, GenericException
from pylox.resolver import resolve


class Session:
    """Governs a Lox session. Global variables and functions live as long as the session does.

    :param error_handler: where diagnostics and runtime errors are reported
    :param out: sink for program output (defaults to print)
    """

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out if out is not None else print

        self.interpreter = Interpreter(self.out)
        self.diagnostics = []  # static diagnostics of the last run

    def run(self, source, print_ast=False):
        """Scans, parses and resolves source, then interprets it if no static error was found. Static errors are
        reported to the error handler; a runtime error is raised for the handler's context manager to report.
        Returns whether the program was executed.
        """
        tokens, scan_diagnostics = scan(source)
        statements, parse_diagnostics = parse(tokens)

        self.diagnostics = scan_diagnostics + parse_diagnostics
        if self.error_handler.report(self.diagnostics):
            return False

        if print_ast:
            printer = AstPrinter()
            for stmt in statements:
                self.out(printer.print(stmt))
            return False

        locals_, self.diagnostics = resolve(statements)
        if self.error_handler.report(self.diagnostics):
            return False

        self.interpreter.resolve(locals_)
        self.interpreter.interpret(statements)
        return True

    def run_file(self, path, print_ast=False):
        """Reads path as a whole and runs it."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                source = file.read()
        except OSError:
            raise GenericException(f"'{path}' could not be opened", exit_code=ErrorHandler.EX_NOINPUT)

        return self.run(source, print_ast)
