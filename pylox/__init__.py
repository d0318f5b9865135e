"""Lox interpreter.

For reference:
- "Lox": the small dynamically typed, lexically scoped scripting language this package runs
- `grammar`: scanner, syntax tree nodes and parser (front end)
- `resolver`, `environment`, `callable`, `interpreter`: static scope resolution and evaluation
- `lang`: error reporting, sessions and the interactive shell
"""

__version__ = "0.1.0"
