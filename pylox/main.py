"""Runs .lox files or the interactive shell. Installed as the `pylox` console script.

Exit status in file mode: 65 for scan/parse/resolution errors, 70 for a runtime error, 66 if the file can't be read.
"""

import argparse
import sys

from pylox.lang.error import ErrorHandler
from pylox.lang.session import Session
from pylox.lang.shell import Shell


def main(argv=None):
    """Runs the Lox interpreter. Called from the pylox console script."""
    assert sys.version_info >= (3, 8), "pylox cannot be run with python < 3.8"

    parser = argparse.ArgumentParser(prog="pylox", description="Lox tree-walking interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree of each statement instead of running")
    args = parser.parse_args(argv)

    if args.file is not None:
        with ErrorHandler(fatal=True) as error_handler:
            Session(error_handler).run_file(args.file, print_ast=args.ast)
    else:
        Shell(Session(ErrorHandler(fatal=False))).cmdloop()


if __name__ == "__main__":
    main()
