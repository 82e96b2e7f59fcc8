"""Uses implementation of pure lambda calculus/arrowcalc statements to interpret files or run in command-line mode. Also
uses error handling context manager. Called from the arrowcalc console script.

Python version must be >=3.7, because error handling requires that dicts are insertion-ordered.
"""

import argparse
import sys

from arrowcalc.lang.error import ErrorHandler
from arrowcalc.lang.session import Session
from arrowcalc.lang.shell import Shell
from arrowcalc.pure.reducer import Reducer


def build_parser():
    parser = argparse.ArgumentParser(prog="arrowcalc", description="Untyped lambda calculus over JSON programs.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--max-steps", type=int, default=Reducer.STEP_LIMIT,
                        help="reduction passes allowed per statement (default: %(default)s)")
    parser.add_argument("--max-depth", type=int, default=Reducer.DEPTH_LIMIT,
                        help="pending work allowed within a single pass (default: %(default)s)")
    parser.add_argument("--trace", action="store_true", help="print the term after every reduction pass")
    parser.add_argument("--unhygienic", action="store_true",
                        help="substitute by name only, never renaming parameters (capture is possible)")
    parser.add_argument("--resugar", action="store_true", help="fold defined names back into results")
    return parser


def main(argv=None):
    """Runs arrowcalc interpreter. Called from arrowcalc console script."""
    assert sys.version_info >= (3, 7), "arrowcalc cannot be run with python < 3.7"

    args = build_parser().parse_args(argv)
    options = {
        "max_steps": args.max_steps,
        "max_depth": args.max_depth,
        "hygienic": not args.unhygienic,
        "resugar": args.resugar,
    }

    with ErrorHandler(trace=args.trace) as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, **options)
            sess.run()

            for stmt in sess.results:
                print(stmt.result)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()
