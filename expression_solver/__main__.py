import argparse
import math
import sys
from typing import Dict, List, Optional, Sequence

import numpy as np

from . import __version__
from .config import SolverConfig
from .errors import ExpressionError
from .expression_tree.utils import SymPySimplifier
from .logging_system import LogLevel, configure_logging
from .solver import ExpressionSolver

TRACE_VARIABLE = 't'
TRACE_STEP = 0.1


def _parse_bindings(pairs: Sequence[str]) -> Dict[str, float]:
    bindings: Dict[str, float] = {}
    for pair in pairs:
        name, sep, value = pair.partition('=')
        if not sep or not name:
            raise ValueError(f"expected NAME=VALUE, got {pair!r}")
        bindings[name.strip()] = float(value)
    return bindings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="expression-solver",
        description="Parse, optimize and evaluate infix math expressions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  expression-solver "3x + y^2" --var x=2 --var y=3
  expression-solver "sin x" "cos x" --sweep x 0 1 0.25
  expression-solver            (interactive function tracer over t)
        """,
    )
    parser.add_argument("expressions", nargs="*", help="expressions to evaluate")
    parser.add_argument(
        "-v", "--version", action="version", version=f"expression-solver {__version__}",
        help="prints the version number and exits",
    )
    parser.add_argument(
        "--var", action="append", default=[], metavar="NAME=VALUE",
        help="bind a variable (repeatable)",
    )
    parser.add_argument(
        "--sweep", nargs=4, metavar=("NAME", "START", "STOP", "STEP"),
        help="evaluate across a range of one variable",
    )
    parser.add_argument("--no-optimize", action="store_true", help="skip tree optimization")
    parser.add_argument(
        "--irrational", action="store_true",
        help="disable rewrites that assume finite operands (x*0 -> 0, x-x -> 0, x/x -> 1)",
    )
    parser.add_argument("--sympy", action="store_true", help="also print a sympy-simplified form")
    parser.add_argument("-D", "--debug", action="store_true", help="log every applied rewrite")
    parser.add_argument("-V", "--verbose", action="store_true", help="log parse and optimize summaries")
    parser.add_argument("-L", "--logfile", metavar="FILE", help="write logs to FILE")
    return parser


def _configure_logging(args):
    if args.debug:
        level = LogLevel.VERBOSE
    elif args.verbose:
        level = LogLevel.DETAILED
    else:
        level = LogLevel.MINIMAL
    configure_logging(level, log_to_file=args.logfile is not None, log_file_path=args.logfile)


def _evaluate_expressions(args, config: SolverConfig, bindings: Dict[str, float]):
    names = list(bindings)
    sweep_values: Optional[np.ndarray] = None
    if args.sweep:
        sweep_name = args.sweep[0]
        start, stop, step = (float(value) for value in args.sweep[1:])
        if step <= 0:
            raise ValueError("sweep STEP must be positive")
        sweep_values = np.arange(start, stop + step / 2, step)
        if sweep_name not in bindings:
            names.append(sweep_name)
            bindings[sweep_name] = start

    solver = ExpressionSolver(names, [bindings[name] for name in names], config)
    optimize = not args.no_optimize
    simplifier = SymPySimplifier() if args.sympy else None

    for text in args.expressions:
        expression = solver.parse_string(text, optimize=optimize)
        if optimize:
            print(f"{text}  =>  {expression}")
        if simplifier is not None:
            print(f"  sympy: {simplifier.simplify_expression(expression.root)['simplified']}")

        if sweep_values is None:
            print(f"  = {solver.eval(expression)!r}")
            continue

        rows = np.tile(np.asarray([bindings[name] for name in names], dtype=np.float64), (len(sweep_values), 1))
        rows[:, names.index(args.sweep[0])] = sweep_values
        for x, y in zip(sweep_values, solver.eval_batch(expression, rows)):
            print(f"  {args.sweep[0]}={x:.6g}\t{float(y)!r}")


def run_tracer(config: SolverConfig, optimize: bool = True):
    """Interactive tracer: read functions of t, then print their values per t

    pi and e are predefined alongside t.
    """
    solver = ExpressionSolver([TRACE_VARIABLE, 'pi', 'e'], [0.0, math.pi, math.e], config)
    functions: List = []
    print(f"Enter functions of {TRACE_VARIABLE}, one per line (empty line to finish):")
    while True:
        line = input().strip()
        if not line:
            break
        try:
            functions.append(solver.parse_string(line, optimize=optimize))
        except ExpressionError as e:
            print(f"Error: {e}")
    if not functions:
        return

    print(f"Enter {TRACE_VARIABLE} values (empty line steps by {TRACE_STEP}, 'quit' exits):")
    t = 0.0
    while True:
        line = input().strip()
        if line == 'quit':
            break
        try:
            t = t + TRACE_STEP if not line else solver.eval_string(line)
        except ExpressionError as e:
            print(f"Error: {e}")
            continue
        solver.context.bind(TRACE_VARIABLE, t)
        values = ', '.join(repr(solver.eval(function)) for function in functions)
        print(f"{TRACE_VARIABLE}={t!r}: ({values})")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        bindings = _parse_bindings(args.var)
    except ValueError as e:
        parser.error(str(e))

    config = SolverConfig(rational=not args.irrational, optimize=not args.no_optimize)
    try:
        if args.expressions:
            _evaluate_expressions(args, config, bindings)
        else:
            run_tracer(config, optimize=not args.no_optimize)
    except EOFError:
        pass
    except (ExpressionError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
