"""
Command-line entry point.

Sub-commands:
- eval: evaluate expressions given as arguments
- keys: replay a sequence of keypad presses
- batch: evaluate every line of a text file or archive with worker processes
"""

import argparse
from pathlib import Path
import sys
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError

from keypad_calculator.batch.runner import BatchEvaluator
from keypad_calculator.common.operations import OperationResult
from keypad_calculator.session.session import CalculatorSession


class CliArgs(BaseModel):
    """
    Pydantic model used to validate the batch sub-command arguments.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing arithmetic operations.
    output : Path, optional
        Results file, derived from ``file_path`` when omitted.
    workers : int, optional
        Maximum number of simultaneous worker processes.
    """

    file_path: FilePath
    output: Optional[Path] = None
    workers: Optional[int] = Field(default=None, ge=1)


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations_short.7z
    output: resources/operations_short_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    # Path.stem only strips the last suffix
    stem = input_path.name[: -len("".join(input_path.suffixes))] if input_path.suffixes else input_path.name
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keypad-calc", description="Keypad calculator")
    commands = parser.add_subparsers(dest="command", required=True)

    eval_parser = commands.add_parser("eval", help="Evaluate expressions and print the displayed results")
    eval_parser.add_argument("expressions", nargs="+", help="Arithmetic expressions, e.g. '2+3*4'")

    keys_parser = commands.add_parser("keys", help="Press keypad keys in order and print the screen")
    keys_parser.add_argument("sequence", help="Key labels, one character per key, e.g. '12+3='")

    batch_parser = commands.add_parser("batch", help="Evaluate a file of expressions, one per line")
    batch_parser.add_argument("file_path", help="Path to the file containing arithmetic operations")
    batch_parser.add_argument("-o", "--output", help="Results file (default: <input>_results.txt)")
    batch_parser.add_argument("-w", "--workers", type=int, help="Maximum number of worker processes")

    return parser


def run_eval(expressions: List[str]) -> int:
    """Print one displayed result per expression; exit status 1 if any failed."""
    status = 0
    for line, expr in enumerate(expressions, start=1):
        outcome = OperationResult.from_expression(expr, line=line)
        print(outcome.display)
        if not outcome.ok:
            status = 1
    return status


def run_keys(sequence: str) -> int:
    session = CalculatorSession()
    session.press_all(sequence)
    print(session.display)
    if session.result:
        print(session.result)
    return 0


def run_batch(cli_args: CliArgs) -> int:
    output_path: Path = cli_args.output or build_output_path(Path(cli_args.file_path))
    evaluator = BatchEvaluator(
        input_file=cli_args.file_path,
        output_file=output_path,
        max_workers=cli_args.workers,
    )
    results = evaluator.run()
    print(f"{len(results)} expressions evaluated, results written to {output_path}")
    return 0 if all(outcome.ok for outcome in results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments and dispatch to the selected sub-command.

    :param argv: Arguments without the program name, ``sys.argv[1:]`` when None
    :return: Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "eval":
        return run_eval(args.expressions)

    if args.command == "keys":
        try:
            return run_keys(args.sequence)
        except ValueError as exc:
            parser.error(str(exc))

    try:
        cli_args = CliArgs(file_path=args.file_path, output=args.output, workers=args.workers)
    except ValidationError as exc:
        parser.error(str(exc))

    try:
        return run_batch(cli_args)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
