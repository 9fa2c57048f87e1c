"""
Command line entrypoint.

Subcommands:
- ``eval``: evaluate expressions given as arguments
- ``rpn``: print expressions in Reverse Polish Notation
- ``batch``: start the evaluation server, send it a file of expressions through the client,
  and write ``<name>_results.txt`` next to the input
"""

import argparse
from multiprocessing import Process
from pathlib import Path
import sys
import time
from typing import List, Optional

from pydantic import BaseModel, FilePath, ValidationError

from shunting_yard.client.client import EvaluationClient
from shunting_yard.common.logger import logger
from shunting_yard.common.models import EngineConfig
from shunting_yard.core.errors import ExpressionSyntaxError
from shunting_yard.service.server import EvaluationServer


class BatchArgs(BaseModel):
    """
    Pydantic model used to validate the ``batch`` arguments.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing expressions.
    port : int
        Port the server listens on.
    """

    file_path: FilePath
    port: int = 9000


def build_output_path(input_path: Path) -> Path:
    """
    Construct the result file path based on the input file.

    - Keeps the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt'

    Examples
    --------
    input: resources/expressions.tar.xz
    output: resources/expressions_tar_xz_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name[: -len("".join(input_path.suffixes))] if input_path.suffixes else input_path.name
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def run_server(output_file: Path, port: int, config: EngineConfig) -> None:
    """Start the evaluation server, in its own process."""
    server = EvaluationServer(port=port, output_file=output_file, config=config)
    server.start()


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(prog="shunting-yard", description="Shunting-yard expression evaluator")
    parser.add_argument("--raw", action="store_true", help="Keep literals as strings instead of numbers")
    parser.add_argument("--math", action="store_true", help="Enable sqrt, sin, ln and other math functions")
    subparsers = parser.add_subparsers(dest="command", required=True)

    eval_parser = subparsers.add_parser("eval", help="Evaluate infix expressions")
    eval_parser.add_argument("expressions", nargs="+")

    rpn_parser = subparsers.add_parser("rpn", help="Print expressions in Reverse Polish Notation")
    rpn_parser.add_argument("expressions", nargs="+")

    batch_parser = subparsers.add_parser("batch", help="Evaluate a file of expressions through the server")
    batch_parser.add_argument("file_path", help="Text file or .zip/.tar.xz/.7z archive, one expression per line")
    batch_parser.add_argument("--port", type=int, default=9000)

    return parser


def run_batch(parser: argparse.ArgumentParser, args: argparse.Namespace, config: EngineConfig) -> None:
    """Run the server and the client on the given file."""
    try:
        batch_args = BatchArgs(file_path=args.file_path, port=args.port)
    except ValidationError as exc:
        parser.error(str(exc))

    input_path = Path(batch_args.file_path)
    output_path = build_output_path(input_path)

    server_process = Process(target=run_server, args=(output_path, batch_args.port, config))
    server_process.start()

    # Give the server time to start listening
    time.sleep(1)

    try:
        client = EvaluationClient(port=batch_args.port)
        client.send_file(input_path, output_path)
        logger.info(f"📄✅ Results written to {output_path}")
    finally:
        # Ensure the server is always stopped
        server_process.terminate()
        server_process.join()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse the command line and run the chosen subcommand.

    :param argv: Arguments, defaults to ``sys.argv[1:]``
    :return: Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = EngineConfig(raw_literals=args.raw, math_functions=args.math)

    if args.command == "batch":
        run_batch(parser, args, config)
        return 0

    engine = config.build()
    exit_code = 0
    for expression in args.expressions:
        try:
            if args.command == "rpn":
                print(" ".join(engine.parse(expression)))
            else:
                print(engine.resolve(expression))
        except (ExpressionSyntaxError, ArithmeticError, IndexError, ValueError) as exc:
            print(f"{expression} -> ERROR: {exc}", file=sys.stderr)
            exit_code = 1
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
