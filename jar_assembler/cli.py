"""Command-line interface for jar-assembler.

WHY: Build scripts need one command that turns a classpath into a jar
and signals failure through the exit status, so a partial archive never
goes unnoticed in CI.

HOW: Uses argparse for the destination, classpath, mode, main class
and the warning/verbosity switches. Reads the debug flag from the
environment, configures logging to stderr, builds AssemblyOptions and
runs the assembly. Status messages go to stderr.

RULES:
- Positional argument: destination jar path
- --classpath defaults to the CLASSPATH environment variable
- Exit 0 on success; exit 1 on configuration errors, invalid options,
  fatal setup errors, or a run that completed with errors
- "Completed with errors!" is printed when the run recorded errors
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from jar_assembler import __version__
from jar_assembler.config import env_flag
from jar_assembler.core.assembly import assemble
from jar_assembler.core.classpath import split_classpath
from jar_assembler.errors import AssemblyError, ConfigurationError
from jar_assembler.options import AssemblyMode, AssemblyOptions

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _configure_logging(debug: bool) -> None:
    """Send jar_assembler log records to stderr.

    Only handlers installed by a previous call are replaced, so
    handlers added by an embedding application stay in place.
    """
    level = logging.DEBUG if debug else logging.INFO
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_jar_assembler", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.setLevel(level)
    handler._jar_assembler = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)

    logging.getLogger("jar_assembler").setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="jar_assembler",
        description="Merge the directories and jars of a classpath into a single jar.",
    )

    parser.add_argument(
        "dest",
        help="Path of the jar to create (replaced if it exists).",
    )

    parser.add_argument(
        "-cp",
        "--classpath",
        default=None,
        help="Classpath items separated by the platform path separator "
             "(default: the CLASSPATH environment variable).",
    )

    parser.add_argument(
        "--jar",
        choices=[mode.value for mode in AssemblyMode],
        default=AssemblyMode.uber.value,
        help="uber includes dependency jars, thin only directories (default: %(default)s).",
    )

    parser.add_argument(
        "-m",
        "--main",
        default=None,
        help="Main class written to the manifest.",
    )

    parser.add_argument(
        "-S",
        "--suppress-clash",
        action="store_true",
        help="Do not warn about clashing entries.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every source and copied file.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        debug = bool(env_flag("debug"))
    except ConfigurationError as e:
        _status("Error: {}".format(e))
        sys.exit(1)

    _configure_logging(debug)

    try:
        options = AssemblyOptions(
            classpath=split_classpath(args.classpath),
            destination=args.dest,
            mode=args.jar,
            main_class=args.main,
            suppress_clash=args.suppress_clash,
            verbose=args.verbose,
        )
    except ValidationError as e:
        _status("Error: invalid options\n{}".format(e))
        sys.exit(1)

    try:
        result = assemble(options)
    except AssemblyError as e:
        _status("Error: {}".format(e))
        sys.exit(1)

    if not result.ok:
        _status("\nCompleted with errors!")
        sys.exit(1)


if __name__ == "__main__":
    main()
