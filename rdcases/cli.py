"""Command line programs for building, running, and cleaning simulation cases.

A simulation case is a python script `<case-name>.py` in the cases directory. Running a
case copies the script into the output directory `<case-name>/`, byte-compiles it into
`<case-name>/<case-name>.pyc`, and executes the compiled file from within the output
directory, so all files written by the case end up there.

.. autosummary::
   :nosignatures:

   run_case
   cleanup_case
   main_run
   main_cleanup
"""

from __future__ import annotations

import argparse
import logging
import py_compile
import shutil
import subprocess as sp
import sys
from collections.abc import Sequence
from pathlib import Path

from . import config
from .tools.misc import copy_to_directory

_logger = logging.getLogger(__name__)


def get_case_dirs(
    name: str, cases_dir: str | Path | None = None
) -> tuple[Path, Path, Path]:
    """Determine the paths associated with a simulation case.

    Args:
        name (str):
            The name of the case
        cases_dir (str or :class:`~pathlib.Path`, optional):
            The directory containing the case scripts. The value is read from the
            configuration if it is omitted.

    Returns:
        tuple: the case script, the output directory, and the compiled executable
    """
    if cases_dir is None:
        cases_dir = config["cases.directory"]
    base = Path(cases_dir).resolve()
    case_dir = base / name
    return base / f"{name}.py", case_dir, case_dir / f"{name}.pyc"


def run_case(name: str, cases_dir: str | Path | None = None) -> int:
    """Build and run a simulation case.

    Args:
        name (str):
            The name of the case
        cases_dir (str or :class:`~pathlib.Path`, optional):
            The directory containing the case scripts

    Returns:
        int: The exit code of the case process

    Raises:
        FileNotFoundError: if the case script does not exist
        py_compile.PyCompileError: if the case script cannot be compiled
    """
    source, case_dir, executable = get_case_dirs(name, cases_dir)
    if not source.is_file():
        raise FileNotFoundError(f"Case script `{source}` does not exist")

    copy_to_directory(source, case_dir)
    _logger.info("Copied `%s` to `%s`", source, case_dir)

    py_compile.compile(str(source), cfile=str(executable), doraise=True)
    _logger.info("Compiled case into `%s`", executable)

    _logger.info("Run case `%s` in `%s`", name, case_dir)
    proc = sp.run([sys.executable, executable.name], cwd=case_dir)
    if proc.returncode != 0:
        _logger.error("Case `%s` failed with exit code %d", name, proc.returncode)
    return proc.returncode


def cleanup_case(name: str, cases_dir: str | Path | None = None) -> bool:
    """Remove the output directory of a simulation case.

    Args:
        name (str):
            The name of the case
        cases_dir (str or :class:`~pathlib.Path`, optional):
            The directory containing the case scripts

    Returns:
        bool: Whether anything was removed. A plain file in place of the directory is
        deleted as well and a missing directory is not an error.
    """
    _, case_dir, _ = get_case_dirs(name, cases_dir)
    if case_dir.is_dir() and not case_dir.is_symlink():
        shutil.rmtree(case_dir)
    elif case_dir.exists() or case_dir.is_symlink():
        case_dir.unlink()
    else:
        _logger.info("Nothing to remove at `%s`", case_dir)
        return False
    _logger.info("Removed `%s`", case_dir)
    return True


def _make_parser(description: str) -> argparse.ArgumentParser:
    """Create the argument parser shared by the command line programs."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("case_name", metavar="case-name", help="Name of the case")
    parser.add_argument(
        "-d",
        "--cases-dir",
        metavar="PATH",
        type=str,
        default=None,
        help="Directory containing the case scripts (default: "
        f"`{config['cases.directory']}`)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show informative log messages",
    )
    return parser


def _parse_args(
    parser: argparse.ArgumentParser, argv: Sequence[str] | None
) -> argparse.Namespace:
    """Parse arguments, rejecting empty case names, and set up logging."""
    args = parser.parse_args(argv)
    if not args.case_name:
        parser.error("the case name must not be empty")
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )
    return args


def main_run(argv: Sequence[str] | None = None) -> int:
    """Command line program that builds and runs a simulation case.

    Args:
        argv (list of str):
            The command line arguments. If omitted, :data:`sys.argv` is used.

    Returns:
        int: The exit code of the program
    """
    parser = _make_parser("Build a simulation case and run it in its output directory")
    args = _parse_args(parser, argv)
    try:
        return run_case(args.case_name, args.cases_dir)
    except FileNotFoundError as err:
        _logger.error("Could not find case: %s", err)
        return 1
    except py_compile.PyCompileError as err:
        _logger.error("Could not compile case: %s", err.msg)
        return 1


def main_cleanup(argv: Sequence[str] | None = None) -> int:
    """Command line program that removes the output directory of a simulation case.

    Args:
        argv (list of str):
            The command line arguments. If omitted, :data:`sys.argv` is used.

    Returns:
        int: The exit code of the program
    """
    parser = _make_parser("Remove the output directory of a simulation case")
    args = _parse_args(parser, argv)
    cleanup_case(args.case_name, args.cases_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main_run())
