"""Tests for the command line programs that build, run, and clean cases."""

import py_compile
from pathlib import Path

import pytest

from rdcases import cli

CASES_DIR = Path(__file__).resolve().parents[1] / "simulationCases"

CASE_SCRIPT = """
from pathlib import Path

Path("output.txt").write_text("done")
"""


@pytest.fixture
def cases_dir(tmp_path):
    """Provide a directory with simple case scripts."""
    (tmp_path / "demo.py").write_text(CASE_SCRIPT)
    (tmp_path / "failing.py").write_text("import sys\nsys.exit(3)\n")
    (tmp_path / "broken.py").write_text("def f(:\n")
    return tmp_path


def test_case_dirs(tmp_path):
    """Test the paths associated with a case."""
    source, case_dir, executable = cli.get_case_dirs("demo", tmp_path)
    assert source == tmp_path.resolve() / "demo.py"
    assert case_dir == tmp_path.resolve() / "demo"
    assert executable == case_dir / "demo.pyc"


def test_run_case(cases_dir):
    """Test building and running a case."""
    assert cli.run_case("demo", cases_dir) == 0
    case_dir = cases_dir / "demo"
    assert (case_dir / "demo.py").read_text() == CASE_SCRIPT
    assert (case_dir / "demo.pyc").is_file()
    assert (case_dir / "output.txt").read_text() == "done"

    # running a case again overwrites the output
    assert cli.main_run(["demo", "--cases-dir", str(cases_dir)]) == 0


def test_run_case_errors(cases_dir):
    """Test the exit codes of cases that fail."""
    assert cli.main_run(["failing", "-d", str(cases_dir)]) == 3
    assert cli.main_run(["missing", "-d", str(cases_dir)]) == 1
    assert not (cases_dir / "missing").exists()
    assert cli.main_run(["broken", "-d", str(cases_dir)]) == 1
    with pytest.raises(py_compile.PyCompileError):
        cli.run_case("broken", cases_dir)


@pytest.mark.parametrize("main", [cli.main_run, cli.main_cleanup])
def test_cli_arguments(main, capsys):
    """Test that a case name is required."""
    for argv in [[], [""]]:
        with pytest.raises(SystemExit) as excinfo:
            main(argv)
        assert excinfo.value.code != 0
        assert "usage" in capsys.readouterr().err


def test_cleanup_case(cases_dir):
    """Test removing the output of a case."""
    assert cli.run_case("demo", cases_dir) == 0
    assert cli.cleanup_case("demo", cases_dir)
    assert not (cases_dir / "demo").exists()
    assert (cases_dir / "demo.py").exists()

    # cleaning up twice is not an error
    assert not cli.cleanup_case("demo", cases_dir)
    assert cli.main_cleanup(["demo", "-d", str(cases_dir)]) == 0

    # a file in place of the output directory is removed as well
    (cases_dir / "demo").write_text("stale")
    assert cli.cleanup_case("demo", cases_dir)
    assert not (cases_dir / "demo").exists()


@pytest.mark.parametrize("name", ["brusselator", "keller-segel"])
def test_case_scripts_compile(name, tmp_path):
    """Test that the shipped case scripts are valid python."""
    py_compile.compile(
        str(CASES_DIR / f"{name}.py"), cfile=str(tmp_path / f"{name}.pyc"), doraise=True
    )
