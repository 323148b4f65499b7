"""Pytest configuration for the Lox test suite."""

import io
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).parent.parent / "src"
PROGRAMS_DIR = Path(__file__).parent / "programs"


def parse_test_file(path: Path) -> list[tuple[str, str, list[str], list[str]]]:
    """Parse a .tests file into (name, source, stdout lines, error lines) tuples.

    Format:

        === test name
        lox source
        ---
        expected stdout line
        error: expected diagnostic line
        ---
    """
    lines = path.read_text().split("\n")
    result = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            source_lines: list[str] = []
            while i < len(lines) and lines[i] != "---":
                source_lines.append(lines[i])
                i += 1
            i += 1
            stdout_lines: list[str] = []
            error_lines: list[str] = []
            while i < len(lines) and lines[i] != "---":
                if lines[i].startswith("error: "):
                    error_lines.append(lines[i][len("error: "):])
                elif lines[i]:
                    stdout_lines.append(lines[i])
                i += 1
            i += 1
            result.append((test_name, "\n".join(source_lines), stdout_lines, error_lines))
        else:
            i += 1
    return result


def discover_program_tests():
    for test_file in sorted(PROGRAMS_DIR.glob("*.tests")):
        for name, source, stdout_lines, error_lines in parse_test_file(test_file):
            yield f"{test_file.stem}/{name}", source, stdout_lines, error_lines


def pytest_generate_tests(metafunc):
    """Parametrize program tests over the .tests files."""
    if "program" in metafunc.fixturenames:
        params = [
            pytest.param((source, out, err), id=test_id)
            for test_id, source, out, err in discover_program_tests()
        ]
        metafunc.parametrize("program", params)


class Captured:
    def __init__(self):
        from lox import Lox

        self.out = io.StringIO()
        self.err = io.StringIO()
        self.session = Lox(out=self.out, err=self.err)

    def run(self, source: str):
        return self.session.run(source)

    @property
    def stdout_lines(self) -> list[str]:
        return self.out.getvalue().splitlines()

    @property
    def stderr_lines(self) -> list[str]:
        return self.err.getvalue().splitlines()


@pytest.fixture
def lox():
    """A fresh session writing to in-memory streams."""
    return Captured()


@pytest.fixture
def cli_env():
    import os

    env = dict(os.environ)
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")
    return env


@pytest.fixture
def python():
    return sys.executable
