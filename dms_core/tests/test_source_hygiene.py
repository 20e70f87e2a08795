# dms_core/tests/test_source_hygiene.py
import ast
import pathlib
import re

import pytest

REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]

CHECKS = {
    "terminal prompt": re.compile(r"^(\(\S+\)\s+)?\S+@\S+:.+\$\s"),
    "merge conflict marker": re.compile(r"^(<{7}|>{7}|={7})( |$)"),
    "debugger call": re.compile(r"^\s*(breakpoint\(\)|import pdb|pdb\.set_trace\(\))"),
}


def _sources():
    for p in REPO_ROOT.rglob("*.py"):
        parts = set(p.parts)
        if parts & {"venv", ".venv", "migrations", "build"}:
            continue
        yield p


@pytest.mark.parametrize("label", sorted(CHECKS))
def test_no_accidental_paste_in_source(label):
    pattern = CHECKS[label]
    offenders = []
    for p in _sources():
        lines = p.read_text(encoding="utf-8", errors="ignore").splitlines()
        for i, line in enumerate(lines, start=1):
            if pattern.match(line):
                offenders.append(f"{p.relative_to(REPO_ROOT)}:{i}: {line}")
    assert not offenders, f"{label} found in source:\n" + "\n".join(offenders)


def test_module_docstrings_precede_future_imports():
    offenders = []
    for p in _sources():
        body = ast.parse(p.read_text(encoding="utf-8")).body
        if (
            len(body) > 1
            and isinstance(body[0], ast.ImportFrom)
            and body[0].module == "__future__"
            and isinstance(body[1], ast.Expr)
            and isinstance(body[1].value, ast.Constant)
            and isinstance(body[1].value.value, str)
        ):
            offenders.append(str(p.relative_to(REPO_ROOT)))
    assert not offenders, "docstring after __future__ import:\n" + "\n".join(offenders)
