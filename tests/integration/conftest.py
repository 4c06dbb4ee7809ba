"""Fixtures for integration tests that compile generated code with rustc."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from pymdo import expand

RUSTC = shutil.which("rustc")

_PROGRAM = """\
#[allow(unused_parens, unused_mut, unused_braces, unused_variables)]
fn main() {{
{prelude}
    let result: {result_type} = {expression};
    println!("{{:?}}", result);
}}
"""

_SEQUENCE_PROGRAM = """\
#[allow(unused_parens, unused_mut, unused_braces, unused_variables)]
fn main() {{
{prelude}
    let result: Vec<{item_type}> = ({expression}).collect();
    println!("{{:?}}", result);
}}
"""


def _compile_and_run(directory: Path, program: str) -> str:
    source = directory / "main.rs"
    binary = directory / "main"
    source.write_text(program)
    compiled = subprocess.run(
        [RUSTC, "--edition", "2021", "-o", str(binary), str(source)],
        capture_output=True, text=True, timeout=120,
    )
    if compiled.returncode != 0:
        pytest.fail(f"rustc failed:\n{compiled.stderr}\n--- program ---\n{program}")
    ran = subprocess.run([str(binary)], capture_output=True, text=True, check=True, timeout=30)
    return ran.stdout.strip()


@pytest.fixture
def run_expansion(tmp_path) -> Callable[..., str]:
    """Expand a comprehension, embed it in a program and return what it prints.

    For the sequence flavor ``result_type`` is the element type and the
    iterator is collected into a Vec.
    """
    if RUSTC is None:
        pytest.skip("rustc is not installed")

    def run(
        flavor: str,
        source: str,
        result_type: str,
        prelude: str = "",
        array_sources: list[str] | None = None,
    ) -> str:
        expression = expand(flavor, source, array_sources=array_sources)
        prelude_lines = "\n".join(f"    {line}" for line in prelude.splitlines())
        if flavor == "sequence":
            program = _SEQUENCE_PROGRAM.format(
                prelude=prelude_lines, item_type=result_type, expression=expression,
            )
        else:
            program = _PROGRAM.format(
                prelude=prelude_lines, result_type=result_type, expression=expression,
            )
        return _compile_and_run(tmp_path, program)

    return run
