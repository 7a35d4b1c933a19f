#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Contract tests for uv-based development and test workflow.
"""

from __future__ import annotations

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _iter_non_comment_lines(text: str) -> list[str]:
    lines: list[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        lines.append(line)
    return lines


def test_root_makefile_uses_uv_for_sync_and_tests() -> None:
    content = (PROJECT_ROOT / "Makefile").read_text(encoding="utf-8")

    assert "uv sync" in content
    assert "uv run pytest -q" in content


def test_example_targets_do_not_use_raw_python_commands() -> None:
    content = (PROJECT_ROOT / "Makefile").read_text(encoding="utf-8")

    violations = [
        line
        for line in _iter_non_comment_lines(content)
        if "python" in line and "uv run python" not in line
    ]

    assert not violations, "Found non-uv python commands: " + "; ".join(violations)


def test_example_scripts_exist_for_make_targets() -> None:
    example_dir = PROJECT_ROOT / "examples" / "keyword_route"

    for script in ("server.py", "client.py", "example_library.py"):
        assert (example_dir / script).is_file()
