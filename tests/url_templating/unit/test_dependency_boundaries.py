"""Boundary tests for url_templating internal dependencies."""

from __future__ import annotations

from pathlib import Path


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def test_url_templating_core_does_not_import_transport_or_cli() -> None:
    templating_dir = _project_root() / "src" / "postback_tester" / "url_templating"
    forbidden_import_fragments = (
        "import requests",
        "import click",
        "postback_tester.catalog",
        "postback_tester.test_execution",
    )

    for module_path in sorted(templating_dir.glob("*.py")):
        text = module_path.read_text(encoding="utf-8")
        for fragment in forbidden_import_fragments:
            assert fragment not in text, f"Forbidden core dependency in {module_path}: {fragment}"
