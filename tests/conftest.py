from __future__ import annotations

from pathlib import Path

import pytest

from config import Settings
from services.project_index import ProjectIndex


def write(root: Path, relative: str, content: str | bytes = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small mixed JS/TS/Python project with some noise that must be ignored."""
    write(tmp_path, "main.py", "print('hello')\n")
    write(tmp_path, "config.json", '{"debug": true}\n')
    write(tmp_path, "README.md", "# Demo\n")
    write(tmp_path, "src/parser.ts", "export function parse(input: string) {}\n")
    write(tmp_path, "src/utils/helpers.js", "module.exports = {};\n")
    write(tmp_path, "tests/parser.test.ts", "test('parses', () => {});\n")
    write(tmp_path, "node_modules/lib/index.js", "ignored\n")
    write(tmp_path, ".env", "SECRET=1\n")
    write(tmp_path, "package-lock.json", "{}\n")
    write(tmp_path, "logo.png", b"\x89PNG\r\n")
    return tmp_path


@pytest.fixture
def index(project: Path) -> ProjectIndex:
    idx = ProjectIndex(project)
    idx.scan()
    return idx


@pytest.fixture
def settings() -> Settings:
    return Settings(
        llm_api_key="sk-test-0123456789",
        llm_api_base="https://openrouter.ai/api/v1",
        llm_model="openai/gpt-oss-20b",
        llm_timeout=5,
        llm_max_tokens=None,
        retry_max_attempts=3,
        retry_base_delay=0.0,
        max_context_chars=8000,
        per_file_max_chars=2000,
        keyword_match_limit=3,
        continuity_window=4,
        history_limit=20,
        scan_max_depth=5,
        max_file_size=1024 * 1024,
        log_level="WARNING",
    )
