"""Inclusion rules for the local project scan.

Only small text/source files outside build, VCS and dependency directories
are indexed; everything else is invisible to the context builder.
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Exclusion rules
# ---------------------------------------------------------------------------

IGNORED_DIRS: set[str] = {
    "node_modules", ".git", ".vscode", ".idea",
    "__pycache__", ".pytest_cache", ".mypy_cache",
    "build", "dist", "target", ".next", ".nuxt",
    "coverage", ".coverage", ".nyc_output",
    "vendor", "Pods", ".gradle",
}

IGNORED_FILENAMES: set[str] = {
    ".DS_Store", ".gitignore", ".npmignore",
    ".env", ".env.local", ".env.production",
    "package-lock.json", "yarn.lock",
    ".eslintrc", ".prettierrc",
}

# ---------------------------------------------------------------------------
# Allow-list
# ---------------------------------------------------------------------------

SUPPORTED_EXTENSIONS: set[str] = {
    ".js", ".jsx", ".ts", ".tsx",
    ".py", ".pyx",
    ".java", ".kt",
    ".cpp", ".c", ".h", ".hpp",
    ".rs", ".go", ".php", ".rb", ".swift", ".dart",
    ".sh", ".bash",
    ".sql",
    ".json", ".yaml", ".yml",
    ".md", ".txt",
    ".html", ".css", ".scss",
}

MAX_FILE_SIZE = 1024 * 1024  # 1 MiB


def is_ignored_dir(name: str) -> bool:
    return name in IGNORED_DIRS


def should_include_file(filename: str, size: int, max_size: int = MAX_FILE_SIZE) -> bool:
    """Return True if *filename* belongs in the project index."""
    if filename in IGNORED_FILENAMES:
        return False

    # Extensions are matched case-sensitively, so README.MD is not indexed.
    _, ext = os.path.splitext(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        return False

    return size <= max_size
