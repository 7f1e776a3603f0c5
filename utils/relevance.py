"""Lexical relevance matching between user messages and project files.

Two passes are run over a message:

1. literal file references (``main.py``, ``src/app.ts``, or either wrapped in
   backticks or quotes), every index match kept;
2. topic keywords ("test", "config", ...) mapped to representative file
   patterns, capped per keyword so generic words don't flood the context.

Both passes resolve through :meth:`ProjectIndex.find_by_query`.
"""

from __future__ import annotations

import re
from typing import Iterable

from services.project_index import ProjectIndex

KEYWORD_MATCH_LIMIT = 3

FILE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\w+\.\w+", re.ASCII),   # filename.ext
    re.compile(r"[\w/]+\.\w+", re.ASCII),  # path/to/file.ext
    re.compile(r"`[^`]+\.\w+`", re.ASCII),  # `filename.ext`
    re.compile(r'"[^"]+\.\w+"', re.ASCII),  # "filename.ext"
    re.compile(r"'[^']+\.\w+'", re.ASCII),  # 'filename.ext'
)

_QUOTE_CHARS = re.compile(r"[`\"']")

KEYWORD_PATTERNS: dict[str, list[str]] = {
    "main": ["main.js", "main.py", "index.js", "app.js", "main.cpp"],
    "config": [".config", "config.js", "config.json", "package.json"],
    "readme": ["README.md", "readme.txt"],
    "test": ["test", "spec", "__test__"],
    "component": [".jsx", ".tsx", ".vue"],
    "style": [".css", ".scss", ".sass"],
    "database": ["db", "database", ".sql"],
    "api": ["api", "routes", "endpoints"],
    "auth": ["auth", "login", "authentication"],
}


def dedupe(paths: Iterable[str]) -> list[str]:
    """Drop repeated paths, keeping the first occurrence of each."""
    return list(dict.fromkeys(paths))


class RelevanceMatcher:
    """Extracts candidate files for a free-text message."""

    def __init__(self, index: ProjectIndex, keyword_match_limit: int = KEYWORD_MATCH_LIMIT) -> None:
        self._index = index
        self._keyword_match_limit = keyword_match_limit

    def extract_candidates(self, message: str) -> list[str]:
        """Return relative paths of files referenced by *message*, first match first."""
        return dedupe([*self._literal_matches(message), *self._keyword_matches(message)])

    def _literal_matches(self, message: str) -> list[str]:
        found: list[str] = []
        for pattern in FILE_PATTERNS:
            for match in pattern.finditer(message):
                literal = _QUOTE_CHARS.sub("", match.group(0))
                found.extend(f.relative_path for f in self._index.find_by_query(literal))
        return found

    def _keyword_matches(self, message: str) -> list[str]:
        lowered = message.lower()
        found: list[str] = []
        for keyword, patterns in KEYWORD_PATTERNS.items():
            # Substring test: "latest" also triggers "test".
            if keyword not in lowered:
                continue
            per_keyword: list[str] = []
            for pattern in patterns:
                per_keyword.extend(f.relative_path for f in self._index.find_by_query(pattern))
            found.extend(dedupe(per_keyword)[: self._keyword_match_limit])
        return found
