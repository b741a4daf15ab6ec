"""
Security utilities for the JSX to PDF service.

This module provides the static checks applied before untrusted input
reaches the script sandbox or a response header:
- Template source size and shape limits
- Blocked host-escape identifiers
- Filename sanitization for Content-Disposition
"""

import logging
import re
from typing import Iterable, List, Tuple

logger = logging.getLogger(__name__)


class TemplateSourceValidator:
    """
    Validates dynamic template source before compilation.

    The sandbox has no file system, network or process access to begin
    with; these checks reject sources that try to reach for them so the
    caller gets a precise diagnostic instead of a runtime ReferenceError.
    """

    # Maximum sizes
    MAX_SOURCE_SIZE = 256 * 1024  # 256KB of template source
    MAX_LINE_COUNT = 10000

    # Identifiers that only make sense with host access
    BLOCKED_IDENTIFIERS = frozenset({
        "require",
        "import",
        "process",
        "fetch",
        "XMLHttpRequest",
        "WebSocket",
        "importScripts",
        "Deno",
        "Bun",
    })

    @classmethod
    def validate_source(cls, source: str, max_size: int = None) -> Tuple[bool, List[str]]:
        """
        Validate template source size and shape.

        Args:
            source: Raw template source
            max_size: Override for MAX_SOURCE_SIZE

        Returns:
            Tuple of (is_valid, list_of_issues)
        """
        issues = []
        limit = max_size or cls.MAX_SOURCE_SIZE

        if not source or not source.strip():
            issues.append("Template source is empty")
            return False, issues

        size = len(source.encode("utf-8"))
        if size > limit:
            issues.append(f"Template source too large: {size} bytes > {limit}")

        if source.count("\n") > cls.MAX_LINE_COUNT:
            issues.append(f"Template source has excessive line count (>{cls.MAX_LINE_COUNT:,} lines)")

        if "\x00" in source:
            issues.append("Template source contains null bytes")

        return len(issues) == 0, issues

    @classmethod
    def validate_identifiers(cls, identifiers: Iterable[str]) -> Tuple[bool, List[str]]:
        """
        Check free identifiers of a transpiled template against the blocklist.

        Args:
            identifiers: Identifiers used outside strings and comments

        Returns:
            Tuple of (is_valid, list_of_issues)
        """
        blocked = sorted(set(identifiers) & cls.BLOCKED_IDENTIFIERS)
        issues = [f"Access to '{name}' is not available in templates" for name in blocked]
        if issues:
            logger.warning(f"Rejected template using blocked identifiers: {blocked}")
        return len(issues) == 0, issues


# Filename limits for response headers
MAX_FILENAME_LENGTH = 255
UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def sanitize_filename(filename: str, default: str = "document.pdf") -> str:
    """
    Make a filename safe for a Content-Disposition header.

    Whitespace runs become ``-``, other unsafe characters are dropped, and a
    ``.pdf`` suffix is ensured.

    Args:
        filename: Requested filename
        default: Fallback when nothing usable remains

    Returns:
        Sanitized filename
    """
    name = re.sub(r"\s+", "-", (filename or "").strip())
    name = UNSAFE_FILENAME_CHARS.sub("", name).lstrip(".")
    if not name:
        return default
    if not name.lower().endswith(".pdf"):
        name += ".pdf"
    if len(name) > MAX_FILENAME_LENGTH:
        name = name[:MAX_FILENAME_LENGTH - 4] + ".pdf"
    return name
