"""Core type definitions."""

from typing import NewType

# Ordered path segments of a page, e.g. ("guide", "setup"); () is the site root
Address = tuple[str, ...]

# Site URL of a rendered page (e.g., "/docs/guide/")
# Distinct from output file paths to catch type mismatches
URLPath = NewType("URLPath", str)
