"""Address resolution for compiled pages.

Maps a compiled page's relative source path to its site address and
derives the output file path and URL from that address.
"""

from pathlib import PurePosixPath

from sitestage.core.types import Address, URLPath

INDEX_SEGMENT = "index"


def resolve_address(relative_path: str, suffix: str | None = None) -> Address:
    """Resolve a relative source path to a site address.

    A trailing "index" segment is collapsed into its parent, so
    "guide/index" and "guide" both resolve to ("guide",).

    Args:
        relative_path: Path relative to the compiled pages directory
        suffix: Artifact extension to strip (e.g., ".json"), if still present

    Returns:
        Address tuple, empty for the site root
    """
    normalized = relative_path.replace("\\", "/")
    if suffix and normalized.endswith(suffix):
        normalized = normalized[: -len(suffix)]

    segments = [s for s in normalized.split("/") if s and s != "."]
    if segments and segments[-1] == INDEX_SEGMENT:
        segments.pop()
    return tuple(segments)


def output_path(address: Address, extension: str = "html") -> PurePosixPath:
    """Build the output file path for an address.

    Every page is written as an index document inside its own directory,
    the root page maps to "index.<extension>".
    """
    return PurePosixPath(*address, f"{INDEX_SEGMENT}.{extension}")


def normalize_site_url(site_url: str) -> URLPath:
    """Normalize site base URL to start and end with a slash."""
    stripped = site_url.strip().strip("/")
    if not stripped:
        return URLPath("/")
    return URLPath(f"/{stripped}/")


def output_url(address: Address, site_url: str = "/") -> URLPath:
    """Build the site URL for an address.

    Args:
        address: Page address
        site_url: Base path the site is served under

    Returns:
        URL ending in a slash, e.g. "/docs/guide/setup/"
    """
    base = normalize_site_url(site_url)
    if not address:
        return base
    return URLPath(base + "/".join(address) + "/")
