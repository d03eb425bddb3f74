"""Compiled page discovery and body rendering.

Compiled pages live in the intermediate build directory as JSON artifacts
written by the compiler:

    .build/
    ├── index.json
    ├── intro.json
    └── guide/
        ├── index.json
        └── setup.json

Each artifact holds {"title": str | null, "body": str}.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".json"


@dataclass(frozen=True)
class CompiledPage:
    """Compiled page record.

    Attributes:
        relative_path: POSIX path relative to the build directory, without
            the artifact extension (e.g., "guide/index")
        title: Page title extracted at compile time, if any
        artifact: Absolute path to the compiled artifact
    """

    relative_path: str
    title: str | None
    artifact: Path


class BodyRenderer(Protocol):
    """Capability that turns a compiled page into body markup."""

    def render(self, page: CompiledPage) -> str: ...


class ArtifactBodyRenderer:
    """Reads the rendered body stored in a compiled artifact."""

    def render(self, page: CompiledPage) -> str:
        """Return body HTML of a compiled page.

        Raises:
            ValueError: If the artifact has no string body
        """
        data = _read_artifact(page.artifact)
        body = data.get("body")
        if not isinstance(body, str):
            raise ValueError(f"Compiled page has no body: {page.artifact}")
        return body


def discover_pages(build_dir: Path) -> list[CompiledPage]:
    """Find compiled pages in the build directory.

    Pages are returned sorted by relative path so that discovery order,
    and with it navigation order, is stable between runs.

    Args:
        build_dir: Intermediate directory written by the compiler

    Returns:
        List of CompiledPage, empty if the directory doesn't exist
    """
    if not build_dir.exists():
        logger.warning(f"Build directory not found: {build_dir}")
        return []

    artifacts = sorted(
        build_dir.rglob(f"*{ARTIFACT_SUFFIX}"),
        key=lambda p: p.relative_to(build_dir).as_posix(),
    )

    pages: list[CompiledPage] = []
    for artifact in artifacts:
        relative = artifact.relative_to(build_dir).as_posix()
        data = _read_artifact(artifact)
        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise ValueError(f"Compiled page title must be a string: {artifact}")
        pages.append(
            CompiledPage(
                relative_path=relative[: -len(ARTIFACT_SUFFIX)],
                title=title or None,
                artifact=artifact,
            )
        )

    logger.debug(f"Discovered {len(pages)} compiled pages in {build_dir}")
    return pages


def _read_artifact(artifact: Path) -> dict[str, object]:
    try:
        data = json.loads(artifact.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid compiled page {artifact}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Compiled page must be a JSON object: {artifact}")
    return data
