"""Markdown to compiled page converter.

Compiles markdown sources into JSON artifacts in the intermediate build
directory, mirroring the source layout (docs/guide/setup.md becomes
.build/guide/setup.json).
"""

import json
import logging
from pathlib import Path

import mistune
from mistune.core import BlockState

from sitestage.core.pages import ARTIFACT_SUFFIX

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".md"

TITLE_ENV_KEY = "sitestage_title"


def _pop_title_heading(md: mistune.Markdown, state: BlockState) -> None:
    """Move the first top-level H1 out of the token stream into state.env."""
    for idx, token in enumerate(state.tokens):
        if token["type"] == "heading" and token["attrs"]["level"] == 1:
            state.env[TITLE_ENV_KEY] = (token.get("text") or "").strip()
            del state.tokens[idx]
            return


class MarkdownCompiler:
    """Convert markdown documents into compiled page artifacts."""

    def __init__(self, *, extract_title: bool = True) -> None:
        """Initialize the compiler.

        Args:
            extract_title: Take the title from the first H1 and drop that
                heading from the body
        """
        self._extract_title = extract_title
        self.markdown = mistune.create_markdown(
            escape=False,
            plugins=["strikethrough", "table"],
        )
        if extract_title:
            self.markdown.before_render_hooks.append(_pop_title_heading)

    def compile(self, markdown_text: str) -> dict[str, str | None]:
        """Compile markdown text into an artifact payload.

        Returns:
            Dictionary with "title" (str or None) and "body" (HTML)
        """
        body, state = self.markdown.parse(markdown_text)
        title = state.env.get(TITLE_ENV_KEY) or None
        return {"title": title, "body": str(body)}

    def compile_tree(self, source_dir: Path, build_dir: Path) -> list[Path]:
        """Compile every markdown file under source_dir into build_dir.

        Hidden files and files starting with underscore are skipped.
        Artifacts left in build_dir by sources that no longer exist are
        removed.

        Args:
            source_dir: Root directory of markdown sources
            build_dir: Intermediate directory for compiled artifacts

        Returns:
            Paths of written artifacts, sorted

        Raises:
            FileNotFoundError: If source_dir doesn't exist
        """
        if not source_dir.is_dir():
            raise FileNotFoundError(f"Source directory not found: {source_dir}")

        written: list[Path] = []
        for source_path in sorted(source_dir.rglob(f"*{SOURCE_SUFFIX}")):
            relative = source_path.relative_to(source_dir)
            if any(part.startswith((".", "_")) for part in relative.parts):
                continue

            artifact = build_dir / relative.with_suffix(ARTIFACT_SUFFIX)
            payload = self.compile(source_path.read_text(encoding="utf-8"))
            artifact.parent.mkdir(parents=True, exist_ok=True)
            artifact.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            logger.debug(f"Compiled {relative} -> {artifact}")
            written.append(artifact)

        self._remove_stale(build_dir, set(written))
        logger.info(f"Compiled {len(written)} pages into {build_dir}")
        return written

    def _remove_stale(self, build_dir: Path, keep: set[Path]) -> None:
        """Delete artifacts in build_dir that were not written by this run."""
        if not build_dir.exists():
            return
        for artifact in sorted(build_dir.rglob(f"*{ARTIFACT_SUFFIX}")):
            if artifact not in keep:
                artifact.unlink()
                logger.debug(f"Removed stale artifact {artifact}")
