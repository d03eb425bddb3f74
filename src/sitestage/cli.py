"""CLI interface for Sitestage.

Command-line tool for compiling markdown sources and assembling them
into a static documentation site.
"""

import logging
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import ParamSpec

import click

from sitestage.config import Config
from sitestage.core.builder import SiteAssembler
from sitestage.core.compiler import MarkdownCompiler
from sitestage.core.templates import TemplateRenderer

P = ParamSpec("P")


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log every compiled and written page)",
)
def cli(verbose: bool) -> None:
    """Sitestage - assemble documentation pages into a static site."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    if verbose:
        logging.getLogger("sitestage").setLevel(logging.DEBUG)


def _config_options(func: Callable[P, None]) -> Callable[P, None]:
    """Attach the options shared by all build commands."""
    options = [
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="Path to configuration file (default: auto-discover sitestage.toml)",
        ),
        click.option(
            "--source-dir",
            "-s",
            type=click.Path(path_type=Path, file_okay=False),
            default=None,
            help="Markdown source directory (overrides config)",
        ),
        click.option(
            "--build-dir",
            type=click.Path(path_type=Path, file_okay=False),
            default=None,
            help="Directory for compiled pages (overrides config)",
        ),
        click.option(
            "--output-dir",
            "-o",
            type=click.Path(path_type=Path, file_okay=False),
            default=None,
            help="Directory for the rendered site (overrides config)",
        ),
        click.option(
            "--site-url",
            default=None,
            help='Base path the site is served under (overrides config, default: "/")',
        ),
        click.option(
            "--jobs",
            "-j",
            type=click.IntRange(min=1),
            default=None,
            help="Number of parallel render workers (overrides config, default: 1)",
        ),
        click.option(
            "--strict/--no-strict",
            default=None,
            help="Fail when two pages resolve to the same address (overrides config)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _handle_errors(func: Callable[P, None]) -> Callable[P, None]:
    """Report any failure as a red error line and exit with status 1."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> None:
        try:
            func(*args, **kwargs)
        except Exception as e:
            click.echo(click.style(f"Error: {e}", fg="red"), err=True)
            sys.exit(1)

    return wrapper


def _load_config(
    config_path: Path | None,
    source_dir: Path | None,
    build_dir: Path | None,
    output_dir: Path | None,
    site_url: str | None,
    jobs: int | None,
    strict: bool | None,
) -> Config:
    config = Config.load(config_path)
    return config.with_overrides(
        site_url=site_url,
        source_dir=source_dir,
        build_dir=build_dir,
        output_dir=output_dir,
        jobs=jobs,
        strict=strict,
    )


@cli.command()
@_config_options
@_handle_errors
def build(**options: object) -> None:
    """Compile markdown sources and assemble the site.

    Compiled pages whose markdown source was removed are deleted from the
    build directory before assembly.
    """
    config = _load_config(**options)  # type: ignore[arg-type]
    _compile(config)
    _assemble(config)


@cli.command("compile")
@_config_options
@_handle_errors
def compile_command(**options: object) -> None:
    """Compile markdown sources into the build directory."""
    config = _load_config(**options)  # type: ignore[arg-type]
    _compile(config)


@cli.command()
@_config_options
@_handle_errors
def assemble(**options: object) -> None:
    """Assemble already compiled pages into the site."""
    config = _load_config(**options)  # type: ignore[arg-type]
    _assemble(config)


def _compile(config: Config) -> None:
    """Compile sources and report the number of compiled pages.

    Args:
        config: Application config
    """
    click.echo(f"Source directory: {config.build.source_dir}")
    compiler = MarkdownCompiler()
    artifacts = compiler.compile_tree(config.build.source_dir, config.build.build_dir)
    click.echo(f"Compiled {len(artifacts)} pages into {config.build.build_dir}")


def _assemble(config: Config) -> None:
    """Assemble the site and report written documents.

    Args:
        config: Application config
    """
    assembler = SiteAssembler(
        config.build.build_dir,
        config.build.output_dir,
        site_url=config.site.url,
        site_title=config.site.title,
        templates=TemplateRenderer(config.build.template_dir),
        on_duplicate=config.build.on_duplicate,
        jobs=config.build.jobs,
    )
    result = assembler.build()
    click.echo(
        click.style(
            f"Wrote {len(result.written)} pages to {config.build.output_dir}",
            fg="green",
        ),
    )
    click.echo(f"Site URL: {assembler.site_url}")


if __name__ == "__main__":
    cli()
