"""CLI application for DepBump."""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from core.config import DEFAULT_CONCURRENCY, CheckOptions
from core.errors import DepBumpError
from core.fetch import DEPENDENCIES, DEV_DEPENDENCIES, check_manifest
from core.manifest import apply_changes, read_manifest, write_manifest
from core.registry import DEFAULT_REGISTRY_URL
from core.report import render, render_json

console = Console()

SECTION_TITLES = {
    DEPENDENCIES: "Dependencies",
    DEV_DEPENDENCIES: "DevDependencies",
}


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def format_text_output(result) -> str:
    """Format the per-section reports shown by default."""
    blocks = []
    for section, title in SECTION_TITLES.items():
        if section in result.errors:
            continue
        change_set = result.change_sets[section]
        block = f"{title}:\n\n{render(change_set) or 'Up to date'}"
        for name, reason in sorted(change_set.failures.items()):
            block += f"\n  skipped {name}: {reason}"
        blocks.append(block)
    return "\n\n".join(blocks)


app = typer.Typer(
    name="depbump",
    help="DepBump - Check package.json dependencies against the npm registry",
    add_completion=False,
)


@app.command()
def check(
    file_path: str = typer.Argument("package.json", help="Path to package.json"),
    concurrency: int = typer.Option(
        DEFAULT_CONCURRENCY, "--concurrency", "-c",
        envvar="DEPBUMP_CONCURRENCY", help="Concurrent registry requests per section",
    ),
    write: bool = typer.Option(False, "--write", "-w", help="Rewrite package.json with the new versions"),
    registry_url: str = typer.Option(
        DEFAULT_REGISTRY_URL, "--registry", envvar="DEPBUMP_REGISTRY", help="Registry base URL",
    ),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds"),
    skip_failures: bool = typer.Option(
        False, "--skip-failures", help="Skip packages whose lookup fails instead of aborting",
    ),
    format_type: str = typer.Option("text", "--format", help="Output format: text or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every registry request"),
) -> None:
    """DepBump - Report outdated dependencies and optionally update them."""

    configure_logging(verbose)

    try:
        path = Path(file_path)
        if not path.exists():
            console.print(f"Error: File {file_path} not found", style="red")
            raise typer.Exit(1)

        options = CheckOptions(
            concurrency=concurrency,
            write=write,
            registry_url=registry_url,
            timeout=timeout,
            fail_fast=not skip_failures,
        )
        manifest = read_manifest(path)

        result = asyncio.run(
            check_manifest(manifest.dependencies, manifest.dev_dependencies, options)
        )

        # Generate output
        if format_type == "json":
            console.print(render_json(result.change_sets.values()), soft_wrap=True, highlight=False)
        else:
            console.print(format_text_output(result), soft_wrap=True, highlight=False)

        for error in result.errors.values():
            console.print(f"Error: {error}", style="red")

        # Sections that failed are never written
        if options.write and result.has_changes:
            document = apply_changes(
                manifest.document, result.change_sets.values(), skip_sections=result.errors.keys()
            )
            write_manifest(path, manifest, document)
            console.print(f"Updated {file_path}")

        if not result.ok:
            raise typer.Exit(1)
        if not result.has_changes:
            raise typer.Exit(2)  # No changes exit code

    except typer.Exit:
        raise
    except DepBumpError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
