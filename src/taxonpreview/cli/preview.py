#!/usr/bin/env python3
"""Command line access to scientific name previews."""

import asyncio
import json
from pathlib import Path
from typing import Any

import click
from structlog.contextvars import bound_contextvars

from taxonpreview.config import ConfigManager, PreviewConfig
from taxonpreview.preview.extractor import strip_markup
from taxonpreview.preview.models import ArticleSummary, EntitySummary, NoEntry, ResolutionResult
from taxonpreview.preview.resolver import SourceResolver
from taxonpreview.preview.sources import ReferenceSourceClient
from taxonpreview.system.path_resolver import PathResolver
from taxonpreview.system.structlog_configurator import configure_structlog
from taxonpreview.web.models.preview import PreviewResponse
from taxonpreview.wiring.links import LinkInjector


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Resolve scientific name previews and add preview links to pages."""
    ctx.ensure_object(dict)
    ctx.obj["resolver"] = PathResolver()


def _load_config(obj: dict[str, Any]) -> PreviewConfig:
    config = ConfigManager(obj["resolver"]).load()
    configure_structlog(config)
    return config


async def _resolve_async(config: PreviewConfig, name: str) -> ResolutionResult:
    async with ReferenceSourceClient(config.sources) as client:
        resolver = SourceResolver(client)
        with bound_contextvars(subject=name):
            result = await resolver.resolve(name)
        return result if result is not None else resolver.no_entry(name)


def _echo_result(result: ResolutionResult) -> None:
    if isinstance(result, ArticleSummary):
        click.echo(click.style(result.title, bold=True))
        click.echo(strip_markup(result.snippet_html))
        if result.image_url:
            click.echo(f"Image: {result.image_url}")
        click.echo(f"Read more: {result.canonical_url}")
    elif isinstance(result, EntitySummary):
        click.echo(click.style(result.label, bold=True) + f" – {result.description}")
        if result.image_url:
            click.echo(f"Image: {result.image_url}")
        click.echo(f"See more: {result.canonical_url}")
    elif isinstance(result, NoEntry):
        click.echo(
            click.style(
                f"No entry for {result.subject} exists on English Wikipedia or Wikidata.",
                fg="yellow",
            )
        )
        click.echo(f"Check Wikispecies: {result.wikispecies_url}")


@cli.command()
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Print the preview as JSON")
@click.pass_obj
def resolve(obj: dict[str, Any], name: str, as_json: bool) -> None:
    """Resolve the preview for a scientific NAME."""
    name = name.strip()
    if not name:
        raise click.BadParameter("must not be blank", param_hint="NAME")

    config = _load_config(obj)
    result = asyncio.run(_resolve_async(config, name))

    if as_json:
        response = PreviewResponse.from_result(name, result)
        click.echo(json.dumps(response.model_dump(mode="json"), indent=2, ensure_ascii=False))
    else:
        _echo_result(result)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the augmented page here instead of stdout",
)
@click.pass_obj
def augment(obj: dict[str, Any], input_file: Path, output: Path | None) -> None:
    """Add preview links to the taxon names in INPUT_FILE."""
    config = _load_config(obj)
    augmented = LinkInjector(config.sources).augment(input_file.read_text(encoding="utf-8"))

    if output is None:
        click.echo(augmented.html)
        return

    output.write_text(augmented.html, encoding="utf-8")
    click.echo(
        click.style(f"Added {len(augmented.links)} preview link(s) to {output}", fg="green"),
        err=True,
    )


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
def serve(host: str, port: int) -> None:
    """Run the preview web API."""
    import uvicorn

    uvicorn.run("taxonpreview.web.main:app", host=host, port=port)


def main() -> None:
    """Entry point for the taxonpreview command."""
    cli(obj={})


if __name__ == "__main__":
    main()
