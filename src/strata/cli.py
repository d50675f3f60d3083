"""Command-line interface for Strata."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import build_registry, build_root_styles, build_world
from .content import ContentNode, ElementKind
from .exceptions import StrataError
from .logger import setup_logger
from .outline import describe
from .parser import parse_document
from .realize import Realizer
from .recipes import default_registry, load_rules
from .styles import StyleChain

app = typer.Typer(
    name="strata",
    help="Realize structured content through show rules and a style cascade",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show rewrites, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: strata_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for strata commands."""
    setup_logger(verbose)
    context.set_config_path(config)


@app.command()
def render(
    file: Annotated[Path, typer.Argument(help="Path to the document YAML file")],
    *,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    rules_module: Annotated[
        str | None,
        typer.Option("--rules-module", help="Python module path registering show rules"),
    ] = None,
    rules_file: Annotated[
        Path | None,
        typer.Option("--rules-file", help="Python file path registering show rules"),
    ] = None,
) -> None:
    """Realize a document and print its styled outline."""
    if rules_module and rules_file:
        typer.echo("Error: Cannot specify both --rules-module and --rules-file", err=True)
        raise typer.Exit(1)

    try:
        registry = default_registry()
        if rules_module or rules_file:
            registry = load_rules(rules_module, rules_file)

        config = context.config_for(file)
        recipes = build_registry(config, registry.copy()).snapshot()
        world = build_world(config)
        content = parse_document(file)

        realizer = Realizer.from_config(world, config.realize, recipes)
        root = StyleChain().chain(build_root_styles(config))
        realized = realizer.realize(content, root)
        lines = describe(realized, world, root, config.realize.base_size)
    except StrataError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    outline = "\n".join(lines)
    if output:
        output.write_text(outline + "\n", encoding="utf-8")
        typer.echo(f"Outline written to {output}")
    else:
        typer.echo(outline)


def _format_value(value: object) -> str:
    if isinstance(value, ContentNode):
        if value.kind is ElementKind.TEXT:
            return repr(value.field("text"))
        return f"[{value.kind.value}]"
    if isinstance(value, tuple):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return str(value)


@app.command()
def fields(
    file: Annotated[Path, typer.Argument(help="Path to the document YAML file")],
) -> None:
    """List the fields of each top-level element of a document."""
    try:
        content = parse_document(file)
    except StrataError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    nodes = list(content.children()) if content.kind is ElementKind.SEQUENCE else [content]
    for node in nodes:
        location = f" ({node.span})" if node.span else ""
        typer.echo(f"{node.kind.value}{location}")
        for name in node.spec.field_names:
            typer.echo(f"  {name}: {_format_value(node.field(name))}")


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    main()
