"""Command-line interface for gql-fedgen."""

import logging
from pathlib import Path

import click

from .api import build, generate
from .core.config import find_config, load_config
from .core.errors import GenerationError


def _load(config_path: str | None):
    path = Path(config_path) if config_path else find_config(Path.cwd())
    return load_config(path)


@click.group()
@click.version_option(package_name="gql-fedgen")
def main():
    """GraphQL code generator for Python with federation support.

    Generate pydantic models and federation resolvers from GraphQL schemas.
    """
    pass


@main.command("generate")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the config file (default: search upwards for gqlgen.yml).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate_cmd(config_path: str | None, verbose: bool):
    """Generate Python code from the configured schema.

    Examples:

        gql-fedgen generate

        gql-fedgen generate -c ./service/gqlgen.yml -v
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = _load(config_path)
        if verbose:
            click.echo(f"Config: {config.base_dir}")
            click.echo(f"Schema: {', '.join(config.schema_filename)}")

        click.echo("Generating code...")
        data = generate(config)

        if verbose:
            click.echo(f"  Objects: {len(data.objects)}")
            click.echo(f"  Inputs: {len(data.inputs)}")
            click.echo(f"  Interfaces: {len(data.interfaces)}")
            click.echo(f"  Entities: {len(data.entities)}")
    except GenerationError as e:
        click.echo(f"error: {e.message}", err=True)
        raise SystemExit(1)

    click.echo(f"Done! Models in {config.resolve_path(config.model.filename)}")
    if config.federated:
        click.echo(f"Federation service in {config.resolve_path(config.federation.filename)}")


@main.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the config file (default: search upwards for gqlgen.yml).",
)
def sdl(config_path: str | None):
    """Print the schema as published to a federation gateway."""
    try:
        data = build(_load(config_path))
    except GenerationError as e:
        click.echo(f"error: {e.message}", err=True)
        raise SystemExit(1)
    click.echo(data.sdl, nl=False)


if __name__ == "__main__":
    main()
