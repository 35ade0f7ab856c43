"""Command line entry point."""

import logging
from pathlib import Path
from typing import Optional

import typer

from blog_publisher.core.config import PublisherConfig, load_config
from blog_publisher.core.exceptions import ConfigurationError
from blog_publisher.core.publisher import create_publisher_from_config
from blog_publisher.core.slugs import slugify

app = typer.Typer(help="Publish tagged notes as a static blog on GitHub.", no_args_is_help=True)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.command()
def publish(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    vault: Optional[Path] = typer.Option(None, "--vault", help="Vault directory (overrides config)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Staging directory (overrides config)"),
    push: bool = typer.Option(False, "--push", help="Sync to GitHub after staging"),
    stage_only: bool = typer.Option(False, "--stage-only", help="Only write the staging directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Render the blog and optionally push it to GitHub."""
    configure_logging(verbose)

    try:
        config = load_config(config_path) if config_path else PublisherConfig.from_dict({})
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    if vault is not None:
        config.vault_path = vault
    if output is not None:
        config.output_dir = output

    if push and stage_only:
        typer.echo("--push and --stage-only are mutually exclusive", err=True)
        raise typer.Exit(code=2)
    if push or stage_only:
        config.push = push

    result = create_publisher_from_config(config).publish()
    for line in result.summary():
        typer.echo(line)

    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def slug(title: str) -> None:
    """Print the identifier a title would get."""
    typer.echo(slugify(title))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
