#!/usr/bin/env python3
import asyncio
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError

from declgen.cli import load_settings
from declgen.generate import generate_declarations, write_declarations
from declgen.logger import configure_logging, logger


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "root",
    type=click.Path(
        exists=True, file_okay=False, dir_okay=True, readable=True, path_type=Path
    ),
)
@click.option(
    "--analysis",
    "analysis_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Analyzer JSON dump (default: <root>/analysis.json).",
)
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write declaration files here instead of printing them.",
)
@click.option(
    "--exclude",
    multiple=True,
    help="Glob of source paths to skip. Repeatable; replaces the defaults.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML or JSON settings file.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug logging.",
)
def main(
    root: Path,
    analysis_file: Optional[Path],
    out_dir: Optional[Path],
    exclude: Tuple[str, ...],
    config_file: Optional[Path],
    debug: bool,
) -> None:
    """
    Generate TypeScript declarations for the analyzed package at ROOT.
    """
    configure_logging(debug)

    overrides: dict = {"root_dir": str(root.resolve())}
    if analysis_file is not None:
        overrides["analysis_file"] = str(analysis_file)
    if out_dir is not None:
        overrides["out_dir"] = str(out_dir)
    if exclude:
        overrides["exclude"] = list(exclude)

    toml_file = json_file = None
    if config_file is not None:
        if config_file.suffix == ".json":
            json_file = str(config_file)
        else:
            toml_file = str(config_file)

    try:
        settings = load_settings(toml_file=toml_file, json_file=json_file, **overrides)
        outputs = asyncio.run(generate_declarations(settings))
    except (OSError, ValidationError, ValueError) as e:
        logger.error("Declaration generation failed", error=str(e))
        raise SystemExit(1)

    if settings.out_dir:
        for path in write_declarations(outputs, settings.out_dir):
            click.echo(path)
    else:
        for filename, text in outputs.items():
            click.echo(f"// {filename}")
            click.echo(text)

    raise SystemExit(0)


if __name__ == "__main__":
    main()
