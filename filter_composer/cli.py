#!/usr/bin/env python3
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from filter_composer.config.configuration import config
from filter_composer.errors import ConfigurationError
from filter_composer.filters.evaluator import evaluate
from filter_composer.filters.query_builder import QueryCompiler
from filter_composer.filters.registry import FilterRegistry, get_filter_registry
from filter_composer.storage import FileFilterStore, hydrate
from filter_composer.types.common import CatalogName

logger = logging.getLogger(__name__)


def setup_logging(quiet: bool) -> None:
    file_handler = logging.FileHandler(config.log_filepath)
    stream_handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_handler.setFormatter(formatter)
    stream_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [file_handler] if quiet else [file_handler, stream_handler]
    logging.basicConfig(level=logging.INFO, handlers=handlers, force=True)


def _echo_json(data: object) -> None:
    click.echo(json.dumps(data, indent=4, ensure_ascii=False))


@click.group()
@click.option(
    "-r",
    "--registry",
    "catalog",
    type=click.Choice([c.value for c in CatalogName], case_sensitive=False),
    default=CatalogName.Employees.value,
    show_default=True,
    help="Filter catalog the persisted filters refer to.",
)
@click.option(
    "-c",
    "--config",
    "configpath",
    default=None,
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
    help="Path to your own config yaml file that will override the default one.",
)
@click.option("-q", "--quiet", is_flag=True, help="If set, will not log to stderr")
@click.pass_context
def main(ctx: click.Context, catalog: str, configpath: str | None, quiet: bool) -> None:
    if configpath:
        try:
            config.load(Path(configpath))
        except ConfigurationError as e:
            raise click.ClickException(f"Bad format of configuration file: {e}")
    setup_logging(quiet)
    ctx.obj = get_filter_registry(CatalogName(catalog.lower()))


@main.command()
@click.pass_obj
def definitions(registry: type[FilterRegistry]) -> None:
    """List the filter definitions of the catalog."""
    _echo_json([definition.to_dict() for definition in registry.all()])


@main.command(name="compile")
@click.argument("state", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["query", "params", "payload"], case_sensitive=False),
    default="query",
    show_default=True,
    help="Output shape of the compiled filters.",
)
@click.pass_obj
def compile_command(registry: type[FilterRegistry], state: Path, fmt: str) -> None:
    """Compile the persisted filters in STATE into a query."""
    filter_set = hydrate(FileFilterStore(state), registry)
    compiler = QueryCompiler(registry)
    if fmt == "params":
        _echo_json(compiler.compile_to_flat_params(filter_set))
    elif fmt == "payload":
        _echo_json(compiler.build_payload(filter_set))
    else:
        _echo_json(compiler.compile(filter_set).to_dict())


@main.command()
@click.argument("state", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("records", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    "outputpath",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    default=None,
    help="Write the matching records here instead of stdout.",
)
@click.pass_obj
def apply(registry: type[FilterRegistry], state: Path, records: Path, outputpath: Path | None) -> None:
    """Filter and sort the JSON list of RECORDS with the persisted filters in STATE."""
    with records.open("r") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as e:
            raise click.ClickException(f"Records file is not valid JSON: {e}")
    if not isinstance(data, list) or not all(isinstance(record, dict) for record in data):
        raise click.ClickException("Records file must contain a JSON list of objects")

    filter_set = hydrate(FileFilterStore(state), registry)
    result = evaluate(data, filter_set)
    logger.info(f"{len(result)} of {len(data)} records match {len(filter_set)} filters")

    if outputpath:
        with outputpath.open("w") as handle:
            json.dump(result, handle, indent=4, ensure_ascii=False)
    else:
        _echo_json(result)


if __name__ == "__main__":
    main()
