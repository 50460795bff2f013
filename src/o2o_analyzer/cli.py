"""Command line entrypoint: run a transport or invoke a single tool."""

from __future__ import annotations

import json
import logging
import sys

import anyio
import click

from o2o_analyzer.agent.dispatcher import Dispatcher
from o2o_analyzer.config import AnalyzerConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    # stdout carries the MCP stream.
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


@click.group()
@click.option(
    "--base-path",
    envvar="O2O_BASE_PATH",
    type=click.Path(file_okay=False),
    help="Root of the Laravel checkout",
)
@click.option("--log-level", envvar="O2O_LOG_LEVEL", default=None, help="Logging level")
@click.pass_context
def cli(ctx: click.Context, base_path: str | None, log_level: str | None) -> None:
    """Read-only introspection tools for the O2O Laravel application."""
    config = AnalyzerConfig.from_env(base_path=base_path, log_level=log_level)
    configure_logging(config.log_level)
    ctx.obj = config


@cli.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default="stdio",
    show_default=True,
)
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.pass_obj
def serve(config: AnalyzerConfig, transport: str, host: str, port: int) -> None:
    """Serve the tool catalog over MCP stdio or HTTP."""
    if config.is_placeholder:
        logging.getLogger(__name__).warning(
            "O2O_BASE_PATH is not set; filesystem tools will fail until it is configured"
        )

    if transport == "http":
        import uvicorn

        from o2o_analyzer.api.main import create_app

        uvicorn.run(create_app(config), host=host, port=port, log_level=config.log_level.lower())
        return

    from o2o_analyzer.api.mcp_server import run_stdio

    anyio.run(run_stdio, Dispatcher.from_config(config))


@cli.command()
@click.pass_obj
def tools(config: AnalyzerConfig) -> None:
    """List the available tool names."""
    for descriptor in Dispatcher.from_config(config).list_capabilities():
        click.echo(f"{descriptor.name}\t{descriptor.description}")


@cli.command()
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object")
@click.pass_obj
def call(config: AnalyzerConfig, name: str, raw_args: str) -> None:
    """Invoke one tool and print its result."""
    try:
        args = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--args") from exc
    if not isinstance(args, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--args")

    result = Dispatcher.from_config(config).invoke(name, args)
    click.echo(result.text)
    if result.is_error:
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
