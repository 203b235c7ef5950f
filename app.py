#!/usr/bin/env python3

import functools
import sys

import click
from dotenv import load_dotenv

from src.analyzers import CookstyleAnalyzer
from src.chef import ChefCookbookCatalog, ChefNodeSearch, ChefServerClient
from src.config import ChefServerSettings, get_settings
from src.error_details import get_error_human_message
from src.presenters import (
    render_cookbooks,
    render_error_summary,
    write_cookbooks_csv,
    write_nodes_report,
)
from src.reporting import ReportOptions, aggregate_cookbooks, aggregate_nodes
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def handle_errors(func):
    """Turn unexpected failures into a readable message and a non-zero exit."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            raise click.ClickException(get_error_human_message(e)) from e

    return wrapper


def server_settings(ctx: click.Context) -> ChefServerSettings:
    """Chef server settings with command line overrides applied."""
    overrides = {k: v for k, v in ctx.obj["chef"].items() if v is not None}
    chef = get_settings().chef.model_copy(update=overrides)
    errors = chef.validate_config()
    if errors:
        raise click.UsageError("\n".join(errors), ctx=ctx)
    return chef


@click.group(invoke_without_command=True)
@click.option("--chef-server-url", "-s", help="Chef Infra Server URL")
@click.option("--client-name", "-n", help="Chef Infra Server API client username")
@click.option(
    "--client-key",
    "-k",
    type=click.Path(dir_okay=False),
    help="Chef Infra Server API client key",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL certificate verification",
)
@click.pass_context
def cli(ctx, chef_server_url, client_name, client_key, no_ssl_verify) -> None:
    """Analyze your Chef inventory"""
    ctx.ensure_object(dict)
    ctx.obj["chef"] = {
        "server_url": chef_server_url.rstrip("/") if chef_server_url else None,
        "client_name": client_name,
        "client_key": client_key,
        "ssl_verify": False if no_ssl_verify else None,
    }
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.group()
def report() -> None:
    """Generate reports from a Chef Infra Server"""


@report.command()
@click.option(
    "--detailed",
    "-d",
    is_flag=True,
    default=False,
    help="Include detailed information about cookbook violations",
)
@click.option(
    "--skip-unused",
    "-u",
    is_flag=True,
    default=False,
    help="Do not include cookbooks and versions that are not applied to any nodes",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["txt", "csv"]),
    default="txt",
    help="Output format: txt is human readable, csv is machine readable",
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    help="Maximum concurrent cookbook operations (default: REPORT_WORKERS or 10)",
)
@click.option(
    "--timeout",
    "-t",
    type=click.FloatRange(min=0),
    help="Overall report deadline in seconds (default: REPORT_TIMEOUT, unset)",
)
@click.pass_context
@handle_errors
def cookbooks(ctx, detailed, skip_unused, output_format, workers, timeout) -> None:
    """Generates a cookbook oriented report"""
    settings = get_settings()
    client = ChefServerClient(server_settings(ctx))
    options = ReportOptions(
        skip_unused=skip_unused,
        workers=workers or settings.report.workers,
        timeout=timeout if timeout is not None else settings.report.timeout_s,
    )

    result = aggregate_cookbooks(
        ChefCookbookCatalog(client),
        ChefNodeSearch(client),
        CookstyleAnalyzer(settings.cookstyle),
        options,
    )

    if output_format == "csv":
        write_cookbooks_csv(result, sys.stdout, skip_unused=skip_unused)
    else:
        text = render_cookbooks(result, skip_unused=skip_unused, detailed=detailed)
        if text:
            click.echo(text)

    summary = render_error_summary(result)
    if summary:
        click.echo(summary, err=True)


@report.command()
@click.pass_context
@handle_errors
def nodes(ctx) -> None:
    """Generates a nodes oriented report"""
    client = ChefServerClient(server_settings(ctx))
    items = aggregate_nodes(ChefNodeSearch(client))
    write_nodes_report(items, sys.stdout)


def main() -> None:
    load_dotenv()
    setup_logging()
    cli()


if __name__ == "__main__":
    main()
