#!/usr/bin/env python3
"""
Command line entry point for the SiteDigest crawler.

Commands:
  crawl URL   Discover and crawl a site, streaming events as JSON lines
  page URL    Crawl a single page ad hoc and print its record
  config      Show the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --max-pages INT     Override max_pages
  --json PATH         Save a JSON report
  --html PATH         Save an HTML report
  --template DIR      Directory with the Jinja2 report template
  --pretty            Indent JSON output (events and the JSON report)
  --timeout SEC       Timeout for the whole run (seconds)

Example:
  site_digest crawl example.com --json report.json --max-pages 20
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from site_digest import __version__
from site_digest.aggregator import aggregate_pages
from site_digest.config import load_config
from site_digest.crawler.models import PageStatus
from site_digest.crawler.orchestrator import RunState
from site_digest.engine import crawl_page, start_crawl
from site_digest.logger import init_logging
from site_digest.report.html_report import render_html
from site_digest.report.json_report import render_json
from site_digest.utils import normalize_seed_url

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _dump(data, pretty: bool) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2 if pretty else None)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteDigest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stderr when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Format string for log records'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteDigest command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--max-pages', '-l', 'max_pages',
    type=click.IntRange(min=1),
    default=None,
    help='Maximum number of pages to discover (overrides max_pages)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save a JSON report to this file'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save an HTML report to this file'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with report.html.j2 (bundled template when omitted)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON output (2 spaces)'
)
@click.option(
    '--timeout', 'run_timeout',
    type=float,
    default=None,
    help='Timeout for the whole run (seconds)'
)
@click.pass_context
def crawl(ctx, url, max_pages, json_output, html_output, template_dir, pretty, run_timeout):
    """Crawl a site starting at URL and stream progress events."""
    cfg = ctx.obj['config']
    if max_pages is not None:
        cfg = cfg.model_copy(update={'max_pages': max_pages})
    try:
        seed = normalize_seed_url(url)
    except ValueError as e:
        print_error(str(e))

    def emit(event):
        click.echo(_dump(event.to_dict(), pretty))

    try:
        if run_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_crawl(cfg, seed, emit), timeout=run_timeout)
            )
        else:
            result = asyncio.run(start_crawl(cfg, seed, emit))
    except asyncio.TimeoutError:
        print_error(f'Crawl did not finish within {run_timeout} seconds')
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    report = aggregate_pages(result.pages, seed)

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}', err=True)
        except Exception as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}', err=True)
        except Exception as e:
            print_error(f'Failed to save HTML report: {e}')

    if result.state is RunState.ABORTED:
        sys.exit(1)


@cli.command('page', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--pretty', is_flag=True, help='Indent JSON output (2 spaces)')
@click.pass_context
def page(ctx, url, pretty):
    """Re-crawl a single URL and print its page record."""
    cfg = ctx.obj['config']
    try:
        target = normalize_seed_url(url)
    except ValueError as e:
        print_error(str(e))
    record = asyncio.run(crawl_page(cfg, target))
    click.echo(_dump(record.to_dict(), pretty))
    if record.status is PageStatus.ERROR:
        sys.exit(1)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
