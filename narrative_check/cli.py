"""Command-line interface for NarrativeCheck."""

import asyncio
import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from narrative_check.config import Config
from narrative_check.exceptions import AuthError
from narrative_check.monitoring.metrics import PrometheusExporter
from narrative_check.service import NarrativeService
from narrative_check.sinks import ConsoleSink, JsonSink, NarrativeSink

app = typer.Typer(help="NarrativeCheck - Reddit narrative and sentiment for public companies")

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating log file
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": 10485760,  # 10 MB
            "backupCount": 5,
            "encoding": "utf8",
        }

    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers),
                "level": log_level,
                "propagate": True
            },
            "asyncio": {
                "level": "WARNING",
            },
            "aiohttp": {
                "level": "WARNING",
            },
            "httpx": {
                "level": "WARNING",
            },
        }
    }

    logging.config.dictConfig(log_config)


def ensure_valid(config: Config) -> Config:
    validation_errors = config.validate()

    if validation_errors:
        for error in validation_errors:
            logger.error(f"Configuration error: {error}")
        logger.critical("Invalid configuration, aborting")
        raise typer.Exit(code=1)

    return config


async def run_analysis(
    config: Config,
    company: str,
    sink: NarrativeSink,
    with_financials: bool = False,
    prometheus_exporter: Optional[PrometheusExporter] = None,
) -> None:
    async with NarrativeService.from_config(config, prometheus_exporter) as service:
        report = await service.analyze(company, with_financials=with_financials)
    sink.emit(report)


@app.command()
def analyze(
    company: Annotated[str, typer.Argument(help="Company name or ticker, e.g. TSLA")],
    config: Annotated[Optional[str], typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Path to .env file")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Write the report as JSON")] = False,
    no_summarizer: Annotated[bool, typer.Option("--no-summarizer", help="Always use local synthesis")] = False,
    with_financials: Annotated[bool, typer.Option("--with-financials", help="Fetch financial reality and divergence")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
    metrics_port: Annotated[Optional[int], typer.Option("--metrics-port", help="Expose Prometheus metrics on this port")] = None,
) -> None:
    """
    Gather Reddit discussion about a company and print five narrative bullets.
    """
    app_config = Config.from_files(config, env)
    setup_logging("DEBUG" if verbose else "INFO", app_config.log_file)
    ensure_valid(app_config)

    if no_summarizer:
        app_config.summarizer.enabled = False

    prometheus_exporter = None
    if metrics_port is not None or app_config.monitoring.enable_prometheus:
        prometheus_exporter = PrometheusExporter(port=metrics_port or app_config.monitoring.prometheus_port)
        prometheus_exporter.start_server()

    sink = JsonSink(sys.stdout) if as_json else ConsoleSink(sys.stdout)
    logger.info(f"Analyzing Reddit narrative for {company}")

    try:
        asyncio.run(run_analysis(app_config, company, sink, with_financials, prometheus_exporter))
    except AuthError as e:
        logger.error(f"Authentication failed: {e}")
        reason = e.status_code if e.status_code is not None else "no response"
        typer.echo(f"Reddit authentication failed ({reason}); try again later.", err=True)
        raise typer.Exit(code=2)


@app.command("check-config")
def check_config(
    config: Annotated[Optional[str], typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Path to .env file")] = None,
) -> None:
    """
    Validate configuration and report any problems.
    """
    app_config = Config.from_files(config, env)
    errors = app_config.validate()

    if errors:
        for error in errors:
            typer.echo(f"- {error}")
        raise typer.Exit(code=1)

    typer.echo(f"Configuration OK ({len(app_config.search.subreddits)} subreddits, "
               f"summarizer {'enabled' if app_config.summarizer.is_active else 'disabled'})")


if __name__ == "__main__":
    app()
