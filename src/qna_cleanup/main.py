import asyncio
from typing import Optional

import click
import pydantic
from loguru import logger

from qna_cleanup.errors import ConfigurationError
from qna_cleanup.errors import SourceError
from qna_cleanup.jobs.qna_projects import ProjectDeleter
from qna_cleanup.jobs.qna_projects import iter_projects
from qna_cleanup.monitoring.logger import configure_logger
from qna_cleanup.purge.cancellation import CancellationToken
from qna_cleanup.purge.cancellation import install_interrupt_handler
from qna_cleanup.purge.dispatcher import ProjectDispatcher
from qna_cleanup.purge.enums import RunState
from qna_cleanup.purge.models import DispatchConfig
from qna_cleanup.purge.models import RunResult
from qna_cleanup.qna_auth.client import authoring_client
from qna_cleanup.qna_auth.client import validate_endpoint
from qna_cleanup.settings import Settings

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130  # conventional 128 + SIGINT


def load_settings() -> Settings:
    """Load settings from the environment, reporting bad values as configuration errors."""
    try:
        return Settings()
    except pydantic.ValidationError as exc:
        raise ConfigurationError(f"Invalid environment configuration: {exc}") from exc


def build_dispatch_config(
    settings: Settings,
    pattern: Optional[str],
    dry_run: bool,
    workers: Optional[int],
) -> DispatchConfig:
    """Merge command-line options over settings and validate them."""
    return DispatchConfig.from_options(
        pattern=pattern if pattern is not None else settings.cleanup_pattern,
        dry_run=dry_run,
        max_workers=workers if workers is not None else settings.cleanup_workers,
    )


def exit_code_for(result: RunResult) -> int:
    """
    Map a finished run to a process exit status.

    A run with individual deletion failures still ends COMPLETED, but exits
    non-zero so that scripts can tell something was left behind.
    """
    if result.state is RunState.CANCELLED:
        return EXIT_CANCELLED
    if result.state is RunState.FAILED or result.has_failures:
        return EXIT_FAILURE
    return EXIT_OK


def log_summary(result: Optional[RunResult]) -> None:
    if result is None:
        return
    logger.info(
        "Cleanup finished",
        state=result.state.value,
        dry_run=result.dry_run,
        matched=result.matched,
        attempted=result.attempted,
        succeeded=result.succeeded,
        failed=result.failed,
        cancelled=result.cancelled,
    )


async def run_cleanup(
    endpoint: str,
    key: Optional[str],
    config: DispatchConfig,
    debug: bool = False,
) -> int:
    """
    Delete (or, in dry-run, list) every project matching ``config.pattern``.

    Ctrl+C cancels the run: no further deletions are started, in-flight ones are
    abandoned and the run drains before returning.

    Returns:
        Process exit status
    """
    token = CancellationToken()
    restore_signals = install_interrupt_handler(token)
    try:
        async with authoring_client(endpoint, key, logging_enable=debug) as client:
            dispatcher = ProjectDispatcher(config, ProjectDeleter(client), token)
            try:
                result = await dispatcher.run(iter_projects(client))
            except SourceError as exc:
                logger.error(str(exc))
                log_summary(exc.result)
                return EXIT_FAILURE
    finally:
        restore_signals()

    log_summary(result)
    return exit_code_for(result)


@click.command(help="Delete Question Answering projects whose names match a pattern.")
@click.option(
    "--endpoint",
    default=None,
    help="Question Answering (formerly QnA Maker) endpoint. "
    "The default is the QUESTIONANSWERING_ENDPOINT environment variable.",
)
@click.option(
    "--key",
    default=None,
    help="Question Answering API key. The default is the QUESTIONANSWERING_KEY environment variable, "
    "if set; otherwise, the current Azure authenticated identity is used, if logged in.",
)
@click.option(
    "--pattern",
    default=None,
    help="The regular expression to match projects to be deleted. Must not be empty. The default is 'TestProject'.",
)
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging.")
@click.option("--dry-run", is_flag=True, help="Show what would happen but do not make any changes.")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="The maximum number of parallel deletions. The default is the number of processors.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    endpoint: Optional[str],
    key: Optional[str],
    pattern: Optional[str],
    debug: bool,
    dry_run: bool,
    workers: Optional[int],
) -> None:
    configure_logger(debug=debug)

    try:
        settings = load_settings()
        endpoint = validate_endpoint(endpoint or settings.questionanswering_endpoint)
        config = build_dispatch_config(settings, pattern, dry_run, workers)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    logger.debug(
        "Configuration loaded",
        endpoint=endpoint,
        key_set=bool(key or settings.questionanswering_key),
        pattern=config.pattern.pattern,
        dry_run=config.dry_run,
        workers=config.max_workers,
    )

    ctx.exit(asyncio.run(run_cleanup(endpoint, key or settings.questionanswering_key, config, debug=debug)))


def main() -> None:
    cli(prog_name="qna-cleanup")
