"""Upload and download probe commands for the bosprobe CLI."""

from __future__ import annotations

import signal
from collections.abc import Callable
from types import FrameType
from typing import Any

import typer
from rich.console import Console
from rich.text import Text

from bosprobe.application.diagnostics import DiagnosticPipeline
from bosprobe.application.network import NetworkReachabilityClassifier
from bosprobe.application.report import ProbeReport
from bosprobe.cli import helpers
from bosprobe.cli import options as cli_options
from bosprobe.cli.models import CliInvocation
from bosprobe.config.settings import region_domains_from_settings
from bosprobe.domain.checks import (
    CheckStrategy,
    DownloadCheck,
    DownloadRequest,
    ProbeRequest,
    UploadCheck,
    UploadRequest,
)
from bosprobe.domain.endpoint import EndpointCache, EndpointResolver, RegionDomains
from bosprobe.domain.suggestions import MessageCatalog, SuggestionEngine
from bosprobe.infrastructure.errors import ProbeError
from bosprobe.infrastructure.finisher import FINISHER
from bosprobe.infrastructure.logging import ProbeLog

EXIT_USAGE_ERROR = 2
EXIT_INTERRUPTED = 130


def _raise_interrupt(signum: int, frame: FrameType | None) -> None:
    raise KeyboardInterrupt


def _fail_startup(error: ProbeError, stderr_console: Console) -> typer.Exit:
    stderr_console.print(f"[red]{error.user_message}[/red]")
    for hint in error.hints:
        stderr_console.print(f"  - {hint}", markup=False)
    return typer.Exit(code=EXIT_USAGE_ERROR)


def run_probe(
    invocation: CliInvocation,
    strategy: CheckStrategy[Any],
    build_request: Callable[[str, str], ProbeRequest],
    *,
    stdout_console: Console,
    stderr_console: Console,
    keyboard_interrupt_banner: Callable[[], Text],
) -> ProbeReport:
    """Resolve settings, wire the pipeline and run one probe.

    ``build_request`` receives the resolved access and secret key (empty for
    anonymous access) and returns the request handed to the strategy.
    """

    try:
        probe_settings, logging_settings, settings = helpers.resolve_probe_and_logging(invocation)
        credentials = helpers.resolve_credentials(invocation, settings)
    except ProbeError as error:
        raise _fail_startup(error, stderr_console) from error

    logger = helpers.initialize_logging(probe_settings, logging_settings)
    if credentials is None:
        logger.info("credentials.anonymous")
    else:
        logger.debug("credentials.resolved", source=credentials.source)

    cache = EndpointCache(probe_settings.cache_file)
    probe_log = ProbeLog.create(probe_settings.log_dir, console=stdout_console)
    FINISHER.insert(cache)
    FINISHER.insert(probe_log)

    client = helpers.build_client(credentials, probe_settings)
    resolver = EndpointResolver(
        cache,
        RegionDomains.from_config(region_domains_from_settings(settings)),
        ttl_seconds=probe_settings.cache_ttl,
    )
    classifier = NetworkReachabilityClassifier(
        helpers.build_net_tools(),
        probe_log,
        reference_host=probe_settings.reference_host,
        ping_count=probe_settings.ping_count,
        traceroute_max_hops=probe_settings.traceroute_max_hops,
    )
    pipeline = DiagnosticPipeline(
        strategy,
        client=client,
        resolver=resolver,
        classifier=classifier,
        engine=SuggestionEngine(MessageCatalog.load(probe_settings.locale)),
        sink=probe_log,
        console=stdout_console,
        spinner=stdout_console.is_terminal,
    )
    request = build_request(
        credentials.access_key if credentials else "",
        credentials.secret_key if credentials else "",
    )

    previous_handler = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        return pipeline.run(request)
    except KeyboardInterrupt:
        FINISHER.execute()
        stderr_console.print(keyboard_interrupt_banner())
        raise typer.Exit(code=EXIT_INTERRUPTED) from None
    finally:
        client.close()
        FINISHER.execute()
        signal.signal(signal.SIGTERM, previous_handler)


def register(
    app: typer.Typer,
    *,
    stdout_console: Console,
    stderr_console: Console,
    keyboard_interrupt_banner: Callable[[], Text],
) -> None:
    """Register the probe commands with the app."""

    @app.command(help="Probe an upload to a bucket and diagnose any failure.")
    def upload(
        access_key: cli_options.AccessKeyOption = None,
        secret_key: cli_options.SecretKeyOption = None,
        endpoint: cli_options.EndpointOption = None,
        bucket: cli_options.BucketOption = None,
        object_name: cli_options.ObjectOption = None,
        local_file: cli_options.UploadSourceOption = None,
        config_path: cli_options.ConfigPathOption = None,
        locale: cli_options.LocaleOption = None,
        log_level: cli_options.LogLevelOption = None,
        debug: cli_options.DebugOption = None,
    ) -> None:
        invocation = helpers.build_invocation(
            config_path=config_path,
            access_key=access_key,
            secret_key=secret_key,
            locale=locale,
            debug=debug,
            log_level=log_level,
        )

        def build_request(ak: str, sk: str) -> UploadRequest:
            return UploadRequest(
                access_key=ak,
                secret_key=sk,
                endpoint=cli_options.clean_string(endpoint) or "",
                bucket=cli_options.clean_string(bucket) or "",
                object_name=object_name or "",
                local_path=cli_options.clean_string(local_file) or "",
            )

        report = run_probe(
            invocation,
            UploadCheck(),
            build_request,
            stdout_console=stdout_console,
            stderr_console=stderr_console,
            keyboard_interrupt_banner=keyboard_interrupt_banner,
        )
        raise typer.Exit(code=report.exit_code())

    @app.command(help="Probe a download from a bucket or URL and diagnose any failure.")
    def download(
        access_key: cli_options.AccessKeyOption = None,
        secret_key: cli_options.SecretKeyOption = None,
        endpoint: cli_options.EndpointOption = None,
        bucket: cli_options.BucketOption = None,
        object_name: cli_options.ObjectOption = None,
        url: cli_options.DownloadSourceOption = None,
        local_path: cli_options.DownloadTargetOption = None,
        config_path: cli_options.ConfigPathOption = None,
        locale: cli_options.LocaleOption = None,
        log_level: cli_options.LogLevelOption = None,
        debug: cli_options.DebugOption = None,
    ) -> None:
        invocation = helpers.build_invocation(
            config_path=config_path,
            access_key=access_key,
            secret_key=secret_key,
            locale=locale,
            debug=debug,
            log_level=log_level,
        )

        def build_request(ak: str, sk: str) -> DownloadRequest:
            return DownloadRequest(
                access_key=ak,
                secret_key=sk,
                endpoint=cli_options.clean_string(endpoint) or "",
                bucket=cli_options.clean_string(bucket) or "",
                object_name=object_name or "",
                local_path=cli_options.clean_string(local_path) or "",
                url=cli_options.clean_string(url) or "",
            )

        report = run_probe(
            invocation,
            DownloadCheck(),
            build_request,
            stdout_console=stdout_console,
            stderr_console=stderr_console,
            keyboard_interrupt_banner=keyboard_interrupt_banner,
        )
        raise typer.Exit(code=report.exit_code())


__all__ = ["EXIT_INTERRUPTED", "EXIT_USAGE_ERROR", "register", "run_probe"]
