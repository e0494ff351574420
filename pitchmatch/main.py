"""Main entry point for the PitchMatch service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Optional, Tuple

import uvicorn

from pitchmatch.api import create_app
from pitchmatch.config.environment import EnvironmentConfig
from pitchmatch.config.exceptions import ConfigurationError
from pitchmatch.config.loader import load_config
from pitchmatch.config.models import AppConfig
from pitchmatch.logging import get_logger
from pitchmatch.logging.config import configure_logging
from pitchmatch.persistence import PersistenceError, close_database, init_database
from pitchmatch.scheduler import SchedulerService
from pitchmatch.sender import BatchSender, SenderError

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PitchMatch - match contacts to journalist leads and run drip campaigns"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--send-batch",
        action="store_true",
        help="Send one batch of due emails and exit",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API together with the batch scheduler",
    )
    return parser


def run_send_batch(sender: BatchSender) -> int:
    """Run one batch. Returns 1 when any row failed or could not be updated."""
    result = sender.run_once()
    logger.info(
        f"Batch finished: {result.sent} sent, {result.retried} retried, {result.failed} failed",
        extra={
            "event": "service.send_batch.completed",
            "batch_id": result.batch_id,
            "fetched": result.fetched,
            "sent": result.sent,
            "retried": result.retried,
            "failed": result.failed,
            "errors": result.errors,
        },
    )
    return 1 if result.has_errors else 0


def run_server(
    app_config: AppConfig, env_config: EnvironmentConfig, sender: BatchSender
) -> int:
    """Serve the API; the batch scheduler runs alongside when SMTP is configured."""
    scheduler_service = None
    if env_config.smtp_configured:
        scheduler_service = SchedulerService(
            batch_callable=sender.run_once,
            interval_seconds=app_config.sender.batch_interval_seconds,
        )
        scheduler_service.start()
    else:
        logger.warning(
            "SMTP is not configured; batch scheduler disabled",
            extra={"event": "service.scheduler.disabled"},
        )

    app = create_app(app_config, env_config, batch_sender=sender)
    try:
        uvicorn.run(app, host=app_config.api.host, port=app_config.api.port, log_config=None)
    finally:
        if scheduler_service is not None:
            scheduler_service.shutdown(wait=False)
    return 0


def run_daemon(app_config: AppConfig, env_config: EnvironmentConfig, sender: BatchSender) -> int:
    """Run the batch scheduler until SIGINT or SIGTERM."""
    if not env_config.smtp_configured:
        raise SenderError("SMTP is not configured (set SMTP_HOST)")

    shutdown_event = threading.Event()
    scheduler_service = SchedulerService(
        batch_callable=sender.run_once,
        interval_seconds=app_config.sender.batch_interval_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler_service.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler_service.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
        scheduler_service.shutdown(wait=False)
    return 0


def main(argv=None) -> int:
    """
    Main entry point for PitchMatch.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        environment = os.environ.get("ENVIRONMENT", "local")
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=environment,
        )

        mode = "send-batch" if args.send_batch else "serve" if args.serve else "daemon"
        logger.info(
            "PitchMatch starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "mode": mode,
            },
        )

        init_database(env_config.database_url)
        sender = BatchSender(env_config, app_config.sender)

        try:
            if args.send_batch:
                exit_code = run_send_batch(sender)
            elif args.serve:
                exit_code = run_server(app_config, env_config, sender)
            else:
                exit_code = run_daemon(app_config, env_config, sender)
        finally:
            close_database()

        logger.info(
            "PitchMatch stopped",
            extra={"event": "service.stopping", "uptime_seconds": round(time.time() - start_time, 2)},
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except (SenderError, PersistenceError) as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.error(
            f"Service error: {e}",
            extra={"event": "service.error", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
