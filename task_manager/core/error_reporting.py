"""Forwarding of unexpected errors to Rollbar."""
from typing import Optional

import rollbar
from fastapi import Request

from task_manager.core.config import Settings
from task_manager.logs.server_log import api_logger

_enabled = False


def init_error_reporting(settings: Settings) -> bool:
    """Initialise Rollbar when an access token is configured"""
    global _enabled

    if not settings.ROLLBAR_ACCESS_TOKEN:
        api_logger.info("Rollbar access token not set, error reporting disabled")
        _enabled = False
        return False

    rollbar.init(
        settings.ROLLBAR_ACCESS_TOKEN,
        environment=settings.ENVIRONMENT,
        capture_ip=False,
    )
    _enabled = True
    api_logger.info(f"Rollbar error reporting enabled ({settings.ENVIRONMENT})")
    return True


def is_enabled() -> bool:
    return _enabled


def report_exception(exc: BaseException, request: Optional[Request] = None) -> None:
    if not _enabled:
        return
    try:
        rollbar.report_exc_info((type(exc), exc, exc.__traceback__), request)
    except Exception as report_error:
        # Ошибка отправки не должна подменять исходную ошибку
        api_logger.error(f"Error reporting to Rollbar: {report_error}")
