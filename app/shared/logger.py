"""Loguru sink setup for the storage layer."""

import logging
import os
import sys
import traceback
from functools import lru_cache

from loguru import logger

from app.shared.config import config

# Stdlib loggers that would otherwise repeat what the query logger already reports
QUIET_LOGGERS = ('sqlalchemy.engine', 'sqlalchemy.pool', 'aiosqlite', 'asyncpg')


def format_error(ex: BaseException) -> str:
    """Traceback text for ``ex``, chained causes included."""
    return ''.join(traceback.format_exception(type(ex), ex, ex.__traceback__))


@lru_cache
def get_service_tag() -> str:
    """Prefix identifying this process in shared log streams: ``service@commit#pid``."""
    service = (config.get('SERVICE_NAME') or '').strip() or 'live-storage'

    # BUILD_COMMIT looks like "<branch>-<sha>"; keep the sha
    build = (config.get('BUILD_COMMIT') or '').strip()
    commit = build.rsplit('-', 1)[-1][:12] if build else 'dev'

    return f'{service}@{commit}#{os.getpid()}'


def _log_format(colorize: bool) -> str:
    # Braces in the tag would be read as loguru fields
    tag = get_service_tag().replace('{', '{{').replace('}', '}}')
    if colorize:
        return (
            f'<yellow>{tag}</yellow> '
            '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> '
            '<level>{level: <7}</level> '
            '<cyan>{name}:{line}</cyan> - <level>{message}</level>'
        )
    return f'{tag} ' '{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <7} {name}:{line} - {message}'


def init_logger(level: str | None = None) -> None:
    """Replace loguru's default sink. DEBUG turns on colour and debug-level output."""
    from app.app_config import get_app_environ_config

    debug = get_app_environ_config().DEBUG
    level = (level or ('DEBUG' if debug else 'INFO')).upper()

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.remove()
    logger.add(sys.stderr, level=level, format=_log_format(debug), colorize=debug)
