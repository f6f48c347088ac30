"""Logging estructurado: structlog encima del logging estándar.

Con pytest cargado el nivel queda por encima de CRITICAL y no sale nada; en
producción cada evento es una línea JSON y en local se pinta para consola.
"""

import inspect
import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger

from stackmentor.core.config import settings

SILENT = logging.CRITICAL + 1


def _level() -> int:
    if "pytest" in sys.modules:
        return SILENT
    return getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)


def _renderer():
    if settings.is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(level: Optional[int] = None) -> BoundLogger:
    level = _level() if level is None else level

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _renderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return structlog.stdlib.get_logger("stackmentor")


logger: BoundLogger = configure_logging()


def get_module_logger(name: Optional[str] = None) -> BoundLogger:
    """``logger`` con ``component`` y ``module_path`` del módulo que llama.

    Sin ``name`` se toma el ``__name__`` de quien llama.
    """
    if name is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        name = caller.f_globals.get("__name__", "unknown") if caller else "unknown"
    return logger.bind(component=name.rsplit(".", 1)[-1], module_path=name)
