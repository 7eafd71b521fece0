"""
Structured logging configuration for the document OCR pipeline.
Provides JSON or console structured logging with document ID context.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog
from structlog.typing import FilteringBoundLogger

from document_ocr.core.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None, stream: Optional[TextIO] = None) -> None:
    """Configure structured logging for the application."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=level,
    )

    # Pillow logs every decoder plugin it probes at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend([
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_document_id(document_id: str) -> None:
    """Bind a document ID to the logging context."""
    structlog.contextvars.bind_contextvars(document_id=document_id)


def clear_document_id() -> None:
    """Clear the document ID from the logging context."""
    structlog.contextvars.unbind_contextvars("document_id")
