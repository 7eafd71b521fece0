from .config import Settings, get_settings
from .logging import bind_document_id, clear_document_id, configure_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "bind_document_id",
    "clear_document_id",
]
