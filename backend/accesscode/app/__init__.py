"""Access code generation, verification and issuance."""

from .config import settings
from .logging import setup_logging

setup_logging(level=settings.log_level)

__all__ = ["setup_logging"]
