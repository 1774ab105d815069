import logging
import os
from logging.config import dictConfig
from typing import Any, Dict

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
TELEMETRY_LOG_FORMAT = "%(asctime)s %(message)s"


def _flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in {"1", "true", "yes", "on"}


def build_logging_config() -> Dict[str, Any]:
    """Assemble the dictConfig payload from ``SHADOWCOACH_*`` environment flags.

    ``SHADOWCOACH_LOG_LEVEL`` sets the root level and ``SHADOWCOACH_LOG_FORMAT``
    replaces the default line format. Telemetry events get their own handler so
    their JSON lines stay unprefixed; ``SHADOWCOACH_TELEMETRY_LOG=0`` mutes them.
    """
    level = os.getenv("SHADOWCOACH_LOG_LEVEL", "INFO").upper()
    telemetry_enabled = os.getenv("SHADOWCOACH_TELEMETRY_LOG", "1") != "0"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": os.getenv("SHADOWCOACH_LOG_FORMAT", DEFAULT_LOG_FORMAT)},
            "telemetry": {"format": TELEMETRY_LOG_FORMAT},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default"},
            "telemetry": {"class": "logging.StreamHandler", "formatter": "telemetry"},
        },
        "loggers": {
            "shadowcoach.telemetry": {
                "handlers": ["telemetry"],
                "level": "INFO" if telemetry_enabled else "CRITICAL",
                "propagate": False,
            },
        },
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging() -> None:
    """Configure process logging based on environment flags."""
    dictConfig(build_logging_config())

    if _flag("SHADOWCOACH_DEBUG_GENERATOR"):
        logging.getLogger("shadowcoach.combos").setLevel(logging.DEBUG)
