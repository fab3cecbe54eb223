# core/config_validator.py

from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """Required variables that are missing or invalid."""
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    try:
        ZoneInfo(settings.TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        missing.append(f"TIMEZONE (unknown zone '{settings.TIMEZONE}')")

    if settings.INVENTORY_CAS_RETRIES < 1:
        missing.append("INVENTORY_CAS_RETRIES (must be >= 1)")

    return missing


def validate_optional_config() -> List[str]:
    warnings = []

    if not settings.SUPABASE_ANON_KEY:
        warnings.append("SUPABASE_ANON_KEY (optional but recommended)")
    if not settings.FRONTEND_DOMAIN:
        warnings.append("FRONTEND_DOMAIN (only localhost origins allowed)")

    return warnings


def validate_config_on_startup():
    """
    Raises RuntimeError in production if critical config is missing.
    Elsewhere problems are only logged so the app still boots for local work.
    """
    missing_required = validate_required_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        if settings.ENV == "production":
            logger.error(error_msg)
            raise RuntimeError(error_msg)
        logger.warning(error_msg)

    for warning in validate_optional_config():
        logger.warning(f"Optional configuration missing: {warning}")

    logger.info("Configuration validation finished")
