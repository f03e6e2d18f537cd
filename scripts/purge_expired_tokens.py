#!/usr/bin/env python3
"""
Delete refresh tokens whose expiry has passed

Meant for a cron job or a scheduled container task:
    python scripts/purge_expired_tokens.py
"""

import sys
from pathlib import Path

# Add parent directory to path to import the application modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from db import SessionLocal
from utils.auth_service import AuthService
from utils.structured_logging import configure_logging, get_logger, LogCategory

logger = get_logger("scripts.purge_expired_tokens")


def purge_expired_tokens() -> int:
    db = SessionLocal()
    try:
        return AuthService(db).purge_expired_tokens()
    finally:
        db.close()


def main() -> int:
    configure_logging(level="INFO", json_output=True)
    removed = purge_expired_tokens()
    logger.info(f"Removed {removed} expired refresh tokens", category=LogCategory.SYSTEM, extra={"removed": removed})
    return 0


if __name__ == "__main__":
    sys.exit(main())
