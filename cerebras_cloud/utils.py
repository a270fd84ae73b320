"""
Utility functions for the Cerebras Cloud client and CLI.
"""

import logging
import sys
from typing import Optional


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    # Reduce noise from third-party libraries unless debugging
    if level.upper() != "DEBUG":
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).setLevel(logging.WARNING)


def validate_api_key(api_key: Optional[str]) -> bool:
    """Cheap sanity check on an API key before any request is made."""
    if not api_key or not api_key.strip():
        return False
    if any(c.isspace() for c in api_key.strip()):
        return False
    return len(api_key.strip()) >= 10


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Mask all but the first few characters of a secret for display."""
    if not value:
        return ""
    return value[:visible] + "***"
