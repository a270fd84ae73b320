"""
Request decoration - authorization, user agent and per-attempt request id.
"""

from __future__ import annotations
import platform
import uuid
from typing import Dict, Optional

from ... import __version__

REQUEST_ID_HEADER = 'X-Request-Id'
SDK_NAME = 'cerebras-cloud-python'


def build_user_agent(version: str = __version__) -> str:
    """e.g. cerebras-cloud-python/1.0.0 (Python/3.12.1; Linux/6.8.0)"""
    return (
        f"{SDK_NAME}/{version} "
        f"(Python/{platform.python_version()}; {platform.system() or 'unknown'}/{platform.release() or 'unknown'})"
    )


def build_headers(
    api_key: Optional[str],
    user_agent: str,
    request_id: Optional[str] = None,
    stream: bool = False,
) -> Dict[str, str]:
    """Headers for one attempt. A new request id is generated unless given."""
    headers = {
        'User-Agent': user_agent,
        'Accept': 'text/event-stream' if stream else 'application/json',
        REQUEST_ID_HEADER: request_id or str(uuid.uuid4()),
    }
    if api_key:
        headers['Authorization'] = f"Bearer {api_key}"
    return headers
