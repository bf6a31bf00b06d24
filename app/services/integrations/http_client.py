"""
Shared httpx client factory for the Resend, Twilio and Square integrations.

Every outbound call goes through create_httpx_client() so each request has
an explicit timeout; a slow provider fails the send instead of hanging the
event loop that also serves payments and the reminder timer.
"""

import httpx

# Seconds
DEFAULT_TIMEOUT = 10.0
CONNECT_TIMEOUT = 5.0


def get_httpx_timeout() -> httpx.Timeout:
    """
    Timeout used for provider calls.

    Returns:
        httpx.Timeout (10s overall/read, 5s connect/write/pool)
    """
    return httpx.Timeout(
        DEFAULT_TIMEOUT,
        connect=CONNECT_TIMEOUT,
        read=DEFAULT_TIMEOUT,
        write=CONNECT_TIMEOUT,
        pool=CONNECT_TIMEOUT,
    )


def create_httpx_client(**kwargs) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient with the standard timeout.

    Extra keyword arguments (e.g. transport) are passed through to httpx.
    """
    kwargs.setdefault("timeout", get_httpx_timeout())
    return httpx.AsyncClient(**kwargs)
