"""
Test that all outbound httpx.AsyncClient instances use explicit timeouts.

This ensures provider calls (Resend, Twilio, Square) don't block the event loop indefinitely.
"""

from pathlib import Path

import httpx
import pytest

from app.services.integrations.http_client import create_httpx_client, get_httpx_timeout


def test_http_client_helper_returns_timeout():
    """Test that get_httpx_timeout() returns a proper timeout object."""
    timeout = get_httpx_timeout()
    assert isinstance(timeout, httpx.Timeout)
    assert timeout.connect == 5.0
    assert timeout.read == 10.0
    assert timeout.write == 5.0
    assert timeout.pool == 5.0


def test_create_httpx_client_uses_timeout():
    """Test that create_httpx_client() creates a client with timeout."""
    client = create_httpx_client()
    assert isinstance(client, httpx.AsyncClient)
    assert client.timeout.read == 10.0


def test_create_httpx_client_passes_through_kwargs():
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    client = create_httpx_client(transport=transport, timeout=1.0)
    assert client.timeout.read == 1.0


@pytest.mark.parametrize(
    "module",
    ["email_sender.py", "sms_sender.py", "square_service.py"],
)
def test_integrations_use_timeout_helper(module):
    """Each provider adapter builds its client via create_httpx_client()."""
    source = Path(__file__).parent.parent / "app" / "services" / "integrations" / module
    content = source.read_text(encoding="utf-8")
    assert "create_httpx_client" in content, f"{module} should use create_httpx_client()"


def test_no_direct_httpx_client_creation_in_app():
    """Test that app/ code doesn't create httpx.AsyncClient() without timeout."""
    app_dir = Path(__file__).parent.parent / "app"
    assert app_dir.exists(), "app/ directory not found"

    issues = []

    for py_file in app_dir.rglob("*.py"):
        if "__pycache__" in str(py_file):
            continue

        lines = py_file.read_text(encoding="utf-8").split("\n")
        for i, line in enumerate(lines, start=1):
            if "httpx.AsyncClient(" not in line or line.strip().startswith("#"):
                continue
            context_lines = "\n".join(lines[max(0, i - 3) : min(len(lines), i + 3)])
            if "timeout" not in context_lines.lower():
                rel_path = py_file.relative_to(app_dir.parent)
                issues.append(f"{rel_path}:{i}: {line.strip()}")

    if issues:
        error_msg = (
            "Found httpx.AsyncClient() calls without explicit timeout. "
            "Use create_httpx_client() from app.services.integrations.http_client instead:\n\n"
            + "\n".join(f"  - {issue}" for issue in issues)
        )
        raise AssertionError(error_msg)
