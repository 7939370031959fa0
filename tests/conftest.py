"""
Module: conftest.py

Author: Michael Economou
Date: 2026-02-10

Global pytest configuration and fixtures for the exifgate test suite.
Provides a fake stay-open exiftool executable for process-level tests.
"""

import os
import platform
import sys
from pathlib import Path

# Add project root to sys.path so 'exifgate' can be imported without installing
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

FAKE_EXIFTOOL_SOURCE = Path(__file__).parent / "fake_exiftool.py"


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "posix_only: requires a POSIX shebang-launched fake exiftool")
    config.addinivalue_line("markers", "exiftool: requires a real exiftool installation")


def pytest_collection_modifyitems(session, config, items):
    """Skip tests that rely on shebang scripts when running on Windows."""
    _ = session
    _ = config

    if platform.system() != "Windows":
        return

    skip_posix = pytest.mark.skip(reason="Fake exiftool needs a POSIX shebang")
    for item in items:
        if "posix_only" in item.keywords:
            item.add_marker(skip_posix)


@pytest.fixture(scope="session")
def fake_exiftool(tmp_path_factory):
    """Executable fake exiftool running under the current interpreter."""
    target = tmp_path_factory.mktemp("fake_bin") / "exiftool"
    source = FAKE_EXIFTOOL_SOURCE.read_text(encoding="utf-8")
    target.write_text(f"#!{sys.executable}\n{source}", encoding="utf-8")
    target.chmod(0o755)
    return str(target)


@pytest.fixture
def make_gateway(fake_exiftool):
    """Factory creating gateways bound to the fake exiftool, closed after the test."""
    from exifgate.services.metadata_gateway import MetadataGateway

    created = []

    def _make(**kwargs):
        kwargs.setdefault("command", fake_exiftool)
        kwargs.setdefault("types_to_ignore", ())
        kwargs.setdefault("lines_to_ignore", ())
        kwargs.setdefault("grace_period", 0.0)
        kwargs.setdefault("wait_timeout", 5.0)
        gateway = MetadataGateway(**kwargs)
        created.append(gateway)
        return gateway

    yield _make

    for gateway in created:
        gateway.close()


@pytest.fixture
def http_response():
    """Build a raw HTTP response with the given body and content type."""

    def _build(body: bytes, content_type: str | None = "image/jpeg") -> bytes:
        headers = ["HTTP/1.1 200 OK", f"Content-Length: {len(body)}"]
        if content_type:
            headers.append(f"Content-Type: {content_type}")
        return ("\r\n".join(headers) + "\r\n\r\n").encode("latin-1") + body

    return _build
