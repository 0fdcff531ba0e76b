"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports and points the
application at a throwaway database and media directory before it is imported.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Settings are read once at import time, so these must be set first.
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")
os.environ["ENVIRONMENT"] = "testing"
os.environ["ADMIN_API_TOKEN"] = "test-admin-token"
os.environ["APP_URL"] = "http://testserver"
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="restaurant-media-"))


@pytest.fixture(autouse=True)
def media_root(tmp_path, monkeypatch):
    """Give every test its own empty media directory."""
    from app.config import settings

    root = tmp_path / "media"
    root.mkdir()
    monkeypatch.setattr(settings, "media_root", str(root))
    return root
