"""
Shared pytest fixtures and path setup for unit tests.
"""

import sys
from pathlib import Path

# Add backend/src to sys.path so navgate.* imports work when running pytest from repo root,
# and the repo root so the example plugins under plugins/ import as plugins.<name>.
PROJECT_SRC = Path(__file__).resolve().parents[2]
REPO_ROOT = PROJECT_SRC.parents[1]
for path in (PROJECT_SRC, REPO_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import pytest

from navgate.core.config import Settings, reset_settings_instance
from navgate.navigation.design import DesignRegistry
from navgate.navigation.types import EntitlementContext
from navgate.plugins.hooks import HookRegistry
from navgate.plugins.namespaces import NamespaceRegistry
from navgate.plugins.registry import PluginRegistry


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Never leak a cached Settings instance between tests."""
    reset_settings_instance()
    yield
    reset_settings_instance()


@pytest.fixture
def settings() -> Settings:
    """Development settings with the default verification caps."""
    return Settings(NAVGATE_ENVIRONMENT="development", NAVGATE_SAFE_MODE=False)


@pytest.fixture
def hooks() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
def plugin_registry() -> PluginRegistry:
    return PluginRegistry()


@pytest.fixture
def namespaces() -> NamespaceRegistry:
    return NamespaceRegistry()


@pytest.fixture
def designs() -> DesignRegistry:
    return DesignRegistry()


@pytest.fixture
def plugins_dir() -> Path:
    return REPO_ROOT / "plugins"


@pytest.fixture
def user_context() -> EntitlementContext:
    return EntitlementContext(user_id="u1", role="user", tenant_id="t1", tier_level=1)


@pytest.fixture
def admin_context() -> EntitlementContext:
    return EntitlementContext(
        user_id="a1",
        role="admin",
        entitlements=frozenset({"admin"}),
        tenant_id="t1",
        tier_level=2,
        has_multiple_tenants=True,
    )


@pytest.fixture
def guest_context() -> EntitlementContext:
    return EntitlementContext(role="guest")
