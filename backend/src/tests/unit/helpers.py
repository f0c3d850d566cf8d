"""Builders shared by the unit tests."""

from navgate.navigation.types import EntitlementContext, NavItem, NavModel, NavSection
from navgate.plugins.capabilities import PluginTier
from navgate.plugins.manifest import CapabilityRequirement, HookDeclaration, PluginManifest


def make_manifest(
    plugin_id: str = "notes",
    tier: PluginTier | str = PluginTier.B,
    capabilities: list[str] | None = None,
    hooks: list[tuple[str, str]] | None = None,
    **kwargs,
) -> PluginManifest:
    """Build a manifest with sensible defaults for tests."""
    return PluginManifest(
        plugin_id=plugin_id,
        package_name=f"navgate-plugin-{plugin_id}",
        version="1.0.0",
        tier=tier,
        requested_capabilities=tuple(
            CapabilityRequirement(capability=cap, reason="test") for cap in (capabilities or [])
        ),
        hooks=tuple(HookDeclaration(hook=hook, handler=handler) for hook, handler in (hooks or [])),
        **kwargs,
    )


def item(nav_id: str, order: int = 1000, **kwargs) -> NavItem:
    if "action" not in kwargs:
        kwargs.setdefault("href", f"/{nav_id.replace('.', '/')}")
    return NavItem(id=nav_id, label=nav_id.split(".")[-1].title(), order=order, **kwargs)


def section(nav_id: str, *items: NavItem, order: int = 1000, **kwargs) -> NavSection:
    return NavSection(id=nav_id, order=order, items=tuple(items), **kwargs)


def default_baseline() -> NavModel:
    return NavModel(
        main=(section("core.main", item("core.dashboard", 100)),),
        user_menu=(section("core.account", item("core.accountSettings", 500), label="Account", order=9000),),
    )


class StaticDesign:
    """Design whose baseline is fixed, or computed by an optional callable."""

    design_id = "test-design"
    display_name = "Test Design"

    def __init__(self, baseline: NavModel | None = None, factory=None):
        self._baseline = baseline
        self._factory = factory

    def nav_baseline(self, context: EntitlementContext) -> NavModel:
        if self._factory is not None:
            return self._factory(context)
        return self._baseline or default_baseline()


class FakeLoader:
    """Module loader returning prepared objects instead of importing."""

    def __init__(self, modules: dict | None = None, manifests: list[PluginManifest] | None = None):
        self.modules = modules or {}
        self._manifests = manifests or []

    def manifests(self) -> list[PluginManifest]:
        return list(self._manifests)

    def load(self, manifest: PluginManifest):
        if manifest.plugin_id not in self.modules:
            raise ImportError(f"No module for {manifest.plugin_id}")
        return self.modules[manifest.plugin_id]
