"""Plugin capability vocabulary and tier partitions.

Capabilities are coarse-grained permissions a plugin requests in its manifest.
The vocabulary is closed: anything that does not parse as a ``Capability`` is
unknown and always denied.

Tier A (UI plugins):
- ui:filter:* / ui:slot:* - register filters and slots for UI components

Tier B (app plugins), in addition to Tier A:
- app:routes - register API routes under the plugin's mount point
- app:db:read / app:db:write - read/write plugin-prefixed tables
- app:jobs - register background jobs
- app:authz - register an authorization resolver for the plugin namespace

Design owner, in addition to Tier A:
- ui:design:global - own global theme tokens and shell components
- ui:nav:baseline - provide the baseline navigation model
"""

from __future__ import annotations

from enum import Enum


class Capability(str, Enum):
    # Tier A - UI capabilities
    UI_FILTER_NAV = "ui:filter:nav"
    UI_FILTER_DASHBOARD = "ui:filter:dashboard"
    UI_SLOT_HEADER = "ui:slot:header"
    UI_SLOT_SIDEBAR = "ui:slot:sidebar"
    UI_SLOT_FOOTER = "ui:slot:footer"

    # Tier B - App capabilities
    APP_ROUTES = "app:routes"
    APP_DB_READ = "app:db:read"
    APP_DB_WRITE = "app:db:write"
    APP_JOBS = "app:jobs"
    APP_AUTHZ = "app:authz"

    # Design owner - design capabilities
    UI_DESIGN_GLOBAL = "ui:design:global"
    UI_NAV_BASELINE = "ui:nav:baseline"


class PluginTier(str, Enum):
    """Trust classification bounding which capabilities a plugin may hold."""

    A = "A"
    B = "B"
    DESIGN_OWNER = "design-owner"


TIER_A_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.UI_FILTER_NAV,
        Capability.UI_FILTER_DASHBOARD,
        Capability.UI_SLOT_HEADER,
        Capability.UI_SLOT_SIDEBAR,
        Capability.UI_SLOT_FOOTER,
    }
)

TIER_B_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.APP_ROUTES,
        Capability.APP_DB_READ,
        Capability.APP_DB_WRITE,
        Capability.APP_JOBS,
        Capability.APP_AUTHZ,
    }
)

DESIGN_OWNER_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.UI_DESIGN_GLOBAL,
        Capability.UI_NAV_BASELINE,
    }
)

# Capabilities each tier may ever be granted
TIER_ALLOW_LISTS: dict[PluginTier, frozenset[Capability]] = {
    PluginTier.A: TIER_A_CAPABILITIES,
    PluginTier.B: TIER_A_CAPABILITIES | TIER_B_CAPABILITIES,
    PluginTier.DESIGN_OWNER: TIER_A_CAPABILITIES | DESIGN_OWNER_CAPABILITIES,
}


def parse_capability(token: str | Capability) -> Capability | None:
    """Return the Capability for ``token`` or None when it is outside the vocabulary."""
    if isinstance(token, Capability):
        return token
    try:
        return Capability(token)
    except ValueError:
        return None


def is_valid_capability(token: str | Capability) -> bool:
    return parse_capability(token) is not None


def allowed_for_tier(tier: PluginTier | str) -> frozenset[Capability]:
    """Allow-list for ``tier``; an unrecognised tier is allowed nothing."""
    try:
        return TIER_ALLOW_LISTS[PluginTier(tier)]
    except ValueError:
        return frozenset()


def validate_capabilities_for_tier(tier: PluginTier | str, capabilities: list[str]) -> tuple[bool, list[str]]:
    """Check that every capability is known and admitted by ``tier``.

    Returns ``(valid, invalid_capabilities)`` with the offending tokens in
    request order.
    """
    allowed = allowed_for_tier(tier)
    invalid = [cap for cap in capabilities if parse_capability(cap) not in allowed]
    return (not invalid, invalid)
