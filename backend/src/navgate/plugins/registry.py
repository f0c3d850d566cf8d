"""Plugin runtime registry.

Tracks each registered manifest together with its lifecycle status and the
capabilities granted to it at boot.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .capabilities import PluginTier, validate_capabilities_for_tier
from .manifest import PluginManifest, validate_plugin_manifest

logger = logging.getLogger(__name__)


class PluginStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    QUARANTINED = "quarantined"
    DISABLED = "disabled"


class PluginRuntimeState(BaseModel):
    manifest: PluginManifest
    status: PluginStatus = PluginStatus.PENDING
    granted_capabilities: list[str] = Field(default_factory=list)
    error_message: Optional[str] = None
    booted_at: Optional[datetime] = None

    @property
    def plugin_id(self) -> str:
        return self.manifest.plugin_id


class PluginRegistrationResult(BaseModel):
    success: bool
    plugin_id: str
    errors: list[str] = Field(default_factory=list)


class PluginRegistry:
    def __init__(self) -> None:
        self._plugins: dict[str, PluginRuntimeState] = {}
        self._boot_order: list[str] = []

    def register(self, manifest: PluginManifest) -> PluginRegistrationResult:
        """Validate ``manifest`` and record it as pending.

        Every problem is collected, so a rejected manifest reports all of its
        defects at once.
        """
        errors: list[str] = []

        validation = validate_plugin_manifest(manifest)
        if not validation.valid:
            errors.extend(validation.errors)

        valid, invalid = validate_capabilities_for_tier(manifest.tier, manifest.requested)
        if not valid:
            errors.append(f"Invalid capabilities for Tier {manifest.tier.value}: {', '.join(invalid)}")

        if manifest.plugin_id in self._plugins:
            errors.append(f'Plugin "{manifest.plugin_id}" is already registered')

        if errors:
            return PluginRegistrationResult(success=False, plugin_id=manifest.plugin_id, errors=errors)

        self._plugins[manifest.plugin_id] = PluginRuntimeState(manifest=manifest)
        self._boot_order.append(manifest.plugin_id)
        return PluginRegistrationResult(success=True, plugin_id=manifest.plugin_id)

    def get(self, plugin_id: str) -> Optional[PluginRuntimeState]:
        return self._plugins.get(plugin_id)

    def get_manifest(self, plugin_id: str) -> Optional[PluginManifest]:
        state = self._plugins.get(plugin_id)
        return state.manifest if state else None

    def has(self, plugin_id: str) -> bool:
        return plugin_id in self._plugins

    def set_status(self, plugin_id: str, status: PluginStatus, error_message: Optional[str] = None) -> bool:
        state = self._plugins.get(plugin_id)
        if state is None:
            return False
        state.status = status
        if error_message:
            state.error_message = error_message
        if status == PluginStatus.ACTIVE:
            state.booted_at = datetime.now(UTC)
        return True

    def grant_capabilities(self, plugin_id: str, capabilities: list[str]) -> bool:
        state = self._plugins.get(plugin_id)
        if state is None:
            return False
        state.granted_capabilities = list(capabilities)
        return True

    def granted(self, plugin_id: str) -> frozenset[str]:
        state = self._plugins.get(plugin_id)
        return frozenset(state.granted_capabilities) if state else frozenset()

    def has_capability(self, plugin_id: str, capability: str) -> bool:
        return capability in self.granted(plugin_id)

    def quarantine(self, plugin_id: str, error_message: str) -> bool:
        logger.warning("plugin.boot | quarantined %s: %s", plugin_id, error_message, extra={"plugin_id": plugin_id})
        return self.set_status(plugin_id, PluginStatus.QUARANTINED, error_message)

    def all(self) -> list[PluginRuntimeState]:
        return list(self._plugins.values())

    def by_status(self, status: PluginStatus) -> list[PluginRuntimeState]:
        return [p for p in self._plugins.values() if p.status == status]

    def by_tier(self, tier: PluginTier) -> list[PluginRuntimeState]:
        return [p for p in self._plugins.values() if p.manifest.tier == tier]

    def active(self) -> list[PluginRuntimeState]:
        return self.by_status(PluginStatus.ACTIVE)

    def quarantined(self) -> list[PluginRuntimeState]:
        return self.by_status(PluginStatus.QUARANTINED)

    def boot_order(self) -> list[str]:
        return list(self._boot_order)

    def unregister(self, plugin_id: str) -> bool:
        existed = self._plugins.pop(plugin_id, None) is not None
        if existed:
            self._boot_order = [pid for pid in self._boot_order if pid != plugin_id]
        return existed

    def clear(self) -> None:
        self._plugins.clear()
        self._boot_order = []

    def stats(self) -> dict[str, int]:
        plugins = self.all()
        return {
            "total": len(plugins),
            "active": sum(1 for p in plugins if p.status == PluginStatus.ACTIVE),
            "quarantined": sum(1 for p in plugins if p.status == PluginStatus.QUARANTINED),
            "pending": sum(1 for p in plugins if p.status == PluginStatus.PENDING),
            "disabled": sum(1 for p in plugins if p.status == PluginStatus.DISABLED),
            "tier_a": sum(1 for p in plugins if p.manifest.tier == PluginTier.A),
            "tier_b": sum(1 for p in plugins if p.manifest.tier == PluginTier.B),
            "design_owner": sum(1 for p in plugins if p.manifest.tier == PluginTier.DESIGN_OWNER),
        }


REGISTRY = PluginRegistry()
