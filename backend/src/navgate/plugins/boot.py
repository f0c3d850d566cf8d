"""Plugin boot orchestration.

Boot runs once, single-threaded, before any request is served:

1. split manifests into the design owner and everyone else
2. register the design owner and its design, then the other plugins
3. grant capabilities by tier
4. register declared hooks, gated by granted capabilities
5. register authorization namespaces
6. verify navigation across the generated validation contexts
7. freeze the hook registry and mark survivors active

A misbehaving plugin is quarantined and boot continues. Navigation
collisions, reserved-id violations and namespace conflicts abort boot.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field

from ..core.config import Settings, get_settings_instance
from ..core.exceptions import CapabilityDeniedError, NavCollisionError, PluginBootError
from ..navigation.builder import NavBuilder
from ..navigation.design import DESIGNS, AppDesign, DesignRegistry
from ..verification.boot_validator import BootValidator
from ..verification.contexts import build_nav_validation_contexts
from ..verification.coverage import build_validation_entitlement_sets
from .capabilities import Capability, PluginTier
from .enforcer import CAPABILITY_ENFORCER, CapabilityEnforcer
from .hooks import APP_READY, HOOKS, HookRegistry, required_capability
from .loader import PluginLoader
from .manifest import PluginManifest
from .namespaces import NAMESPACES, NamespaceRegistry
from .registry import REGISTRY, PluginRegistry, PluginStatus

logger = logging.getLogger(__name__)


class ModuleLoader(Protocol):
    def manifests(self) -> list[PluginManifest]: ...

    def load(self, manifest: PluginManifest) -> Any: ...


class QuarantinedPlugin(BaseModel):
    plugin_id: str
    error: str


class PluginBootResult(BaseModel):
    success: bool = True
    total: int = 0
    active: list[str] = Field(default_factory=list)
    quarantined: list[QuarantinedPlugin] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    validated_contexts: int = 0


class PluginBootService:
    def __init__(
        self,
        *,
        registry: Optional[PluginRegistry] = None,
        hooks: Optional[HookRegistry] = None,
        namespaces: Optional[NamespaceRegistry] = None,
        designs: Optional[DesignRegistry] = None,
        enforcer: Optional[CapabilityEnforcer] = None,
        loader: Optional[ModuleLoader] = None,
        settings: Optional[Settings] = None,
    ):
        self.registry = registry if registry is not None else REGISTRY
        self.hooks = hooks if hooks is not None else HOOKS
        self.namespaces = namespaces if namespaces is not None else NAMESPACES
        self.designs = designs if designs is not None else DESIGNS
        self.enforcer = enforcer if enforcer is not None else CAPABILITY_ENFORCER
        self._loader = loader
        self.settings = settings if settings is not None else get_settings_instance()

    @property
    def loader(self) -> ModuleLoader:
        if self._loader is None:
            self._loader = PluginLoader()
        return self._loader

    def boot(self, manifests: Optional[list[PluginManifest]] = None) -> PluginBootResult:
        if manifests is None:
            manifests = self.loader.manifests()
        result = PluginBootResult(total=len(manifests))

        if self.settings.safe_mode:
            for manifest in manifests:
                logger.info("plugin.boot | SAFE MODE: skipping plugin %s", manifest.plugin_id)
                result.disabled.append(manifest.plugin_id)
            result.warnings.append("Running in safe mode - all plugins disabled")
            self.hooks.freeze()
            return result

        if not manifests:
            logger.info("plugin.boot | no plugins found")

        owners = [m for m in manifests if m.tier == PluginTier.DESIGN_OWNER]
        others = [m for m in manifests if m.tier != PluginTier.DESIGN_OWNER]
        self._check_design_owner_count(owners, result)

        registered: list[PluginManifest] = []
        for manifest in owners:
            if self._register_design_owner(manifest, result):
                registered.append(manifest)
        for manifest in others:
            reg = self.registry.register(manifest)
            if not reg.success:
                logger.warning("plugin.boot | plugin %s rejected: %s", manifest.plugin_id, "; ".join(reg.errors))
                self._record_quarantine(result, manifest.plugin_id, "; ".join(reg.errors))
                continue
            registered.append(manifest)

        for manifest in registered:
            if self._is_quarantined(manifest.plugin_id):
                continue
            self._grant_capabilities(manifest)

        for manifest in registered:
            if self._is_quarantined(manifest.plugin_id):
                continue
            try:
                self._register_hooks(manifest)
            except Exception as e:  # noqa: BLE001
                self.hooks.remove_plugin_hooks(manifest.plugin_id)
                self.registry.quarantine(manifest.plugin_id, str(e))
                self._record_quarantine(result, manifest.plugin_id, str(e))

        for manifest in registered:
            if self._is_quarantined(manifest.plugin_id):
                continue
            self._register_authz_namespace(manifest)

        if self.designs.has():
            result.validated_contexts = self._validate_navigation(registered)

        self.hooks.freeze()

        for manifest in registered:
            if not self._is_quarantined(manifest.plugin_id):
                self.registry.set_status(manifest.plugin_id, PluginStatus.ACTIVE)
                result.active.append(manifest.plugin_id)

        self.hooks.do_action(APP_READY, result)
        logger.info(
            "plugin.boot | boot complete: %d active, %d quarantined, %d disabled",
            len(result.active),
            len(result.quarantined),
            len(result.disabled),
        )
        return result

    def navigation_builder(self) -> NavBuilder:
        """Builder for request-time navigation over the booted plugins."""
        return NavBuilder(self.designs.get(), self.hooks, design_owner_id=self.designs.owner_plugin_id)

    # Steps

    def _check_design_owner_count(self, owners: list[PluginManifest], result: PluginBootResult) -> None:
        if len(owners) > 1:
            ids = ", ".join(m.plugin_id for m in owners)
            logger.error("plugin.boot | FATAL: multiple design-owner plugins found: %s", ids)
            raise PluginBootError(f"Multiple design-owner plugins found: {ids}. Only one is allowed.")
        if not owners:
            message = "No design-owner plugin found. Navigation will not be available."
            if self.settings.is_production:
                logger.error("plugin.boot | FATAL: %s", message)
                raise PluginBootError(message)
            logger.warning("plugin.boot | %s", message)
            result.warnings.append(message)

    def _register_design_owner(self, manifest: PluginManifest, result: PluginBootResult) -> bool:
        reg = self.registry.register(manifest)
        if not reg.success:
            error = "; ".join(reg.errors)
            if self.settings.is_production:
                raise PluginBootError(f"design-owner registration failed: {error}")
            logger.warning("plugin.boot | design-owner %s rejected: %s", manifest.plugin_id, error)
            self._record_quarantine(result, manifest.plugin_id, error)
            return False

        try:
            self._register_design(manifest)
        except NavCollisionError:
            raise
        except Exception as e:  # noqa: BLE001
            self.registry.quarantine(manifest.plugin_id, str(e))
            self._record_quarantine(result, manifest.plugin_id, str(e))
            if self.settings.is_production:
                raise PluginBootError(f"design-owner boot failed: {e}") from e
            return False
        return True

    def _register_design(self, manifest: PluginManifest) -> None:
        logger.info("plugin.boot | loading design from %s", manifest.plugin_id)
        module = self.loader.load(manifest)
        design = getattr(module, "design", None)
        if design is None:
            raise PluginBootError(f'Design-owner plugin "{manifest.plugin_id}" must export a "design" object')
        if not isinstance(design, AppDesign):
            raise PluginBootError(
                f'Design-owner plugin "{manifest.plugin_id}" design is invalid. '
                "Required: design_id, display_name, nav_baseline()"
            )
        BootValidator().validate_baseline(design, manifest.plugin_id)
        self.designs.register(design, plugin_id=manifest.plugin_id)

    def _grant_capabilities(self, manifest: PluginManifest) -> None:
        decision = self.enforcer.decide_grants(manifest)
        if decision.denied:
            logger.warning(
                "plugin.boot | denied capabilities for %s: %s",
                manifest.plugin_id,
                ", ".join(f"{cap} ({decision.reasons[cap]})" for cap in decision.denied),
                extra={"plugin_id": manifest.plugin_id, "denied": decision.denied},
            )
        self.registry.grant_capabilities(manifest.plugin_id, decision.granted)

    def _register_hooks(self, manifest: PluginManifest) -> None:
        if not manifest.hooks:
            return
        module = self.loader.load(manifest)
        granted = self.registry.granted(manifest.plugin_id)
        for decl in manifest.hooks:
            needed = required_capability(decl.hook)
            if needed is not None and needed.value not in granted:
                raise CapabilityDeniedError(manifest.plugin_id, needed.value, details={"hook": decl.hook})
            handler = getattr(module, decl.handler, None)
            if not callable(handler):
                logger.warning(
                    "plugin.boot | hook handler %s not found in plugin %s", decl.handler, manifest.plugin_id
                )
                continue
            self.hooks.register(decl.hook, manifest.plugin_id, handler, priority=decl.priority)

    def _register_authz_namespace(self, manifest: PluginManifest) -> None:
        if manifest.tier != PluginTier.B or not manifest.authz_namespace:
            return
        if not self.registry.has_capability(manifest.plugin_id, Capability.APP_AUTHZ.value):
            logger.warning(
                "plugin.boot | plugin %s declares authzNamespace but lacks app:authz; skipping",
                manifest.plugin_id,
            )
            return
        module = self.loader.load(manifest)
        resolver = getattr(module, "authz_resolver", None)
        if not callable(resolver):
            logger.warning("plugin.boot | no authz_resolver exported by plugin %s", manifest.plugin_id)
            return
        self.namespaces.register(manifest.plugin_id, manifest.authz_namespace, resolver)

    def _validate_navigation(self, registered: list[PluginManifest]) -> int:
        bundles = [
            self.registry.granted(m.plugin_id) for m in registered if not self._is_quarantined(m.plugin_id)
        ]
        all_granted = frozenset().union(*bundles) if bundles else frozenset()
        sets = build_validation_entitlement_sets(
            all_granted,
            bundles,
            powerset_max_caps=self.settings.nav_validation_powerset_max_caps,
            max_pair_combinations=self.settings.nav_validation_max_pair_combinations,
        )
        contexts = build_nav_validation_contexts(self.settings.nav_validation_tier_levels, sets)
        logger.info(
            "plugin.boot | validating navigation over %d contexts (%d entitlement sets)", len(contexts), len(sets)
        )
        validator = BootValidator(fail_fast=self.settings.nav_validation_fail_fast)
        return validator.validate(self.navigation_builder(), contexts)

    # Helpers

    def _is_quarantined(self, plugin_id: str) -> bool:
        state = self.registry.get(plugin_id)
        return state is None or state.status == PluginStatus.QUARANTINED

    @staticmethod
    def _record_quarantine(result: PluginBootResult, plugin_id: str, error: str) -> None:
        result.quarantined.append(QuarantinedPlugin(plugin_id=plugin_id, error=error))
