"""Plugin manifest models.

A manifest is declared once by each plugin, loaded at boot and never mutated.
Keys may be given in snake_case or in the camelCase used by plugin.meta files
(``pluginId``, ``requestedCapabilities``, ...).
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .capabilities import Capability, PluginTier

_PLUGIN_ID_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")


class _ManifestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class CapabilityRequirement(_ManifestModel):
    """A requested capability and the plugin's stated reason for it."""

    # Kept as a plain string so unknown tokens reach the enforcer and get denied
    capability: str
    reason: str = ""


class HookDeclaration(_ManifestModel):
    """Hook registration declared in the manifest."""

    hook: str
    handler: str
    priority: Optional[int] = None


class PluginManifest(_ManifestModel):
    plugin_id: str = Field(..., min_length=1)
    package_name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    tier: PluginTier
    requested_capabilities: tuple[CapabilityRequirement, ...] = ()
    display_name: Optional[str] = None
    description: Optional[str] = None
    hooks: tuple[HookDeclaration, ...] = ()
    # Authorization namespace (Tier B only, e.g. "notes.")
    authz_namespace: Optional[str] = None
    # Dotted import path of the plugin runtime module ("plugins.notes.plugin")
    module: Optional[str] = None

    @property
    def requested(self) -> list[str]:
        """Requested capability tokens in declaration order."""
        return [req.capability for req in self.requested_capabilities]

    @property
    def is_design_owner(self) -> bool:
        return self.tier == PluginTier.DESIGN_OWNER


class ManifestValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


def validate_plugin_manifest(manifest: PluginManifest) -> ManifestValidationResult:
    """Validate manifest rules that a field-level schema cannot express."""
    errors: list[str] = []

    if not _PLUGIN_ID_PATTERN.match(manifest.plugin_id):
        errors.append(
            f'pluginId "{manifest.plugin_id}" must start with a lowercase letter and contain only '
            "lowercase letters, digits, '-' or '_'"
        )

    seen: set[str] = set()
    for token in manifest.requested:
        if token in seen:
            errors.append(f'Capability "{token}" is requested more than once')
        seen.add(token)

    if manifest.authz_namespace is not None:
        if manifest.tier != PluginTier.B:
            errors.append("authzNamespace is only allowed for Tier B plugins")
        if not manifest.authz_namespace.endswith("."):
            errors.append('authzNamespace must end with a dot (e.g., "notes.")')
        if Capability.APP_AUTHZ.value not in seen:
            errors.append('authzNamespace requires the "app:authz" capability to be requested')

    hook_names: set[tuple[str, str]] = set()
    for decl in manifest.hooks:
        key = (decl.hook, decl.handler)
        if key in hook_names:
            errors.append(f'Hook "{decl.hook}" declares handler "{decl.handler}" more than once')
        hook_names.add(key)

    return ManifestValidationResult(valid=not errors, errors=errors)
