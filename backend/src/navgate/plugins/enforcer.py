"""Capability enforcer.

Pure decision functions over (tier, requested capabilities) and
(capability, granted set). FAIL-CLOSED: absence of an explicit grant is a
denial, and unknown tokens are denied even when present in the granted set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from pydantic import BaseModel, Field

from ..core.exceptions import CapabilityDeniedError, UnknownCapabilityError
from .capabilities import Capability, PluginTier, allowed_for_tier, parse_capability
from .manifest import ManifestValidationResult, PluginManifest

logger = logging.getLogger(__name__)


class CapabilityCheckResult(BaseModel):
    """Structured decision handed to callers, which map it to their own error responses."""

    allowed: bool
    reason: Optional[str] = None
    missing_capabilities: list[str] = Field(default_factory=list)


class GrantDecision(BaseModel):
    """Partition of a manifest's requested capabilities into granted and denied."""

    granted: list[str] = Field(default_factory=list)
    denied: list[str] = Field(default_factory=list)
    reasons: dict[str, str] = Field(default_factory=dict)


def _tier_label(tier: PluginTier | str) -> str:
    return tier.value if isinstance(tier, PluginTier) else str(tier)


class CapabilityEnforcer:
    """Capability Enforcer for boot-time grants and runtime capability checks."""

    def check(self, plugin_id: str, capability: str, granted: Iterable[str]) -> CapabilityCheckResult:
        """Check a single capability against a plugin's granted set."""
        if parse_capability(capability) is None:
            return CapabilityCheckResult(
                allowed=False,
                reason=f"Unknown capability: {capability}",
                missing_capabilities=[str(capability)],
            )

        token = Capability(capability).value
        if token in _as_tokens(granted):
            return CapabilityCheckResult(allowed=True)

        return CapabilityCheckResult(
            allowed=False,
            reason=f'Plugin "{plugin_id}" does not have capability "{token}"',
            missing_capabilities=[token],
        )

    def check_all(self, plugin_id: str, required: Iterable[str], granted: Iterable[str]) -> CapabilityCheckResult:
        """Check every required capability; report all of the missing ones, not just the first."""
        granted_tokens = _as_tokens(granted)
        missing: list[str] = []
        unknown: list[str] = []
        for cap in required:
            parsed = parse_capability(cap)
            if parsed is None:
                unknown.append(str(cap))
                missing.append(str(cap))
            elif parsed.value not in granted_tokens:
                missing.append(parsed.value)

        if not missing:
            return CapabilityCheckResult(allowed=True)

        reason = f'Plugin "{plugin_id}" is missing capabilities: {", ".join(missing)}'
        if unknown:
            reason += f' (unknown capability: {", ".join(unknown)})'
        return CapabilityCheckResult(allowed=False, reason=reason, missing_capabilities=missing)

    def require(self, plugin_id: str, capability: str, granted: Iterable[str]) -> None:
        """Raise instead of returning a decision, for callers inside plugin code paths."""
        if parse_capability(capability) is None:
            raise UnknownCapabilityError(str(capability), plugin_id=plugin_id)
        result = self.check(plugin_id, capability, granted)
        if not result.allowed:
            raise CapabilityDeniedError(plugin_id, Capability(capability).value)

    def decide_grants(self, manifest: PluginManifest) -> GrantDecision:
        """Decide which requested capabilities to grant based on the manifest's tier."""
        allowed = allowed_for_tier(manifest.tier)
        decision = GrantDecision()

        for token in manifest.requested:
            parsed = parse_capability(token)
            if parsed is None:
                decision.denied.append(token)
                decision.reasons[token] = f"Unknown capability: {token}"
                continue
            if parsed not in allowed:
                decision.denied.append(token)
                decision.reasons[token] = f"Tier {_tier_label(manifest.tier)} cannot request this capability"
                continue
            decision.granted.append(token)

        return decision

    def validate_manifest_capabilities(self, manifest: PluginManifest) -> ManifestValidationResult:
        """Fail validation if any requested capability would be denied."""
        decision = self.decide_grants(manifest)
        errors = []
        for token in decision.denied:
            if parse_capability(token) is None:
                errors.append(f"Unknown capability: {token}")
            else:
                errors.append(f'Capability "{token}" is not allowed for Tier {_tier_label(manifest.tier)} plugins')
        return ManifestValidationResult(valid=not errors, errors=errors)

    def requires_db_access(self, capability: str) -> bool:
        return parse_capability(capability) in (Capability.APP_DB_READ, Capability.APP_DB_WRITE)

    def requires_routes(self, capability: str) -> bool:
        return parse_capability(capability) == Capability.APP_ROUTES

    def requires_authz(self, capability: str) -> bool:
        return parse_capability(capability) == Capability.APP_AUTHZ

    def get_required_capabilities_for_feature(
        self,
        tier: PluginTier | str,
        *,
        routes: bool = False,
        db: bool = False,
        authz: bool = False,
    ) -> list[str]:
        """Capabilities a plugin must request to use the given server features."""
        caps: list[str] = []
        if tier != PluginTier.B:
            return caps
        if routes:
            caps.append(Capability.APP_ROUTES.value)
        if db:
            caps.extend([Capability.APP_DB_READ.value, Capability.APP_DB_WRITE.value])
        if authz:
            caps.append(Capability.APP_AUTHZ.value)
        return caps


def _as_tokens(granted: Iterable[str]) -> set[str]:
    tokens: set[str] = set()
    for cap in granted or ():
        tokens.add(cap.value if isinstance(cap, Capability) else str(cap))
    return tokens


CAPABILITY_ENFORCER = CapabilityEnforcer()
