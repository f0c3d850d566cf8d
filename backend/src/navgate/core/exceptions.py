"""Custom exceptions for navgate.

Registration-time and boot-verification errors are never recovered: they abort
startup. CapabilityDeniedError is the only expected, recoverable error and is
usually surfaced to callers as a CapabilityCheckResult instead.
"""

from typing import Any


class NavgateException(Exception):
    """Base exception class for navgate."""

    def __init__(
        self,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# Capability Exceptions
class CapabilityDeniedError(NavgateException):
    """Raised when a plugin acts on a capability it was not granted."""

    def __init__(self, plugin_id: str, capability: str, details: dict[str, Any] | None = None):
        self.plugin_id = plugin_id
        self.capability = capability
        super().__init__(
            message=f'Plugin "{plugin_id}" does not have capability "{capability}"',
            error_code="CAPABILITY_DENIED",
            details=details or {"plugin_id": plugin_id, "capability": capability},
        )


class UnknownCapabilityError(NavgateException):
    """Raised when a token outside the capability vocabulary is requested or checked."""

    def __init__(self, capability: str, plugin_id: str | None = None, details: dict[str, Any] | None = None):
        self.plugin_id = plugin_id
        self.capability = capability
        super().__init__(
            message=f"Unknown capability: {capability}",
            error_code="UNKNOWN_CAPABILITY",
            details=details or {"plugin_id": plugin_id, "capability": capability},
        )


# Registration Exceptions
class ManifestValidationError(NavgateException):
    """Raised when a plugin manifest fails structural validation."""

    def __init__(self, plugin_id: str, errors: list[str], details: dict[str, Any] | None = None):
        self.plugin_id = plugin_id
        self.errors = list(errors)
        super().__init__(
            message=f'Manifest for plugin "{plugin_id}" is invalid: {"; ".join(errors)}',
            error_code="MANIFEST_INVALID",
            details=details or {"plugin_id": plugin_id, "errors": list(errors)},
        )


class NamespaceConflictError(NavgateException):
    """Raised when two plugins claim the same authorization namespace."""

    def __init__(self, namespace: str, existing_plugin_id: str, plugin_id: str):
        self.namespace = namespace
        self.existing_plugin_id = existing_plugin_id
        self.plugin_id = plugin_id
        super().__init__(
            message=(
                f'Namespace "{namespace}" is already registered by plugin "{existing_plugin_id}"; '
                f'plugin "{plugin_id}" cannot register it'
            ),
            error_code="NAMESPACE_CONFLICT",
            details={"namespace": namespace, "existing_plugin_id": existing_plugin_id, "plugin_id": plugin_id},
        )


class HookRegistryFrozenError(NavgateException):
    """Raised when a hook is registered after boot froze the registry."""

    def __init__(self, hook_name: str, plugin_id: str):
        super().__init__(
            message=f'Hook registry is frozen; plugin "{plugin_id}" cannot register "{hook_name}" after boot',
            error_code="HOOK_REGISTRY_FROZEN",
            details={"hook_name": hook_name, "plugin_id": plugin_id},
        )


# Design Exceptions
class DesignRegistrationError(NavgateException):
    """Raised when the design owner's design cannot be registered."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Design registration failed: {reason}",
            error_code="DESIGN_REGISTRATION_FAILED",
            details=details or {"reason": reason},
        )


class DesignNotRegisteredError(NavgateException):
    """Raised when the design is accessed before the design owner registered it."""

    def __init__(self) -> None:
        super().__init__(
            message="No design registered. Ensure the design-owner plugin is loaded first.",
            error_code="DESIGN_NOT_REGISTERED",
        )


# Navigation Exceptions
class ReservedIdViolationError(NavgateException):
    """Raised when a plugin other than the design owner originates a reserved id."""

    def __init__(self, plugin_id: str, reserved_ids: list[str], area: str | None = None):
        self.plugin_id = plugin_id
        self.reserved_ids = list(reserved_ids)
        self.area = area
        where = f' in area "{area}"' if area else ""
        super().__init__(
            message=(
                f'Plugin "{plugin_id}" created reserved navigation id(s) {", ".join(reserved_ids)}{where}. '
                "Only the design-owner plugin may originate core.* ids and reserved sections."
            ),
            error_code="RESERVED_ID_VIOLATION",
            details={"plugin_id": plugin_id, "reserved_ids": list(reserved_ids), "area": area},
        )


class NavCollisionError(NavgateException):
    """Raised when two navigation entries share an id.

    ``collisions`` maps each duplicated id to the descriptions of where it was
    seen; ``triggers`` (boot verification only) maps each id to the names of
    the validation contexts that produced it.
    """

    def __init__(
        self,
        collisions: dict[str, list[str]],
        triggers: dict[str, list[str]] | None = None,
        remediation: str | None = None,
    ):
        self.collisions = {k: list(v) for k, v in collisions.items()}
        self.triggers = {k: list(v) for k, v in (triggers or {}).items()}
        self.remediation = remediation
        lines = ["Navigation ID collisions detected:"]
        for nav_id, places in self.collisions.items():
            lines.append(f'  "{nav_id}" is duplicated ({"; ".join(places)})')
            contexts = self.triggers.get(nav_id)
            if contexts:
                shown = ", ".join(contexts[:5])
                more = f" (+{len(contexts) - 5} more)" if len(contexts) > 5 else ""
                lines.append(f"    triggered by: {shown}{more}")
        if remediation:
            lines.append(remediation)
        super().__init__(
            message="\n".join(lines),
            error_code="NAV_COLLISION",
            details={"collisions": self.collisions, "triggers": self.triggers},
        )

    @property
    def ids(self) -> list[str]:
        return list(self.collisions)


# Boot Exceptions
class PluginBootError(NavgateException):
    """Raised when plugin boot cannot continue."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Plugin boot failed: {reason}",
            error_code="PLUGIN_BOOT_FAILED",
            details=details or {"reason": reason},
        )
