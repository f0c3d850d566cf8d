"""Hook registry.

Plugins extend the host through named hooks. Filters receive a value and
return a (possibly new) value; actions receive a value and return nothing.
Handlers run in ascending ``priority`` with registration order as the
tie-break, recomputed on every read so the order never depends on how the
underlying list happens to be sorted.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Optional, Protocol

from ..core.exceptions import HookRegistryFrozenError
from .capabilities import Capability

logger = logging.getLogger(__name__)


class HookPriority(IntEnum):
    HIGHEST = 0
    HIGH = 25
    NORMAL = 50
    LOW = 75
    LOWEST = 100


class HookKind(str, Enum):
    FILTER = "filter"
    ACTION = "action"


class FilterHook(Protocol):
    def __call__(self, data: Any, context: Any) -> Any: ...


class ActionHook(Protocol):
    def __call__(self, data: Any, context: Any) -> None: ...


# Navigation filters
NAV_MAIN = "ui:nav:main"
NAV_ADMIN = "ui:nav:admin"
NAV_USER_MENU = "ui:user:menu"
LEGACY_NAV_ITEMS = "nav:items"
LEGACY_NAV_USER_MENU = "nav:user-menu"

# Dashboard and settings filters
DASHBOARD_WIDGETS = "dashboard:widgets"
DASHBOARD_STATS = "dashboard:stats"
SETTINGS_SECTIONS = "settings:sections"

# Lifecycle actions
APP_BOOT = "app:boot"
APP_READY = "app:ready"
APP_SHUTDOWN = "app:shutdown"
USER_LOGIN = "user:login"
USER_LOGOUT = "user:logout"
TENANT_SWITCH = "tenant:switch"
TENANT_CREATE = "tenant:create"

ACTION_HOOKS: frozenset[str] = frozenset(
    {APP_BOOT, APP_READY, APP_SHUTDOWN, USER_LOGIN, USER_LOGOUT, TENANT_SWITCH, TENANT_CREATE}
)

# Capability a plugin must hold to register on a hook; absent means none
HOOK_REQUIRED_CAPABILITIES: dict[str, Capability] = {
    NAV_MAIN: Capability.UI_FILTER_NAV,
    NAV_ADMIN: Capability.UI_FILTER_NAV,
    NAV_USER_MENU: Capability.UI_FILTER_NAV,
    LEGACY_NAV_ITEMS: Capability.UI_FILTER_NAV,
    LEGACY_NAV_USER_MENU: Capability.UI_FILTER_NAV,
    SETTINGS_SECTIONS: Capability.UI_FILTER_NAV,
    DASHBOARD_WIDGETS: Capability.UI_FILTER_DASHBOARD,
    DASHBOARD_STATS: Capability.UI_FILTER_DASHBOARD,
}

# Area -> (primary hook, legacy hook), applied in that order
NAV_AREA_HOOKS: dict[str, tuple[str, Optional[str]]] = {
    "main": (NAV_MAIN, LEGACY_NAV_ITEMS),
    "admin": (NAV_ADMIN, None),
    "userMenu": (NAV_USER_MENU, LEGACY_NAV_USER_MENU),
}


def required_capability(hook_name: str) -> Optional[Capability]:
    """Capability gating registration on ``hook_name``, or None when ungated."""
    return HOOK_REQUIRED_CAPABILITIES.get(hook_name)


def default_kind(hook_name: str) -> HookKind:
    return HookKind.ACTION if hook_name in ACTION_HOOKS else HookKind.FILTER


@dataclass(frozen=True)
class HookHandler:
    hook_name: str
    plugin_id: str
    callback: Callable[..., Any]
    priority: int = HookPriority.NORMAL
    registration_order: int = 0
    kind: HookKind = HookKind.FILTER

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.priority, self.registration_order)


@dataclass
class _HookTable:
    filters: dict[str, list[HookHandler]] = field(default_factory=dict)
    actions: dict[str, list[HookHandler]] = field(default_factory=dict)

    def bucket(self, kind: HookKind) -> dict[str, list[HookHandler]]:
        return self.filters if kind == HookKind.FILTER else self.actions


class HookRegistry:
    """Ordered registry of filter and action handlers keyed by hook name."""

    def __init__(self) -> None:
        self._table = _HookTable()
        self._counter = itertools.count()
        self._frozen = False

    # Registration

    def register(
        self,
        hook_name: str,
        plugin_id: str,
        callback: Callable[..., Any],
        priority: Optional[int] = None,
        kind: Optional[HookKind] = None,
    ) -> HookHandler:
        if self._frozen:
            raise HookRegistryFrozenError(hook_name, plugin_id)
        if not callable(callback):
            raise TypeError(f'Hook "{hook_name}" callback from plugin "{plugin_id}" is not callable')

        kind = kind or default_kind(hook_name)
        handler = HookHandler(
            hook_name=hook_name,
            plugin_id=plugin_id,
            callback=callback,
            priority=HookPriority.NORMAL if priority is None else int(priority),
            registration_order=next(self._counter),
            kind=kind,
        )
        self._table.bucket(kind).setdefault(hook_name, []).append(handler)
        logger.debug(
            "Registered %s %s for plugin %s (priority=%s)", kind.value, hook_name, plugin_id, handler.priority
        )
        return handler

    def add_filter(
        self, hook_name: str, plugin_id: str, callback: FilterHook, priority: Optional[int] = None
    ) -> HookHandler:
        return self.register(hook_name, plugin_id, callback, priority, HookKind.FILTER)

    def add_action(
        self, hook_name: str, plugin_id: str, callback: ActionHook, priority: Optional[int] = None
    ) -> HookHandler:
        return self.register(hook_name, plugin_id, callback, priority, HookKind.ACTION)

    def remove_filter(self, hook_name: str, plugin_id: str) -> int:
        return self._remove(HookKind.FILTER, hook_name, plugin_id)

    def remove_action(self, hook_name: str, plugin_id: str) -> int:
        return self._remove(HookKind.ACTION, hook_name, plugin_id)

    def remove_plugin_hooks(self, plugin_id: str) -> int:
        """Drop every handler owned by ``plugin_id``; returns how many were removed."""
        removed = 0
        for kind in HookKind:
            for hook_name in list(self._table.bucket(kind)):
                removed += self._remove(kind, hook_name, plugin_id)
        if removed:
            logger.info("Removed %d hook handler(s) for plugin %s", removed, plugin_id)
        return removed

    def _remove(self, kind: HookKind, hook_name: str, plugin_id: str) -> int:
        if self._frozen:
            raise HookRegistryFrozenError(hook_name, plugin_id)
        bucket = self._table.bucket(kind)
        handlers = bucket.get(hook_name, [])
        kept = [h for h in handlers if h.plugin_id != plugin_id]
        if kept:
            bucket[hook_name] = kept
        else:
            bucket.pop(hook_name, None)
        return len(handlers) - len(kept)

    # Reads

    def get_handlers(self, hook_name: str, kind: Optional[HookKind] = None) -> list[HookHandler]:
        """Handlers for ``hook_name`` ordered by (priority, registration_order).

        ``kind`` defaults to the hook's own kind, so action hooks return their actions.
        """
        kind = kind or default_kind(hook_name)
        return sorted(self._table.bucket(kind).get(hook_name, ()), key=lambda h: h.sort_key)

    def has_filter(self, hook_name: str) -> bool:
        return bool(self._table.filters.get(hook_name))

    def has_action(self, hook_name: str) -> bool:
        return bool(self._table.actions.get(hook_name))

    def count(self, hook_name: Optional[str] = None) -> int:
        if hook_name is not None:
            return len(self._table.filters.get(hook_name, ())) + len(self._table.actions.get(hook_name, ()))
        return sum(len(v) for v in self._table.filters.values()) + sum(len(v) for v in self._table.actions.values())

    def registered_hooks(self) -> dict[str, list[str]]:
        return {
            "filters": sorted(self._table.filters),
            "actions": sorted(self._table.actions),
        }

    # Execution

    def apply_filters(self, hook_name: str, value: Any, context: Any = None) -> Any:
        """Thread ``value`` through every filter; a failing filter is skipped."""
        for handler in self.get_handlers(hook_name, HookKind.FILTER):
            try:
                result = handler.callback(value, context)
            except Exception:
                logger.exception(
                    "Filter %s from plugin %s raised; continuing with previous value", hook_name, handler.plugin_id
                )
                continue
            if result is None:
                logger.warning("Filter %s from plugin %s returned None; ignoring", hook_name, handler.plugin_id)
                continue
            value = result
        return value

    def do_action(self, hook_name: str, data: Any = None, context: Any = None) -> None:
        for handler in self.get_handlers(hook_name, HookKind.ACTION):
            try:
                handler.callback(data, context)
            except Exception:
                logger.exception("Action %s from plugin %s raised", hook_name, handler.plugin_id)

    # Lifecycle

    def freeze(self) -> None:
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def clear(self) -> None:
        self._table = _HookTable()
        self._counter = itertools.count()
        self._frozen = False


HOOKS = HookRegistry()
