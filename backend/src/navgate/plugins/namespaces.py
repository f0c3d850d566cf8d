"""Authorization namespace registry.

Each Tier B plugin holding ``app:authz`` may own one ability namespace
(``"notes."``) and supply a resolver for abilities inside it. Abilities
without a dot are core abilities and never routed here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Callable, Optional

from ..core.exceptions import NamespaceConflictError

logger = logging.getLogger(__name__)

AuthzResolver = Callable[..., Any]


@dataclass(frozen=True)
class NamespaceRegistration:
    plugin_id: str
    namespace: str
    resolver: AuthzResolver
    registered_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class NamespaceRegistry:
    def __init__(self) -> None:
        self._namespaces: dict[str, NamespaceRegistration] = {}

    def register(self, plugin_id: str, namespace: str, resolver: AuthzResolver) -> None:
        """Claim ``namespace`` for ``plugin_id``.

        Raises:
            ValueError: if the namespace does not end with a dot.
            NamespaceConflictError: if another plugin already owns it.
        """
        if not namespace.endswith("."):
            raise ValueError(f'Namespace "{namespace}" must end with a dot')

        existing = self._namespaces.get(namespace)
        if existing is not None:
            raise NamespaceConflictError(namespace, existing.plugin_id, plugin_id)

        self._namespaces[namespace] = NamespaceRegistration(plugin_id=plugin_id, namespace=namespace, resolver=resolver)
        logger.info("Registered authz namespace %s for plugin %s", namespace, plugin_id)

    def unregister(self, namespace: str) -> bool:
        return self._namespaces.pop(namespace, None) is not None

    def unregister_plugin(self, plugin_id: str) -> None:
        for namespace in [ns for ns, reg in self._namespaces.items() if reg.plugin_id == plugin_id]:
            del self._namespaces[namespace]

    def resolver_for(self, namespace: str) -> Optional[AuthzResolver]:
        reg = self._namespaces.get(namespace)
        return reg.resolver if reg else None

    def get_registration(self, namespace: str) -> Optional[NamespaceRegistration]:
        return self._namespaces.get(namespace)

    def has(self, namespace: str) -> bool:
        return namespace in self._namespaces

    @staticmethod
    def parse_namespace(ability: str) -> Optional[str]:
        """Namespace of ``ability`` including the trailing dot.

        ``"notes.item.read"`` gives ``"notes."``; ``"tenant:read"`` gives None.
        """
        head, sep, _ = ability.partition(".")
        if not sep or not head:
            return None
        return f"{head}."

    def namespaces(self) -> list[str]:
        return list(self._namespaces)

    def plugin_namespaces(self, plugin_id: str) -> list[str]:
        return [ns for ns, reg in self._namespaces.items() if reg.plugin_id == plugin_id]

    def clear(self) -> None:
        self._namespaces.clear()


NAMESPACES = NamespaceRegistry()
