"""The application design and the single-slot registry that holds it.

Exactly one design-owner plugin supplies the design. Its baseline navigation
is the starting point of every build.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Optional, Protocol, runtime_checkable

from ..core.exceptions import DesignNotRegisteredError, DesignRegistrationError
from .types import EntitlementContext, NavModel

logger = logging.getLogger(__name__)


@runtime_checkable
class AppDesign(Protocol):
    design_id: str
    display_name: str

    def nav_baseline(self, context: EntitlementContext) -> NavModel:
        """Baseline navigation for ``context``. Must be synchronous and free of I/O."""
        ...


class DesignRegistry:
    def __init__(self) -> None:
        self._design: Optional[AppDesign] = None
        self._owner_plugin_id: Optional[str] = None
        self._registered_at: Optional[datetime] = None

    def register(self, design: AppDesign, plugin_id: Optional[str] = None) -> None:
        if not isinstance(design, AppDesign):
            raise DesignRegistrationError(
                "Invalid design object. Must provide design_id, display_name and nav_baseline()."
            )
        if self._design is not None:
            raise DesignRegistrationError(
                f'Design already registered: "{self._design.design_id}". '
                f'Cannot register "{design.design_id}". Only one design is allowed.'
            )

        self._design = design
        self._owner_plugin_id = plugin_id
        self._registered_at = datetime.now(UTC)
        logger.info("Registered design %s (owner=%s)", design.design_id, plugin_id)

    def get(self) -> AppDesign:
        if self._design is None:
            raise DesignNotRegisteredError()
        return self._design

    def has(self) -> bool:
        return self._design is not None

    @property
    def design_id(self) -> Optional[str]:
        return self._design.design_id if self._design else None

    @property
    def owner_plugin_id(self) -> Optional[str]:
        return self._owner_plugin_id

    @property
    def registered_at(self) -> Optional[datetime]:
        return self._registered_at

    def clear(self) -> None:
        self._design = None
        self._owner_plugin_id = None
        self._registered_at = None


DESIGNS = DesignRegistry()
