"""Boot-time navigation verification.

Builds navigation for every generated validation context and fails boot on
the first collision pattern found. The contexts are a bounded sample of the
entitlement space, so a passing run lowers the risk of a request-time
collision but does not rule it out.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from ..core.exceptions import NavCollisionError
from ..navigation.builder import NavBuilder
from ..navigation.design import AppDesign
from ..navigation.types import EntitlementContext
from ..navigation.validator import find_id_collisions
from .contexts import NamedContext
from .coverage import entitlement_key

logger = logging.getLogger(__name__)

REMEDIATION = (
    "Every section and item id must be unique across main, admin and userMenu. "
    'Prefix plugin entries with the plugin id (e.g. "billing.upgrade") and make sure '
    "no two filters add the same id under any combination of entitlements."
)

BASELINE_CONTEXTS: tuple[NamedContext, ...] = (
    NamedContext(
        name="admin",
        context=EntitlementContext(
            user_id="validation",
            role="admin",
            entitlements=frozenset({"admin"}),
            tenant_id="validation",
            tier_level=99,
            has_multiple_tenants=True,
        ),
    ),
    NamedContext(
        name="user",
        context=EntitlementContext(user_id="validation", role="user", tenant_id="validation", tier_level=1),
    ),
    NamedContext(name="guest", context=EntitlementContext(role="guest", tenant_id=None, tier_level=0)),
)


class _CollisionLedger:
    def __init__(self) -> None:
        self.places: dict[str, list[str]] = {}
        self.triggers: dict[str, list[str]] = {}
        self.entitlement_sets: dict[str, list[str]] = {}

    def record(self, named: NamedContext, collisions: dict[str, list[str]]) -> None:
        key = entitlement_key(named.context.entitlements) or "(none)"
        for nav_id, where in collisions.items():
            places = self.places.setdefault(nav_id, [])
            places.extend(p for p in where if p not in places)
            self.triggers.setdefault(nav_id, []).append(named.name)
            sets = self.entitlement_sets.setdefault(nav_id, [])
            if key not in sets:
                sets.append(key)

    def __bool__(self) -> bool:
        return bool(self.places)

    def to_error(self) -> NavCollisionError:
        error = NavCollisionError(self.places, triggers=self.triggers, remediation=REMEDIATION)
        error.details["entitlement_sets"] = {k: list(v) for k, v in self.entitlement_sets.items()}
        return error


class BootValidator:
    def __init__(self, fail_fast: bool = False):
        self.fail_fast = fail_fast

    def validate_baseline(self, design: AppDesign, plugin_id: Optional[str] = None) -> None:
        """Check the design's baseline alone under admin, user and guest contexts."""
        ledger = _CollisionLedger()
        for named in BASELINE_CONTEXTS:
            collisions = find_id_collisions(design.nav_baseline(named.context))
            if collisions:
                ledger.record(named, collisions)

        if ledger:
            logger.error(
                "plugin.boot | baseline navigation of %s has id collisions: %s",
                plugin_id or design.design_id,
                ", ".join(ledger.places),
            )
            raise ledger.to_error()
        logger.debug("Baseline navigation of %s passed collision check", plugin_id or design.design_id)

    def validate(self, builder: NavBuilder, contexts: Iterable[NamedContext]) -> int:
        """Run stages 1-5 for every context and aggregate collisions into one error.

        Returns the number of contexts validated. Reserved-id violations raised
        by the builder propagate unchanged.
        """
        ledger = _CollisionLedger()
        checked = 0
        for named in contexts:
            checked += 1
            try:
                builder.build(named.context, skip_permission_filter=True, quiet=True)
            except NavCollisionError as e:
                ledger.record(named, e.collisions)
                if self.fail_fast:
                    break

        if ledger:
            logger.error(
                "plugin.boot | navigation collisions in full pipeline: %s",
                ", ".join(ledger.places),
                extra={"triggers": ledger.triggers},
            )
            raise ledger.to_error()

        logger.info("plugin.boot | navigation verified across %d contexts", checked)
        return checked
