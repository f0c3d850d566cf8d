"""Validation context matrix for boot-time navigation verification."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..navigation.types import EntitlementContext
from .coverage import dedupe_entitlement_sets, entitlement_key

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9|_-]")

_TENANT_MODES: tuple[tuple[bool, str], ...] = ((False, "single-tenant"), (True, "multi-tenant"))


@dataclass(frozen=True)
class NamedContext:
    name: str
    context: EntitlementContext


def normalize_tier_levels(tier_levels: Iterable[int]) -> list[int]:
    """Non-negative integer tier levels, sorted, always including 0."""
    levels = {0}
    for level in tier_levels:
        try:
            value = int(level)
        except (TypeError, ValueError):
            continue
        if value >= 0:
            levels.add(value)
    return sorted(levels)


def _suffix(entitlements: frozenset[str]) -> str:
    return _UNSAFE_NAME_CHARS.sub("", entitlement_key(entitlements)) or "none"


def build_nav_validation_contexts(
    tier_levels: Iterable[int],
    entitlement_sets: Sequence[Iterable[str]],
) -> list[NamedContext]:
    """Cross roles, tenant shapes, tier levels and entitlement sets.

    Admin and user contexts cover every combination; guests get one context
    per entitlement set with no tenant at tier 0.
    """
    levels = normalize_tier_levels(tier_levels)
    sets = dedupe_entitlement_sets(entitlement_sets)
    contexts: list[NamedContext] = []

    for role in ("admin", "user"):
        for multi, mode in _TENANT_MODES:
            for level in levels:
                for entitlements in sets:
                    contexts.append(
                        NamedContext(
                            name=f"{role}-{mode}-tier{level}-entitlements-{_suffix(entitlements)}",
                            context=EntitlementContext(
                                user_id=f"validation-{role}",
                                role=role,
                                entitlements=entitlements,
                                tenant_id="validation-tenant",
                                tier_level=level,
                                has_multiple_tenants=multi,
                            ),
                        )
                    )

    for entitlements in sets:
        contexts.append(
            NamedContext(
                name=f"guest-tier0-entitlements-{_suffix(entitlements)}",
                context=EntitlementContext(role="guest", entitlements=entitlements, tenant_id=None, tier_level=0),
            )
        )

    return contexts
