"""Navigation validation: structural checks, reserved ids and id collisions."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Optional

from pydantic import BaseModel, Field

from ..core.exceptions import NavCollisionError
from .types import NAV_AREAS, RESERVED_PREFIX, RESERVED_SECTION_IDS, NavItem, NavModel, NavSection


class NavValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def is_reserved_section_id(section_id: str) -> bool:
    return section_id in RESERVED_SECTION_IDS


def is_reserved_id(nav_id: str) -> bool:
    """True for well-known reserved sections and anything in the ``core.`` namespace."""
    return nav_id in RESERVED_SECTION_IDS or nav_id.startswith(RESERVED_PREFIX)


def validate_nav_item(item: NavItem) -> NavValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if "." not in item.id:
        warnings.append(f'NavItem "{item.id}" should use dot notation (e.g., "pluginId.itemName")')
    if (item.href is None) == (item.action is None):
        errors.append(f'NavItem "{item.id}": must define exactly one of href or action')

    return NavValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_nav_section(section: NavSection) -> NavValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if "." not in section.id:
        warnings.append(f'NavSection "{section.id}" should use dot notation (e.g., "pluginId.sectionName")')

    seen: set[str] = set()
    for item in section.items:
        result = validate_nav_item(item)
        errors.extend(result.errors)
        warnings.extend(result.warnings)
        if item.id in seen:
            errors.append(f'NavSection "{section.id}": item "{item.id}" appears more than once')
        seen.add(item.id)

    return NavValidationResult(valid=not errors, errors=errors, warnings=warnings)


def find_id_collisions(model: NavModel) -> dict[str, list[str]]:
    """Map every id seen more than once to the places it was seen.

    Sections and items of all three areas share one id space.
    """
    places: dict[str, list[str]] = {}
    for area in NAV_AREAS:
        for section in model.area(area):
            places.setdefault(section.id, []).append(f"section in {area}")
            for item in section.items:
                places.setdefault(item.id, []).append(f'item in {area}/"{section.id}"')
    return {nav_id: where for nav_id, where in places.items() if len(where) > 1}


def assert_no_id_collisions(model: NavModel) -> None:
    """Raise NavCollisionError naming every duplicated id in ``model``."""
    collisions = find_id_collisions(model)
    if collisions:
        raise NavCollisionError(collisions)


def validate_nav_model(model: NavModel) -> NavValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    for area in NAV_AREAS:
        for section in model.area(area):
            result = validate_nav_section(section)
            errors.extend(f"[{area}] {e}" for e in result.errors)
            warnings.extend(f"[{area}] {w}" for w in result.warnings)

    for nav_id, where in find_id_collisions(model).items():
        errors.append(f'"{nav_id}" is duplicated ({"; ".join(where)})')

    return NavValidationResult(valid=not errors, errors=errors, warnings=warnings)


def find_reserved_id_violations(
    sections: Sequence[NavSection],
    existing_section_ids: Iterable[str],
    existing_item_ids: Optional[Iterable[str]] = None,
) -> list[str]:
    """Reserved ids in ``sections`` that were not already present.

    When ``existing_item_ids`` is None every ``core.*`` item counts as new.
    """
    known_sections = set(existing_section_ids)
    known_items = set(existing_item_ids or ())
    violations: list[str] = []
    for section in sections:
        if is_reserved_id(section.id) and section.id not in known_sections:
            violations.append(section.id)
        for item in section.items:
            if item.id.startswith(RESERVED_PREFIX) and item.id not in known_items:
                violations.append(item.id)
    return violations


def validate_reserved_ids(
    sections: Sequence[NavSection],
    existing_section_ids: Iterable[str],
    plugin_id: str,
    design_owner_id: Optional[str] = None,
    existing_item_ids: Optional[Iterable[str]] = None,
) -> NavValidationResult:
    """Report every reserved section or ``core.*`` id ``plugin_id`` would originate.

    Plugins may append into a reserved section that already exists; only the
    design owner may create one.
    """
    if design_owner_id is not None and plugin_id == design_owner_id:
        return NavValidationResult(valid=True)

    errors = []
    for nav_id in find_reserved_id_violations(sections, existing_section_ids, existing_item_ids):
        if is_reserved_section_id(nav_id):
            errors.append(
                f'Plugin "{plugin_id}" cannot create reserved section "{nav_id}". '
                "Reserved sections can only be created by the design-owner plugin."
            )
        else:
            errors.append(
                f'Plugin "{plugin_id}" cannot create item with core ID "{nav_id}". '
                "Core IDs are reserved for the design-owner plugin."
            )
    return NavValidationResult(valid=not errors, errors=errors)
