"""Navigation model builder.

Every build runs the same six stages in order:

1. baseline from the design
2. per-area filter hooks, one handler at a time
3. mandatory item injection
4. sort by ``order`` with insertion position as tie-break
5. id collision check
6. permission filter

Collisions are checked before the permission filter so conflicts surface even
for entries a given user would never see. A build is a pure function of the
design, the frozen hook registry and the context.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Optional

from pydantic import ValidationError

from ..core.exceptions import ReservedIdViolationError
from ..plugins.hooks import HOOKS, NAV_AREA_HOOKS, HookHandler, HookKind, HookRegistry
from .design import AppDesign
from .types import (
    NAV_AREAS,
    EntitlementContext,
    NavFilterContext,
    NavItem,
    NavModel,
    NavRequires,
    NavSection,
)
from .validator import assert_no_id_collisions, find_reserved_id_violations

logger = logging.getLogger(__name__)

ACCOUNT_SECTION_ID = "core.account"


def create_empty_nav_model() -> NavModel:
    return NavModel()


def merge_nav_models(base: NavModel, additions: NavModel) -> NavModel:
    """Append the sections and items of ``additions`` onto ``base``.

    Sections sharing an id are merged by appending items; new sections go last.
    """

    def merge(base_sections: Sequence[NavSection], add_sections: Sequence[NavSection]) -> tuple[NavSection, ...]:
        result = list(base_sections)
        index = {section.id: i for i, section in enumerate(result)}
        for section in add_sections:
            if section.id in index:
                existing = result[index[section.id]]
                result[index[section.id]] = existing.with_items(existing.items + section.items)
            else:
                index[section.id] = len(result)
                result.append(section)
        return tuple(result)

    return NavModel(
        main=merge(base.main, additions.main),
        admin=merge(base.admin, additions.admin),
        user_menu=merge(base.user_menu, additions.user_menu),
    )


def append_items(sections: Sequence[NavSection], section_id: str, items: Iterable[NavItem]) -> list[NavSection]:
    """Return ``sections`` with ``items`` appended to the section ``section_id``.

    This is how plugins add to reserved sections they may not create.
    """
    result = list(sections)
    for i, section in enumerate(result):
        if section.id == section_id:
            result[i] = section.with_items(section.items + tuple(items))
            return result
    raise ValueError(f'Navigation section "{section_id}" does not exist')


# Stage 3


def _log_restored(item_id: str, quiet: bool) -> None:
    if not quiet:
        logger.warning("nav.incident | mandatory item %s was missing and has been restored", item_id)


def ensure_mandatory_items(nav: NavModel, context: EntitlementContext, quiet: bool = False) -> NavModel:
    """Inject the account items every user menu must carry.

    - ``core.logout`` always
    - ``core.switchTenant`` when the user belongs to several tenants
    - ``core.profile`` for authenticated, non-guest users
    - ``core.adminDashboard`` for admins unless already in the admin area
    """
    sections = [list(section.items) for section in nav.user_menu]
    meta = list(nav.user_menu)

    def present(item_id: str) -> bool:
        return any(item.id == item_id for items in sections for item in items)

    def account_items() -> list[NavItem]:
        for i, section in enumerate(meta):
            if section.id == ACCOUNT_SECTION_ID:
                return sections[i]
        meta.append(NavSection(id=ACCOUNT_SECTION_ID, label="Account", order=9000))
        sections.append([])
        return sections[-1]

    if not present("core.logout"):
        _log_restored("core.logout", quiet)
        account_items().append(NavItem(id="core.logout", label="Log out", action="logout", icon="LogOut", order=9999))

    if context.has_multiple_tenants and not present("core.switchTenant"):
        _log_restored("core.switchTenant", quiet)
        items = account_items()
        switch = NavItem(
            id="core.switchTenant", label="Switch Organization", action="switchTenant", icon="Building2", order=8990
        )
        logout_at = next((i for i, item in enumerate(items) if item.id == "core.logout"), None)
        if logout_at is None:
            items.append(switch)
        else:
            items.insert(logout_at, switch)

    if not context.is_guest and not present("core.profile"):
        _log_restored("core.profile", quiet)
        account_items().insert(0, NavItem(id="core.profile", label="Profile", href="/profile", icon="User", order=100))

    is_admin = context.role == "admin" or "admin" in context.entitlements
    if is_admin and not present("core.adminDashboard"):
        in_admin = any(item.id == "core.adminDashboard" for section in nav.admin for item in section.items)
        if not in_admin:
            _log_restored("core.adminDashboard", quiet)
            account_items().append(
                NavItem(
                    id="core.adminDashboard",
                    label="Admin Dashboard",
                    href="/admin/dashboard",
                    icon="Shield",
                    order=8000,
                )
            )

    user_menu = tuple(section.with_items(items) for section, items in zip(meta, sections))
    return nav.model_copy(update={"user_menu": user_menu})


# Stage 4


def sort_items(items: Sequence[NavItem]) -> tuple[NavItem, ...]:
    return tuple(item for _, item in sorted(enumerate(items), key=lambda pair: (pair[1].order, pair[0])))


def sort_sections(sections: Sequence[NavSection]) -> tuple[NavSection, ...]:
    ordered = sorted(enumerate(sections), key=lambda pair: (pair[1].order, pair[0]))
    return tuple(section.with_items(sort_items(section.items)) for _, section in ordered)


def apply_sorting(nav: NavModel) -> NavModel:
    """Sort sections and their items by ``(order, position)``."""
    return NavModel(
        main=sort_sections(nav.main),
        admin=sort_sections(nav.admin),
        user_menu=sort_sections(nav.user_menu),
    )


# Stage 6


def requirement_met(requires: Optional[NavRequires], context: EntitlementContext) -> bool:
    """Whether ``context`` satisfies ``requires``. Abilities missing from the context deny."""
    if requires is None:
        return True
    if requires.capability is not None and requires.capability not in context.entitlements:
        return False
    if requires.min_tier_level is not None and context.tier_level < requires.min_tier_level:
        return False
    if requires.ability is not None and not context.has_ability(requires.ability):
        if context.abilities is None:
            logger.debug("Ability %s required but no abilities were provided; hiding entry", requires.ability)
        return False
    return True


def apply_permission_filter(nav: NavModel, context: EntitlementContext) -> NavModel:
    """Drop entries ``context`` may not see, then drop sections left empty."""

    def filter_area(sections: Sequence[NavSection]) -> tuple[NavSection, ...]:
        kept = []
        for section in sections:
            if not requirement_met(section.requires, context):
                continue
            items = tuple(item for item in section.items if requirement_met(item.requires, context))
            if items:
                kept.append(section.with_items(items))
        return tuple(kept)

    return NavModel(
        main=filter_area(nav.main),
        admin=filter_area(nav.admin),
        user_menu=filter_area(nav.user_menu),
    )


class NavBuilder:
    """Builds navigation models from a design and the hook registry."""

    def __init__(
        self,
        design: AppDesign,
        hooks: Optional[HookRegistry] = None,
        design_owner_id: Optional[str] = None,
    ):
        self.design = design
        self.hooks = hooks if hooks is not None else HOOKS
        self.design_owner_id = design_owner_id

    def build(
        self,
        context: EntitlementContext,
        *,
        skip_hooks: bool = False,
        skip_permission_filter: bool = False,
        skip_validation: bool = False,
        quiet: bool = False,
    ) -> NavModel:
        nav = self.design.nav_baseline(context)

        if not skip_hooks:
            nav = self.apply_hooks(nav, context)

        nav = ensure_mandatory_items(nav, context, quiet=quiet)
        nav = apply_sorting(nav)

        if not skip_validation:
            assert_no_id_collisions(nav)

        if not skip_permission_filter:
            nav = apply_permission_filter(nav, context)

        return nav

    def apply_hooks(self, nav: NavModel, context: EntitlementContext) -> NavModel:
        for area in NAV_AREAS:
            nav = nav.with_area(area, self._apply_area_hooks(nav.area(area), area, context))
        return nav

    def _apply_area_hooks(
        self, sections: tuple[NavSection, ...], area: str, context: EntitlementContext
    ) -> tuple[NavSection, ...]:
        filter_context = NavFilterContext.for_area(context, area)
        for hook_name in NAV_AREA_HOOKS[area]:
            if hook_name is None:
                continue
            for handler in self.hooks.get_handlers(hook_name, HookKind.FILTER):
                sections = self._run_handler(handler, sections, area, filter_context)
        return sections

    def _run_handler(
        self,
        handler: HookHandler,
        before: tuple[NavSection, ...],
        area: str,
        context: NavFilterContext,
    ) -> tuple[NavSection, ...]:
        try:
            raw = handler.callback(list(before), context)
        except Exception:
            logger.exception(
                "Navigation filter %s from plugin %s raised; keeping previous sections",
                handler.hook_name,
                handler.plugin_id,
            )
            return before

        try:
            after = _coerce_sections(raw)
        except (TypeError, ValidationError):
            logger.exception(
                "Navigation filter %s from plugin %s returned an invalid value; keeping previous sections",
                handler.hook_name,
                handler.plugin_id,
            )
            return before

        if handler.plugin_id == self.design_owner_id:
            return after

        violations = find_reserved_id_violations(
            after,
            existing_section_ids=[s.id for s in before],
            existing_item_ids=[i.id for s in before for i in s.items],
        )
        if violations:
            raise ReservedIdViolationError(handler.plugin_id, violations, area=area)

        return self._restore_removed(handler.plugin_id, before, after, area)

    def _owns(self, plugin_id: str, nav_id: str) -> bool:
        return plugin_id == self.design_owner_id or nav_id.startswith(f"{plugin_id}.")

    def _restore_removed(
        self,
        plugin_id: str,
        before: tuple[NavSection, ...],
        after: tuple[NavSection, ...],
        area: str,
    ) -> tuple[NavSection, ...]:
        """Put back sections and items a filter dropped without owning them."""
        result = list(after)
        after_sections = {section.id for section in after}
        after_items = {item.id for section in after for item in section.items}

        for original in before:
            if original.id not in after_sections:
                if self._owns(plugin_id, original.id) and all(
                    self._owns(plugin_id, item.id) for item in original.items
                ):
                    continue
                logger.warning(
                    "nav.incident | plugin %s removed section %s in area %s; restored",
                    plugin_id,
                    original.id,
                    area,
                    extra={"plugin_id": plugin_id, "nav_id": original.id, "area": area},
                )
                # Items the filter moved elsewhere stay where it put them
                result.append(original.with_items([i for i in original.items if i.id not in after_items]))
                continue

            missing = [
                item for item in original.items if item.id not in after_items and not self._owns(plugin_id, item.id)
            ]
            if not missing:
                continue
            for item in missing:
                logger.warning(
                    "nav.incident | plugin %s removed item %s in area %s; restored",
                    plugin_id,
                    item.id,
                    area,
                    extra={"plugin_id": plugin_id, "nav_id": item.id, "area": area},
                )
            at = next(i for i, section in enumerate(result) if section.id == original.id)
            result[at] = result[at].with_items(result[at].items + tuple(missing))

        return tuple(result)


def _coerce_sections(raw: Any) -> tuple[NavSection, ...]:
    if not isinstance(raw, (list, tuple)):
        raise TypeError(f"Navigation filters must return a list of sections, got {type(raw).__name__}")
    return tuple(s if isinstance(s, NavSection) else NavSection.model_validate(s) for s in raw)
