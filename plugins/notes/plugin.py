"""Notes plugin: navigation entries and the notes.* ability resolver."""

import logging

from navgate.navigation.types import NavFilterContext, NavItem, NavRequires, NavSection

logger = logging.getLogger(__name__)

# Abilities granted to plain members; admins hold every notes.* ability
MEMBER_ABILITIES = frozenset({"notes.item.read", "notes.item.create"})


def add_notes_nav(sections: list[NavSection], context: NavFilterContext) -> list[NavSection]:
    if context.is_guest:
        return sections
    items = [NavItem(id="notes.list", label="All notes", href="/notes", order=100)]
    if "notes:sharing" in context.entitlements:
        items.append(
            NavItem(
                id="notes.shared",
                label="Shared with me",
                href="/notes/shared",
                order=200,
                requires=NavRequires(capability="notes:sharing"),
            )
        )
    notes = NavSection(id="notes.main", label="Notes", order=300, items=tuple(items))
    return [*sections, notes]


def forget_drafts(data, context) -> None:
    logger.debug("Discarding unsaved note drafts on logout")


def authz_resolver(ability: str, role: str | None = None) -> bool:
    if role == "admin":
        return ability.startswith("notes.")
    return ability in MEMBER_ABILITIES
