"""Navigation model types.

Navigation is a tree of areas, sections and items. Every value is a frozen
pydantic model; filters return new values built with ``model_copy`` instead
of mutating what they were given.
"""

from __future__ import annotations

from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_NAV_ORDER = 1000

NavArea = Literal["main", "admin", "userMenu"]
NAV_AREAS: tuple[str, ...] = ("main", "admin", "userMenu")

UserRole = Literal["admin", "user", "guest"]

# Sections only the design owner may originate; plugins may append items to them
RESERVED_SECTION_IDS: frozenset[str] = frozenset({"core.account", "core.settings", "core.admin", "core.billing"})
RESERVED_PREFIX = "core."

# Always injected when missing
MANDATORY_ITEMS: frozenset[str] = frozenset({"core.logout", "core.switchTenant"})
# Injected when the context calls for them
OPTIONAL_MANDATORY_ITEMS: frozenset[str] = frozenset({"core.profile", "core.adminDashboard"})


class _NavModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class NavRequires(_NavModel):
    """Visibility requirements checked by the permission filter.

    ``capability`` is an entitlement token (cheap). ``ability`` is an
    authorization ability looked up in the context's pre-computed abilities
    and denied when absent. ``min_tier_level`` gates on subscription tier.
    """

    capability: Optional[str] = None
    ability: Optional[str] = None
    min_tier_level: Optional[int] = Field(default=None, alias="minTierLevel", ge=0)


class NavItem(_NavModel):
    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    href: Optional[str] = None
    # Named client-side action for items without a URL (e.g. "logout")
    action: Optional[str] = None
    order: int = DEFAULT_NAV_ORDER
    icon: Optional[str] = None
    badge: Optional[str] = None
    external: bool = False
    requires: Optional[NavRequires] = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "NavItem":
        if (self.href is None) == (self.action is None):
            raise ValueError(f'Nav item "{self.id}" must define exactly one of href or action')
        return self


class NavSection(_NavModel):
    id: str = Field(..., min_length=1)
    label: Optional[str] = None
    order: int = DEFAULT_NAV_ORDER
    items: tuple[NavItem, ...] = ()
    collapsible: bool = False
    default_collapsed: bool = Field(default=False, alias="defaultCollapsed")
    requires: Optional[NavRequires] = None

    def with_items(self, items: list[NavItem] | tuple[NavItem, ...]) -> "NavSection":
        return self.model_copy(update={"items": tuple(items)})

    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]


class NavModel(_NavModel):
    main: tuple[NavSection, ...] = ()
    admin: tuple[NavSection, ...] = ()
    user_menu: tuple[NavSection, ...] = Field(default=(), alias="userMenu")

    def area(self, area: str) -> tuple[NavSection, ...]:
        """Sections of ``area`` ("main", "admin" or "userMenu")."""
        if area == "userMenu":
            return self.user_menu
        if area in ("main", "admin"):
            return getattr(self, area)
        raise ValueError(f"Unknown navigation area: {area}")

    def with_area(self, area: str, sections: list[NavSection] | tuple[NavSection, ...]) -> "NavModel":
        field_name = "user_menu" if area == "userMenu" else area
        if field_name not in ("main", "admin", "user_menu"):
            raise ValueError(f"Unknown navigation area: {area}")
        return self.model_copy(update={field_name: tuple(sections)})


class EntitlementContext(_NavModel):
    """Who is asking: the input to every navigation build."""

    user_id: Optional[str] = None
    role: Optional[UserRole] = None
    entitlements: frozenset[str] = frozenset()
    tenant_id: Optional[str] = None
    tier_level: int = Field(default=0, ge=0)
    has_multiple_tenants: bool = False
    # Pre-computed authorization abilities; missing keys deny
    abilities: Optional[Mapping[str, bool]] = None

    @field_validator("entitlements", mode="before")
    @classmethod
    def _coerce_entitlements(cls, v):
        if v is None:
            return frozenset()
        return frozenset(v)

    @property
    def is_guest(self) -> bool:
        return self.role in (None, "guest")

    def has_ability(self, ability: str) -> bool:
        if not self.abilities:
            return False
        return bool(self.abilities.get(ability, False))


class NavFilterContext(EntitlementContext):
    area: NavArea

    @classmethod
    def for_area(cls, context: EntitlementContext, area: str) -> "NavFilterContext":
        return cls(**context.model_dump(exclude={"area"}), area=area)
