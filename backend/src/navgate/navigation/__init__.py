from .builder import (
    NavBuilder,
    append_items,
    apply_permission_filter,
    apply_sorting,
    create_empty_nav_model,
    ensure_mandatory_items,
    merge_nav_models,
)
from .design import AppDesign, DesignRegistry
from .types import (
    DEFAULT_NAV_ORDER,
    EntitlementContext,
    NavFilterContext,
    NavItem,
    NavModel,
    NavRequires,
    NavSection,
)
from .validator import assert_no_id_collisions, find_id_collisions, validate_reserved_ids

__all__ = [
    "DEFAULT_NAV_ORDER",
    "AppDesign",
    "DesignRegistry",
    "EntitlementContext",
    "NavBuilder",
    "NavFilterContext",
    "NavItem",
    "NavModel",
    "NavRequires",
    "NavSection",
    "append_items",
    "apply_permission_filter",
    "apply_sorting",
    "assert_no_id_collisions",
    "create_empty_nav_model",
    "ensure_mandatory_items",
    "find_id_collisions",
    "merge_nav_models",
    "validate_reserved_ids",
]
