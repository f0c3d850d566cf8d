"""Unit tests for navigation model types."""

import pytest
from pydantic import ValidationError

from navgate.navigation.types import DEFAULT_NAV_ORDER, EntitlementContext, NavFilterContext, NavItem, NavModel
from tests.unit.helpers import item, section


class TestNavItem:
    def test_href_or_action_required(self) -> None:
        with pytest.raises(ValidationError, match="exactly one of href or action"):
            NavItem(id="notes.list", label="Notes")

    def test_href_and_action_rejected(self) -> None:
        with pytest.raises(ValidationError, match="exactly one of href or action"):
            NavItem(id="notes.list", label="Notes", href="/notes", action="open")

    def test_default_order(self) -> None:
        assert item("notes.list").order == DEFAULT_NAV_ORDER == 1000

    def test_frozen(self) -> None:
        nav_item = item("notes.list")
        with pytest.raises(ValidationError):
            nav_item.label = "changed"


class TestNavModel:
    def test_camel_case_user_menu(self) -> None:
        """Payloads may use userMenu; dumps use it by alias."""
        model = NavModel.model_validate(
            {"userMenu": [{"id": "core.account", "items": [{"id": "core.logout", "label": "Out", "action": "logout"}]}]}
        )
        assert model.user_menu[0].items[0].action == "logout"
        assert "userMenu" in model.model_dump(by_alias=True)

    def test_area_accessors(self) -> None:
        model = NavModel(main=(section("a.main", item("a.x")),))
        updated = model.with_area("userMenu", [section("b.menu", item("b.y"))])
        assert updated.area("userMenu")[0].id == "b.menu"
        assert model.area("userMenu") == ()
        with pytest.raises(ValueError):
            model.area("footer")


class TestEntitlementContext:
    def test_entitlements_coerced_to_frozenset(self) -> None:
        ctx = EntitlementContext(entitlements=["a", "b", "a"])
        assert ctx.entitlements == frozenset({"a", "b"})

    def test_guest_detection(self) -> None:
        assert EntitlementContext().is_guest
        assert EntitlementContext(role="guest").is_guest
        assert not EntitlementContext(role="user").is_guest

    def test_abilities_fail_closed(self) -> None:
        assert not EntitlementContext().has_ability("notes.item.read")
        ctx = EntitlementContext(abilities={"notes.item.read": True, "notes.item.delete": False})
        assert ctx.has_ability("notes.item.read")
        assert not ctx.has_ability("notes.item.delete")
        assert not ctx.has_ability("notes.other")

    def test_filter_context_carries_area(self, admin_context) -> None:
        ctx = NavFilterContext.for_area(admin_context, "admin")
        assert ctx.area == "admin"
        assert ctx.entitlements == admin_context.entitlements
        assert NavFilterContext.for_area(ctx, "main").area == "main"
