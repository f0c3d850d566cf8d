"""Unit tests for the six-stage navigation builder."""

import logging

import pytest

from navgate.core.exceptions import NavCollisionError, ReservedIdViolationError
from navgate.navigation.builder import (
    NavBuilder,
    append_items,
    apply_permission_filter,
    apply_sorting,
    ensure_mandatory_items,
    merge_nav_models,
    requirement_met,
)
from navgate.navigation.types import EntitlementContext, NavModel, NavRequires
from tests.unit.helpers import StaticDesign, item, section


def _ids(sections) -> list[str]:
    return [s.id for s in sections]


def _item_ids(sections) -> list[str]:
    return [i.id for s in sections for i in s.items]


class TestBuildPipeline:
    def test_build_is_deterministic(self, hooks, user_context) -> None:
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [*s, section("notes.main", item("notes.list"))])
        builder = NavBuilder(StaticDesign(), hooks)
        assert builder.build(user_context) == builder.build(user_context)

    def test_baseline_only(self, hooks, user_context) -> None:
        nav = NavBuilder(StaticDesign(), hooks).build(user_context)
        assert _ids(nav.main) == ["core.main"]
        assert _item_ids(nav.user_menu) == ["core.profile", "core.accountSettings", "core.logout"]

    def test_handlers_run_in_priority_order(self, hooks, user_context) -> None:
        seen = []

        def recorder(name):
            def handler(sections, context):
                seen.append(name)
                return sections

            return handler

        hooks.add_filter("ui:nav:main", "late", recorder("late"), priority=75)
        hooks.add_filter("ui:nav:main", "early", recorder("early"), priority=25)
        hooks.add_filter("nav:items", "legacy", recorder("legacy"), priority=0)
        NavBuilder(StaticDesign(), hooks).build(user_context)
        assert seen == ["early", "late", "legacy"]

    def test_filter_context_names_area(self, hooks, admin_context) -> None:
        areas = []

        def handler(sections, context):
            areas.append(context.area)
            return sections

        hooks.add_filter("ui:nav:admin", "audit", handler)
        hooks.add_filter("ui:user:menu", "audit", handler)
        NavBuilder(StaticDesign(), hooks).build(admin_context)
        assert areas == ["admin", "userMenu"]

    def test_skip_hooks(self, hooks, user_context) -> None:
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [*s, section("notes.main", item("notes.list"))])
        nav = NavBuilder(StaticDesign(), hooks).build(user_context, skip_hooks=True)
        assert _ids(nav.main) == ["core.main"]

    def test_collision_raises_unless_skipped(self, hooks, user_context) -> None:
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [*s, section("notes.main", item("notes.list"))])
        hooks.add_filter("ui:user:menu", "notes", lambda s, c: [*s, section("notes.menu", item("notes.list"))])
        builder = NavBuilder(StaticDesign(), hooks)

        with pytest.raises(NavCollisionError) as exc:
            builder.build(user_context)
        assert exc.value.ids == ["notes.list"]

        nav = builder.build(user_context, skip_validation=True)
        assert _item_ids(nav.main).count("notes.list") == 1

    def test_collision_detected_before_permission_filter(self, hooks, guest_context) -> None:
        """Entries hidden from the current user still count for collisions."""
        hidden = NavRequires(capability="notes:premium")
        hooks.add_filter(
            "ui:nav:main",
            "notes",
            lambda s, c: [*s, section("notes.main", item("notes.list", requires=hidden), item("notes.list"))],
        )
        with pytest.raises(NavCollisionError):
            NavBuilder(StaticDesign(), hooks).build(guest_context)

    def test_reserved_id_from_plugin_raises(self, hooks, user_context) -> None:
        hooks.add_filter("ui:nav:main", "intruder", lambda s, c: [*s, section("intruder.main", item("core.anything"))])
        with pytest.raises(ReservedIdViolationError) as exc:
            NavBuilder(StaticDesign(), hooks, design_owner_id="main_app").build(user_context)
        assert exc.value.plugin_id == "intruder"
        assert exc.value.reserved_ids == ["core.anything"]
        assert exc.value.area == "main"

    def test_design_owner_may_add_reserved_ids(self, hooks, user_context) -> None:
        hooks.add_filter(
            "ui:nav:main", "main_app", lambda s, c: [*s, section("core.billing", item("core.plans"), order=8500)]
        )
        nav = NavBuilder(StaticDesign(), hooks, design_owner_id="main_app").build(user_context)
        assert _ids(nav.main) == ["core.main", "core.billing"]

    def test_plugin_may_append_to_reserved_section(self, hooks, user_context) -> None:
        hooks.add_filter(
            "ui:user:menu",
            "help_center",
            lambda s, c: append_items(s, "core.account", [item("help_center.docs", 8900)]),
        )
        nav = NavBuilder(StaticDesign(), hooks).build(user_context)
        assert "help_center.docs" in _item_ids(nav.user_menu)


class TestFilterIsolation:
    def test_raising_filter_keeps_previous_sections(self, hooks, user_context, caplog) -> None:
        def broken(sections, context):
            raise RuntimeError("boom")

        hooks.add_filter("ui:nav:main", "broken", broken, priority=0)
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [*s, section("notes.main", item("notes.list"))])

        with caplog.at_level(logging.ERROR):
            nav = NavBuilder(StaticDesign(), hooks).build(user_context)
        assert _ids(nav.main) == ["core.main", "notes.main"]
        assert "plugin broken raised" in caplog.text

    def test_invalid_return_is_ignored(self, hooks, user_context, caplog) -> None:
        hooks.add_filter("ui:nav:main", "lazy", lambda s, c: None)
        hooks.add_filter("ui:nav:main", "garbage", lambda s, c: [{"label": "Garbage"}])
        with caplog.at_level(logging.ERROR):
            nav = NavBuilder(StaticDesign(), hooks).build(user_context)
        assert _ids(nav.main) == ["core.main"]
        assert "returned an invalid value" in caplog.text

    def test_dict_sections_are_accepted(self, hooks, user_context) -> None:
        payload = {"id": "notes.main", "items": [{"id": "notes.list", "label": "Notes", "href": "/notes"}]}
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [*s, payload])
        nav = NavBuilder(StaticDesign(), hooks).build(user_context)
        assert "notes.list" in _item_ids(nav.main)


class TestRemovalRestoration:
    def test_removed_section_restored_with_incident(self, hooks, user_context, caplog) -> None:
        hooks.add_filter("ui:nav:main", "rogue", lambda s, c: [])
        with caplog.at_level(logging.WARNING):
            nav = NavBuilder(StaticDesign(), hooks, design_owner_id="main_app").build(user_context)
        assert _ids(nav.main) == ["core.main"]
        assert "nav.incident | plugin rogue removed section core.main" in caplog.text

    def test_restored_section_keeps_moved_items_in_place(self, hooks, user_context, caplog) -> None:
        """An item moved into another section is not duplicated when its old section is restored."""
        baseline = NavModel(
            main=(section("core.main", item("core.dashboard")), section("notes.main", item("notes.list"))),
        )

        def move_notes(sections, context):
            kept = [s for s in sections if s.id != "notes.main"]
            return [*kept, section("tools.main", item("notes.list"))]

        hooks.add_filter("ui:nav:main", "tools", move_notes)
        with caplog.at_level(logging.WARNING):
            nav = NavBuilder(StaticDesign(baseline), hooks).build(user_context, skip_permission_filter=True)

        assert _item_ids(nav.main).count("notes.list") == 1
        assert [i.id for i in next(s for s in nav.main if s.id == "tools.main").items] == ["notes.list"]
        assert "notes.main" in _ids(nav.main)
        assert "removed section notes.main" in caplog.text

    def test_removed_item_restored(self, hooks, user_context, caplog) -> None:
        hooks.add_filter("ui:nav:main", "rogue", lambda s, c: [x.with_items(()) for x in s])
        with caplog.at_level(logging.WARNING):
            nav = NavBuilder(StaticDesign(), hooks).build(user_context)
        assert _item_ids(nav.main) == ["core.dashboard"]
        assert "removed item core.dashboard" in caplog.text

    def test_plugin_may_remove_its_own_entries(self, hooks, user_context) -> None:
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [*s, section("notes.main", item("notes.list"))])
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [x for x in s if not x.id.startswith("notes.")])
        nav = NavBuilder(StaticDesign(), hooks).build(user_context)
        assert _ids(nav.main) == ["core.main"]

    def test_design_owner_may_remove(self, hooks, user_context) -> None:
        hooks.add_filter("ui:nav:main", "main_app", lambda s, c: [])
        nav = NavBuilder(StaticDesign(), hooks, design_owner_id="main_app").build(user_context)
        assert nav.main == ()


class TestMandatoryItems:
    def test_user_gets_profile_and_logout(self, user_context, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            nav = apply_sorting(ensure_mandatory_items(NavModel(), user_context))
        assert _ids(nav.user_menu) == ["core.account"]
        assert nav.user_menu[0].label == "Account"
        assert _item_ids(nav.user_menu) == ["core.profile", "core.logout"]
        assert "nav.incident | mandatory item core.logout" in caplog.text

    def test_admin_with_several_tenants(self, admin_context) -> None:
        nav = apply_sorting(ensure_mandatory_items(NavModel(), admin_context))
        assert _item_ids(nav.user_menu) == [
            "core.profile",
            "core.adminDashboard",
            "core.switchTenant",
            "core.logout",
        ]

    def test_switch_tenant_inserted_before_logout(self, admin_context) -> None:
        nav = ensure_mandatory_items(NavModel(), admin_context)
        ids = _item_ids(nav.user_menu)
        assert ids.index("core.switchTenant") == ids.index("core.logout") - 1

    def test_admin_dashboard_not_duplicated(self, admin_context) -> None:
        nav = NavModel(admin=(section("core.admin", item("core.adminDashboard")),))
        result = ensure_mandatory_items(nav, admin_context)
        assert "core.adminDashboard" not in _item_ids(result.user_menu)

    def test_guest_only_gets_logout(self, guest_context) -> None:
        nav = ensure_mandatory_items(NavModel(), guest_context)
        assert _item_ids(nav.user_menu) == ["core.logout"]

    def test_existing_items_kept(self, user_context, caplog) -> None:
        baseline = NavModel(
            user_menu=(
                section(
                    "core.account",
                    item("core.profile", 100),
                    item("core.logout", 9999, action="logout"),
                ),
            )
        )
        with caplog.at_level(logging.WARNING):
            assert ensure_mandatory_items(baseline, user_context) == baseline
        assert caplog.text == ""

    def test_quiet_suppresses_incidents(self, user_context, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            ensure_mandatory_items(NavModel(), user_context, quiet=True)
        assert "nav.incident" not in caplog.text


class TestSorting:
    def test_equal_order_keeps_insertion_order(self) -> None:
        nav = NavModel(
            main=(
                section("b.s", item("b.x", 5), item("b.y", 5), item("b.z", 1), order=10),
                section("a.s", item("a.x"), order=10),
                section("c.s", item("c.x"), order=0),
            )
        )
        sorted_nav = apply_sorting(nav)
        assert _ids(sorted_nav.main) == ["c.s", "b.s", "a.s"]
        assert [i.id for i in sorted_nav.main[1].items] == ["b.z", "b.x", "b.y"]


class TestPermissionFilter:
    def test_requirement_checks(self) -> None:
        ctx = EntitlementContext(entitlements={"notes:sharing"}, tier_level=1, abilities={"notes.item.read": True})
        assert requirement_met(None, ctx)
        assert requirement_met(NavRequires(capability="notes:sharing"), ctx)
        assert not requirement_met(NavRequires(capability="billing:manage"), ctx)
        assert requirement_met(NavRequires(min_tier_level=1), ctx)
        assert not requirement_met(NavRequires(min_tier_level=2), ctx)
        assert requirement_met(NavRequires(ability="notes.item.read"), ctx)
        assert not requirement_met(NavRequires(ability="notes.item.delete"), ctx)

    def test_ability_without_abilities_is_hidden(self) -> None:
        assert not requirement_met(NavRequires(ability="notes.item.read"), EntitlementContext())

    def test_empty_sections_dropped(self, user_context) -> None:
        nav = NavModel(
            main=(
                section("notes.main", item("notes.list"), item("notes.shared", requires=NavRequires(capability="x"))),
                section("notes.admin", item("notes.purge", requires=NavRequires(capability="x"))),
                section("notes.pro", item("notes.export"), requires=NavRequires(min_tier_level=5)),
            )
        )
        filtered = apply_permission_filter(nav, user_context)
        assert _ids(filtered.main) == ["notes.main"]
        assert _item_ids(filtered.main) == ["notes.list"]

    def test_skip_permission_filter(self, hooks, user_context) -> None:
        premium = NavRequires(min_tier_level=9)
        hooks.add_filter("ui:nav:main", "notes", lambda s, c: [*s, section("notes.main", item("notes.pro", requires=premium))])
        builder = NavBuilder(StaticDesign(), hooks)
        assert "notes.main" not in _ids(builder.build(user_context).main)
        assert "notes.main" in _ids(builder.build(user_context, skip_permission_filter=True).main)


class TestModelHelpers:
    def test_merge_nav_models(self) -> None:
        base = NavModel(main=(section("a.s", item("a.x")),))
        additions = NavModel(
            main=(section("a.s", item("a.y")), section("b.s", item("b.x"))),
            admin=(section("c.s", item("c.x")),),
        )
        merged = merge_nav_models(base, additions)
        assert _ids(merged.main) == ["a.s", "b.s"]
        assert [i.id for i in merged.main[0].items] == ["a.x", "a.y"]
        assert _ids(merged.admin) == ["c.s"]

    def test_append_items_missing_section(self) -> None:
        with pytest.raises(ValueError, match="does not exist"):
            append_items([section("a.s")], "core.account", [item("a.x")])
