"""Main App design: the baseline navigation every build starts from."""

from navgate.navigation.types import EntitlementContext, NavFilterContext, NavItem, NavModel, NavRequires, NavSection


class MainAppDesign:
    design_id = "main-app"
    display_name = "Main App"

    def nav_baseline(self, context: EntitlementContext) -> NavModel:
        main = [
            NavSection(
                id="core.main",
                order=0,
                items=(
                    NavItem(id="core.dashboard", label="Dashboard", href="/dashboard", icon="LayoutDashboard", order=100),
                    NavItem(id="core.team", label="Team", href="/team", icon="Users", order=200),
                ),
            ),
        ]
        if context.tenant_id is not None:
            main.append(
                NavSection(
                    id="core.settings",
                    label="Settings",
                    order=8000,
                    items=(NavItem(id="core.tenantSettings", label="Organization", href="/settings/tenant"),),
                )
            )

        admin = []
        if context.role == "admin":
            admin.append(
                NavSection(
                    id="core.admin",
                    label="Administration",
                    items=(
                        NavItem(id="core.adminDashboard", label="Dashboard", href="/admin/dashboard", order=100),
                        NavItem(id="core.adminUsers", label="Users", href="/admin/users", order=200),
                    ),
                )
            )

        user_menu = [
            NavSection(
                id="core.account",
                label="Account",
                order=9000,
                items=(NavItem(id="core.accountSettings", label="Settings", href="/account/settings", order=500),),
            )
        ]
        return NavModel(main=tuple(main), admin=tuple(admin), user_menu=tuple(user_menu))


def add_billing_section(sections: list[NavSection], context: NavFilterContext) -> list[NavSection]:
    """Billing is only offered to tenants on a paid tier."""
    if context.tenant_id is None:
        return sections
    billing = NavSection(
        id="core.billing",
        label="Billing",
        order=8500,
        requires=NavRequires(min_tier_level=1),
        items=(NavItem(id="core.billingOverview", label="Plan & invoices", href="/billing"),),
    )
    return [*sections, billing]


design = MainAppDesign()
