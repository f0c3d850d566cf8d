"""Help Center plugin: adds a documentation link to the account menu."""

from navgate.navigation.builder import append_items
from navgate.navigation.types import NavFilterContext, NavItem, NavSection

DOCS_URL = "https://docs.example.com"


def add_help_link(sections: list[NavSection], context: NavFilterContext) -> list[NavSection]:
    link = NavItem(id="help_center.docs", label="Help & docs", href=DOCS_URL, external=True, icon="LifeBuoy", order=8900)
    return append_items(sections, "core.account", [link])
