# sidebar.py
# Shared dashboard sidebar: static navigation with one highlighted section.

import html
import logging
from typing import List, NamedTuple, Optional

from logging_utils import log_event
from models import UserProfile
from storage import KeyValueStore, read_user

logger = logging.getLogger("tripzip.sidebar")

DEFAULT_SECTION = "my-account"


class SidebarLink(NamedTuple):
    section: str
    href: str
    icon: str
    label: str


SIDEBAR_LINKS: List[SidebarLink] = [
    SidebarLink("my-account", "/dashboard", "fa-th-large", "My Account"),
    SidebarLink("travellers", "/dashboard/travellers", "fa-users", "Travellers"),
    SidebarLink("bookings", "/dashboard/bookings", "fa-calendar-alt", "My Bookings"),
    SidebarLink("change-password", "/dashboard/change-password", "fa-lock", "Change Password"),
    SidebarLink("support", "/dashboard/support", "fa-headset", "Support"),
]


class DashboardSidebar:
    def __init__(self, store: KeyValueStore, active_section: str = DEFAULT_SECTION) -> None:
        self._store = store
        self.active_section = active_section or DEFAULT_SECTION
        self.user: Optional[UserProfile] = None

    @property
    def links(self) -> List[SidebarLink]:
        return list(SIDEBAR_LINKS)

    def is_active(self, section: str) -> bool:
        return section == self.active_section

    def select(self, section: str) -> None:
        """Click on a link: only the local highlight moves, the href does the navigating."""
        if any(link.section == section for link in SIDEBAR_LINKS):
            self.active_section = section

    def load_user_info(self) -> Optional[UserProfile]:
        self.user = read_user(self._store)
        if self.user is not None:
            log_event(logger, "sidebar_user_loaded", display_name=self.user.display_name)
        return self.user

    def render(self) -> str:
        items = []
        for link in SIDEBAR_LINKS:
            active = " active" if self.is_active(link.section) else ""
            tone = "" if link.section == DEFAULT_SECTION else " text-gray-700 hover:text-gray-900"
            items.append(
                f'<a href="{link.href}" class="sidebar-link{active} flex items-center space-x-3 '
                f'px-4 py-3 rounded-lg{tone}" data-section="{link.section}">'
                f'<i class="fas {link.icon} text-gray-500 w-5"></i>'
                f'<span class="font-medium">{html.escape(link.label)}</span>'
                "</a>"
            )
        return (
            '<div class="h-full flex flex-col"><nav class="flex-1 mt-6">'
            '<div class="px-4 space-y-2">' + "".join(items) + "</div></nav></div>"
        )


def init_dashboard_sidebar(store: KeyValueStore, active_section: str = DEFAULT_SECTION) -> DashboardSidebar:
    sidebar = DashboardSidebar(store, active_section)
    sidebar.load_user_info()
    return sidebar
