import json

from sidebar import DashboardSidebar, init_dashboard_sidebar
from storage import USER_DATA, MemoryStore


def test_default_section_is_my_account(store):
    sidebar = DashboardSidebar(store)
    assert sidebar.active_section == "my-account"
    assert sidebar.is_active("my-account")


def test_render_marks_only_active_section(store):
    markup = DashboardSidebar(store, "support").render()
    assert markup.count("sidebar-link active") == 1
    assert 'class="sidebar-link active flex items-center space-x-3 px-4 py-3 rounded-lg text-gray-700 hover:text-gray-900" data-section="support"' in markup
    for href in ("/dashboard", "/dashboard/travellers", "/dashboard/bookings", "/dashboard/change-password", "/dashboard/support"):
        assert f'href="{href}"' in markup


def test_select_moves_highlight(store):
    sidebar = DashboardSidebar(store, "bookings")
    sidebar.select("travellers")
    assert sidebar.is_active("travellers")
    assert not sidebar.is_active("bookings")


def test_select_unknown_section_is_ignored(store):
    sidebar = DashboardSidebar(store, "bookings")
    sidebar.select("admin")
    assert sidebar.active_section == "bookings"


def test_loads_cached_user():
    store = MemoryStore({USER_DATA: json.dumps({"display_name": "Moinul Islam", "email": "a@y.com"})})
    sidebar = init_dashboard_sidebar(store, "travellers")
    assert sidebar.user.display_name == "Moinul Islam"


def test_corrupt_user_data_is_ignored():
    store = MemoryStore({USER_DATA: "{broken"})
    sidebar = init_dashboard_sidebar(store)
    assert sidebar.user is None
