"""
Tests for the administrator panels against the stub API.
Covers:
- Agencies: local filtering, blocked submits, server field errors, toggles, deletes
- Agents: agency options, phone search, setup email and access codes
- Staff: server paging/sorting, debounced search, soft/permanent delete, passwords
- Users: filters, access codes, audit shape
- Categories: parent filters, lookups, JSON payloads
- Dashboard statistics
"""

import asyncio

import pytest

from portal.agencies.panel import AgencyPanel
from portal.agents.panel import AgentPanel
from portal.categories.panel import CategoryPanel
from portal.core.files import FileUpload
from portal.core.modals import ModalKind
from portal.core.toasts import ToastLevel
from portal.staff.panel import StaffPanel
from portal.staff.schemas import Staff
from portal.stats.panel import StatsPanel
from portal.users.panel import UserPanel

pytestmark = pytest.mark.anyio

LOGO = FileUpload(filename="logo.png", content=b"\x89PNG0000", content_type="image/png")


@pytest.fixture
def agencies(api, admin_context, toaster):
    return AgencyPanel(api, admin_context, toaster)


@pytest.fixture
def staff(api, admin_context, toaster):
    return StaffPanel(api, admin_context, toaster, search_delay=0.05)


# ---------------------------------------------------------------------
# 🏢 AGENCIES
# ---------------------------------------------------------------------
async def test_agency_rows_follow_search_and_status(agencies):
    """Visible rows are exactly the fetched rows passing every filter."""
    assert await agencies.refresh()
    assert len(agencies.visible) == 3

    agencies.set_search("WATER")
    assert [a.name for a in agencies.visible] == ["Water Board"]

    agencies.set_search("")
    agencies.set_status_filter("inactive")
    assert [a.name for a in agencies.visible] == ["Parks Office"]


async def test_agency_empty_name_sends_nothing(agencies, request_log):
    """Submitting with an empty name records a field error and never hits the API."""
    agencies.open_add()
    agencies.form.update(email="fire@city.gov")
    request_log.clear()

    assert not await agencies.submit()
    assert agencies.form.errors["name"] == "Agency name is required"
    assert request_log == []
    assert agencies.modal.kind == ModalKind.ADD


async def test_agency_add_with_logo(agencies, db, toaster):
    """POST /api/admin/agencies → multipart with logo and audit fields."""
    await agencies.refresh()
    agencies.open_add()
    agencies.form.update(name="Fire Service", email="fire@city.gov")
    assert agencies.choose_logo(LOGO)

    assert await agencies.submit()
    assert db.last_files == ["logo.png"]
    assert db.last_body["createdBy"] == "admin1"
    assert db.last_body["isActive"] == "true"
    assert toaster.latest.message == "Agency added successfully"
    assert not agencies.modal.state.is_open
    assert len(agencies.items) == 4


async def test_agency_server_field_error_lands_on_field(agencies, toaster):
    agencies.open_add()
    agencies.form.update(name="Water Board", email="dup@city.gov")

    assert not await agencies.submit()
    assert agencies.form.errors["name"] == "Agency with this name already exists"
    assert toaster.latest.level == ToastLevel.ERROR
    assert agencies.modal.kind == ModalKind.ADD


async def test_agency_edit_prefills_draft(agencies, db):
    await agencies.refresh()
    agencies.open_edit(agencies.get("ag2"))
    assert agencies.form.draft.name == "Roads Authority"
    assert not agencies.form.creating

    agencies.form.update(phone="0800 123")
    assert await agencies.submit()
    assert db.last_body["updatedBy"] == "admin1"
    assert agencies.get("ag2").phone == "0800 123"


async def test_agency_toggle_twice_restores_status(agencies, db):
    """Toggling status twice ends where it started."""
    await agencies.refresh()
    assert await agencies.toggle_status(agencies.get("ag1"))
    assert agencies.get("ag1").is_active is False
    assert await agencies.toggle_status(agencies.get("ag1"))
    assert agencies.get("ag1").is_active is True
    assert db.agencies[0]["isActive"] is True


async def test_agency_contact_email_alias(agencies, db):
    """Agencies stored with contactEmail/contactPhone still load."""
    db.agencies.append({"_id": "agX", "name": "No Mail Agency", "contactEmail": "x@y.org",
                        "contactPhone": "0700 111", "isActive": True})
    assert await agencies.refresh()
    agency = agencies.get("agX")
    assert agency.email == "x@y.org"
    assert agency.phone == "0700 111"


async def test_agency_malformed_row_keeps_previous_list(agencies, db, toaster):
    """A row that does not parse fails the refresh and keeps the old rows."""
    assert await agencies.refresh()
    db.agencies.append({"_id": "agY", "isActive": True})

    assert not await agencies.refresh()
    assert agencies.error == "An error occurred while fetching agencies"
    assert [a.id for a in agencies.items] == ["ag1", "ag2", "ag3"]
    assert toaster.latest.message == "Failed to load agencies"
    assert not agencies.loading


async def test_agency_failed_toggle_keeps_state(agencies, db, toaster, request_log):
    await agencies.refresh()
    db.failures[("PUT", "/api/admin/agencies/ag1/toggle-status")] = None
    request_log.clear()

    assert not await agencies.toggle_status(agencies.get("ag1"))
    assert agencies.get("ag1").is_active is True
    assert toaster.latest.message == "An error occurred while updating agency status"
    # no refetch after a failure
    assert request_log == [("PUT", "/api/admin/agencies/ag1/toggle-status")]


async def test_agency_delete_sends_audit_body(agencies, db, toaster):
    await agencies.refresh()
    agencies.open_delete(agencies.get("ag3"))
    assert await agencies.delete()
    assert db.last_body == {"deletedBy": "admin1", "deletedByName": "Ada Admin"}
    assert agencies.get("ag3") is None
    assert toaster.latest.message == "Agency deleted successfully"


async def test_agency_fetch_failure_reports_error(agencies, db, toaster):
    db.failures[("GET", "/api/admin/agencies")] = "Database unavailable"
    assert not await agencies.refresh()
    assert agencies.error == "Database unavailable"
    assert toaster.latest.message == "Failed to load agencies"


# ---------------------------------------------------------------------
# 🧑‍💼 AGENTS
# ---------------------------------------------------------------------
async def test_agent_load_fills_agency_options(api, admin_context, toaster):
    panel = AgentPanel(api, admin_context, toaster)
    await panel.load()
    assert [a.id for a in panel.agencies] == ["ag1", "ag2", "ag3"]

    panel.open_add()
    assert panel.form.draft.agency == "ag1"


async def test_agent_search_covers_phone_and_agency_filter(api, admin_context, toaster):
    panel = AgentPanel(api, admin_context, toaster)
    await panel.refresh()

    panel.set_search("0788")
    assert [a.name for a in panel.visible] == ["Grace Hopper"]

    panel.set_search("")
    panel.set_agency_filter("ag2")
    assert [a.name for a in panel.visible] == ["Alan Turing"]


async def test_agent_setup_email_does_not_refetch(api, admin_context, toaster, request_log):
    panel = AgentPanel(api, admin_context, toaster)
    await panel.refresh()
    request_log.clear()

    assert await panel.send_setup_email(panel.get("at1"))
    assert toaster.latest.message == "Account setup email sent successfully"
    assert request_log == [("POST", "/api/admin/agents/at1/send-setup-email")]


async def test_agent_access_code(api, admin_context, toaster):
    panel = AgentPanel(api, admin_context, toaster)
    await panel.refresh()
    assert await panel.generate_access_code(panel.get("at2"))
    assert toaster.latest.message == "Access code generated and sent to agent's email"


async def test_agent_agency_options_failure(api, admin_context, toaster, db):
    db.failures[("GET", "/api/admin/agencies")] = None
    panel = AgentPanel(api, admin_context, toaster)
    assert not await panel.load_agencies()
    assert toaster.latest.message == "Failed to load agencies"


# ---------------------------------------------------------------------
# 👥 STAFF
# ---------------------------------------------------------------------
async def test_staff_rows_capped_by_page_size(staff):
    """Server paging: never more rows than the page size."""
    assert await staff.refresh()
    assert len(staff.visible) == 10
    assert staff.page.total == 13
    assert staff.page.total_pages == 2

    assert await staff.go_to_page(9)
    assert staff.page.page == 2
    assert len(staff.visible) == 3


async def test_staff_status_filter_all_includes_inactive(staff):
    await staff.set_status_filter("all")
    assert staff.page.total == 15
    assert staff.query_params()["includeInactive"] is True


async def test_staff_sort_toggles(staff):
    await staff.refresh()
    await staff.sort_by("name")
    assert staff.query_params()["sortOrder"] == "desc"
    assert staff.visible[0].name == "Staff 14"


async def test_staff_search_is_debounced(staff, request_log):
    """Rapid typing issues a single fetch, back on page 1."""
    await staff.refresh()
    await staff.go_to_page(2)
    request_log.clear()

    for term in ("S", "St", "Staff 1"):
        staff.set_search(term)
        await asyncio.sleep(0.01)
    await staff.settle()

    assert request_log == [("GET", "/api/admin/staff")]
    assert staff.page.page == 1
    assert [s.name for s in staff.visible] == ["Staff 11", "Staff 12", "Staff 13", "Staff 14"]


async def test_staff_slow_response_wins(staff, db):
    """No cancellation: the response that lands last is the one shown."""
    db.delays["slow"] = 0.1
    staff.search = "slow"
    slow = asyncio.create_task(staff.refresh())
    await asyncio.sleep(0.01)

    staff.search = "Staff 02"
    await staff.refresh()
    assert [s.name for s in staff.visible] == ["Staff 02"]

    await slow
    assert staff.items == []


async def test_staff_toggle_uses_delete_then_update(staff, db, toaster):
    await staff.refresh()
    assert await staff.toggle_status(staff.get("st01"))
    assert toaster.latest.message == "Staff member deactivated successfully"
    assert db.staff[1]["isActive"] is False

    inactive = Staff.model_validate(db.staff[1])
    assert await staff.toggle_status(inactive)
    assert toaster.latest.message == "Staff member activated successfully"
    assert db.staff[1]["isActive"] is True


async def test_staff_cannot_toggle_self(staff, toaster, request_log):
    await staff.refresh()
    request_log.clear()
    assert not await staff.toggle_status(staff.get("admin1"))
    assert toaster.latest.message == "You cannot change your own status"
    assert request_log == []


async def test_staff_permanent_delete_only_when_inactive(staff, db, toaster):
    await staff.refresh()
    staff.open_delete(staff.get("st01"))
    assert not staff.modal.state.is_open
    assert toaster.latest.message == "Deactivate the staff member before deleting"

    inactive = Staff.model_validate(next(s for s in db.staff if s["_id"] == "st05"))
    staff.open_delete(inactive)
    assert await staff.delete()
    assert all(s["_id"] != "st05" for s in db.staff)
    assert toaster.latest.message == "Staff member permanently deleted"


async def test_staff_add_and_duplicate_email(staff, db):
    staff.open_add()
    staff.form.update(name="Eve", email="eve@example.com", password="password123")
    assert await staff.submit()
    assert db.last_body["role"] == "moderator"
    assert db.last_body["password"] == "password123"

    staff.open_add()
    staff.form.update(name="Ada Again", email="ada@example.com", password="password123")
    assert not await staff.submit()
    assert staff.form.errors["email"] == "Email already in use"


async def test_staff_change_password(staff, db, toaster, request_log):
    await staff.refresh()
    staff.open_reset_password(staff.get("st01"))
    request_log.clear()

    staff.new_password = "short"
    assert not await staff.change_password()
    assert "newPassword" in staff.form.errors

    staff.new_password, staff.confirm_password = "longenough1", "different"
    assert not await staff.change_password()
    assert staff.form.errors == {"confirmPassword": "Passwords do not match"}
    assert request_log == []

    staff.confirm_password = "longenough1"
    assert await staff.change_password()
    assert db.last_body == {"newPassword": "longenough1"}
    assert toaster.latest.message == "Password changed successfully"
    assert not staff.modal.state.is_open


async def test_staff_closing_reset_password_forgets_input(staff):
    """Closing the reset-password modal wipes both password fields."""
    await staff.refresh()
    staff.open_reset_password(staff.get("st01"))
    staff.new_password = staff.confirm_password = "secret-pass"

    staff.close()
    assert staff.modal.kind == ModalKind.CLOSED
    assert staff.new_password == ""
    assert staff.confirm_password == ""

async def test_staff_reset_link(staff, toaster):
    await staff.refresh()
    assert await staff.send_reset_link(staff.get("st02"))
    assert toaster.latest.message == "Password reset link sent to the staff member"


# ---------------------------------------------------------------------
# 🙋 USERS
# ---------------------------------------------------------------------
async def test_user_filters_and_clear(api, admin_context, toaster):
    panel = UserPanel(api, admin_context, toaster)
    await panel.refresh()
    assert panel.page.total_pages == 2

    await panel.set_filters(verified=True)
    assert len(panel.visible) == 6
    assert all(u.is_verified for u in panel.visible)

    await panel.clear_filters()
    assert len(panel.visible) == 10
    assert panel.query_params()["adminId"] == "admin1"


async def test_user_toggle_sends_admin_fields(api, admin_context, toaster, db):
    panel = UserPanel(api, admin_context, toaster)
    await panel.refresh()
    assert await panel.toggle_status(panel.get("us01"))
    assert db.last_body == {"isActive": False, "adminId": "admin1", "adminName": "Ada Admin"}
    assert toaster.latest.message == "User deactivated successfully"


async def test_user_access_code_cleared_on_close(api, admin_context, toaster):
    panel = UserPanel(api, admin_context, toaster)
    await panel.refresh()
    panel.open_reset_password(panel.get("us02"))

    assert await panel.generate_access_code() == "ABC123"
    assert panel.access_code == "ABC123"
    panel.close()
    assert panel.access_code is None


async def test_user_panel_has_no_add_modal(api, admin_context, toaster):
    panel = UserPanel(api, admin_context, toaster)
    with pytest.raises(ValueError):
        panel.open_add()


async def test_user_edit_is_multipart_with_audit(api, admin_context, toaster, db):
    panel = UserPanel(api, admin_context, toaster)
    await panel.refresh()
    panel.open_edit(panel.get("us04"))
    panel.form.update(phone="0799000111")
    assert await panel.submit()
    assert db.last_body["phone"] == "0799000111"
    assert db.last_body["updatedByName"] == "Ada Admin"
    assert toaster.latest.message == "User updated successfully"


# ---------------------------------------------------------------------
# 🗂️ CATEGORIES
# ---------------------------------------------------------------------
async def test_category_parent_filters(api, admin_context, toaster):
    panel = CategoryPanel(api, admin_context, toaster)
    await panel.refresh()

    panel.set_parent_filter("parent")
    assert [c.id for c in panel.visible] == ["c1", "c2"]
    panel.set_parent_filter("child")
    assert [c.id for c in panel.visible] == ["c3"]
    panel.set_parent_filter("c1")
    assert [c.id for c in panel.visible] == ["c3"]

    panel.set_parent_filter("")
    panel.set_search("lamps")
    assert [c.id for c in panel.visible] == ["c3"]


async def test_category_lookups(api, admin_context, toaster):
    panel = CategoryPanel(api, admin_context, toaster)
    await panel.refresh()
    assert panel.category_name("c2") == "Health"
    assert panel.category_name(None) == "None"
    assert panel.category_name("zzz") == "Unknown"
    assert panel.parent_name(panel.get("c3")) == "Infrastructure"

    panel.open_delete(panel.get("c1"))
    assert panel.delete_warning() == "This category has 1 subcategories that will also be deleted."


async def test_category_add_sends_json(api, admin_context, toaster, db):
    panel = CategoryPanel(api, admin_context, toaster)
    panel.open_add()
    panel.form.update(name="Sanitation", icon="health")
    assert await panel.submit()
    assert db.last_body["isActive"] is True
    assert db.last_body["color"] == "#3B82F6"
    assert db.last_body["createdByName"] == "Ada Admin"


async def test_category_rejects_unknown_icon(api, admin_context, toaster, request_log):
    panel = CategoryPanel(api, admin_context, toaster)
    panel.open_add()
    panel.form.update(name="Odd", icon="rocket")
    request_log.clear()
    assert not await panel.submit()
    assert "icon" in panel.form.errors
    assert request_log == []


# ---------------------------------------------------------------------
# 📊 STATS
# ---------------------------------------------------------------------
async def test_stats_load_and_range(api, admin_context, toaster):
    panel = StatsPanel(api, admin_context, toaster)
    assert await panel.refresh()
    assert panel.stats.user_stats.total_users == 12
    assert panel.stats.complaint_stats.resolution_rate == 40.0

    assert await panel.set_time_range("week")
    assert panel.stats.generated_for.value == "week"
    with pytest.raises(ValueError):
        await panel.set_time_range("decade")


async def test_stats_failure_toasts(api, admin_context, toaster, db):
    db.failures[("GET", "/api/admin/dashboard/stats")] = None
    panel = StatsPanel(api, admin_context, toaster)
    assert not await panel.refresh()
    assert panel.error == "An error occurred while fetching dashboard statistics"
    assert toaster.latest.message == "Error loading dashboard data"
