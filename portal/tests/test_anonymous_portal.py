"""
Tests for the anonymous user side.
Covers:
- Complaint submission: validation, attachments, optional blocks, server errors
- Submit-then-track round trip
- Own complaints: detail, follow-up responses, feedback
- Notifications: filters, optimistic mark-as-read, mark-all, delete
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from portal.complaints.submit import ComplaintForm
from portal.complaints.tracker import ComplaintTracker, TrackingLookup, track_complaint
from portal.complaints.utils import format_status
from portal.core.files import FileUpload
from portal.core.modals import ModalKind
from portal.core.toasts import ToastLevel
from portal.notifications.center import NotificationCenter
from portal.notifications.utils import format_relative_time

pytestmark = pytest.mark.anyio

DESCRIPTION = "The lamp on 5th street has been dark for over a week now."


def attachment(i):
    return FileUpload(filename=f"photo{i}.jpg", content=b"jpeg-bytes", content_type="image/jpeg")


@pytest.fixture
def form(api, toaster):
    return ComplaintForm(api, toaster)


@pytest.fixture
def resolved_complaint(db):
    complaint = {
        "_id": "cp900", "title": "Pothole on Main", "description": DESCRIPTION,
        "trackingId": "SAY-2025-00001", "status": "resolved", "createdAt": "2025-01-05T10:00:00Z",
        "category": {"_id": "c1", "name": "Infrastructure"},
    }
    db.complaints.append(complaint)
    return complaint


# ---------------------------------------------------------------------
# 📝 SUBMISSION
# ---------------------------------------------------------------------
async def test_submit_then_track_round_trip(form, api, toaster):
    """A submitted complaint can be looked up by the tracking ID it returns."""
    assert await form.load_categories()
    assert [c.id for c in form.categories] == ["c1", "c2"]

    form.update(title="Broken streetlight", description=DESCRIPTION, category="c1")
    tracking_id = await form.submit()

    assert tracking_id.startswith("SAY-")
    info = toaster.latest
    assert (info.level, info.message, info.duration) == (ToastLevel.INFO, f"Your tracking ID: {tracking_id}", 10)
    assert form.form.draft.title == ""

    complaint = await track_complaint(api, tracking_id)
    assert complaint.title == "Broken streetlight"
    assert complaint.status.value == "pending"


async def test_submit_validation_blocks_request(form, toaster, request_log):
    form.update(title="Hey", description="Too short", contact_email="nope")
    assert await form.submit() is None

    assert form.errors == {
        "title": "Title must be at least 5 characters",
        "description": "Description must be at least 20 characters",
        "category": "Please select a category",
        "contact_email": "Please enter a valid email address",
    }
    assert toaster.latest.message == "Please fix the errors in the form"
    assert request_log == []


async def test_optional_blocks_sent_only_when_filled(form, db):
    form.update(title="Broken streetlight", description=DESCRIPTION, category="c1")
    await form.submit()
    assert "location" not in db.last_body
    assert "contactInfo" not in db.last_body

    form.update(title="Broken streetlight", description=DESCRIPTION, category="c1",
                address="5th street", contact_email="me@example.io")
    await form.submit()
    assert json.loads(db.last_body["location"])["address"] == "5th street"
    assert json.loads(db.last_body["contactInfo"]) == {"email": "me@example.io", "phone": ""}


async def test_extra_attachments_dropped_with_warning(form, db, toaster):
    assert form.choose_files([attachment(i) for i in range(7)])
    assert toaster.latest.level == ToastLevel.WARNING
    assert len(form.attachments) == 5

    form.update(title="Broken streetlight", description=DESCRIPTION, category="c2")
    assert await form.submit()
    assert db.last_files == [f"photo{i}.jpg" for i in range(5)]
    assert form.attachments == []


async def test_server_validation_errors_map_to_fields(form, db, toaster):
    db.failures[("POST", "/api/anonymous/complaints")] = {
        "errors": [{"param": "contactInfo.email", "msg": "Invalid email"}, {"param": "title", "msg": "Too vague"}],
    }
    form.update(title="Broken streetlight", description=DESCRIPTION, category="c1")
    assert await form.submit() is None
    assert form.errors == {"contact_email": "Invalid email", "title": "Too vague"}
    assert toaster.latest.message == "Please fix the errors in the form"


async def test_submit_failure_falls_back(form, db, toaster):
    db.failures[("POST", "/api/anonymous/complaints")] = None
    form.update(title="Broken streetlight", description=DESCRIPTION, category="c1")
    assert await form.submit() is None
    assert toaster.latest.message == "Failed to submit complaint. Please try again."
    # draft survives for another try
    assert form.form.draft.title == "Broken streetlight"


# ---------------------------------------------------------------------
# 🔎 TRACKING
# ---------------------------------------------------------------------
async def test_track_blank_id(api):
    with pytest.raises(ValueError):
        await track_complaint(api, "   ")


async def test_tracking_lookup_unknown_id(api):
    lookup = TrackingLookup(api)
    assert not await lookup.track("SAY-1999-00000")
    assert lookup.error == "Failed to fetch complaint. Please check your tracking ID and try again."

    assert not await lookup.track("")
    assert lookup.error == "Please enter a tracking ID"


def test_format_status():
    assert format_status("in_progress") == "In Progress"
    assert format_status("pending") == "Pending"


# ---------------------------------------------------------------------
# 📂 OWN COMPLAINTS
# ---------------------------------------------------------------------
async def test_tracker_detail_and_response(api, toaster, resolved_complaint, request_log):
    tracker = ComplaintTracker(api, toaster)
    assert await tracker.refresh()
    assert [c.tracking_id for c in tracker.complaints] == ["SAY-2025-00001"]

    assert await tracker.view("cp900")
    assert tracker.responses == []

    tracker.open_respond()
    request_log.clear()
    assert not await tracker.add_response()
    assert toaster.latest.message == "Please enter your response"
    assert request_log == []

    tracker.response_content = "Thanks, it is fixed."
    assert await tracker.add_response()
    assert toaster.history[-1].message == "Response submitted successfully"
    assert [r.content for r in tracker.responses] == ["Thanks, it is fixed."]
    assert not tracker.modal.state.is_open


async def test_response_attachments_capped_at_three(api, toaster, resolved_complaint):
    tracker = ComplaintTracker(api, toaster)
    await tracker.view("cp900")
    tracker.open_respond()
    assert tracker.choose_response_files([attachment(i) for i in range(4)])
    assert len(tracker.response_files) == 3
    assert toaster.latest.message == "Maximum 3 files allowed. Only the first 3 will be used."


async def test_switching_to_feedback_clears_response_draft(api, toaster, resolved_complaint):
    tracker = ComplaintTracker(api, toaster)
    await tracker.view("cp900")
    tracker.open_respond()
    tracker.response_content = "half typed"

    tracker.open_feedback()
    assert tracker.modal.kind == ModalKind.FEEDBACK
    assert tracker.response_content == ""


async def test_feedback_submitted_with_ratings(api, toaster, db, resolved_complaint):
    tracker = ComplaintTracker(api, toaster)
    await tracker.view("cp900")
    tracker.open_feedback()
    tracker.rate(satisfaction_level=5, comment="Quick fix")

    assert await tracker.submit_feedback()
    sent = db.feedback[0]
    assert sent["complaintId"] == "cp900"
    assert sent["satisfactionLevel"] == 5
    assert sent["communicationRating"] == 3
    assert sent["wouldRecommend"] is True
    assert toaster.history[-1].message == "Feedback submitted successfully! Thank you for your input."


async def test_feedback_rating_out_of_range(api, toaster, resolved_complaint, request_log):
    tracker = ComplaintTracker(api, toaster)
    await tracker.view("cp900")
    tracker.open_feedback()
    tracker.rate(satisfaction_level=6)
    request_log.clear()

    assert not await tracker.submit_feedback()
    assert tracker.feedback.errors
    assert request_log == []


async def test_feedback_needs_finished_complaint(api, toaster, resolved_complaint):
    resolved_complaint["status"] = "in_progress"
    tracker = ComplaintTracker(api, toaster)
    await tracker.view("cp900")
    with pytest.raises(ValueError):
        tracker.open_feedback()


async def test_tracker_list_failure_shows_empty(api, toaster, db, resolved_complaint):
    tracker = ComplaintTracker(api, toaster)
    await tracker.refresh()
    db.failures[("GET", "/api/anonymous/complaints")] = None
    assert not await tracker.refresh()
    assert tracker.complaints == []
    # failures on the list are silent
    assert toaster.history == []


# ---------------------------------------------------------------------
# 🔔 NOTIFICATIONS
# ---------------------------------------------------------------------
@pytest.fixture
def reported():
    return []


@pytest.fixture
def center(api, toaster, reported):
    return NotificationCenter(api, toaster, on_unread_count=reported.append)


async def test_mark_as_read_flips_one_and_decrements(center, reported, db):
    """Only the marked notification changes and the badge drops by exactly one."""
    await center.refresh()
    assert reported == [3]
    before = {n.id: n.read for n in center.notifications}

    assert await center.mark_as_read("n2")
    after = {n.id: n.read for n in center.notifications}
    assert after == {**before, "n2": True}
    assert reported[-1] == 2
    assert db.notifications[1]["read"] is True


async def test_mark_as_read_is_not_rolled_back(center, db, toaster):
    await center.refresh()
    db.failures[("PUT", "/api/anonymous/notifications/n1/read")] = None

    assert not await center.mark_as_read("n1")
    assert center.get("n1").read is True
    assert center.unread_count == 2
    assert toaster.history == []


async def test_notification_filters(center, request_log):
    await center.set_filter("unread")
    assert {n.id for n in center.notifications} == {"n1", "n2", "n3"}

    await center.set_filter("updates")
    assert all(n.type.value == "status_change" for n in center.notifications)
    assert center.query_params()["type"] == "status_change"


async def test_mark_all_waits_for_server(center, db, toaster, reported):
    await center.refresh()
    db.failures[("PUT", "/api/anonymous/notifications/read-all")] = None
    assert not await center.mark_all_as_read()
    assert center.unread_count == 3
    assert toaster.latest.message == "Failed to mark notifications as read"

    del db.failures[("PUT", "/api/anonymous/notifications/read-all")]
    assert await center.mark_all_as_read()
    assert all(n.read for n in center.notifications)
    assert reported[-1] == 0
    assert toaster.latest.message == "All notifications marked as read"


async def test_delete_unread_notification(center, toaster):
    await center.refresh()
    assert await center.delete("n1")
    assert center.get("n1") is None
    assert center.unread_count == 2
    assert toaster.latest.message == "Notification deleted"


def test_relative_time_buckets():
    now = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)

    def ago(**delta):
        return (now - timedelta(**delta)).isoformat().replace("+00:00", "Z")

    assert format_relative_time(ago(seconds=20), now) == "just now"
    assert format_relative_time(ago(minutes=1), now) == "1 minute ago"
    assert format_relative_time(ago(minutes=5), now) == "5 minutes ago"
    assert format_relative_time(ago(hours=3), now) == "3 hours ago"
    assert format_relative_time(ago(days=2), now) == "2 days ago"
    assert format_relative_time("2025-01-05T09:00:00Z", now) == "Jan 5, 2025"
