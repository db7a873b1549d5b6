import pytest
import requests

from notion_toggl_proxy.credentials import Credential
from notion_toggl_proxy.errors import TimerStartError, ValidationError
from notion_toggl_proxy.timer import sanitize_text, start_tracking, stop_current_entry

from conftest import TOGGL, make_response

CRED = Credential("togglApiToken", "tok")
CURRENT_URL = f"{TOGGL}/me/time_entries/current"
START_URL = f"{TOGGL}/workspaces/42/time_entries"
STOP_URL = f"{TOGGL}/workspaces/42/time_entries/7/stop"


def created(description="Write report"):
    return make_response(200, {"id": 99, "workspace_id": 42, "description": description, "duration": -1})


def test_stops_running_entry_before_starting(upstream):
    upstream.add("GET", CURRENT_URL, make_response(200, {"id": 7, "workspace_id": 42}))
    upstream.add("PATCH", STOP_URL, make_response(200, {"id": 7, "stop": "2026-10-14T06:00:00Z"}))
    upstream.add("POST", START_URL, created())

    entry = start_tracking(CRED, "42", "Write report")

    assert entry["id"] == 99
    assert [(c.method, c.url) for c in upstream.calls] == [
        ("GET", CURRENT_URL),
        ("PATCH", STOP_URL),
        ("POST", START_URL),
    ]


def test_start_payload(upstream):
    upstream.add("GET", CURRENT_URL, make_response(200, None))
    upstream.add("POST", START_URL, created())

    start_tracking(CRED, "42", "Write report")

    body = upstream.calls_to("POST", START_URL)[0].body
    assert body["description"] == "Write report"
    assert body["workspace_id"] == 42
    assert body["created_with"] == "Notion-Toggl-Timer"
    assert body["duration"] == -1
    assert body["start"].endswith("Z")


def test_nothing_running_skips_stop(upstream):
    upstream.add("GET", CURRENT_URL, make_response(200, None))
    upstream.add("POST", START_URL, created())

    start_tracking(CRED, 42, "Write report")

    assert not [c for c in upstream.calls if c.method == "PATCH"]


def test_stop_not_found_does_not_prevent_start(upstream):
    upstream.add("GET", CURRENT_URL, make_response(200, {"id": 7, "workspace_id": 42}))
    upstream.add("PATCH", STOP_URL, make_response(404, text="Time entry not found"))
    upstream.add("POST", START_URL, created())

    entry = start_tracking(CRED, "42", "Write report")

    assert entry["id"] == 99
    assert len(upstream.calls_to("POST", START_URL)) == 1


def test_stop_network_failure_does_not_prevent_start(upstream):
    upstream.add("GET", CURRENT_URL, requests.ConnectionError("reset"))
    upstream.add("POST", START_URL, created())

    entry = start_tracking(CRED, "42", "Write report")

    assert entry["id"] == 99


def test_stop_outcome_reports_lookup_failure(upstream):
    upstream.add("GET", CURRENT_URL, make_response(403, text="Forbidden"))

    outcome = stop_current_entry(CRED)

    assert outcome.stopped_id is None
    assert "403" in outcome.error


def test_start_failure_is_fatal_even_after_successful_stop(upstream):
    upstream.add("GET", CURRENT_URL, make_response(200, {"id": 7, "workspace_id": 42}))
    upstream.add("PATCH", STOP_URL, make_response(200, {"id": 7}))
    upstream.add("POST", START_URL, make_response(400, text="workspace_id is required"))

    with pytest.raises(TimerStartError) as exc:
        start_tracking(CRED, "42", "Write report")

    assert exc.value.upstream_status == 400
    assert exc.value.upstream_body == "workspace_id is required"


def test_start_unreachable_is_fatal(upstream):
    upstream.add("GET", CURRENT_URL, make_response(200, None))
    upstream.add("POST", START_URL, requests.Timeout("slow"))

    with pytest.raises(TimerStartError):
        start_tracking(CRED, "42", "Write report")


@pytest.mark.parametrize("workspace_id", ["abc", "", None, True, "4.2"])
def test_invalid_workspace_id_rejected_before_any_call(upstream, workspace_id):
    with pytest.raises(ValidationError):
        start_tracking(CRED, workspace_id, "Write report")
    assert upstream.calls == []


def test_sanitize_text():
    assert sanitize_text("<b>Review</b> PR\x07 ") == "Review PR"
    assert sanitize_text(None) == ""
