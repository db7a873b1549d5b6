"""Stop whatever Toggl timer is running, then start a new one."""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from . import config
from .credentials import Credential
from .errors import ProxyError, TimerStartError, UpstreamUnreachable, ValidationError
from .upstream import decode_body, send

logger = logging.getLogger(__name__)


@dataclass
class StopOutcome:
    """Result of the best-effort stop step. ``error`` is set when it failed."""

    stopped_id: Optional[int] = None
    error: Optional[str] = None


def sanitize_text(text: Optional[str]) -> str:
    """Strip HTML tags and control chars."""
    if text is None:
        return ""
    text = re.sub(r"<.*?>", "", str(text))
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)
    return text.strip()


def parse_workspace_id(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("workspaceId must be an integer.")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("workspaceId must be an integer.")


def stop_current_entry(credential: Credential) -> StopOutcome:
    """Stop the running time entry, if any. Never raises."""
    try:
        resp = send("GET", f"{config.TOGGL_API_BASE}/me/time_entries/current", credential)
        if not resp.ok:
            return StopOutcome(error=f"current entry lookup returned {resp.status_code}")

        entry = decode_body(resp)
        if not isinstance(entry, dict) or not entry.get("id"):
            return StopOutcome()

        entry_id = entry["id"]
        stop_url = f"{config.TOGGL_API_BASE}/workspaces/{entry['workspace_id']}/time_entries/{entry_id}/stop"
        resp = send("PATCH", stop_url, credential)
        if not resp.ok:
            return StopOutcome(error=f"stop returned {resp.status_code}")
        return StopOutcome(stopped_id=entry_id)
    except (ProxyError, KeyError) as e:
        return StopOutcome(error=str(e))


def start_tracking(credential: Credential, workspace_id: Any, description: Optional[str]) -> Dict[str, Any]:
    wid = parse_workspace_id(workspace_id)

    outcome = stop_current_entry(credential)
    if outcome.error:
        logger.warning("Failed to stop current Toggl entry, starting new one anyway: %s", outcome.error)
    elif outcome.stopped_id:
        logger.info("Stopped running Toggl entry %s", outcome.stopped_id)

    payload = {
        "description": sanitize_text(description),
        "workspace_id": wid,
        "start": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "duration": -1,
        "created_with": config.TOGGL_CREATED_WITH,
    }
    try:
        resp = send("POST", f"{config.TOGGL_API_BASE}/workspaces/{wid}/time_entries", credential, body=payload)
    except UpstreamUnreachable as e:
        raise TimerStartError(f"Toggl Start API unreachable: {e.message}") from e
    if not resp.ok:
        raise TimerStartError("Toggl Start API Error", resp.status_code, resp.text)

    entry = decode_body(resp)
    if not isinstance(entry, dict):
        raise TimerStartError("Toggl Start API returned an unexpected body", resp.status_code, resp.text)
    logger.info("Started Toggl entry %s in workspace %s", entry.get("id"), wid)
    return entry
