import logging
from typing import Any, Callable, Dict, Tuple

from .credentials import NOTION_TOKEN, TOGGL_TOKEN, Credential
from .errors import ProxyError, ValidationError
from .kpi import get_kpi
from .schema import get_db_config
from .timer import start_tracking
from .upstream import RelayRequest, RelayResult, relay

logger = logging.getLogger(__name__)


def require(payload: Dict[str, Any], *names: str) -> Any:
    """First non-empty value among ``names``."""
    for name in names:
        value = payload.get(name)
        if value not in (None, ""):
            return value
    raise ValidationError(f"Missing {' or '.join(names)} in request body.")


def _get_config(payload: Dict[str, Any]) -> Dict[str, Any]:
    db_id = require(payload, "dbId")
    return get_db_config(db_id, Credential(NOTION_TOKEN, payload["tokenValue"]))


def _get_kpi(payload: Dict[str, Any]) -> Dict[str, Any]:
    db_id = require(payload, "dataSourceId", "dbId")
    return get_kpi(db_id, Credential(NOTION_TOKEN, payload["tokenValue"]))


def _start_toggl_tracking(payload: Dict[str, Any]) -> Dict[str, Any]:
    workspace_id = require(payload, "workspaceId")
    return start_tracking(
        Credential(TOGGL_TOKEN, payload["tokenValue"]),
        workspace_id,
        payload.get("description"),
    )


# customEndpoint name -> (error label, handler)
WORKFLOWS: Dict[str, Tuple[str, Callable[[Dict[str, Any]], Dict[str, Any]]]] = {
    "getConfig": ("Config Error", _get_config),
    "getKpi": ("KPI Error", _get_kpi),
    "startTogglTracking": ("Toggl Start Error", _start_toggl_tracking),
}


def run_workflow(name: str, payload: Dict[str, Any]) -> RelayResult:
    if name not in WORKFLOWS:
        raise ValidationError("Invalid custom endpoint.")
    label, handler = WORKFLOWS[name]
    try:
        result = handler(payload)
    except ProxyError as e:
        e.context = label
        logger.error("Custom endpoint %s failed: %s", name, e)
        raise
    return RelayResult(status=200, body=result, content_type="application/json")


def dispatch(payload: Any) -> RelayResult:
    """Route one inbound proxy call to a custom endpoint or the generic relay."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    if not payload.get("tokenValue"):
        raise ValidationError("Token value missing in request body.")

    custom = payload.get("customEndpoint")
    if custom:
        return run_workflow(custom, payload)

    if not payload.get("targetUrl"):
        raise ValidationError("Missing targetUrl for standard proxy.")
    req = RelayRequest(
        target_url=payload["targetUrl"],
        method=str(payload.get("method") or "GET"),
        credential=Credential(payload.get("tokenKey"), payload["tokenValue"]),
        body=payload.get("body"),
    )
    return relay(req)
