import logging
from typing import Any, Dict, Iterable, List

from . import config
from .credentials import Credential
from .errors import SchemaFetchError
from .upstream import send

logger = logging.getLogger(__name__)


def unique_in_order(names: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for name in names:
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out


def option_names(properties: Dict[str, Any], name: str, field_type: str) -> List[str]:
    """Option names of a select-style property, or [] if absent or of another type."""
    prop = properties.get(name)
    if not isinstance(prop, dict) or prop.get("type", field_type) != field_type:
        return []
    options = (prop.get(field_type) or {}).get("options") or []
    return unique_in_order(
        opt["name"] for opt in options if isinstance(opt, dict) and opt.get("name")
    )


def get_db_config(db_id: str, credential: Credential) -> Dict[str, Any]:
    """Category and department options of a Notion database."""
    resp = send("GET", f"{config.NOTION_API_BASE}/databases/{db_id}", credential)
    if not resp.ok:
        raise SchemaFetchError("Notion API Error", resp.status_code, resp.text)

    try:
        properties = resp.json().get("properties") or {}
    except (ValueError, AttributeError):
        raise SchemaFetchError("Notion API returned an unreadable schema", resp.status_code, resp.text)

    categories = option_names(properties, config.CATEGORY_PROPERTY, "select")
    departments = option_names(properties, config.DEPARTMENT_PROPERTY, "multi_select")
    logger.info(
        "Loaded database config: %d categories, %d departments",
        len(categories),
        len(departments),
    )
    return {
        "categories": categories,
        "departments": departments,
        "dataSourceId": db_id,
    }
