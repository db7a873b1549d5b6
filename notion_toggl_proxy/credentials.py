import base64
from dataclasses import dataclass
from typing import Dict

from . import config
from .errors import InvalidCredentialKind

NOTION_TOKEN = "notionToken"
TOGGL_TOKEN = "togglApiToken"


@dataclass(frozen=True)
class Credential:
    """A caller-supplied upstream token, valid for one request only."""

    kind: str
    value: str

    def __repr__(self) -> str:
        return f"Credential(kind={self.kind!r}, value=***)"


def build_auth_headers(credential: Credential) -> Dict[str, str]:
    """Return the authorization headers the upstream expects for this token."""
    if credential.kind == NOTION_TOKEN:
        return {
            "Authorization": f"Bearer {credential.value}",
            "Notion-Version": config.NOTION_VERSION,
        }
    if credential.kind == TOGGL_TOKEN:
        # Toggl takes the API token as the username and the literal "api_token" as password
        pair = f"{credential.value}:api_token".encode("utf-8")
        return {"Authorization": "Basic " + base64.b64encode(pair).decode("ascii")}
    raise InvalidCredentialKind(credential.kind)
