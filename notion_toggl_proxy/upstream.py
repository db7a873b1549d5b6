"""Outbound HTTP to the upstream APIs.

``send`` is the only place that talks to the network; the generic relay and
all custom endpoints go through it.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import requests

from . import config
from .credentials import Credential, build_auth_headers
from .errors import UpstreamUnreachable, ValidationError

logger = logging.getLogger(__name__)

BODYLESS_METHODS = frozenset({"GET", "DELETE", "HEAD", "OPTIONS"})


@dataclass
class RelayRequest:
    target_url: str
    method: str
    credential: Credential
    body: Any = None


@dataclass
class RelayResult:
    status: int
    body: Any
    content_type: Optional[str] = None


def send(method: str, url: str, credential: Credential, body: Any = None) -> requests.Response:
    headers = {}
    if body is not None:
        headers["Content-Type"] = "application/json"
    headers.update(build_auth_headers(credential))

    try:
        return requests.request(
            method,
            url,
            headers=headers,
            json=body,
            timeout=config.UPSTREAM_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Upstream %s %s failed: %s", method, url, e)
        raise UpstreamUnreachable(f"Failed to reach upstream: {e.__class__.__name__}") from e


def decode_body(resp: requests.Response) -> Any:
    """Parsed JSON object or array, raw text for anything else, None when empty.

    Scalar JSON such as ``null`` stays as text so it reaches the caller unchanged.
    """
    if not resp.content:
        return None
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, (dict, list)):
        return data
    return resp.text


def relay(req: RelayRequest) -> RelayResult:
    parsed = urlparse(req.target_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("targetUrl must be an absolute http(s) URL.")

    method = req.method.upper()
    body = req.body if method not in BODYLESS_METHODS else None

    resp = send(method, req.target_url, req.credential, body=body)
    logger.info("Relayed %s %s -> %s", method, parsed.netloc, resp.status_code)
    return RelayResult(
        status=resp.status_code,
        body=decode_body(resp),
        content_type=resp.headers.get("Content-Type"),
    )
