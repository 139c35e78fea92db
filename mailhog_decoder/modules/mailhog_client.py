"""
MailHog Client Module
Thin adapter over the MailHog HTTP API returning lazily decoded messages

PATTERN RECOGNITION: This follows the Adapter pattern. It only builds
requests and wraps the JSON results into MessageView objects; all decoding
happens in the views, on demand.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .message_view import MessageView
from . import transfer_encoding
from ..utils.config import MailHogConfig
from ..utils.logging_utils import sanitize_for_logging

logger = logging.getLogger(__name__)

SEARCH_KINDS = ("from", "to", "containing")


class MailHogAPIError(RuntimeError):
    """Raised when the MailHog API cannot be reached or answers with an error"""


@dataclass
class MessageList:
    """One page of messages from a list or search request"""
    total: int
    count: int
    start: int
    items: List[MessageView] = field(default_factory=list)


@dataclass
class SMTPReleaseConfig:
    """Outgoing SMTP server a captured message is released to"""
    host: str
    port: str
    email: str
    username: Optional[str] = None
    password: Optional[str] = None
    mechanism: Optional[str] = None

    def to_payload(self) -> Dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class MailHogClient:
    """
    Client for the MailHog v1/v2 HTTP API

    MAINTENANCE WISDOM: A session is created per client so connections are
    reused across calls; pass your own to share one or to mock the transport.
    """

    def __init__(self, config: Optional[MailHogConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or MailHogConfig()
        self.session = session or requests.Session()
        if self.config.basic_auth:
            self.session.auth = self.config.basic_auth

    encode = staticmethod(transfer_encoding.encode)
    decode = staticmethod(transfer_encoding.decode)

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.config.base_url}{path}"
        try:
            response = self.session.request(
                method, url, timeout=self.config.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"MailHog request {method} {path} failed: {e}")
            raise MailHogAPIError(f"{method} {path} failed: {e}") from e
        return response

    def _get_messages(self, path: str, params: Dict[str, Any]) -> MessageList:
        response = self._request("GET", path, params=params)
        try:
            result = response.json()
        except ValueError as e:
            raise MailHogAPIError(f"Invalid JSON from GET {path}") from e
        if not isinstance(result, dict):
            raise MailHogAPIError(f"Unexpected response from GET {path}")

        items = [MessageView.from_dict(item) for item in result.get("items") or []]
        return MessageList(
            total=int(result.get("total") or 0),
            count=int(result.get("count") or len(items)),
            start=int(result.get("start") or 0),
            items=items
        )

    def messages(self, start: int = 0, limit: int = 50) -> MessageList:
        """
        List captured messages, newest first

        Args:
            start: Offset of the first message
            limit: Maximum number of messages
        """
        params = {}
        if start:
            params["start"] = start
        if limit:
            params["limit"] = limit
        return self._get_messages("/v2/messages", params)

    def search(self, query: str, kind: str = "containing", start: int = 0, limit: int = 50) -> MessageList:
        """
        Search captured messages

        Args:
            query: Search query. To match encoded content, encode the query
                first (see ``encode``).
            kind: from | to | containing
            start: Offset of the first result
            limit: Maximum number of results

        Raises:
            ValueError: If kind is not a supported search kind
        """
        kind = kind or "containing"
        if kind not in SEARCH_KINDS:
            raise ValueError(f"Unsupported search kind: {kind}")
        params = {"kind": kind, "query": query}
        if start:
            params["start"] = start
        if limit:
            params["limit"] = limit
        logger.debug("Searching MailHog (%s): %s", kind, sanitize_for_logging(query))
        return self._get_messages("/v2/search", params)

    def _latest(self, query: str, kind: str) -> Optional[MessageView]:
        result = self.search(query, kind, 0, 1)
        if not result.count or not result.items:
            return None
        return result.items[0]

    def latest_from(self, query: str) -> Optional[MessageView]:
        """Latest message sent from the given address"""
        return self._latest(query, "from")

    def latest_to(self, query: str) -> Optional[MessageView]:
        """Latest message sent to the given address"""
        return self._latest(query, "to")

    def latest_containing(self, query: str) -> Optional[MessageView]:
        """Latest message containing the query anywhere in its raw data"""
        return self._latest(query, "containing")

    def release_message(self, message_id: str, smtp: SMTPReleaseConfig) -> requests.Response:
        """
        Release a captured message to an outgoing SMTP server

        SECURITY STORY: The SMTP password is sent in the request body, so
        only the message id and target host are ever logged.
        """
        logger.info(
            "Releasing message %s to %s:%s",
            sanitize_for_logging(message_id), smtp.host, smtp.port
        )
        return self._request(
            "POST",
            f"/v1/messages/{quote(message_id, safe='')}/release",
            json=smtp.to_payload()
        )

    def delete_message(self, message_id: str) -> requests.Response:
        """Delete one captured message"""
        return self._request("DELETE", f"/v1/messages/{quote(message_id, safe='')}")

    def delete_all(self) -> requests.Response:
        """Delete all captured messages"""
        return self._request("DELETE", "/v1/messages")
