"""Gmail API email source connector."""

import logging
from datetime import datetime
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from inbox_sms.config import GmailConfig
from inbox_sms.models import BodyNode, ContainerPart, Email, LeafPart

from .base import EmailSource

logger = logging.getLogger(__name__)

GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.labels",
]


def payload_to_body_node(payload: dict[str, Any]) -> BodyNode:
    """Convert a Gmail message payload into a body tree.

    Parts with children become containers; everything else is a leaf carrying
    ``body.data`` (empty when Gmail sent no inline data, e.g. attachments).
    """
    media_type = payload.get("mimeType", "")
    children = payload.get("parts") or []
    if children:
        return ContainerPart(
            media_type=media_type,
            parts=tuple(payload_to_body_node(child) for child in children),
        )
    body = payload.get("body") or {}
    return LeafPart(media_type=media_type, data=body.get("data") or "")


def message_to_email(message: dict[str, Any], source: str = "gmail") -> Email:
    """Convert a Gmail API message resource (format=full) into an Email."""
    payload = message.get("payload") or {}
    headers = {h["name"]: h.get("value", "") for h in payload.get("headers", [])}
    lowered = {name.lower(): value for name, value in headers.items()}

    date = None
    if message.get("internalDate"):
        date = datetime.fromtimestamp(int(message["internalDate"]) / 1000)

    return Email(
        id=message["id"],
        source=source,
        thread_id=message.get("threadId"),
        subject=lowered.get("subject", ""),
        from_addr=lowered.get("from", ""),
        date=date,
        snippet=message.get("snippet", ""),
        headers=headers,
        label_ids=message.get("labelIds", []),
        body=payload_to_body_node(payload),
    )


class GmailSource(EmailSource):
    """Gmail mailbox accessed through the Gmail API."""

    def __init__(self, config: GmailConfig, name: str = "gmail") -> None:
        self.config = config
        self.name = name
        self._service: Any = None
        self.label_id: str | None = None

    async def connect(self) -> None:
        """Authenticate and make sure the processed label exists."""
        if not self.config.refresh_token:
            raise ValueError("Gmail refresh token is not set")

        credentials = Credentials(
            token=None,
            refresh_token=self.config.refresh_token,
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            token_uri=self.config.token_uri,
            scopes=GMAIL_SCOPES,
        )
        self._service = build("gmail", "v1", credentials=credentials, cache_discovery=False)

        self.label_id = self._ensure_label()
        if not self.label_id:
            raise RuntimeError(
                f"Could not create or find the label '{self.config.processed_label}'"
            )

    async def disconnect(self) -> None:
        """Release the API client."""
        if self._service is not None:
            self._service.close()
            self._service = None

    @property
    def service(self) -> Any:
        if self._service is None:
            raise RuntimeError("Not connected to Gmail")
        return self._service

    def _ensure_label(self) -> str | None:
        """Find the processed label, creating it if it does not exist."""
        name = self.config.processed_label
        labels = self.service.users().labels().list(userId="me").execute().get("labels", [])
        for label in labels:
            if label.get("name") == name:
                return label["id"]

        try:
            created = (
                self.service.users()
                .labels()
                .create(
                    userId="me",
                    body={
                        "name": name,
                        "labelListVisibility": "labelShow",
                        "messageListVisibility": "show",
                    },
                )
                .execute()
            )
        except HttpError as e:
            logger.error(f"Failed to create label {name}: {e}")
            return None

        logger.info(f"Created label {name}")
        return created.get("id")

    def _build_query(self) -> str:
        query = f"in:inbox -from:me -label:{self.config.processed_label}"
        if self.config.extra_query:
            query = f"{query} {self.config.extra_query}"
        return query

    async def fetch_unprocessed(self, limit: int = 10) -> list[Email]:
        """Fetch recent inbox messages that do not carry the processed label."""
        response = (
            self.service.users()
            .messages()
            .list(userId="me", maxResults=limit, q=self._build_query())
            .execute()
        )
        refs = response.get("messages") or []
        if not refs:
            logger.info("No messages found")
            return []

        emails: list[Email] = []
        for ref in refs:
            try:
                message = (
                    self.service.users()
                    .messages()
                    .get(userId="me", id=ref["id"], format="full")
                    .execute()
                )
            except HttpError as e:
                logger.error(f"Error fetching message {ref['id']}: {e}")
                continue
            emails.append(message_to_email(message, source=self.name))

        return emails

    async def mark_processed(self, email_id: str) -> bool:
        """Apply the processed label to a message."""
        if not self.label_id:
            raise RuntimeError("Processed label is not initialized")
        self.service.users().messages().modify(
            userId="me",
            id=email_id,
            body={"addLabelIds": [self.label_id]},
        ).execute()
        return True
