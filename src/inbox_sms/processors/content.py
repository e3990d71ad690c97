"""Plain-text extraction from multipart message bodies.

Message bodies arrive as a tree of parts. The first ``text/plain`` leaf found
in a depth-first, pre-order walk is decoded and normalized; HTML alternatives
are ignored. Extraction never raises: anything that cannot be decoded yields
an empty string.
"""

import base64
import binascii
import logging
import re

from inbox_sms.models import BodyNode, ContainerPart, LeafPart

logger = logging.getLogger(__name__)

PLAIN_TEXT = "text/plain"


def find_text_part(root: BodyNode) -> LeafPart | None:
    """Find the leaf whose payload should be used as the message text.

    Returns the first non-empty ``text/plain`` leaf in pre-order. When there is
    none and the root is itself a leaf with data, the root is returned
    whatever its media type.
    """
    stack: list[BodyNode] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, LeafPart):
            if node.data and node.media_type.lower() == PLAIN_TEXT:
                return node
        elif isinstance(node, ContainerPart):
            # Reversed so the first child is visited first
            stack.extend(reversed(node.parts))

    if isinstance(root, LeafPart) and root.data:
        return root
    return None


def decode_part_data(data: str) -> str:
    """Decode a base64url payload into UTF-8 text.

    Padding is reconstructed when the provider stripped it. Malformed or
    truncated payloads and invalid UTF-8 decode to an empty string.
    """
    payload = data.strip().rstrip("=")
    payload += "=" * (-len(payload) % 4)
    try:
        raw = base64.b64decode(payload, altchars=b"-_", validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, ValueError) as e:
        # UnicodeDecodeError is a ValueError
        logger.debug(f"Could not decode body part: {e}")
        return ""


def normalize_body(text: str) -> str:
    """Normalize line endings and blank lines.

    - CRLF becomes LF
    - Three or more consecutive newlines collapse to two
    - Leading/trailing whitespace is stripped
    """
    text = text.replace("\r\n", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def extract_text(root: BodyNode) -> str:
    """Extract the normalized plain-text body of a message.

    Args:
        root: Root of the message body tree

    Returns:
        The decoded text, or "" if no usable part exists
    """
    part = find_text_part(root)
    if part is None:
        return ""
    return normalize_body(decode_part_data(part.data))
