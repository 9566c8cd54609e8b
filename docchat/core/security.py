"""Webhook signature verification for the LINE Messaging API."""

import base64
import binascii
import hashlib
import hmac
import logging
from typing import Union

logger = logging.getLogger(__name__)


def compute_line_signature(body: Union[str, bytes], channel_secret: str) -> str:
    """
    Compute the base64 HMAC-SHA256 signature LINE sends in ``X-Line-Signature``.

    Args:
        body: Raw request body
        channel_secret: Channel secret shared with LINE

    Returns:
        Base64-encoded signature
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_line_signature(
    body: Union[str, bytes], signature: str, channel_secret: str
) -> bool:
    """
    Verify the ``X-Line-Signature`` header of a webhook request.

    The comparison runs in constant time over the decoded bytes.

    Args:
        body: Raw request body exactly as received
        signature: Header value (base64)
        channel_secret: Channel secret shared with LINE

    Returns:
        True if the signature matches, False otherwise
    """
    if not signature or not channel_secret:
        return False

    try:
        incoming = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        logger.debug("Rejected webhook signature: not valid base64")
        return False

    if isinstance(body, str):
        body = body.encode("utf-8")
    expected = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()

    return hmac.compare_digest(incoming, expected)
