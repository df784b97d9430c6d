import base64
import hashlib
import hmac
import logging
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)


async def raw_body(request: Request) -> bytes:
    """Dependency: signatures cover the raw bytes, so they are read before any JSON parsing."""
    return await request.body()


def hex_signature(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_hex_signature(secret: Optional[str], payload: bytes, signature: Optional[str]) -> bool:
    """Tipalti / DocuSeal style: hex HMAC-SHA256 of the raw body, optional `sha256=` prefix."""
    if not secret or not signature:
        return False
    if signature.startswith("sha256="):
        signature = signature[len("sha256="):]
    expected = hex_signature(secret, payload)
    return hmac.compare_digest(expected, signature.strip())


def _svix_key(secret: str) -> bytes:
    if secret.startswith("whsec_"):
        secret = secret[len("whsec_"):]
    return base64.b64decode(secret)


def svix_signature(secret: str, msg_id: str, timestamp: str, payload: bytes) -> str:
    signed = f"{msg_id}.{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(_svix_key(secret), signed, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_svix_signature(secret: Optional[str], msg_id: Optional[str], timestamp: Optional[str],
                          payload: bytes, signature_header: Optional[str]) -> bool:
    """Clerk webhooks are delivered by Svix: `svix-signature` holds space separated `v1,<base64>` entries."""
    if not secret or not msg_id or not timestamp or not signature_header:
        return False
    try:
        expected = svix_signature(secret, msg_id, timestamp, payload)
    except (ValueError, TypeError):
        logger.error("Clerk webhook secret is not valid base64")
        return False

    for entry in signature_header.split():
        version, _, value = entry.partition(",")
        if version == "v1" and hmac.compare_digest(expected, value):
            return True
    return False
