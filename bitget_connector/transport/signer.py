"""
Bitget request signing.

Bitget signature: BASE64(HMAC-SHA256(timestamp + METHOD + requestPath + body))

`requestPath` includes the query string when there is one, and `body`
is the exact JSON text sent on the wire ("" for an empty body).
"""

import base64
import hashlib
import hmac


def build_prehash(timestamp: str, method: str, request_path: str, body: str = "") -> str:
    return f"{timestamp}{method.upper()}{request_path}{body or ''}"


def sign(
    timestamp: str,
    method: str,
    request_path: str,
    body: str,
    secret_key: str,
) -> str:
    """
    Create request signature.

    Args:
        timestamp: Epoch milliseconds as a string
        method: HTTP method (case-insensitive)
        request_path: Endpoint path with query string
        body: Serialised JSON body, or ""
        secret_key: API secret

    Returns:
        Base64 encoded signature
    """
    message = build_prehash(timestamp, method, request_path, body)
    signature = hmac.new(
        secret_key.encode(),
        message.encode(),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(signature).decode()
