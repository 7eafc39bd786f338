"""Webhook payload signature verification.

Facebook signs every callback with the app secret and sends the result in
the ``x-hub-signature`` header as ``sha1=<hexdigest>``. The digest is taken
over the raw request body, so verification must happen before the body is
decoded.
"""

import hashlib
import hmac

import logfire


class SignatureVerificationError(Exception):
    """Raised when the request signature does not match the payload."""

    pass


def compute_signature(body: bytes, app_secret: str) -> str:
    """Return the ``sha1=<hexdigest>`` header value for ``body``."""
    digest = hmac.new(app_secret.encode("utf-8"), msg=body, digestmod=hashlib.sha1)
    return f"sha1={digest.hexdigest()}"


def verify_request_signature(
    body: bytes,
    signature_header: str | None,
    app_secret: str,
) -> bool:
    """Verify the HMAC-SHA1 signature of a webhook request.

    A missing header is logged and tolerated so that the webhook can be
    exercised by hand; a present but wrong header is fatal for the request.

    Args:
        body: Raw, undecoded request body
        signature_header: Value of the x-hub-signature header, if any
        app_secret: Facebook app secret

    Returns:
        True if the signature was checked and matched, False if the header
        was absent.

    Raises:
        SignatureVerificationError: If the header is malformed or the hash
            does not match.
    """
    if not signature_header:
        logfire.warn("Couldn't validate the signature: x-hub-signature header missing")
        return False

    method, sep, signature_hash = signature_header.partition("=")
    if not sep or not signature_hash:
        raise SignatureVerificationError("Malformed x-hub-signature header")

    expected = compute_signature(body, app_secret).partition("=")[2]

    # Header text is latin-1 decoded and may hold non-ASCII characters
    received = signature_hash.lower().encode("utf-8")
    if not hmac.compare_digest(received, expected.encode("ascii")):
        logfire.warn(
            "Request signature mismatch",
            method=method,
            body_length=len(body),
        )
        raise SignatureVerificationError("Couldn't validate the request signature.")

    return True
