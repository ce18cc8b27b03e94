import hashlib
import hmac
import time

MAX_REQUEST_AGE = 60 * 5


def verify_slack_signature(
    signing_secret: str,
    timestamp: str,
    body: bytes,
    signature: str,
    now: float | None = None,
) -> bool:
    try:
        request_time = int(timestamp)
    except ValueError:
        return False
    if abs((now or time.time()) - request_time) > MAX_REQUEST_AGE:
        return False
    basestring = f"v0:{timestamp}:{body.decode()}"
    computed = "v0=" + hmac.new(
        signing_secret.encode(), basestring.encode(), hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(computed, signature)
