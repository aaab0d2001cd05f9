import hashlib
import hmac
import json
import time

WEBHOOK_SECRET = "whsec_test_secret"


def sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhook deliveries."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event(event_type="checkout.session.completed", **session) -> bytes:
    session.setdefault("id", "sess_1")
    return json.dumps({
        "id": "evt_" + session["id"],
        "object": "event",
        "type": event_type,
        "data": {"object": session},
    }).encode("utf-8")
