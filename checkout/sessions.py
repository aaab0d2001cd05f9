from checkout.errors import SessionNotFound
from checkout.stripe_service import StripeGateway


def get_session_detail(gateway: StripeGateway, session_id: str | None) -> dict:
    """Fetch a checkout session for display on the success page."""
    if not session_id or not session_id.strip():
        raise SessionNotFound("No session ID provided")
    return gateway.retrieve_session(session_id.strip())
