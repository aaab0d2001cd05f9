import logging
from dataclasses import dataclass, field
from typing import Any

import stripe

from checkout.errors import (
    GatewayRequestError,
    GatewayUnavailable,
    SessionNotFound,
    SignatureInvalid,
)

logger = logging.getLogger(__name__)

SESSION_EXPAND = ["line_items.data.price.product", "customer_details", "shipping"]


@dataclass
class SessionOptions:
    currency: str = "dkk"
    allowed_countries: list[str] = field(default_factory=lambda: ["DK"])
    success_url: str = ""
    cancel_url: str = ""


@dataclass
class CreatedSession:
    session_id: str
    url: str


@dataclass
class GatewayEvent:
    id: str
    type: str
    data_object: dict


def _to_plain(obj: Any) -> Any:
    """Turn a StripeObject into plain dicts and lists."""
    if isinstance(obj, stripe.StripeObject):
        # older SDK releases only recurse through to_dict_recursive()
        to_dict = getattr(type(obj), "to_dict_recursive", None) or type(obj).to_dict
        return to_dict(obj)
    return obj


def _translate(exc: stripe.StripeError, session_id: str | None = None) -> Exception:
    if isinstance(exc, stripe.InvalidRequestError):
        if session_id is not None and exc.code == "resource_missing":
            return SessionNotFound(f"No such checkout session: {session_id}")
        return GatewayRequestError(exc.user_message or str(exc))
    if isinstance(exc, stripe.CardError):
        return GatewayRequestError(exc.user_message or str(exc))
    return GatewayUnavailable(str(exc) or exc.__class__.__name__)


def build_line_items(items, currency: str) -> list[dict]:
    """Validate checkout items and convert them to Stripe ``line_items``.

    Prices are given in whole currency units and sent in the smallest unit
    (øre for DKK), so a price of 100 becomes ``unit_amount=10000``.
    """
    if not items:
        raise GatewayRequestError("At least one item is required")

    line_items = []
    for item in items:
        name = getattr(item, "name", None)
        price = getattr(item, "price", None)
        quantity = getattr(item, "quantity", None)
        if not isinstance(name, str) or not name.strip():
            raise GatewayRequestError("Item name must not be empty")
        if not isinstance(price, int) or isinstance(price, bool) or price <= 0:
            raise GatewayRequestError(f"Invalid price for {name!r}")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise GatewayRequestError(f"Invalid quantity for {name!r}")

        line_items.append({
            "price_data": {
                "currency": currency,
                "product_data": {"name": name},
                "unit_amount": price * 100,
            },
            "quantity": quantity,
        })
    return line_items


class StripeGateway:
    def __init__(self, api_key: str | None):
        self.api_key = api_key

    def create_session(self, items, options: SessionOptions) -> CreatedSession:
        line_items = build_line_items(items, options.currency)
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                payment_method_types=["card"],
                mode="payment",
                line_items=line_items,
                shipping_address_collection={"allowed_countries": options.allowed_countries},
                success_url=options.success_url,
                cancel_url=options.cancel_url,
            )
        except stripe.StripeError as exc:
            logger.error("Error creating checkout session: %s", exc)
            raise _translate(exc) from exc
        return CreatedSession(session_id=session["id"], url=session["url"])

    def retrieve_session(self, session_id: str) -> dict:
        try:
            session = stripe.checkout.Session.retrieve(
                session_id,
                api_key=self.api_key,
                expand=SESSION_EXPAND,
            )
        except stripe.StripeError as exc:
            raise _translate(exc, session_id) from exc
        return _to_plain(session)

    def list_line_items(self, session_id: str) -> list[dict]:
        try:
            line_items = stripe.checkout.Session.list_line_items(session_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise _translate(exc, session_id) from exc
        return _to_plain(line_items).get("data", [])

    def verify_event(self, raw_payload: bytes, signature_header: str | None, secret: str | None) -> GatewayEvent:
        """Verify a webhook signature and parse the event.

        Nothing in the payload is looked at before the signature checks out.
        """
        if not signature_header:
            raise SignatureInvalid("Missing signature header")
        if not secret:
            raise SignatureInvalid("Webhook signing secret is not configured")

        try:
            event = stripe.Webhook.construct_event(raw_payload, signature_header, secret)
        except ValueError as exc:
            raise SignatureInvalid("Invalid payload") from exc
        except stripe.SignatureVerificationError as exc:
            raise SignatureInvalid("Invalid signature") from exc

        # signed JSON that is not shaped like an event
        try:
            event_type = event.type
            data_object = _to_plain(event.data.object)
        except (AttributeError, KeyError) as exc:
            raise SignatureInvalid("Invalid payload") from exc
        if not isinstance(event_type, str) or not isinstance(data_object, dict):
            raise SignatureInvalid("Invalid payload")

        return GatewayEvent(id=getattr(event, "id", None) or "", type=event_type, data_object=data_object)
