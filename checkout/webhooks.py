"""Recording of paid checkout sessions delivered by Stripe webhooks.

Stripe delivers events at least once and keeps retrying until it receives a
2xx response, so ingestion must be repeatable: the checkout session id is the
external reference every order is keyed on, and an event whose session is
already recorded is acknowledged without writing anything.
"""
import json
import logging
from enum import Enum

from checkout.errors import DuplicateOrder, GatewayError
from checkout.orders import OrderStore
from checkout.schemas import OrderFields
from checkout.stripe_service import StripeGateway

logger = logging.getLogger(__name__)

PAYMENT_COMPLETED = "checkout.session.completed"


class Outcome(str, Enum):
    IGNORED = "ignored"
    RECORDED = "recorded"
    DUPLICATE = "duplicate"


def _section(obj, key: str) -> dict:
    value = obj.get(key) if isinstance(obj, dict) else None
    return value if isinstance(value, dict) else {}


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _shipping(session: dict) -> dict:
    # newer API versions nest shipping under collected_information
    for candidate in (
        _section(_section(session, "collected_information"), "shipping_details"),
        _section(session, "shipping_details"),
        _section(session, "shipping"),
    ):
        if candidate:
            return candidate
    return {}


def _line_items(raw) -> list[dict]:
    if isinstance(raw, dict):
        raw = raw.get("data")
    if not isinstance(raw, list):
        return []

    items = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        name = item.get("description") or _section(_section(item, "price"), "product").get("name")
        items.append({
            "name": _text(name),
            "quantity": item.get("quantity") or 0,
            "amount_total": item.get("amount_total") or 0,
        })
    return items


def order_fields_from_session(session: dict, line_items: list[dict]) -> OrderFields:
    """Map a completed checkout session onto order columns.

    Missing or malformed customer and shipping data becomes empty strings:
    the payment already went through and must be recorded regardless.
    """
    customer = _section(session, "customer_details")
    shipping = _shipping(session)
    address = _section(shipping, "address") or _section(customer, "address")

    total = session.get("amount_total")
    if not isinstance(total, int) or isinstance(total, bool):
        total = 0

    return OrderFields(
        session_id=_text(session.get("id")),
        email=_text(customer.get("email") or session.get("customer_email")),
        name=_text(shipping.get("name") or customer.get("name")),
        line1=_text(address.get("line1")),
        line2=_text(address.get("line2")),
        city=_text(address.get("city")),
        postal_code=_text(address.get("postal_code")),
        country=_text(address.get("country")),
        phone=_text(customer.get("phone") or shipping.get("phone")),
        items=json.dumps(line_items),
        total=total,
    )


class OrderIngestion:
    def __init__(self, gateway: StripeGateway, store: OrderStore, webhook_secret: str | None):
        self.gateway = gateway
        self.store = store
        self.webhook_secret = webhook_secret

    def handle(self, payload: bytes, signature: str | None) -> Outcome:
        """Process one webhook delivery.

        Raises ``SignatureInvalid`` for unverifiable deliveries and
        ``StorageError`` when the order could not be written; both must be
        answered with a non-success status.
        """
        event = self.gateway.verify_event(payload, signature, self.webhook_secret)

        if event.type != PAYMENT_COMPLETED:
            logger.debug("Ignoring event %s of type %s", event.id, event.type)
            return Outcome.IGNORED

        session = event.data_object
        session_id = _text(session.get("id")) or event.id
        if not session_id:
            logger.warning("Completed event carries no session or event id, recording under an empty reference")

        if self.store.find_by_external_reference(session_id) is not None:
            logger.info("Order for session %s already recorded", session_id)
            return Outcome.DUPLICATE

        fields = order_fields_from_session(session, self._collect_line_items(session, session_id))
        fields.session_id = session_id
        try:
            order_id = self.store.insert_order(fields)
        except DuplicateOrder:
            logger.info("Order for session %s recorded by a concurrent delivery", session_id)
            return Outcome.DUPLICATE

        logger.info("Payment succeeded, recorded order %s for session %s", order_id, session_id)
        return Outcome.RECORDED

    def _collect_line_items(self, session: dict, session_id: str) -> list[dict]:
        if "line_items" in session:
            return _line_items(session["line_items"])
        try:
            return _line_items(self.gateway.list_line_items(session_id))
        except GatewayError as exc:
            logger.warning("Could not fetch line items for session %s: %s", session_id, exc)
            return []
