import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from checkout.config import Settings
from checkout.errors import (
    GatewayRequestError,
    GatewayUnavailable,
    SessionNotFound,
    SignatureInvalid,
    StorageError,
)
from checkout.schemas import CheckoutRequest, CheckoutResponse
from checkout.sessions import get_session_detail
from checkout.stripe_service import SessionOptions, StripeGateway
from checkout.webhooks import OrderIngestion

logger = logging.getLogger(__name__)

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> StripeGateway:
    return request.app.state.gateway


def get_ingestion(request: Request) -> OrderIngestion:
    return OrderIngestion(
        request.app.state.gateway,
        request.app.state.store,
        request.app.state.settings.stripe_webhook_secret,
    )


@router.get("/test-stripe-key")
def test_stripe_key(settings: Settings = Depends(get_settings)):
    return {"stripe_key_loaded": bool(settings.stripe_secret_key)}


@router.post("/create-checkout-session", response_model=CheckoutResponse)
def create_checkout_session(
    request: CheckoutRequest,
    gateway: StripeGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    options = SessionOptions(
        currency=settings.currency,
        allowed_countries=settings.allowed_countries,
        success_url=settings.success_url,
        cancel_url=settings.cancel_url,
    )
    try:
        session = gateway.create_session(request.items, options)
    except GatewayRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GatewayUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"url": session.url, "session_id": session.session_id}


@router.get("/checkout-session")
def checkout_session(session_id: str | None = None, gateway: StripeGateway = Depends(get_gateway)):
    try:
        return get_session_detail(gateway, session_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GatewayRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GatewayUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    ingestion: OrderIngestion = Depends(get_ingestion),
):
    payload = await request.body()

    try:
        await run_in_threadpool(ingestion.handle, payload, stripe_signature)
    except SignatureInvalid as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        logger.error("Webhook could not be processed, Stripe will retry: %s", e)
        raise HTTPException(status_code=500, detail="Order could not be stored")

    return {"received": True}
