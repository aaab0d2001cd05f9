import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from checkout.config import Settings
from checkout.orders import OrderStore
from checkout.routes import router
from checkout.stripe_service import StripeGateway

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    store: OrderStore | None = None,
    gateway: StripeGateway | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # StorageUnavailable aborts startup: no traffic without a working store
        app.state.store = store or OrderStore.initialize(settings.database_url)
        logger.info("Stripe key loaded: %s", bool(settings.stripe_secret_key))
        yield

    app = FastAPI(title="Checkout Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.gateway = gateway or StripeGateway(settings.stripe_secret_key)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


def run():
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
