"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from api.orders import create_orders_router
from core.config import OrdersConfig, load_config
from core.services.order_service import OrderService
from core.store import Store
from core.stores.factory import create_store

logger = logging.getLogger(__name__)


def create_app(config: OrdersConfig | None = None, store: Store | None = None) -> FastAPI:
    """
    Build the API app around a single Store instance.

    A store passed in stays owned by the caller. Otherwise one is built from
    config (or the environment) and closed when the app shuts down.
    """
    config = config or load_config()
    owns_store = store is None
    if store is None:
        store = create_store(config)

    order_service = OrderService(store, list_workers=config.list_workers)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_store:
            store.close()
            logger.info("Order store closed")

    app = FastAPI(title="Service Orders", lifespan=lifespan)
    app.state.order_service = order_service
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)
    app.include_router(create_orders_router(order_service), prefix="/api")

    return app
