"""Construct the configured Store once per process."""

import logging

from clients.postgres_client import PostgresClient
from core.config import OrdersConfig
from core.store import Store
from core.stores.memory_store import InMemoryStore
from core.stores.postgres_store import PostgresStore

logger = logging.getLogger(__name__)


def create_store(config: OrdersConfig) -> Store:
    """
    Build the Store named by config.store_backend.

    The postgres backend creates its tables if missing. The caller owns the
    returned store and must close() it on shutdown.
    """
    if config.store_backend == "postgres":
        client = PostgresClient(
            config.resolve_database_url(),
            min_connections=config.pool_min_connections,
            max_connections=config.pool_max_connections,
        )
        store = PostgresStore(client)
        store.ensure_schema()
        logger.info("Using PostgreSQL order store")
        return store

    logger.info("Using in-memory order store")
    return InMemoryStore()
