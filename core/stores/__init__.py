"""Store implementations."""

from core.stores.memory_store import InMemoryStore
from core.stores.postgres_store import PostgresStore, SCHEMA_SQL
