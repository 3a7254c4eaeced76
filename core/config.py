"""Order engine configuration."""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from clients.vault_client import VaultClient, VaultError

ENV_PREFIX = "SHOP_ORDERS_"


class OrdersConfig(BaseModel):
    """
    Runtime configuration.

    The postgres backend needs a database URL; when none is configured it is
    read from Vault at store construction time (see resolve_database_url).
    """

    store_backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="Which Store implementation to construct",
    )
    database_url: str | None = Field(
        default=None,
        description="PostgreSQL DSN; fetched from Vault when unset",
    )
    list_workers: int = Field(
        default=8,
        description="Threads used to fetch line items when listing orders",
        ge=1,
        le=32,
    )
    pool_min_connections: int = Field(default=1, ge=1)
    pool_max_connections: int = Field(default=10, ge=1, le=100)

    @model_validator(mode="after")
    def check_pool_bounds(self) -> "OrdersConfig":
        if self.pool_min_connections > self.pool_max_connections:
            raise ValueError("pool_min_connections cannot exceed pool_max_connections")
        return self

    def resolve_database_url(self, vault: VaultClient | None = None) -> str:
        """
        Database URL from config, falling back to Vault.

        Raises:
            VaultError: If no URL is configured and Vault cannot supply one
        """
        if self.database_url:
            return self.database_url

        try:
            vault = vault or VaultClient()
            return vault.get_database_url()
        except (ValueError, PermissionError, KeyError) as e:
            raise VaultError(f"No database URL configured and Vault lookup failed: {e}") from e


def load_config(env_file: str | None = None) -> OrdersConfig:
    """
    Build config from SHOP_ORDERS_* environment variables.

    A .env file (default: nearest one found by python-dotenv) is loaded first
    without overriding variables already set in the environment.
    """
    load_dotenv(env_file)

    values = {}
    for field in OrdersConfig.model_fields:
        raw = os.getenv(f"{ENV_PREFIX}{field.upper()}")
        if raw is not None and raw != "":
            values[field] = raw

    return OrdersConfig.model_validate(values)
