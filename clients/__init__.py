# Infrastructure clients
from clients.vault_client import VaultClient, VaultError
from clients.postgres_client import PostgresClient
