"""VaultWard HTTP API."""

from vaultward.api.server import create_app

__all__ = ["create_app"]
