"""Read-only HTTP API over diagnostic snapshots."""

from strict_migrate.web.app import create_app

__all__ = ["create_app"]
