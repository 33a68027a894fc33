"""Repository adapters - Database implementations."""

from .postgres import PostgresCodeStore, run_migrations

__all__ = ["PostgresCodeStore", "run_migrations"]
