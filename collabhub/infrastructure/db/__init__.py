"""
Database Infrastructure Package for CollabHub

Exports the migration database URL helper. Models live in
`collabhub.infrastructure.db.models`.
"""

from collabhub.infrastructure.db.database import get_database_url


__all__ = [
    "get_database_url",
]
