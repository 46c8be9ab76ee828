"""
Database Adapter Protocol.

The storage classes in onboarding only need the PostgREST-style fluent
query builder that the Supabase client exposes: table() returns a
builder supporting .select(), .upsert(), .insert(), .eq(), .limit() and
.execute(). Tests pass a MagicMock that satisfies the same shape.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DatabaseAdapter(Protocol):
    """
    Abstract database access for onboarding storage.

    The returned builder's concrete type depends on the backend
    (e.g., SyncRequestBuilder for Supabase).
    """

    def table(self, name: str) -> Any:
        """Return a query builder for the given table."""
        ...
