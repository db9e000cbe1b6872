"""
Supabase Backend Client

Thin wrapper around the Supabase async client. Every query the services
build is executed here so backend failures are translated into the
package's exception types in one place.
"""

import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from ..config import Settings, get_supabase_config
from ..exceptions import BackendRequestError, RecordNotFoundError, ReferentialConstraintError


logger = logging.getLogger(__name__)

# PostgreSQL / PostgREST error codes
FOREIGN_KEY_VIOLATION = "23503"
NO_ROWS_FOR_SINGLE = "PGRST116"


class SupabaseBackend:
    """Executes PostgREST queries and maps their errors"""

    def __init__(self, client: AsyncClient):
        """
        Initialize the backend wrapper

        Args:
            client: Supabase async client (or any object exposing ``table()``)
        """
        self.client = client

    @classmethod
    async def connect(cls, settings: Optional[Settings] = None) -> "SupabaseBackend":
        """Create a backend connected to the configured Supabase project"""
        config = get_supabase_config(settings)
        client = await acreate_client(config["url"], config["anon_key"])
        logger.info(f"✅ Supabase client initialized: {config['url']}")
        return cls(client)

    def table(self, name: str) -> Any:
        return self.client.table(name)

    async def execute(self, query: Any, operation: str) -> Any:
        """
        Execute a built query

        Args:
            query: PostgREST request builder, ready to execute
            operation: Short description used in logs and errors

        Returns:
            The PostgREST response (``.data``, ``.count``)

        Raises:
            RecordNotFoundError: A single-row read matched nothing
            ReferentialConstraintError: A foreign key blocked the write
            BackendRequestError: Any other backend or transport failure
        """
        logger.debug(f"Executing {operation}")
        try:
            return await query.execute()
        except APIError as e:
            code = str(e.code) if e.code is not None else None
            if code == NO_ROWS_FOR_SINGLE:
                raise RecordNotFoundError(f"{operation}: record not found", operation=operation, code=code) from e
            logger.error(f"❌ {operation} failed: {e.message} (code={code})")
            if code == FOREIGN_KEY_VIOLATION:
                raise ReferentialConstraintError(f"{operation} violates a reference: {e.message}",
                                                 operation=operation, code=code) from e
            raise BackendRequestError(f"{operation} failed: {e.message}", operation=operation, code=code) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ {operation} request failed: {e}")
            raise BackendRequestError(f"{operation} request failed: {e}", operation=operation) from e
