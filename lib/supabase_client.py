# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides table-agnostic helpers for the record shapes the platform
# stores (users, role profiles, form submissions, IP filings, funding
# requests, notifications, messages).
#
# Records are looked up by id; references between tables (owner_id,
# agency_id, ...) are resolved with separate lookups rather than joins.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   filing = SupabaseClient.fetch_by_id("ipr_filings", filing_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    errors should tell HOW to fix, not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        filing = SupabaseClient.fetch_by_id("ipr_filings", filing_id)

        # Move a filing out of Pending only if nobody else did first
        updated = SupabaseClient.update_where_status(
            "ipr_filings", filing_id, "Pending", {"status": "Accepted"}
        )
        if updated is None:
            ...  # someone else reviewed it
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Authorization is enforced by the API layer instead.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @classmethod
    def _apply_filters(cls, query, filters: dict[str, Any] | None):
        """Apply equality filters; list values become IN filters, None becomes IS NULL."""
        for column, value in (filters or {}).items():
            if value is None:
                query = query.is_(column, "null")
            elif isinstance(value, (list, tuple, set)):
                query = query.in_(column, [cls._normalize_uuid(v) for v in value])
            elif isinstance(value, UUID):
                query = query.eq(column, str(value))
            else:
                query = query.eq(column, value)
        return query

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_by_id(
        cls,
        table: str,
        record_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single record by primary key.

        Args:
            table: Table name
            record_id: The record UUID
            columns: PostgREST select expression

        Returns:
            Record dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        record_id_str = cls._normalize_uuid(record_id)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq("id", record_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} record: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the id exists and the {table} table is accessible",
                details={"table": table, "id": record_id_str}
            )

    @classmethod
    def fetch_one(
        cls,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch the first record matching equality filters.

        Returns:
            Record dict, or None if nothing matches

        Raises:
            SupabaseClientError: If query fails
        """
        rows = cls.fetch_many(table, filters=filters, columns=columns, limit=1)
        return rows[0] if rows else None

    @classmethod
    def fetch_many(
        cls,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = "created_at",
        desc: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """
        Fetch records matching equality filters.

        Args:
            table: Table name
            filters: Column -> value; list values match any (IN)
            columns: PostgREST select expression
            order_by: Column to sort by (None for unordered)
            desc: Sort descending
            limit: Maximum rows (None for all)
            offset: Rows to skip (only used with limit)

        Returns:
            List of record dicts (possibly empty)

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = cls._apply_filters(client.table(table).select(columns), filters)

            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.range(offset, offset + limit - 1)

            response = query.execute()
            rows = response.data or []

            logger.debug(f"Fetched {len(rows)} rows from {table}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch {table} records: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the {table} table exists and the filters are valid columns",
                details={"table": table, "filters": {k: str(v) for k, v in (filters or {}).items()}}
            )

    @classmethod
    def count(cls, table: str, filters: dict[str, Any] | None = None) -> int:
        """
        Count records matching equality filters.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = cls._apply_filters(
                client.table(table).select("id", count="exact"), filters
            )
            response = query.execute()
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table} records: {e}",
                code="COUNT_FAILED",
                details={"table": table}
            )

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @classmethod
    def insert(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a record.

        Returns:
            Inserted record with generated id and created_at

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                suggestion="Check required columns and value types",
                details={"table": table}
            )

    @classmethod
    def update(
        cls,
        table: str,
        record_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a record by id.

        Returns:
            Updated record, or None if no row has that id

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        record_id_str = cls._normalize_uuid(record_id)

        try:
            response = (
                client.table(table)
                .update(data)
                .eq("id", record_id_str)
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table} record: {e}",
                code="UPDATE_FAILED",
                details={"table": table, "id": record_id_str}
            )

    @classmethod
    def update_where(
        cls,
        table: str,
        record_id: str | UUID,
        conditions: dict[str, Any],
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a record only while it still matches `conditions`.

        The check and the write happen in one UPDATE statement, so two
        reviewers racing on the same record cannot both succeed.

        Returns:
            Updated record, or None if the id doesn't exist or no longer
            matches `conditions`

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        record_id_str = cls._normalize_uuid(record_id)

        try:
            query = client.table(table).update(data).eq("id", record_id_str)
            query = cls._apply_filters(query, conditions)
            response = query.execute()

            if not response.data:
                logger.info(
                    f"Conditional update skipped: {table} {record_id_str} "
                    f"does not match {conditions}"
                )
                return None
            return response.data[0]

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table} record: {e}",
                code="UPDATE_FAILED",
                details={"table": table, "id": record_id_str, "conditions": {k: str(v) for k, v in conditions.items()}}
            )

    @classmethod
    def update_where_status(
        cls,
        table: str,
        record_id: str | UUID,
        expected_status: str,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a record only while its status is `expected_status`.

        Returns:
            Updated record, or None if the status has moved on (or no such id)
        """
        return cls.update_where(table, record_id, {"status": expected_status}, data)

    @classmethod
    def delete(cls, table: str, record_id: str | UUID) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a row was deleted

        Raises:
            SupabaseClientError: If delete fails
        """
        client = cls.get_client()
        record_id_str = cls._normalize_uuid(record_id)

        try:
            response = (
                client.table(table)
                .delete()
                .eq("id", record_id_str)
                .execute()
            )
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete {table} record: {e}",
                code="DELETE_FAILED",
                details={"table": table, "id": record_id_str}
            )
