#!/usr/bin/env python3
"""
PostgreSQL / Greenplum Connector Module
Reads the lock manager snapshot (pg_locks) used by the deadlock detector.
"""

import logging
from typing import Any, Dict, List, Optional

import psycopg2
import psycopg2.extras

from .config.detection_config import DEFAULT_SNAPSHOT_QUERY
from .core.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


class PostgresLockSource:
    """
    Handles the database connection and the single pg_locks query
    """

    def __init__(self, conn_str: str, query: str = DEFAULT_SNAPSHOT_QUERY,
                 connect_timeout: Optional[int] = 10):
        """
        Initialize the lock source

        Args:
            conn_str: libpq connection string, e.g. "host=mdw dbname=gpadmin sslmode=disable"
            query: Snapshot query returning the pg_locks columns
            connect_timeout: Seconds to wait for the connection
        """
        self.conn_str = conn_str
        self.query = query
        self.connect_timeout = connect_timeout
        self.connection = None

    def connect(self):
        """
        Open the connection

        Raises:
            SourceUnavailable: If the database cannot be reached
        """
        if self.connection is not None:
            return self.connection

        logger.debug("Connecting to database for lock snapshot")
        params: Dict[str, Any] = {}
        if self.connect_timeout:
            params['connect_timeout'] = self.connect_timeout
        try:
            self.connection = psycopg2.connect(self.conn_str, **params)
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to database: {e}")
            raise SourceUnavailable(f"cannot connect to database: {e}") from e
        # Read-only snapshot; nothing to commit
        self.connection.autocommit = True
        return self.connection

    def fetch_lock_rows(self) -> List[Dict[str, Any]]:
        """
        Run the snapshot query and read it to completion

        Returns:
            List[Dict]: one dictionary per pg_locks row

        Raises:
            SourceUnavailable: If the connection or the query fails
        """
        connection = self.connect()
        try:
            with connection.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(self.query)
                rows = [dict(row) for row in cursor.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error fetching lock snapshot: {e}")
            raise SourceUnavailable(f"cannot query pg_locks: {e}") from e

        logger.info(f"Fetched {len(rows)} lock rows")
        return rows

    def close(self):
        """
        Close the connection
        """
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            logger.debug("Database connection closed")

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
