"""
SQLAlchemy Dialect for the RDS Data API

This module implements a SQLAlchemy dialect that runs statements through
the Data API driver in ``sqlalchemy_dataapi.base``.
"""

import datetime
import decimal
import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy import types
from sqlalchemy.engine import default
from sqlalchemy.engine.url import URL

from sqlalchemy_dataapi.base import DataAPIDBAPI
from sqlalchemy_dataapi.dsn import format_connection_url
from sqlalchemy_dataapi.values import parse_time, parse_timestamp

logger = logging.getLogger(__name__)

# Query arguments passed through to connect() under their own names.
CONNECT_ARGUMENTS = ("region_name", "profile_name", "endpoint_url")


class _DataAPIDateTime(types.DateTime):
    """Timestamps come back as YYYY-MM-DD HH:MM:SS[.fff] strings."""

    def result_processor(self, dialect, coltype):
        def process(value):
            if isinstance(value, str):
                return parse_timestamp(value)
            return value
        return process


class _DataAPIDate(types.Date):

    def result_processor(self, dialect, coltype):
        def process(value):
            if isinstance(value, str):
                return datetime.date.fromisoformat(value[:10])
            return value
        return process


class _DataAPITime(types.Time):

    def result_processor(self, dialect, coltype):
        def process(value):
            if isinstance(value, str):
                return parse_time(value)
            return value
        return process


class _DataAPINumeric(types.Numeric):
    """DECIMAL columns come back as strings."""

    def result_processor(self, dialect, coltype):
        asdecimal = self.asdecimal

        def process(value):
            if value is None:
                return None
            if asdecimal:
                return decimal.Decimal(str(value))
            return float(value)
        return process


class _DataAPIFloat(types.Float):

    def result_processor(self, dialect, coltype):
        asdecimal = self.asdecimal

        def process(value):
            if value is None:
                return None
            if asdecimal:
                return decimal.Decimal(str(value))
            return float(value)
        return process


class DataAPIDialect(default.DefaultDialect):
    """
    SQLAlchemy Dialect for the RDS Data API.

    Connection URL format:
        dataapi:///<database>?clusterARN=<cluster ARN>&secretARN=<secret ARN>

    Optional query arguments: region_name, profile_name, endpoint_url.

    Examples:
        engine = create_engine(
            "dataapi:///orders"
            "?clusterARN=arn:aws:rds:us-east-1:123456789012:cluster:prod"
            "&secretARN=arn:aws:secretsmanager:us-east-1:123456789012:secret:prod"
        )

        # Every statement auto-committed by the service
        engine = create_engine(url, use_transactions=False)

        # Reuse an existing boto3 client
        engine = create_engine(url, connect_args={"client": rds_data_client})
    """

    name = "dataapi"
    driver = "dataapi"

    default_paramstyle = "numeric"

    # Dialect features
    supports_alter = True
    supports_statement_cache = True
    supports_unicode_statements = True
    supports_unicode_binds = True
    returns_unicode_strings = True
    supports_multivalues_insert = True
    supports_default_values = True
    supports_empty_insert = False
    postfetch_lastrowid = False

    # numberOfRecordsUpdated is exact; batch calls report no counts
    supports_sane_rowcount = True
    supports_sane_multi_rowcount = False

    colspecs = {
        types.DateTime: _DataAPIDateTime,
        types.Date: _DataAPIDate,
        types.Time: _DataAPITime,
        types.Numeric: _DataAPINumeric,
        types.Float: _DataAPIFloat,
    }

    def __init__(self, use_transactions: bool = True, **kwargs):
        """
        Args:
            use_transactions: Map SQLAlchemy transactions onto Data API
                transactions. When False the service commits each statement
                on its own.
        """
        super().__init__(**kwargs)
        self.use_transactions = use_transactions

    @classmethod
    def import_dbapi(cls):
        """Import and return the DBAPI module."""
        return DataAPIDBAPI

    def create_connect_args(self, url: URL) -> Tuple[List, Dict[str, Any]]:
        """
        Build connection arguments from URL.

        URL format: dataapi:///<database>?clusterARN=..&secretARN=..

        The identifiers are passed on as a connection string so that
        missing ones are reported by the connection-string parser.
        """
        query = dict(url.query) if url.query else {}

        kwargs = {
            "dsn": format_connection_url(
                query.pop("clusterARN", None),
                query.pop("secretARN", None),
                url.database,
            ),
        }
        for name in CONNECT_ARGUMENTS:
            if name in query:
                kwargs[name] = query.pop(name)

        if query:
            logger.warning(f"Ignoring unknown connection URL arguments: {', '.join(sorted(query))}")

        return [], kwargs

    def do_begin(self, dbapi_connection) -> None:
        """Open a Data API transaction for the SQLAlchemy transaction."""
        if self.use_transactions:
            dbapi_connection.begin()
