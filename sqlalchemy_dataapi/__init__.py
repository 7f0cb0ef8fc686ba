"""
SQLAlchemy dialect and DB-API driver for the AWS RDS Data API

This package runs SQL against Aurora clusters through the RDS Data API, an
HTTPS service, instead of a database socket. It provides a PEP 249 driver
and a SQLAlchemy dialect built on it.

Usage:
    import sqlalchemy_dataapi

    conn = sqlalchemy_dataapi.connect(
        "dataapi:///orders"
        "?clusterARN=arn:aws:rds:us-east-1:123456789012:cluster:prod"
        "&secretARN=arn:aws:secretsmanager:us-east-1:123456789012:secret:prod"
    )
    cursor = conn.cursor()
    cursor.execute("SELECT id, city FROM orders WHERE total > :1", [100])
    rows = cursor.fetchall()

    # With SQLAlchemy (dialect registered through the package entry point)
    from sqlalchemy import create_engine
    engine = create_engine("dataapi:///orders?clusterARN=...&secretARN=...")

AWS credentials and region are resolved by boto3.
"""

from sqlalchemy_dataapi.base import (
    Connection,
    DataAPICursor,
    DataAPIDBAPI,
    Result,
    Rows,
    Statement,
    apilevel,
    connect,
    paramstyle,
    threadsafety,
)
from sqlalchemy_dataapi.config import DataAPISettings, get_settings
from sqlalchemy_dataapi.dsn import Credentials, parse_connection_string
from sqlalchemy_dataapi.exceptions import (
    ConnectionStringError,
    DatabaseError,
    DataError,
    Error,
    IntegrityError,
    InterfaceError,
    InternalError,
    LastInsertIdUnavailable,
    NotSupportedError,
    OperationalError,
    ProgrammingError,
    Warning,
)
from sqlalchemy_dataapi.transaction import Transaction, TransactionState
from sqlalchemy_dataapi.values import TaggedValue

__version__ = "1.0.0"
__all__ = [
    "Connection",
    "DataAPICursor",
    "DataAPIDBAPI",
    "Statement",
    "Rows",
    "Result",
    "Transaction",
    "TransactionState",
    "TaggedValue",
    "Credentials",
    "DataAPISettings",
    "connect",
    "get_settings",
    "parse_connection_string",
    "apilevel",
    "paramstyle",
    "threadsafety",
    # Exceptions
    "Error",
    "Warning",
    "InterfaceError",
    "DatabaseError",
    "DataError",
    "OperationalError",
    "IntegrityError",
    "InternalError",
    "ProgrammingError",
    "NotSupportedError",
    "ConnectionStringError",
    "LastInsertIdUnavailable",
]
