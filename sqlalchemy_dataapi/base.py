"""
DBAPI 2.0 compatible interface for the RDS Data API

This module implements a PEP 249 (DB-API 2.0) compatible interface that
runs statements through the AWS RDS Data API instead of a database socket.

The Data API is stateless: every call carries the cluster ARN, the secret
ARN and the database name, plus the transaction id when one is open.
"""

import datetime
import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

import boto3

from sqlalchemy_dataapi.config import DataAPISettings, get_settings
from sqlalchemy_dataapi.dsn import Credentials, format_connection_string, parse_connection_string
from sqlalchemy_dataapi.exceptions import (
    CLIENT_ERRORS,
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
    translate_client_error,
)
from sqlalchemy_dataapi.transaction import Transaction
from sqlalchemy_dataapi.values import Parameters, build_parameters, decode_field

logger = logging.getLogger(__name__)

# DB-API 2.0 globals
apilevel = "2.0"
threadsafety = 1  # Threads may share the module, but not connections
paramstyle = "numeric"  # Positional by index: WHERE name=:1


# =============================================================================
# TYPE OBJECTS AND CONSTRUCTORS
# =============================================================================

class DBAPITypeObject:
    """Compares equal to any of the Data API type names it groups."""

    def __init__(self, *type_names: str):
        self.values = frozenset(type_names)

    def __eq__(self, other):
        if isinstance(other, str):
            return other.upper() in self.values
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self.values)


STRING = DBAPITypeObject(
    "VARCHAR", "CHAR", "BPCHAR", "TEXT", "NAME", "ENUM", "SET",
    "TINYTEXT", "MEDIUMTEXT", "LONGTEXT", "JSON", "JSONB", "UUID",
)
BINARY = DBAPITypeObject(
    "BYTEA", "BLOB", "BINARY", "VARBINARY", "TINYBLOB", "MEDIUMBLOB", "LONGBLOB",
)
NUMBER = DBAPITypeObject(
    "INT", "INT2", "INT4", "INT8", "INTEGER", "SMALLINT", "BIGINT", "TINYINT",
    "MEDIUMINT", "SERIAL", "BIGSERIAL", "FLOAT", "FLOAT4", "FLOAT8", "DOUBLE",
    "REAL", "DECIMAL", "NUMERIC", "BIT", "BOOL", "BOOLEAN",
)
DATETIME = DBAPITypeObject(
    "DATE", "TIME", "TIMETZ", "DATETIME", "TIMESTAMP", "TIMESTAMPTZ", "YEAR",
)
ROWID = DBAPITypeObject("OID", "ROWID")

Date = datetime.date
Time = datetime.time
Timestamp = datetime.datetime
Binary = bytes


def DateFromTicks(ticks: float) -> datetime.date:
    return Date(*time.localtime(ticks)[:3])


def TimeFromTicks(ticks: float) -> datetime.time:
    return Time(*time.localtime(ticks)[3:6])


def TimestampFromTicks(ticks: float) -> datetime.datetime:
    return Timestamp(*time.localtime(ticks)[:6])


# =============================================================================
# STATEMENT, ROWS, RESULT
# =============================================================================

class Result:
    """Outcome of a statement that does not return rows."""

    def __init__(self, response: Dict[str, Any]):
        self.response = response

    def rows_affected(self) -> int:
        """Rows updated as reported by the service; 0 for queries."""
        return self.response.get("numberOfRecordsUpdated", 0)

    def last_insert_id(self) -> int:
        """Always raises: the Data API returns no generated id for plain statements."""
        raise LastInsertIdUnavailable()


class Rows:
    """
    Forward-only view over the records of one ExecuteStatement response.
    """

    def __init__(self, response: Dict[str, Any]):
        self.response: Optional[Dict[str, Any]] = response
        self._position = 0

    def _require_open(self) -> Dict[str, Any]:
        if self.response is None:
            raise InterfaceError("Rows are closed")
        return self.response

    @property
    def column_metadata(self) -> List[Dict[str, Any]]:
        return self._require_open().get("columnMetadata", [])

    def columns(self) -> List[str]:
        """Column names in field order; empty string where the name is unknown."""
        return [cm.get("name", "") for cm in self.column_metadata]

    @property
    def description(self) -> Optional[List[Tuple]]:
        metadata = self.column_metadata
        if not metadata:
            return None
        return [
            (
                cm.get("name", ""),  # name
                cm.get("typeName", "").upper(),  # type_code
                None,  # display_size
                None,  # internal_size
                cm.get("precision"),  # precision
                cm.get("scale"),  # scale
                cm.get("nullable", 1) != 0,  # null_ok
            )
            for cm in metadata
        ]

    def next(self, dest: List[Any]) -> bool:
        """
        Decode the next record into ``dest``.

        Returns False, leaving ``dest`` untouched, once every record has been
        read. ``dest`` must be exactly as wide as ``columns()``.
        """
        records = self._require_open().get("records", [])
        if self._position >= len(records):
            return False

        record = records[self._position]
        if len(dest) != len(record):
            raise ProgrammingError(
                f"Destination has {len(dest)} slots for {len(record)} columns"
            )
        for n, field in enumerate(record):
            dest[n] = decode_field(field)
        self._position += 1
        return True

    def __iter__(self):
        return self

    def __next__(self) -> Tuple:
        row = [None] * len(self.columns())
        if not self.next(row):
            raise StopIteration
        return tuple(row)

    def close(self) -> None:
        """Release the response."""
        self.response = None


class Statement:
    """
    SQL text bound to a connection.

    Nothing is sent to the service until ``exec`` or ``query``; the Data API
    has no server-side prepare step. A statement may be run any number of
    times with different parameters.
    """

    # Placeholder count is not checked locally; the service validates it.
    num_input = -1

    def __init__(self, connection: "Connection", sql: str):
        self.connection: Optional[Connection] = connection
        self.sql = sql

    def _require_connection(self) -> "Connection":
        if self.connection is None:
            raise InterfaceError("Statement is closed")
        return self.connection

    def _request(self, conn: "Connection") -> Dict[str, Any]:
        creds = conn.credentials
        request = {
            "resourceArn": creds.cluster_arn,
            "secretArn": creds.secret_arn,
            "database": creds.database,
            "sql": self.sql,
        }
        if conn.transaction is not None:
            request["transactionId"] = conn.transaction.id
        return request

    def _execute(self, params: Parameters = None) -> Dict[str, Any]:
        conn = self._require_connection()
        client = conn.client
        request = self._request(conn)
        request["parameters"] = build_parameters(params)
        request["includeResultMetadata"] = True

        if conn.settings.log_statements:
            logger.debug(
                f"Executing '{self.sql}' with {len(request['parameters'])} parameter(s)"
                f" transaction={request.get('transactionId')}"
            )

        try:
            return client.execute_statement(**request)
        except CLIENT_ERRORS as e:
            raise translate_client_error(e) from e

    def exec(self, params: Parameters = None) -> Result:
        """Run a statement that does not return rows, such as INSERT or UPDATE."""
        return Result(self._execute(params))

    def query(self, params: Parameters = None) -> Rows:
        """Run a statement that returns rows, such as SELECT."""
        return Rows(self._execute(params))

    def exec_many(self, param_sets: Iterable[Parameters]) -> List[Dict[str, Any]]:
        """
        Run the statement once per parameter set in a single
        BatchExecuteStatement call.

        Returns:
            The service's updateResults, one entry per parameter set
        """
        conn = self._require_connection()
        client = conn.client
        request = self._request(conn)
        request["parameterSets"] = [build_parameters(params) for params in param_sets]

        if conn.settings.log_statements:
            logger.debug(
                f"Batch executing '{self.sql}' with {len(request['parameterSets'])} set(s)"
            )

        try:
            response = client.batch_execute_statement(**request)
        except CLIENT_ERRORS as e:
            raise translate_client_error(e) from e
        return response.get("updateResults", [])

    def close(self) -> None:
        """Close the statement."""
        self.connection = None


# =============================================================================
# CURSOR
# =============================================================================

class DataAPICursor:
    """
    DB-API 2.0 Cursor implementation for the RDS Data API.
    """

    def __init__(self, connection: "Connection"):
        self.connection = connection
        self.description: Optional[List[Tuple]] = None
        self.rowcount: int = -1
        self.lastrowid = None
        self.arraysize: int = 1
        self._rows: Optional[Rows] = None
        self._closed: bool = False

    def _check_open(self) -> None:
        if self._closed:
            raise ProgrammingError("Cursor is closed")

    def _reset(self) -> None:
        if self._rows is not None:
            self._rows.close()
        self._rows = None
        self.description = None
        self.rowcount = -1

    def close(self) -> None:
        """Close the cursor."""
        self._reset()
        self._closed = True

    def execute(self, operation: str, parameters: Parameters = None) -> "DataAPICursor":
        """
        Execute a SQL statement.

        Args:
            operation: SQL text, positional parameters written as :1, :2, ...
            parameters: Sequence of positional values, or a mapping for
                named :name parameters

        Returns:
            Self for chaining
        """
        self._check_open()
        self._reset()

        statement = self.connection.prepare(operation)
        response = statement._execute(parameters)

        rows = Rows(response)
        self.description = rows.description
        if self.description is not None:
            self._rows = rows
            self.rowcount = len(response.get("records", []))
        else:
            self.rowcount = Result(response).rows_affected()
        return self

    def executemany(
        self,
        operation: str,
        seq_of_parameters: Iterable[Parameters],
    ) -> "DataAPICursor":
        """Execute a statement once per parameter set in one batch call."""
        self._check_open()
        self._reset()

        statement = self.connection.prepare(operation)
        statement.exec_many(seq_of_parameters)
        return self

    def _require_rows(self) -> Rows:
        self._check_open()
        if self._rows is None:
            raise ProgrammingError("No result set; the last statement returned no rows")
        return self._rows

    def fetchone(self) -> Optional[Tuple]:
        """Fetch the next row."""
        rows = self._require_rows()
        row = [None] * len(self.description)
        if not rows.next(row):
            return None
        return tuple(row)

    def fetchmany(self, size: Optional[int] = None) -> List[Tuple]:
        """Fetch multiple rows."""
        if size is None:
            size = self.arraysize

        rows = []
        for _ in range(size):
            row = self.fetchone()
            if row is None:
                break
            rows.append(row)
        return rows

    def fetchall(self) -> List[Tuple]:
        """Fetch all remaining rows."""
        return list(iter(self.fetchone, None))

    def setinputsizes(self, sizes: List) -> None:
        """Set input sizes (no-op for the Data API)."""
        pass

    def setoutputsize(self, size: int, column: Optional[int] = None) -> None:
        """Set output size (no-op for the Data API)."""
        pass

    def __iter__(self):
        """Make cursor iterable."""
        return self

    def __next__(self):
        """Get next row."""
        row = self.fetchone()
        if row is None:
            raise StopIteration
        return row


# =============================================================================
# CONNECTION
# =============================================================================

class Connection:
    """
    DB-API 2.0 Connection implementation for the RDS Data API.

    Statements outside ``begin()`` are auto-committed by the service one
    by one. Inside, every statement carries the transaction id until
    ``commit()`` or ``rollback()``.
    """

    def __init__(
        self,
        credentials: Credentials,
        client: Any,
        settings: Optional[DataAPISettings] = None,
    ):
        self.credentials = credentials
        self.settings = settings or get_settings()
        self._client = client
        self._transaction: Optional[Transaction] = None

    @property
    def client(self) -> Any:
        """The boto3 rds-data client."""
        if self._client is None:
            raise InterfaceError("Connection is closed")
        return self._client

    @property
    def closed(self) -> bool:
        return self._client is None

    def _check_open(self) -> None:
        if self._client is None:
            raise InterfaceError("Connection is closed")

    @property
    def transaction(self) -> Optional[Transaction]:
        """The open transaction, if any."""
        return self._transaction

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def begin(self) -> Transaction:
        """
        Start a remote transaction.

        A transaction already open on this connection is not rolled back;
        it stops being attached to new statements.
        """
        self._check_open()
        if self._transaction is not None:
            logger.warning(
                f"Beginning a transaction while {self._transaction.id} is still open"
            )
        self._transaction = Transaction.begin(self)
        return self._transaction

    def _release_transaction(self, transaction: Transaction) -> None:
        if self._transaction is transaction:
            self._transaction = None

    def prepare(self, sql: str) -> Statement:
        """Bind SQL text to this connection. Makes no remote call."""
        self._check_open()
        return Statement(self, sql)

    def cursor(self) -> DataAPICursor:
        """Create a new cursor."""
        if self.closed:
            raise ProgrammingError("Connection is closed")
        return DataAPICursor(self)

    def commit(self) -> None:
        """Commit the open transaction; no-op when none is open."""
        self._check_open()
        if self._transaction is not None:
            self._transaction.commit()

    def rollback(self) -> None:
        """Roll back the open transaction; no-op when none is open."""
        self._check_open()
        if self._transaction is not None:
            self._transaction.rollback()

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._transaction is not None:
            logger.warning(
                f"Closing connection with transaction {self._transaction.id} still open"
            )
        self._client = None
        self._transaction = None

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup."""
        self.close()
        return False


def create_client(settings: DataAPISettings) -> Any:
    """
    Build an rds-data client from a fresh boto3 session.

    Credentials are resolved by boto3's default chain.
    """
    try:
        session = boto3.session.Session(
            profile_name=settings.profile_name,
            region_name=settings.region_name,
        )
        return session.client("rds-data", endpoint_url=settings.endpoint_url)
    except CLIENT_ERRORS as e:
        raise OperationalError(f"Error creating session: {e}", original_error=e) from e


class DataAPIDBAPI:
    """
    DB-API 2.0 module-level interface.
    """

    # Module globals
    apilevel = apilevel
    threadsafety = threadsafety
    paramstyle = paramstyle

    # Exceptions
    Error = Error
    Warning = Warning
    InterfaceError = InterfaceError
    DatabaseError = DatabaseError
    DataError = DataError
    OperationalError = OperationalError
    IntegrityError = IntegrityError
    InternalError = InternalError
    ProgrammingError = ProgrammingError
    NotSupportedError = NotSupportedError

    # Types
    STRING = STRING
    BINARY = BINARY
    NUMBER = NUMBER
    DATETIME = DATETIME
    ROWID = ROWID
    Date = Date
    Time = Time
    Timestamp = Timestamp
    Binary = Binary

    @staticmethod
    def connect(
        dsn: Optional[str] = None,
        *,
        cluster_arn: Optional[str] = None,
        secret_arn: Optional[str] = None,
        database: Optional[str] = None,
        client: Any = None,
        settings: Optional[DataAPISettings] = None,
        **overrides: Any,
    ) -> Connection:
        """
        Open a connection to the RDS Data API.

        Args:
            dsn: Connection string, 'dataapi:///<database>?clusterARN=..&secretARN=..'
                or 'dataapi:<cluster ARN>|<secret ARN>|<database>'
            cluster_arn, secret_arn, database: Explicit credentials, used
                when no dsn is given
            client: Pre-built boto3 rds-data client; one is created when omitted
            settings: Driver settings; environment defaults when omitted
            **overrides: region_name, profile_name or endpoint_url applied
                over the settings

        Returns:
            Connection instance
        """
        if dsn is not None:
            credentials = parse_connection_string(dsn)
        else:
            credentials = Credentials(
                cluster_arn=cluster_arn or "",
                secret_arn=secret_arn or "",
                database=database or "",
            )

        settings = settings or get_settings()
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            unknown = set(overrides) - {"region_name", "profile_name", "endpoint_url"}
            if unknown:
                raise InterfaceError(f"Unknown connection arguments: {', '.join(sorted(unknown))}")
            settings = settings.model_copy(update=overrides)

        if client is None:
            client = create_client(settings)

        logger.debug(f"Opened Data API connection: {format_connection_string(credentials)}")
        return Connection(credentials, client, settings=settings)


# Convenience function
def connect(dsn: Optional[str] = None, **kwargs) -> Connection:
    """Create a Data API connection."""
    return DataAPIDBAPI.connect(dsn, **kwargs)
