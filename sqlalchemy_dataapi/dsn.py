"""
Connection string parsing

Two layouts are accepted, told apart by what follows the scheme prefix:

    dataapi:///<database>?clusterARN=<cluster ARN>&secretARN=<secret ARN>
    dataapi:<cluster ARN>|<secret ARN>|<database>

The URL layout is canonical; the pipe layout is kept for connection strings
written against earlier releases.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, quote, unquote, urlencode, urlparse

from sqlalchemy_dataapi.exceptions import ConnectionStringError

SCHEME = "dataapi"
PREFIX = f"{SCHEME}:"

URL_FORMAT = f"'{PREFIX}///<database>?clusterARN=<cluster ARN>&secretARN=<secret ARN>'"
PIPE_FORMAT = f"'{PREFIX}<cluster ARN>|<secret ARN>|<database>'"


@dataclass(frozen=True)
class Credentials:
    """Identifiers sent with every Data API call."""

    cluster_arn: str
    secret_arn: str
    database: str

    def __post_init__(self):
        for name in ("cluster_arn", "secret_arn", "database"):
            if not getattr(self, name):
                raise ConnectionStringError(f"Missing {name} in credentials")


def parse_connection_string(conn_string: str) -> Credentials:
    """
    Parse a driver connection string into Credentials.

    Raises:
        ConnectionStringError: prefix missing, a field missing, or the
            pipe layout not having exactly three segments
    """
    if not isinstance(conn_string, str) or not conn_string.startswith(PREFIX):
        raise ConnectionStringError(
            f"Expected connection string with the format {URL_FORMAT} "
            f"or {PIPE_FORMAT}, got '{conn_string}'"
        )

    remainder = conn_string[len(PREFIX):]
    if remainder.startswith("//"):
        return _parse_url(conn_string)
    return _parse_pipe(conn_string, remainder)


def _parse_url(conn_string: str) -> Credentials:
    try:
        parsed = urlparse(conn_string)
        query = parse_qs(parsed.query)
    except ValueError as e:
        raise ConnectionStringError(
            f"Error parsing connection URL '{conn_string}': {e}"
        ) from e

    cluster_arn = query.get("clusterARN", [""])[0]
    if not cluster_arn:
        raise ConnectionStringError(f"Missing clusterARN in connection URL '{conn_string}'")

    secret_arn = query.get("secretARN", [""])[0]
    if not secret_arn:
        raise ConnectionStringError(f"Missing secretARN in connection URL '{conn_string}'")

    database = unquote(parsed.path.lstrip("/"))
    if not database:
        raise ConnectionStringError(f"Missing database in connection URL '{conn_string}'")

    return Credentials(cluster_arn=cluster_arn, secret_arn=secret_arn, database=database)


def _parse_pipe(conn_string: str, remainder: str) -> Credentials:
    segments = remainder.split("|")
    if len(segments) != 3:
        raise ConnectionStringError(
            f"Expected connection string with the format {PIPE_FORMAT}, "
            f"got {len(segments)} segment(s) in '{conn_string}'"
        )

    cluster_arn, secret_arn, database = segments
    if not cluster_arn:
        raise ConnectionStringError(f"Missing clusterARN in connection string '{conn_string}'")
    if not secret_arn:
        raise ConnectionStringError(f"Missing secretARN in connection string '{conn_string}'")
    if not database:
        raise ConnectionStringError(f"Missing database in connection string '{conn_string}'")

    return Credentials(cluster_arn=cluster_arn, secret_arn=secret_arn, database=database)


def format_connection_url(
    cluster_arn: Optional[str], secret_arn: Optional[str], database: Optional[str]
) -> str:
    """
    Render identifiers in the canonical URL layout without validating them.

    Empty identifiers are left out, so parsing the result reports them.
    """
    query = urlencode(
        {name: value for name, value in (("clusterARN", cluster_arn), ("secretARN", secret_arn)) if value}
    )
    return f"{PREFIX}///{quote(database or '')}?{query}"


def format_connection_string(credentials: Credentials) -> str:
    """Render credentials in the canonical URL layout."""
    return format_connection_url(credentials.cluster_arn, credentials.secret_arn, credentials.database)
