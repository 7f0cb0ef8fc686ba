"""
Tests for connection string parsing.
"""

import pytest

from sqlalchemy_dataapi import connect
from sqlalchemy_dataapi.dsn import (
    Credentials,
    format_connection_string,
    parse_connection_string,
)
from sqlalchemy_dataapi.exceptions import ConnectionStringError, InterfaceError

from conftest import CLUSTER_ARN, CONNECTION_STRING, DATABASE, SECRET_ARN


class TestUrlLayout:
    """Tests for dataapi:///<database>?clusterARN=..&secretARN=.."""

    def test_parses_all_fields(self):
        """Test that the three identifiers are extracted."""
        creds = parse_connection_string(CONNECTION_STRING)
        assert creds == Credentials(
            cluster_arn=CLUSTER_ARN, secret_arn=SECRET_ARN, database=DATABASE
        )

    def test_query_order_is_irrelevant(self):
        """Test that swapping the query arguments gives the same result."""
        swapped = f"dataapi:///{DATABASE}?secretARN={SECRET_ARN}&clusterARN={CLUSTER_ARN}"
        assert parse_connection_string(swapped) == parse_connection_string(CONNECTION_STRING)

    def test_missing_cluster_arn(self):
        """Test that a missing clusterARN is named in the error."""
        with pytest.raises(ConnectionStringError, match="Missing clusterARN"):
            parse_connection_string(f"dataapi:///{DATABASE}?secretARN={SECRET_ARN}")

    def test_missing_secret_arn(self):
        """Test that a missing secretARN is named in the error."""
        with pytest.raises(ConnectionStringError, match="Missing secretARN"):
            parse_connection_string(f"dataapi:///{DATABASE}?clusterARN={CLUSTER_ARN}")

    def test_missing_database(self):
        """Test that an empty path is rejected."""
        with pytest.raises(ConnectionStringError, match="Missing database"):
            parse_connection_string(f"dataapi:///?clusterARN={CLUSTER_ARN}&secretARN={SECRET_ARN}")

    def test_format_round_trip(self):
        """Test that the canonical rendering parses back to the same credentials."""
        creds = parse_connection_string(CONNECTION_STRING)
        assert parse_connection_string(format_connection_string(creds)) == creds


class TestPipeLayout:
    """Tests for dataapi:<cluster>|<secret>|<database>."""

    def test_three_segments(self):
        """Test the documented example."""
        creds = parse_connection_string("dataapi:arn:aws:cluster123|arn:aws:secret456|mydb")
        assert creds.cluster_arn == "arn:aws:cluster123"
        assert creds.secret_arn == "arn:aws:secret456"
        assert creds.database == "mydb"

    @pytest.mark.parametrize("conn_string", [
        "dataapi:arn:aws:cluster123|arn:aws:secret456",
        "dataapi:arn:aws:cluster123|arn:aws:secret456|mydb|extra",
    ])
    def test_wrong_segment_count(self, conn_string):
        """Test that two or four segments are rejected."""
        with pytest.raises(ConnectionStringError, match="segment"):
            parse_connection_string(conn_string)

    def test_empty_segment(self):
        """Test that an empty segment counts as a missing field."""
        with pytest.raises(ConnectionStringError, match="Missing secretARN"):
            parse_connection_string("dataapi:arn:aws:cluster123||mydb")


class TestPrefix:
    """Tests for scheme prefix checking."""

    @pytest.mark.parametrize("conn_string", [
        "postgresql://user@host/db",
        "arn:aws:cluster123|arn:aws:secret456|mydb",
        "",
    ])
    def test_rejects_other_schemes(self, conn_string):
        """Test that strings without the dataapi: prefix are rejected."""
        with pytest.raises(ConnectionStringError, match="Expected connection string"):
            parse_connection_string(conn_string)

    def test_connect_makes_no_remote_call(self, monkeypatch):
        """Test that a bad string fails before any client is created."""
        def fail(settings):
            raise AssertionError("client should not be created")

        monkeypatch.setattr("sqlalchemy_dataapi.base.create_client", fail)
        with pytest.raises(InterfaceError):
            connect("mysql://localhost/orders")


class TestCredentials:
    """Tests for explicit credentials."""

    def test_connect_with_keywords(self, rds_client, settings):
        """Test that connect() accepts the identifiers directly."""
        conn = connect(
            cluster_arn=CLUSTER_ARN,
            secret_arn=SECRET_ARN,
            database=DATABASE,
            client=rds_client,
            settings=settings,
        )
        assert conn.credentials.database == DATABASE

    def test_connect_with_missing_keyword(self, rds_client, settings):
        """Test that an omitted identifier is rejected."""
        with pytest.raises(ConnectionStringError, match="secret_arn"):
            connect(cluster_arn=CLUSTER_ARN, database=DATABASE, client=rds_client, settings=settings)

    def test_credentials_are_frozen(self):
        """Test that credentials cannot change after parsing."""
        creds = parse_connection_string(CONNECTION_STRING)
        with pytest.raises(AttributeError):
            creds.database = "other"
