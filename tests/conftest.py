"""
Pytest configuration and shared fixtures for the Data API driver tests.

Remote calls go to a real boto3 rds-data client wrapped in a botocore
Stubber, so every request is validated against the service model without
touching the network.
"""

import boto3
import pytest
from botocore.stub import Stubber

from sqlalchemy_dataapi import connect
from sqlalchemy_dataapi.config import DataAPISettings

CLUSTER_ARN = "arn:aws:rds:us-east-1:123456789012:cluster:orders"
SECRET_ARN = "arn:aws:secretsmanager:us-east-1:123456789012:secret:orders-abc123"
DATABASE = "orders"
CONNECTION_STRING = f"dataapi:///{DATABASE}?clusterARN={CLUSTER_ARN}&secretARN={SECRET_ARN}"
TRANSACTION_ID = "AQC5SRDIm6W4Fo4ZW9KlUm3B"


def execute_params(sql, parameters=None, transaction_id=None):
    """Expected ExecuteStatement arguments for the default credentials."""
    params = {
        "resourceArn": CLUSTER_ARN,
        "secretArn": SECRET_ARN,
        "database": DATABASE,
        "sql": sql,
        "parameters": parameters or [],
        "includeResultMetadata": True,
    }
    if transaction_id:
        params["transactionId"] = transaction_id
    return params


def transaction_params(transaction_id=TRANSACTION_ID):
    """Expected CommitTransaction / RollbackTransaction arguments."""
    return {
        "resourceArn": CLUSTER_ARN,
        "secretArn": SECRET_ARN,
        "transactionId": transaction_id,
    }


def begin_params():
    return {
        "resourceArn": CLUSTER_ARN,
        "secretArn": SECRET_ARN,
        "database": DATABASE,
    }


@pytest.fixture
def rds_client():
    """A real rds-data client that never reaches AWS."""
    return boto3.client(
        "rds-data",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(rds_client):
    """Stubber bound to rds_client, active for the test."""
    with Stubber(rds_client) as stub:
        yield stub


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return DataAPISettings(_env_file=None, region_name="us-east-1", log_statements=True)


@pytest.fixture
def connection(rds_client, stubber, settings):
    """An open connection using the stubbed client."""
    conn = connect(CONNECTION_STRING, client=rds_client, settings=settings)
    yield conn
    conn.close()


@pytest.fixture
def users_response():
    """ExecuteStatement response for a two-row SELECT."""
    return {
        "columnMetadata": [
            {"name": "id", "typeName": "int8", "nullable": 0, "precision": 19, "scale": 0},
            {"name": "name", "typeName": "varchar", "nullable": 1, "precision": 255, "scale": 0},
            {"name": "avatar", "typeName": "bytea", "nullable": 1},
        ],
        "records": [
            [{"longValue": 1}, {"stringValue": "Ada"}, {"blobValue": b"\x89PNG"}],
            [{"longValue": 2}, {"stringValue": "Grace"}, {"isNull": True}],
        ],
        "numberOfRecordsUpdated": 0,
    }
