"""
Data API transactions

A Transaction wraps the id returned by BeginTransaction. It moves from
ACTIVE to exactly one terminal state and never back; the id is forgotten as
soon as commit or rollback has been attempted, whatever the outcome.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy_dataapi.exceptions import (
    CLIENT_ERRORS,
    ProgrammingError,
    translate_client_error,
)

if TYPE_CHECKING:
    from sqlalchemy_dataapi.base import Connection

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"


class Transaction:
    """
    A remote transaction bound to one Connection.

    Usage:
        tx = conn.begin()
        conn.cursor().execute("UPDATE t SET x = :1", [1])
        tx.commit()
    """

    def __init__(self, connection: "Connection", transaction_id: str):
        self.connection = connection
        self._id: Optional[str] = transaction_id
        self.state = TransactionState.ACTIVE

    @classmethod
    def begin(cls, connection: "Connection") -> "Transaction":
        """
        Start a transaction with BeginTransaction.

        Raises:
            DatabaseError / OperationalError: the remote call failed; no
                transaction exists in that case
        """
        creds = connection.credentials
        try:
            response = connection.client.begin_transaction(
                resourceArn=creds.cluster_arn,
                secretArn=creds.secret_arn,
                database=creds.database,
            )
        except CLIENT_ERRORS as e:
            raise translate_client_error(e) from e

        tx = cls(connection, response["transactionId"])
        logger.debug(f"Began transaction {tx.id} on {creds.database}")
        return tx

    @property
    def id(self) -> Optional[str]:
        """The remote id while ACTIVE, None afterwards."""
        return self._id

    @property
    def is_active(self) -> bool:
        return self.state is TransactionState.ACTIVE

    def commit(self) -> None:
        """Commit with CommitTransaction."""
        self._finish("commit_transaction", TransactionState.COMMITTED)

    def rollback(self) -> None:
        """Roll back with RollbackTransaction."""
        self._finish("rollback_transaction", TransactionState.ROLLED_BACK)

    def _finish(self, operation: str, outcome: TransactionState) -> None:
        if not self.is_active:
            raise ProgrammingError(
                f"Transaction is {self.state.value} and has no id to send"
            )

        transaction_id = self._id
        creds = self.connection.credentials
        client = self.connection.client

        # Cleared before the call: a failed commit must not leave a reusable id.
        self._id = None
        self.connection._release_transaction(self)

        try:
            getattr(client, operation)(
                resourceArn=creds.cluster_arn,
                secretArn=creds.secret_arn,
                transactionId=transaction_id,
            )
        except CLIENT_ERRORS as e:
            self.state = TransactionState.FAILED
            logger.debug(f"{operation} failed for transaction {transaction_id}: {e}")
            raise translate_client_error(e) from e

        self.state = outcome
        logger.debug(f"Transaction {transaction_id} {outcome.value}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.is_active:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        return False

    def __repr__(self):
        return f"<Transaction id={self._id!r} state={self.state.value}>"
