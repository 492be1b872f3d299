"""Exception hierarchy for position store errors."""


class PositionStoreError(Exception):
    """Base exception for all position store errors."""


class SchemaError(PositionStoreError):
    """Creating or verifying the persisted schema failed."""


class TransactionError(PositionStoreError):
    """A batch write failed and was rolled back.

    Args:
        msg: Human-readable description of the failure.
        row_count: Number of rows the rolled-back batch contained.

    """

    def __init__(self, msg: str, row_count: int) -> None:
        """Initialize transaction error.

        Args:
            msg: Human-readable description of the failure.
            row_count: Number of rows the rolled-back batch contained.

        """
        super().__init__(f"{msg} ({row_count} rows rolled back)")
        self.msg = msg
        self.row_count = row_count
