"""
Block meta exception handling and standardized error codes
"""


class BlockMetaErrorCodes:
    """Standardized error codes for block meta processing"""

    # Bucket key errors
    INVALID_KEY = "INVALID_KEY"

    # Inbound block errors
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_BLOCK = "INVALID_BLOCK"

    # Store contract errors
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"

    # Sink schema errors
    UNKNOWN_COLUMN = "UNKNOWN_COLUMN"


class BlockMetaException(Exception):

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class InvalidKeyError(BlockMetaException):
    """Malformed or out-of-range bucket key"""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(BlockMetaErrorCodes.INVALID_KEY, f"invalid key {key!r}: {reason}")


class MissingFieldError(BlockMetaException):
    """A required field is absent from a block or a delta"""

    def __init__(self, field_name: str, context: str = "block"):
        self.field_name = field_name
        super().__init__(BlockMetaErrorCodes.MISSING_FIELD, f"{context} is missing required field {field_name!r}")


class InvalidTimestampError(BlockMetaException):

    def __init__(self, message: str):
        super().__init__(BlockMetaErrorCodes.INVALID_TIMESTAMP, message)


class UnsupportedOperationError(BlockMetaException):
    """A delta operation the changelog builder does not handle"""

    def __init__(self, operation, key: str = None):
        self.operation = operation
        self.key = key
        super().__init__(
            BlockMetaErrorCodes.UNSUPPORTED_OPERATION,
            f"unsupported operation {operation!r} for key {key!r}",
        )


class SchemaError(BlockMetaException):

    def __init__(self, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(BlockMetaErrorCodes.UNKNOWN_COLUMN, f"table {table!r} has no column {column!r}")
