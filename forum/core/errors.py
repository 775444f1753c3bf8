"""
Data layer failures.

Every error raised by `DataStore` derives from `DataStoreError`. Driver
failures that the store does not classify (for example an unknown column)
propagate as the driver's own exception.
"""

from __future__ import annotations


class DataStoreError(RuntimeError):
    pass


class NotFoundError(DataStoreError):
    """A required single-row fetch found nothing (or a row without an id)."""


class InvalidArgumentError(DataStoreError):
    """A caller-supplied value failed a precondition."""


class DuplicateEntityError(DataStoreError):
    """A unique constraint rejected an insert."""


class OwnershipError(DataStoreError):
    """The acting user does not own the record being changed."""


class WriteFailedError(DataStoreError):
    pass


class InsertionFailedError(WriteFailedError):
    pass


class UpdateFailedError(WriteFailedError):
    pass


class DeletionFailedError(WriteFailedError):
    pass


class FetchFailedError(DataStoreError):
    pass
