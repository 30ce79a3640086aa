"""Exceptions raised by the persistence core."""


class FuseError(Exception):
    """Base class for all fuse-inventory exceptions."""


class SnapshotValidationError(FuseError):
    """A candidate snapshot violates referential integrity.

    Raised by the store when a commit is refused; the previous snapshot
    and the data files are left untouched.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Data validation failed:\n" + "\n".join(self.errors))


class StoreLoadError(SnapshotValidationError):
    """The durable data files are inconsistent and cannot be served."""


class OperationCancelled(FuseError):
    """A store operation was cancelled before it committed."""
