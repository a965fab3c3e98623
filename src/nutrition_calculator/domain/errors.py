"""Errors raised by the application services and adapters."""

from uuid import UUID


class RecordStoreError(RuntimeError):
    """The record store failed to persist or return a row."""


class EntryNotFoundError(LookupError):
    """No food entry exists for the given id."""

    def __init__(self, entry_id: UUID) -> None:
        super().__init__(f"Food entry {entry_id} not found")
        self.entry_id = entry_id


class PortionEditNotAllowedError(ValueError):
    """Portions may only be adjusted for entries logged today."""

    def __init__(self, entry_id: UUID) -> None:
        super().__init__(f"Food entry {entry_id} was not logged today")
        self.entry_id = entry_id


class EstimateError(RuntimeError):
    """The macro estimator could not produce a usable estimate."""


class SupersededEstimateError(EstimateError):
    """A newer estimate request of the same kind has started."""
