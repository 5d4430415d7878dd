"""Exceptions raised by the screening core."""


class AMLError(Exception):
    """Base class for screening core errors."""


class DuplicateSARError(AMLError):
    """A SAR with the same id is already on file."""

    def __init__(self, sar_id: str) -> None:
        super().__init__(f"SAR '{sar_id}' already exists")
        self.sar_id = sar_id


class SanctionListError(AMLError):
    """The sanctions snapshot could not be loaded."""
