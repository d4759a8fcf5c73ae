"""Failure taxonomy shared by the data, service and web layers."""


class MonitorError(Exception):
    """Base class for validator monitor errors."""


class ListFailure(MonitorError):
    """The validator registry could not be enumerated."""


class FetchFailure(MonitorError):
    """A chain or status API read failed for one address (or a chain-wide read)."""

    def __init__(self, operation: str, address: str | None = None, reason: str = ""):
        self.operation = operation
        self.address = address
        self.reason = reason
        target = f" for {address}" if address else ""
        super().__init__(f"{operation} failed{target}: {reason}" if reason else f"{operation} failed{target}")


class StoreFailure(MonitorError):
    """The name store is unavailable."""


class DuplicateNameFailure(MonitorError):
    """A name has already been assigned to this address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Name already exists for {address}")
