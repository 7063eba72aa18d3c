"""Output exceptions: artifacts that cannot be produced."""

from pathlib import Path

from .base import ArchaeoError


class SerializationError(ArchaeoError):
    """Raised when an artifact cannot be rendered or written."""

    def __init__(self, destination: Path, reason: str):
        super().__init__(
            f"Cannot write output to {destination}",
            details={"destination": str(destination), "reason": reason},
        )
        self.destination = destination
        self.reason = reason
