"""
Base Service Interface

All services inherit from this base class.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")
T = TypeVar("T")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for all services.

    Each service:
    - Has a defined input type
    - Has a defined output type
    - Can check its health
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Execute the service's main function.

        Args:
            input_data: Validated input conforming to InputT

        Returns:
            Output conforming to OutputT
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if service is healthy and can process requests."""
        pass


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ExternalAPIError(ServiceError):
    """External API call failed."""
    pass


class ProviderError(ExternalAPIError):
    """Quote provider returned a non-success status or an error envelope."""
    pass


class EmptyResultError(ExternalAPIError):
    """Quote provider answered successfully but no quote was usable."""
    pass


class StoreError(ServiceError):
    """Cache store failure."""
    pass


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


# ============ Tagged results ============


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the classified error."""

    error: ServiceError


Result = Union[Ok[T], Err]
