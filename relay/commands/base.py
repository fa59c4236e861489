"""
Base command for encapsulating business operations.

The Command pattern encapsulates business logic as objects, making it
reusable from HTTP handlers and the CLI and easy to test in isolation.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class BaseCommand(ABC, Generic[TInput, TOutput]):
    """
    Base command for business operations.

    Commands depend on repositories (or any NotificationStore) for data
    access and raise AppException subclasses for expected failures.

    Type Parameters:
        TInput: Input data type (usually a Pydantic model).
        TOutput: Output data type.
    """

    @abstractmethod
    async def execute(self, input_data: TInput) -> TOutput:
        """
        Execute the command.

        Args:
            input_data: Input data for the command.

        Returns:
            Result of the command execution.
        """
        pass
