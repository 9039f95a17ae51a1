"""Access and safety guard - owner check, pause gate, reentrancy latch."""

from contextlib import contextmanager
from typing import Iterator, Optional

from ..exceptions import ReentrantCallError, UnauthorizedError, VaultPausedError


class VaultGuard:
    """Checks run at the top of each vault entry point.

    The guard holds no ledger state. It is composed into the vault rather than
    inherited, and each entry point asks it explicitly for the checks it needs.
    """

    def __init__(self, owner: str, paused: bool = False):
        """
        Initialize guard.

        Args:
            owner: Identity with exclusive admin rights
            paused: Initial state of the deposit/withdraw gate
        """
        self.owner = owner
        self.paused = paused
        self._active: Optional[str] = None

    @property
    def entered(self) -> bool:
        return self._active is not None

    def require_owner(self, caller: str, operation: str) -> None:
        if caller != self.owner:
            raise UnauthorizedError(caller, operation)

    def require_not_paused(self, operation: str) -> None:
        if self.paused:
            raise VaultPausedError(operation)

    @contextmanager
    def locked(self, operation: str) -> Iterator[None]:
        """
        Hold the execution latch for the duration of operation.

        Raises:
            ReentrantCallError: If another guarded operation is executing
        """
        if self._active is not None:
            raise ReentrantCallError(operation, self._active)
        self._active = operation
        try:
            yield
        finally:
            self._active = None
