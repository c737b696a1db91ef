"""
Operation descriptor registry.

Maps handler identity to the OperationDescriptor documenting it. The
registry is filled by explicit registration during startup and frozen
before the first request is served.
"""

from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

from ..exceptions import DuplicateOperationError, RegistryFrozenError
from ..observability import get_logger
from .models import OperationDescriptor

logger = get_logger(__name__)


class OperationRegistry:
    """
    Registry of documented handlers.

    Example:
        registry = OperationRegistry()
        registry.register(update_pet, UPDATE_PET)
        registry.freeze()

        descriptor = registry.get(update_pet)
    """

    def __init__(self):
        self._by_handler: Dict[Callable, OperationDescriptor] = {}
        self._by_operation_id: Dict[str, Callable] = {}
        # every id the document will carry, including method-suffixed ones
        self._document_ids: Dict[str, str] = {}
        self._frozen = False
        self._lock = Lock()

    def register(self, handler: Callable, descriptor: OperationDescriptor) -> Callable:
        """
        Register a handler with its descriptor.

        Args:
            handler: The request handler being documented
            descriptor: Its operation metadata

        Returns:
            The handler, unchanged

        Raises:
            RegistryFrozenError: if called after freeze()
            DuplicateOperationError: if the handler is already registered, or any
                of its document operation ids is already taken
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register '{descriptor.operation_id}': registry is frozen"
                )
            if handler in self._by_handler:
                raise DuplicateOperationError(
                    f"Handler {getattr(handler, '__name__', handler)!r} is already registered"
                )
            if descriptor.operation_id in self._by_operation_id:
                raise DuplicateOperationError(
                    f"Operation id '{descriptor.operation_id}' is already registered"
                )
            for document_id in descriptor.operation_ids().values():
                owner = self._document_ids.get(document_id)
                if owner is not None:
                    raise DuplicateOperationError(
                        f"Operation '{descriptor.operation_id}' would document id '{document_id}', "
                        f"already used by '{owner}'"
                    )

            self._by_handler[handler] = descriptor
            self._by_operation_id[descriptor.operation_id] = handler
            for document_id in descriptor.operation_ids().values():
                self._document_ids[document_id] = descriptor.operation_id

        logger.debug(
            "Registered operation",
            extra={'operation_id': descriptor.operation_id, 'route': descriptor.route}
        )
        return handler

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True
        logger.info("Operation registry frozen", extra={'operation_count': len(self)})

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, handler: Callable) -> Optional[OperationDescriptor]:
        return self._by_handler.get(handler)

    def find(self, operation_id: str) -> Optional[Tuple[Callable, OperationDescriptor]]:
        handler = self._by_operation_id.get(operation_id)
        if handler is None:
            return None
        return handler, self._by_handler[handler]

    def descriptors(self) -> List[OperationDescriptor]:
        """Descriptors in registration order."""
        return list(self._by_handler.values())

    def handlers(self) -> List[Tuple[Callable, OperationDescriptor]]:
        return list(self._by_handler.items())

    def __contains__(self, handler) -> bool:
        return handler in self._by_handler

    def __len__(self) -> int:
        return len(self._by_handler)
