"""Registry of change callbacks keyed by change kind."""

import logging
from typing import Any, Callable, Dict, List, Optional

from .errors import CallbackExecutionError

logger = logging.getLogger(__name__)


class CallbackRegistry:
    """Maps a change kind (e.g. "bairro") to a single callback."""

    def __init__(self):
        self._callbacks: Dict[str, Callable[..., Any]] = {}

    def register(self, kind: str, callback: Optional[Callable[..., Any]]):
        """
        Set the callback for ``kind``. Passing None removes it.

        Raises:
            TypeError: If callback is neither callable nor None
        """
        if callback is None:
            self._callbacks.pop(kind, None)
            return
        if not callable(callback):
            raise TypeError(
                f'Callback for type "{kind}" must be a function or None. '
                f"Received: {type(callback).__name__}"
            )
        self._callbacks[kind] = callback

    def get(self, kind: str) -> Optional[Callable[..., Any]]:
        return self._callbacks.get(kind)

    def execute(self, kind: str, *args, **kwargs) -> bool:
        """
        Run the callback for ``kind``.

        Errors raised by the callback are logged and swallowed.

        Returns:
            True if a callback ran to completion, False otherwise
        """
        callback = self._callbacks.get(kind)
        if callback is None:
            return False
        try:
            callback(*args, **kwargs)
            return True
        except Exception as e:
            err = CallbackExecutionError(kind, e)
            logger.error(f"{err}", exc_info=True)
            return False

    def has(self, kind: str) -> bool:
        return kind in self._callbacks

    def unregister(self, kind: str) -> bool:
        return self._callbacks.pop(kind, None) is not None

    def clear(self):
        self._callbacks.clear()

    def registered_types(self) -> List[str]:
        return list(self._callbacks)

    def __len__(self) -> int:
        return len(self._callbacks)
