"""Local preview handles for staged files."""

import logging
from uuid import uuid4

logger = logging.getLogger(__name__)


class PreviewRegistry:
    """Holds preview bytes for staged files until they are released."""

    def __init__(self):
        self._previews: dict[str, bytes] = {}

    def allocate(self, data: bytes) -> str:
        ref = f"preview:{uuid4()}"
        self._previews[ref] = data
        return ref

    def release(self, ref: str | None) -> None:
        """Free a preview. Releasing twice, or releasing None, is harmless."""
        if ref is not None and self._previews.pop(ref, None) is not None:
            logger.debug("Released preview", extra={"preview": ref})

    @property
    def active(self) -> set[str]:
        """References allocated and not yet released."""
        return set(self._previews)
