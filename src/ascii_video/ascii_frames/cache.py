"""Identity token deciding whether a previously extracted frame set is reusable."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class CacheValidator:
    """
    Persist the input path that produced the current frame set.

    The comparison is an exact string match on the path as supplied: no
    normalization, so a renamed or differently spelled path invalidates
    the cache.
    """

    def __init__(self, token_path: Path):
        self.token_path = Path(token_path)

    def read(self) -> str | None:
        try:
            with open(self.token_path, "r", encoding="utf-8") as f:
                return f.readline().rstrip("\n")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"No usable cache token at {self.token_path}: {e}")
            return None

    def is_valid(self, input_path: str) -> bool:
        return self.read() == input_path

    def record(self, input_path: str) -> bool:
        """Write the token. Only call once a frame set has been fully extracted.

        Returns False (and logs) when the token cannot be written; the
        current run is unaffected, the next one just won't reuse frames.
        """
        try:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_path, "w", encoding="utf-8") as f:
                f.write(input_path + "\n")
        except OSError as e:
            logger.warning(f"Could not write cache token {self.token_path}: {e}")
            return False
        return True

    def clear(self) -> None:
        """Drop the token so an interrupted extraction is never taken for a complete one."""
        try:
            self.token_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove cache token {self.token_path}: {e}")
