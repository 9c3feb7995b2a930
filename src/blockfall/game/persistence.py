from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

DEFAULT_HIGHSCORE_FILE = "highscore.txt"


class HighScoreStore:
    """Best-effort high score persistence in a plain text file.

    Failures never propagate: a missing or unparsable file loads as 0 and a failed
    write is only logged.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_HIGHSCORE_FILE) -> None:
        self.path = Path(path)

    def load(self) -> int:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No high score file at %s", self.path)
            return 0
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read high score from %s: %s", self.path, exc)
            return 0
        try:
            value = int(text.strip())
        except ValueError:
            logger.warning("Ignoring unparsable high score file %s", self.path)
            return 0
        return max(0, value)

    def save(self, value: int) -> bool:
        try:
            self.path.write_text(str(int(value)), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save high score to %s: %s", self.path, exc)
            return False
        return True
