"""
Best Score Storage
===================
A single best survival time, kept as a small JSON file.
"""

import json
import logging
import os


logger = logging.getLogger(__name__)


class HighScoreStore:
    """Reads and writes ``{"best": <seconds>}`` at ``path``."""

    def __init__(self, path: str):
        self.path = os.path.expanduser(path)

    def load(self) -> float:
        """Stored best score, or 0.0 when there is none or it is unreadable."""
        if not os.path.exists(self.path):
            return 0.0
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            best = float(data['best'])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning('Ignoring unreadable score file %s: %s', self.path, e)
            return 0.0
        if best < 0 or best != best:
            logger.warning('Ignoring invalid best score %r in %s', best, self.path)
            return 0.0
        return best

    def save(self, score: float) -> None:
        """Overwrite the stored best score. Failures are logged, not raised."""
        directory = os.path.dirname(self.path)
        tmp_path = self.path + '.tmp'
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump({'best': round(float(score), 2)}, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error('Could not save best score to %s: %s', self.path, e)
            return
        logger.info('Saved best score %.2f to %s', score, self.path)


class MemoryScoreStore:
    """In-process store for headless runs."""

    def __init__(self, best: float = 0.0):
        self.best = best
        self.saves = 0

    def load(self) -> float:
        return self.best

    def save(self, score: float) -> None:
        self.best = round(float(score), 2)
        self.saves += 1
