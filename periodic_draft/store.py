"""
Versioned game-state store.

Holds one state dict per room and only accepts a write when the writer
saw the latest version. Readers always get a private copy, so an engine
can never mutate what is stored.
"""

import logging
from copy import deepcopy

logger = logging.getLogger(__name__)


class StateStore:
    """In-memory compare-and-set store keyed by room code."""

    def __init__(self):
        self._states: dict[str, dict] = {}

    def __contains__(self, key):
        return key in self._states

    def create(self, key, state):
        if key in self._states:
            raise ValueError(f"State for {key} already exists")
        self._states[key] = deepcopy(state)
        return self.read(key)

    def read(self, key):
        """Return a snapshot of the current state. Raises KeyError if missing."""
        if key not in self._states:
            raise KeyError(f"No state stored for {key}")
        return deepcopy(self._states[key])

    def version(self, key):
        return self._states[key].get("version", 0)

    def compare_and_set(self, key, expected_version, new_state):
        """
        Replace the stored state if its version is still expected_version.

        Returns False (and writes nothing) when another writer got there first.
        """
        current = self.version(key)
        if current != expected_version:
            logger.info("Stale write to %s: expected version %s, found %s",
                        key, expected_version, current)
            return False
        self._states[key] = deepcopy(new_state)
        return True
