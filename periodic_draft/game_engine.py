"""
Abstract game engine interface.

Any board game that plugs into the server must implement this interface.
The server knows nothing about game-specific rules; it just routes
player actions through these methods and broadcasts the results.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

ACCEPTED = "accepted"
DECLINED = "declined"
CONFLICT = "conflict"


@dataclass
class ActionResult:
    """Returned by apply_action to tell the server what happened."""
    new_state: dict
    # If non-empty, broadcast a log/message to all players
    log: list[str] = field(default_factory=list)
    # If the game is over after this action
    game_over: bool = False
    # accepted | declined (invalid input) | conflict (stale snapshot)
    status: str = ACCEPTED
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status == ACCEPTED


def declined(state: dict, reason: str) -> ActionResult:
    """Decline an action; the caller's snapshot is handed back untouched."""
    return ActionResult(
        new_state=state,
        game_over=bool(state.get("game_over")),
        status=DECLINED,
        reason=reason,
    )


def conflicted(state: dict, reason: str) -> ActionResult:
    return ActionResult(
        new_state=state,
        game_over=bool(state.get("game_over")),
        status=CONFLICT,
        reason=reason,
    )


class GameEngine(ABC):
    """
    Pure-logic game engine. No networking, no rendering, just rules.

    State is always a plain dict (JSON-serializable) so the server can
    store it, send it over the wire, and snapshot it for reconnection.
    Every accepted action bumps state["version"], which the store uses
    for compare-and-set commits.
    """

    # Subclasses can override to restrict player counts.
    player_count_range: tuple[int, int] = (2, 5)

    @abstractmethod
    def initial_state(self, player_ids: list[str], player_names: list[str]) -> dict:
        """
        Create the starting game state for the given players.
        Called once when a game room starts.
        """
        ...

    @abstractmethod
    def get_player_view(self, state: dict, player_id: str) -> dict:
        """
        Return a filtered/redacted view of the state for one player.
        Hides information that player shouldn't see (other players' hands, etc).
        """
        ...

    @abstractmethod
    def get_valid_actions(self, state: dict, player_id: str) -> list[dict]:
        """
        Return the list of actions this player can currently take.
        Empty list means they have nothing to do right now.
        Each action is a dict describing the action shape the client can submit.
        """
        ...

    @abstractmethod
    def apply_action(self, state: dict, player_id: str, action: dict) -> ActionResult:
        """
        Validate and apply a player's action to the state.

        Never raises for bad player input: an invalid action comes back as
        an ActionResult with status DECLINED and the original state.
        """
        ...

    @abstractmethod
    def get_waiting_for(self, state: dict) -> list[str]:
        """
        Return list of player_ids who need to act before the game can proceed.
        The server uses this to know who to prompt.
        """
        ...

    @abstractmethod
    def get_phase_info(self, state: dict) -> dict:
        """
        Return a summary of the current phase for display purposes.
        e.g. {"phase": "drafting", "round": 3, "description": "Pick a card"}
        """
        ...
