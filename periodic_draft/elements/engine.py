"""
Element draft: game engine implementation.

Implements the GameEngine interface as a pure state machine.
All state is a plain dict. No side effects, no networking.

Round machine:
  every player picks one card from their hand (any order, any timing)
  → once all have picked, each seat takes the hand of the seat after it
  → when the hands run out, drafting ends and final scores are computed.

A player may also, once per game, claim the word-spelling bonus by naming
a word their revealed cards can spell.
"""

import logging
from copy import deepcopy

from periodic_draft.config import default_rules
from periodic_draft.game_engine import GameEngine, ActionResult, declined
from periodic_draft.elements.state import (
    MIN_PLAYERS, MAX_PLAYERS, PHASE_DRAFTING, PHASE_SCORING,
    create_initial_state, revealed_cards, unrevealed_cards,
)
from periodic_draft.elements.spelling import can_spell_word, symbol_letter_count
from periodic_draft.elements.scoring import compute_final_scores

logger = logging.getLogger(__name__)


class ElementsEngine(GameEngine):

    player_count_range = (MIN_PLAYERS, MAX_PLAYERS)

    def __init__(self, rules=None, rng=None):
        self.rules = rules or default_rules
        self.rng = rng

    # ── Setup ─────────────────────────────────────────────────────────

    def initial_state(self, player_ids, player_names):
        low, high = self.player_count_range
        if len(player_ids) < low or len(player_ids) > high:
            raise ValueError(f"Element draft requires {low}-{high} players")
        return create_initial_state(player_ids, player_names, self.rng,
                                    full_deck_size=self.rules.full_deck_size)

    # ── Views ─────────────────────────────────────────────────────────

    def get_player_view(self, state, player_id):
        """
        Return state with opponents' hands and this round's picks hidden.

        Opponents' hands become card counts; their drafted list only shows
        revealed cards, with "pending" counting the hidden current pick.
        Once drafting is over every drafted card is public.
        """
        view = deepcopy(state)
        player_idx = self._player_index(state, player_id)

        for i, p in enumerate(view["players"]):
            if i == player_idx:
                continue
            if state["game_over"]:
                p["pending"] = 0
            else:
                p["pending"] = len(unrevealed_cards(state, i))
                p["drafted"] = revealed_cards(state, i)
            p["hand"] = len(p["hand"])

        return view

    def get_valid_actions(self, state, player_id):
        player_idx = self._player_index(state, player_id)
        if state["game_over"] or player_idx is None:
            return []

        player = state["players"][player_idx]
        actions = []

        if len(player["drafted"]) < state["current_round"]:
            for ci in range(len(player["hand"])):
                actions.append({"kind": "draft_card", "card_index": ci})

        letters = symbol_letter_count(revealed_cards(state, player_idx))
        if not self._has_spelled(state, player_id) and letters >= self.rules.word_length:
            actions.append({"kind": "spell_word", "length": self.rules.word_length})

        return actions

    def get_waiting_for(self, state):
        if state["game_over"]:
            return []
        return [
            p["player_id"] for p in state["players"]
            if len(p["drafted"]) < state["current_round"]
        ]

    def get_phase_info(self, state):
        phase = state["phase"]
        current = state["current_round"]
        total = state["total_rounds"]

        if phase == PHASE_DRAFTING:
            waiting = len(self.get_waiting_for(state))
            description = f"Round {current} of {total}: {waiting} player(s) still picking"
        else:
            description = "Drafting complete: final scores"

        return {
            "phase": phase,
            "round": current,
            "total_rounds": total,
            "description": description,
        }

    # ── Action Dispatch ───────────────────────────────────────────────

    def apply_action(self, state, player_id, action):
        if not isinstance(action, dict):
            return self._decline(state, player_id, "Action must be an object")
        kind = action.get("kind")

        if kind == "draft_card":
            return self.submit_selection(state, player_id, action.get("card_index"))
        if kind == "spell_word":
            return self.record_spelling_attempt(state, player_id, action.get("word"))

        return self._decline(state, player_id, f"Invalid action kind: {kind}")

    def submit_selection(self, state, player_id, hand_position):
        """Move the card at hand_position from the player's hand to their drafted cards."""
        if state["game_over"] or state["phase"] != PHASE_DRAFTING:
            return self._decline(state, player_id, "Drafting is over")

        player_idx = self._player_index(state, player_id)
        if player_idx is None:
            return self._decline(state, player_id, f"Player {player_id} not in this game")

        player = state["players"][player_idx]
        if (not isinstance(hand_position, int) or isinstance(hand_position, bool)
                or hand_position < 0 or hand_position >= len(player["hand"])):
            return self._decline(state, player_id, "Invalid card index")

        if len(player["drafted"]) >= state["current_round"]:
            return self._decline(state, player_id, "Already picked a card this round")

        state = deepcopy(state)
        player = state["players"][player_idx]
        card = player["hand"].pop(hand_position)
        player["drafted"].append(card)

        log = [f"{player['name']} drafts a card"]
        log += self._check_round_complete(state)
        self._bump_version(state)

        return ActionResult(new_state=state, log=log, game_over=state["game_over"])

    def record_spelling_attempt(self, state, player_id, word):
        """Record the first time a player spells a word from their revealed cards."""
        if state["game_over"] or state["phase"] != PHASE_DRAFTING:
            return self._decline(state, player_id, "Drafting is over")

        player_idx = self._player_index(state, player_id)
        if player_idx is None:
            return self._decline(state, player_id, f"Player {player_id} not in this game")

        length = self.rules.word_length
        if (not isinstance(word, str) or len(word) != length
                or not word.isascii() or not word.isalpha()):
            return self._decline(
                state, player_id, f"Word must be exactly {length} letters A-Z")

        if self._has_spelled(state, player_id):
            return self._decline(state, player_id, "Word bonus already claimed")

        if not can_spell_word(revealed_cards(state, player_idx), word):
            return self._decline(
                state, player_id, "Cannot spell that word with your revealed cards")

        state = deepcopy(state)
        round_number = state["current_round"]
        state["spelling_events"].append({"player_id": player_id, "round": round_number})
        self._bump_version(state)

        name = state["players"][player_idx]["name"]
        return ActionResult(
            new_state=state,
            log=[f"{name} spelled a word in round {round_number}"],
            game_over=state["game_over"],
        )

    # ── Round Machine ─────────────────────────────────────────────────

    def _check_round_complete(self, state):
        """Advance the round once every player has picked for it."""
        players = state["players"]
        if any(len(p["drafted"]) < state["current_round"] for p in players):
            return []

        if all(not p["hand"] for p in players):
            return self._end_game(state)
        return self._pass_hands(state)

    def _pass_hands(self, state):
        """Each seat takes the hand held by the next seat."""
        players = state["players"]
        hands = [p["hand"] for p in players]
        for i, player in enumerate(players):
            player["hand"] = hands[(i + 1) % len(players)]

        state["current_round"] += 1
        logger.info("Hands passed; starting round %d of %d",
                    state["current_round"], state["total_rounds"])
        return [f"Hands passed. Round {state['current_round']} begins"]

    def _end_game(self, state):
        """Trigger end-of-game scoring."""
        state["phase"] = PHASE_SCORING
        state["game_over"] = True

        scoring = compute_final_scores(state, self.rules)
        state["scoring_results"] = scoring
        logger.info("Drafting complete after %d rounds", state["current_round"])

        winners = scoring["winners"]
        by_id = {p["player_id"]: p for p in state["players"]}
        score = scoring["scores"][winners[0]]["total"]
        if len(winners) == 1:
            return [f"Game over! {by_id[winners[0]]['name']} wins with {score} points!"]
        names = " and ".join(by_id[w]["name"] for w in winners)
        return [f"Game over! {names} tie with {score} points!"]

    # ── Helpers ───────────────────────────────────────────────────────

    def _player_index(self, state, player_id):
        try:
            return state["player_ids"].index(player_id)
        except ValueError:
            return None

    def _has_spelled(self, state, player_id):
        return any(e["player_id"] == player_id for e in state["spelling_events"])

    def _bump_version(self, state):
        state["version"] = state.get("version", 0) + 1

    def _decline(self, state, player_id, reason):
        logger.debug("Declined action from %s: %s", player_id, reason)
        return declined(state, reason)
