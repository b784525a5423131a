"""
Constants and state helpers for the element draft.

Deck configuration, shuffling and dealing, seat helpers, and initial state
creation.
"""

import random

from periodic_draft.elements.catalog import ELEMENTS, FULL_DECK_SIZE

# ── Deck Configuration ───────────────────────────────────────────────

# player count -> (deck size, hand size)
DECK_CONFIGS = {
    2: (36, 15),
    3: (54, 15),
    4: (54, 13),
    5: (54, 10),
    6: (86, 14),
    7: (103, 14),
    8: (103, 12),
    9: (103, 11),
    10: (103, 10),
}
DEFAULT_DECK_CONFIG = (FULL_DECK_SIZE, 10)

MIN_PLAYERS = 2
MAX_PLAYERS = 10

PHASE_DRAFTING = "drafting"
PHASE_SCORING = "scoring"


def get_deck_config(player_count):
    """Return (deck_size, hand_size) for a player count."""
    return DECK_CONFIGS.get(player_count, DEFAULT_DECK_CONFIG)


# ── Dealing ──────────────────────────────────────────────────────────

def shuffle_cards(cards, rng=None):
    """Fisher-Yates shuffle from the end; returns a new list."""
    rng = rng or random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def deal_hands(player_count, rng=None):
    """
    Deal one hand per seat, as lists of atomic numbers.

    The catalog is cut down to atomic numbers <= deck size, shuffled, and
    sliced into contiguous hands in seating order. Cards beyond
    player_count * hand_size are left out of the game.
    """
    deck_size, hand_size = get_deck_config(player_count)
    deck = [n for n in sorted(ELEMENTS) if n <= deck_size]
    deck = shuffle_cards(deck, rng)
    return [deck[i * hand_size:(i + 1) * hand_size] for i in range(player_count)]


# ── Seat Helpers ─────────────────────────────────────────────────────

def left_neighbor(state, player_idx):
    return (player_idx - 1) % state["player_count"]


def right_neighbor(state, player_idx):
    return (player_idx + 1) % state["player_count"]


def revealed_cards(state, player_idx):
    """Drafted cards whose round has fully elapsed."""
    drafted = state["players"][player_idx]["drafted"]
    return drafted[:max(state["current_round"] - 1, 0)]


def unrevealed_cards(state, player_idx):
    """The pick made this round, if any; hidden from opponents."""
    drafted = state["players"][player_idx]["drafted"]
    return drafted[max(state["current_round"] - 1, 0):]


# ── State Creation ───────────────────────────────────────────────────

def create_initial_state(player_ids, player_names, rng=None, full_deck_size=FULL_DECK_SIZE):
    """
    Build the full initial game state for an element draft.

    Radioactivity is scored only when the dealt deck is full_deck_size cards.
    """
    player_count = len(player_ids)
    deck_size, hand_size = get_deck_config(player_count)
    hands = deal_hands(player_count, rng)

    players = []
    for i, (pid, name) in enumerate(zip(player_ids, player_names)):
        players.append({
            "index": i,
            "player_id": pid,
            "name": name,
            "hand": hands[i],
            "drafted": [],
        })

    return {
        "game": "elements",
        "version": 0,
        "player_ids": list(player_ids),
        "player_count": player_count,
        "players": players,
        "deck_size": deck_size,
        "hand_size": hand_size,
        "total_rounds": hand_size,
        "include_radioactivity": deck_size == full_deck_size,
        "current_round": 1,
        "phase": PHASE_DRAFTING,
        "spelling_events": [],
        "game_over": False,
        "scoring_results": None,
    }
