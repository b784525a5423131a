"""
Element draft scoring logic.

Six independent rules per player, the word-spelling placement ladder, and
final standings with the highest-atomic-number tie-break.

All card arguments are lists of atomic numbers, the same shape the game
state stores.
"""

from collections import Counter, defaultdict

from periodic_draft.config import default_rules
from periodic_draft.elements.catalog import elements_for
from periodic_draft.elements.state import left_neighbor, right_neighbor

SCORE_KEYS = [
    "atomic_number", "atomic_mass", "atomic_symbol",
    "radioactivity", "ionization", "family",
]

MIN_SEQUENCE = 2
MAX_SEQUENCE = 4

MAX_FAMILY_SIZE = 6
FAMILY_SCORES = {2: 1, 3: 3, 4: 6, 5: 10, 6: 15}

MASS_SWING = 2
RADIOACTIVE_BONUS = 7
RADIOACTIVE_PENALTY = -3
ION_PAIR_POINTS = 5


# ── Rule Calculators ─────────────────────────────────────────────────

def longest_run(atomic_numbers):
    """Length of the longest run of consecutive atomic numbers."""
    numbers = sorted(set(atomic_numbers))
    if not numbers:
        return 0
    best = current = 1
    for prev, nxt in zip(numbers, numbers[1:]):
        if nxt == prev + 1:
            current += 1
            best = max(best, current)
        else:
            current = 1
    return best


def atomic_number_score(cards):
    """
    Longest consecutive run, clamped to 2..4, squared.

    The clamp's lower bound applies to any non-empty set, so a lone card or
    a set without a single consecutive pair still scores 4. No cards, 0.
    """
    if not cards:
        return 0
    length = min(max(longest_run(cards), MIN_SEQUENCE), MAX_SEQUENCE)
    return length * length


def total_mass(cards):
    return sum(e.mass_group for e in elements_for(cards))


def atomic_mass_score(cards, left_cards, right_cards):
    """+2 per neighbor out-massed, -2 per neighbor who out-masses us."""
    mass = total_mass(cards)
    score = 0
    for neighbor_mass in (total_mass(left_cards), total_mass(right_cards)):
        if mass > neighbor_mass:
            score += MASS_SWING
        elif mass < neighbor_mass:
            score -= MASS_SWING
    return score


def radioactivity_score(cards):
    count = sum(1 for e in elements_for(cards) if e.radioactive)
    if count >= 2:
        return RADIOACTIVE_BONUS
    if count == 1:
        return RADIOACTIVE_PENALTY
    return 0


def ionization_score(cards):
    """5 points per positive/negative ion pair of the same charge."""
    positive = Counter()
    negative = Counter()
    for e in elements_for(cards):
        if e.positive_ion:
            positive[e.positive_ion] += 1
        elif e.negative_ion:
            negative[e.negative_ion] += 1

    pairs = sum(min(count, negative[charge]) for charge, count in positive.items())
    return pairs * ION_PAIR_POINTS


def family_score(cards):
    """Score the larger of (distinct families, biggest family), capped at 6."""
    counts = Counter(e.family for e in elements_for(cards))
    if not counts:
        return 0
    size = min(max(len(counts), max(counts.values())), MAX_FAMILY_SIZE)
    return FAMILY_SCORES.get(size, 0)


# ── Word Spelling Placement ──────────────────────────────────────────

def placement_points(events, ladder=None):
    """
    Map player_id -> word-spelling points.

    Events are grouped by round. Every player in the earliest group gets the
    first ladder value; the ladder then advances by the size of the group,
    so a two-way tie for first skips second place entirely. Places past the
    end of the ladder are worth 0.
    """
    ladder = default_rules.placement_ladder if ladder is None else ladder

    by_round = defaultdict(list)
    for event in events:
        by_round[event["round"]].append(event["player_id"])

    points = {}
    place = 0
    for round_number in sorted(by_round):
        group = by_round[round_number]
        value = ladder[place] if place < len(ladder) else 0
        for player_id in group:
            points[player_id] = value
        place += len(group)
    return points


def spelling_points(player_id, events, ladder=None):
    return placement_points(events, ladder).get(player_id, 0)


# ── Totals ───────────────────────────────────────────────────────────

def total_score(cards, left_cards, right_cards, spelling_bonus=0,
                include_radioactivity=True):
    """Full per-rule breakdown plus total for one player."""
    breakdown = {
        "atomic_number": atomic_number_score(cards),
        "atomic_mass": atomic_mass_score(cards, left_cards, right_cards),
        "atomic_symbol": spelling_bonus,
        "radioactivity": radioactivity_score(cards) if include_radioactivity else 0,
        "ionization": ionization_score(cards),
        "family": family_score(cards),
    }
    breakdown["total"] = sum(breakdown[k] for k in SCORE_KEYS)
    return breakdown


def compute_scores(state, rules=None):
    """
    Score every player from their drafted cards so far.

    Pure; safe to call mid-draft for a live leaderboard.
    """
    rules = rules or default_rules
    players = state["players"]
    points = placement_points(state["spelling_events"], rules.placement_ladder)

    scores = {}
    for pi, player in enumerate(players):
        left = players[left_neighbor(state, pi)]
        right = players[right_neighbor(state, pi)]
        scores[player["player_id"]] = total_score(
            player["drafted"],
            left["drafted"],
            right["drafted"],
            spelling_bonus=points.get(player["player_id"], 0),
            include_radioactivity=state["include_radioactivity"],
        )
    return scores


# ── Standings ────────────────────────────────────────────────────────

def standing_key(total, cards):
    """Higher total first; ties go to the single highest atomic number."""
    return (total, max(cards, default=0))


def rank_players(state, scores):
    """Return standings rows, best first."""
    keyed = []
    for player in state["players"]:
        pid = player["player_id"]
        total = scores[pid]["total"]
        keyed.append((standing_key(total, player["drafted"]), {
            "player_id": pid,
            "name": player["name"],
            "total": total,
            "highest_atomic_number": max(player["drafted"], default=0),
        }))
    # sort is stable, so exact ties keep seating order
    keyed.sort(key=lambda item: item[0], reverse=True)

    rows = []
    for rank, (_, row) in enumerate(keyed, start=1):
        row["rank"] = rank
        rows.append(row)
    return rows


def compute_final_scores(state, rules=None):
    """
    Compute final scores for all players.

    Returns detailed scoring results for the UI.
    """
    rules = rules or default_rules
    scores = compute_scores(state, rules)
    standings = rank_players(state, scores)

    def row_key(row):
        return (row["total"], row["highest_atomic_number"])

    top = row_key(standings[0])
    winners = [row["player_id"] for row in standings if row_key(row) == top]

    return {
        "scores": scores,
        "spelling_points": placement_points(
            state["spelling_events"], rules.placement_ladder),
        "standings": standings,
        "winners": winners,
    }
