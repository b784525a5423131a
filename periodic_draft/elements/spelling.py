"""
Word spelling with element symbols.

A word is spellable when some ordering of the available symbols, each used
at most once and always whole, concatenates to exactly the word
(case-insensitive). "He" + "Li" spells HELI; "C" + "At" + "S" spells CATS
but not CAST. Two cards with the same symbol are two separate tokens.
"""

from functools import lru_cache

from periodic_draft.elements.catalog import elements_for


def can_spell_word_with_symbols(symbols, word):
    """Return True if the word can be covered exactly by the symbols."""
    tokens = tuple(sorted(s.lower() for s in symbols if s))
    return _can_spell(tokens, word.lower())


def can_spell_word(atomic_numbers, word):
    """Same check, using the symbols printed on a list of cards."""
    return can_spell_word_with_symbols(
        [e.symbol for e in elements_for(atomic_numbers)], word)


def symbol_letter_count(atomic_numbers):
    """Total letters available across the cards' symbols."""
    return sum(len(e.symbol) for e in elements_for(atomic_numbers))


@lru_cache(maxsize=4096)
def _can_spell(tokens, word):
    # tokens is sorted, so the cache key is the remaining multiset
    if not word:
        return True

    tried = set()
    for i, token in enumerate(tokens):
        if token in tried:
            continue
        tried.add(token)
        if word.startswith(token):
            remaining = tokens[:i] + tokens[i + 1:]
            if _can_spell(remaining, word[len(token):]):
                return True
    return False
