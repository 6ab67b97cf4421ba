"""Edit-distance suggestions for names that failed an exact lookup."""

from __future__ import annotations

from collections.abc import Iterable

from dex_access.core.constants import DEFAULT_SUGGESTION_LIMIT
from dex_access.core.exceptions import ConfigurationError
from dex_access.lookup.names import NameIndex, normalize_name


def levenshtein_distance(s1: str, s2: str) -> int:
    """
    Calculate the Levenshtein (edit) distance between two strings.

    Args:
        s1: First string
        s2: Second string

    Returns:
        The minimum number of single-character edits needed to transform s1 into s2
    """
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            # j+1 instead of j since previous_row and current_row are one character longer
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


class FuzzyMatcher:
    """
    Suggests the closest dictionary words to an unmatched name.

    Only call this after an exact lookup has failed: each call is
    O(dictionary size x name length^2).

    Candidates within ``max_distance`` are grouped into distance buckets in
    the order each distance first appears while scanning the dictionary.
    Only the first ``max_results`` buckets are considered; the lowest of
    those wins and every word in it is returned, so ties can yield more
    than ``max_results`` names.
    """

    def __init__(self, dictionary: Iterable[str], default_limit: int = DEFAULT_SUGGESTION_LIMIT):
        words = tuple(dict.fromkeys(normalize_name(word) for word in dictionary))
        if not words:
            raise ConfigurationError("Cannot suggest names from an empty dictionary", field="dictionary")
        if default_limit < 1:
            raise ConfigurationError(f"Suggestion limit must be positive, got {default_limit}", field="default_limit")
        self._words = words
        self._word_set = frozenset(words)
        self.default_limit = default_limit

    @classmethod
    def from_index(cls, index: NameIndex, default_limit: int = DEFAULT_SUGGESTION_LIMIT) -> FuzzyMatcher:
        # Listing order keeps bucket order stable between runs
        return cls(index, default_limit=default_limit)

    @property
    def dictionary(self) -> tuple[str, ...]:
        return self._words

    def __len__(self) -> int:
        return len(self._words)

    def suggest(self, text: str, max_distance: int | None = None, max_results: int | None = None) -> list[str]:
        """
        Return the best-matching dictionary words for text.

        Args:
            text: Unmatched input (normalized before comparison)
            max_distance: Largest edit distance to accept (default: len(text) - 1)
            max_results: Number of distance buckets to inspect (default: default_limit)

        Returns:
            Words at the best inspected distance, in dictionary order; [] if none qualify
        """
        target = normalize_name(text)
        if max_distance is None:
            max_distance = len(target) - 1
        if max_results is None:
            max_results = self.default_limit
        if max_distance < 0 or max_results < 1:
            return []

        if target in self._word_set:
            return [target]

        buckets: dict[int, list[str]] = {}
        for word in self._words:
            distance = levenshtein_distance(target, word)
            if distance <= max_distance:
                buckets.setdefault(distance, []).append(word)

        if not buckets:
            return []

        inspected = list(buckets)[:max_results]
        return list(buckets[min(inspected)])

    def __repr__(self) -> str:
        return f"FuzzyMatcher(words={len(self)}, default_limit={self.default_limit})"
