"""Name resolution: exact index lookup first, suggestions only on a miss."""

from __future__ import annotations

from dataclasses import dataclass, field

from dex_access.core.config import SuggestConfig
from dex_access.lookup.names import NameIndex, normalize_name
from dex_access.lookup.suggest import FuzzyMatcher


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one name."""

    query: str
    resource_id: int | None
    suggestions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def found(self) -> bool:
        return self.resource_id is not None


class NameResolver:
    """
    Resolves user-typed names against a NameIndex.

    The fuzzy matcher only runs after the exact lookup has failed.
    """

    def __init__(
        self,
        index: NameIndex,
        matcher: FuzzyMatcher | None = None,
        suggest_config: SuggestConfig | None = None,
    ):
        self.index = index
        self.suggest_config = suggest_config or SuggestConfig()
        self.matcher = matcher or FuzzyMatcher.from_index(index, default_limit=self.suggest_config.default_limit)

    def resolve(self, name: str) -> Resolution:
        resource_id = self.index.get_id(name)
        if resource_id is not None:
            return Resolution(query=name, resource_id=resource_id)
        return Resolution(query=name, resource_id=None, suggestions=tuple(self.matcher.suggest(name)))

    def hint(self, guess: str) -> str | None:
        """
        Return a single close spelling for a wrong guess, or None.

        Known names never get a hint, and only near misses (distance
        ``hint_max_distance``) qualify, so hints stay quiet for unrelated input.
        """
        if normalize_name(guess) in self.index:
            return None
        candidates = self.matcher.suggest(
            guess,
            max_distance=self.suggest_config.hint_max_distance,
            max_results=self.suggest_config.hint_max_results,
        )
        return candidates[0] if candidates else None
