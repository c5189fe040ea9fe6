"""Candidate ranking policies.

The candidate list is ordered by a pluggable policy. The default prefers the
least loaded driver so work spreads across the fleet; the alphabetical policy
matches how the admin console listed drivers before load was tracked.
"""

from abc import ABC, abstractmethod

from dispatch.config import get_settings


class RankingPolicy(ABC):
    """Orders a list of candidates. Must be deterministic for equal inputs."""

    name: str

    @abstractmethod
    def rank(self, candidates: list) -> list:
        """Return ``candidates`` in presentation order. Never mutates the input."""
        ...


class LeastLoadedRanking(RankingPolicy):
    name = "load"

    def rank(self, candidates: list) -> list:
        return sorted(candidates, key=lambda c: (c.active_order_count, c.name.casefold(), c.id))


class NameRanking(RankingPolicy):
    name = "name"

    def rank(self, candidates: list) -> list:
        return sorted(candidates, key=lambda c: (c.name.casefold(), c.id))


_POLICIES = {policy.name: policy for policy in (LeastLoadedRanking, NameRanking)}


def get_ranking_policy(name: str | None = None) -> RankingPolicy:
    """Return the ranking policy called ``name``, or the configured one."""
    name = name or get_settings().candidate_ranking
    try:
        return _POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown ranking policy: {name}") from None
