"""
Declared fallback policy: which provider is the always-available baseline, and when
its results must be added to a search that did not already include it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional

from courtfinder.models import ProviderName


class ProviderRole(str, Enum):
    BASELINE = "baseline"
    LIVE = "live"


class FallbackTrigger(str, Enum):
    # Every live provider that was queried came back with zero records
    ALL_LIVE_EMPTY = "all_live_empty"
    NO_LIVE_QUERIED = "no_live_queried"


@dataclass(frozen=True)
class ProviderPolicy:
    role: ProviderRole
    # A mandatory provider must have an adapter registered with the orchestrator
    mandatory: bool = False


DEFAULT_POLICY: Dict[ProviderName, ProviderPolicy] = {
    ProviderName.STATIC: ProviderPolicy(ProviderRole.BASELINE, mandatory=True),
    ProviderName.GOOGLE_PLACES: ProviderPolicy(ProviderRole.LIVE),
    ProviderName.FOURSQUARE: ProviderPolicy(ProviderRole.LIVE),
}


class FallbackStrategy:
    def __init__(self, policy: Optional[Mapping[ProviderName, ProviderPolicy]] = None):
        self.policy = dict(policy if policy is not None else DEFAULT_POLICY)

    def role_of(self, provider: ProviderName) -> ProviderRole:
        entry = self.policy.get(provider)
        return entry.role if entry else ProviderRole.LIVE

    def is_mandatory(self, provider: ProviderName) -> bool:
        entry = self.policy.get(provider)
        return bool(entry and entry.mandatory)

    @property
    def baseline(self) -> Optional[ProviderName]:
        for provider, entry in self.policy.items():
            if entry.role == ProviderRole.BASELINE:
                return provider
        return None

    def trigger(self, queried: Iterable[ProviderName], contributions: Mapping[ProviderName, int]) -> Optional[FallbackTrigger]:
        """Return the condition that calls for baseline results, or None."""
        live = [p for p in queried if self.role_of(p) == ProviderRole.LIVE]
        if not live:
            return FallbackTrigger.NO_LIVE_QUERIED
        if all(contributions.get(p, 0) == 0 for p in live):
            return FallbackTrigger.ALL_LIVE_EMPTY
        return None

    def needs_baseline(self, queried: Iterable[ProviderName], contributions: Mapping[ProviderName, int]) -> Optional[FallbackTrigger]:
        """
        Trigger that requires an extra baseline query, or None when the baseline was
        already part of the aggregation (its records are then in the result) or no
        trigger fired.
        """
        queried = list(queried)
        if self.baseline is None or self.baseline in queried:
            return None
        return self.trigger(queried, contributions)
