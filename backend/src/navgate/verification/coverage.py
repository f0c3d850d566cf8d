"""Entitlement coverage generator.

Builds the entitlement sets boot verification exercises. The sample covers:

- no capabilities and the ``admin`` baseline
- every granted capability at once
- each capability alone
- each plugin's own grant bundle
- sorted pairs of capabilities, capped
- every subset, when few enough capabilities are granted

The pairwise cap and the power-set threshold keep the result bounded; it is a
representative sample, not a proof over all 2^N subsets.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_POWERSET_MAX_CAPS = 8
DEFAULT_MAX_PAIR_COMBINATIONS = 512


def entitlement_key(entitlements: Iterable[str]) -> str:
    """Canonical key of an entitlement set: its sorted members joined by ``|``."""
    return "|".join(sorted(set(entitlements)))


def dedupe_entitlement_sets(sets: Iterable[Iterable[str]]) -> list[frozenset[str]]:
    """Drop repeated sets, keeping the first occurrence of each."""
    seen: set[str] = set()
    unique: list[frozenset[str]] = []
    for entitlements in sets:
        frozen = frozenset(entitlements)
        key = entitlement_key(frozen)
        if key in seen:
            continue
        seen.add(key)
        unique.append(frozen)
    return unique


def build_validation_entitlement_sets(
    all_granted: Iterable[str],
    granted_by_plugin: Sequence[Iterable[str]] = (),
    powerset_max_caps: int = DEFAULT_POWERSET_MAX_CAPS,
    max_pair_combinations: int = DEFAULT_MAX_PAIR_COMBINATIONS,
) -> list[frozenset[str]]:
    all_caps = frozenset(all_granted)
    candidates: list[Iterable[str]] = [frozenset(), frozenset({"admin"})]

    if all_caps:
        candidates.append(all_caps)
        candidates.extend(frozenset({cap}) for cap in sorted(all_caps))
        candidates.extend(frozenset(bundle) for bundle in granted_by_plugin)

        sorted_caps = sorted(all_caps)
        pairs = itertools.islice(itertools.combinations(sorted_caps, 2), max_pair_combinations)
        candidates.extend(frozenset(pair) for pair in pairs)

        if len(sorted_caps) <= powerset_max_caps:
            for size in range(1, len(sorted_caps) + 1):
                candidates.extend(frozenset(combo) for combo in itertools.combinations(sorted_caps, size))

    sets = dedupe_entitlement_sets(candidates)
    logger.debug(
        "Generated %d entitlement sets from %d granted capabilities across %d plugins",
        len(sets),
        len(all_caps),
        len(granted_by_plugin),
    )
    return sets
