# src/pc_app/modules/dedup/cluster.py
"""
Greedy seed-comparison clustering over 64-bit fingerprints.

Ids are visited in mapping order. Each unassigned id becomes a seed and pulls
in every later unassigned id whose similarity *to the seed* reaches the
threshold. Members are never compared with each other, so chains A~B~C where
A !~ C split at C. Results are rebuilt from scratch on every call.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from pc_app.core.errors import BadRequest

from .schemas import HEX64_PATTERN, DuplicateGroup
from .strategies.base import FINGERPRINT_BITS


_HEX64 = re.compile(HEX64_PATTERN)


def hamming_distance(a: str, b: str) -> int:
    for fp in (a, b):
        if not _HEX64.fullmatch(fp):
            raise ValueError(
                f"fingerprint must be {FINGERPRINT_BITS // 4} hex digits, got {fp!r}"
            )
    return (int(a, 16) ^ int(b, 16)).bit_count()


def similarity(a: str, b: str) -> float:
    """Percent of matching bits, 100.0 for identical fingerprints."""
    return 100.0 * (FINGERPRINT_BITS - hamming_distance(a, b)) / FINGERPRINT_BITS


def validate_threshold(threshold: float) -> float:
    if not 0 <= threshold <= 100:
        raise BadRequest(f"similarity threshold must be within 0..100, got {threshold}")
    return float(threshold)


def cluster(fingerprints: Mapping[str, str], threshold: float) -> list[DuplicateGroup]:
    threshold = validate_threshold(threshold)
    ids = list(fingerprints)
    assigned: set[str] = set()
    groups: list[DuplicateGroup] = []

    for i, seed in enumerate(ids):
        if seed in assigned:
            continue
        assigned.add(seed)
        seed_hash = fingerprints[seed]
        members = [seed]
        for other in ids[i + 1 :]:
            if other in assigned:
                continue
            if similarity(seed_hash, fingerprints[other]) >= threshold:
                members.append(other)
                assigned.add(other)
        if len(members) > 1:
            groups.append(
                DuplicateGroup(
                    id=f"dup_group_{len(groups) + 1}",
                    photo_ids=tuple(members),
                    threshold=threshold,
                )
            )
    return groups


def membership(groups: list[DuplicateGroup]) -> dict[str, str]:
    """photo id -> group id for every grouped photo."""
    return {pid: g.id for g in groups for pid in g.photo_ids}
