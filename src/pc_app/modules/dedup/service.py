# src/pc_app/modules/dedup/service.py
from __future__ import annotations

from collections.abc import Mapping

from pc_app.core.errors import BadRequest
from pc_app.core.logging import get_logger
from pc_app.core.progress import ProgressReporter

from . import cluster as clustering
from .schemas import ClusterResponse, DuplicateGroup, HashStrategy, SimilarityResponse
from .strategies.base import FingerprintStrategy
from .strategies.dhash import DHashStrategy
from .strategies.phash import PHashStrategy

log = get_logger(__name__)


class DedupService:
    """Fingerprint strategy selection plus whole-set clustering."""

    # ---- strategy resolution -------------------------------------------------
    @staticmethod
    def select(strategy: HashStrategy | str) -> FingerprintStrategy:
        try:
            strategy = HashStrategy(strategy)
        except ValueError as err:
            raise BadRequest(f"unknown hash strategy: {strategy!r}") from err
        if strategy == HashStrategy.phash:
            return PHashStrategy()
        return DHashStrategy()

    # ---- public API ----------------------------------------------------------
    def cluster(
        self,
        fingerprints: Mapping[str, str],
        threshold: float,
        reporter: ProgressReporter | None = None,
    ) -> list[DuplicateGroup]:
        """
        Group the complete fingerprint set. Always a full recomputation: callers
        holding previous groups must discard them.
        """
        if reporter:
            reporter.start(
                "cluster", total=None, text=f"Clustering {len(fingerprints)} fingerprints…"
            )
        groups = clustering.cluster(fingerprints, threshold)
        if reporter:
            reporter.end("cluster")
        log.info(
            "Clustered %d fingerprints at %.1f%%: %d duplicate group(s)",
            len(fingerprints),
            threshold,
            len(groups),
        )
        return groups

    def summarize(self, groups: list[DuplicateGroup], threshold: float) -> ClusterResponse:
        return ClusterResponse(
            threshold=threshold,
            groups_count=len(groups),
            duplicates_count=sum(len(g.photo_ids) - 1 for g in groups),
            groups=groups,
        )

    @staticmethod
    def compare(a: str, b: str) -> SimilarityResponse:
        try:
            distance = clustering.hamming_distance(a, b)
        except ValueError as err:
            raise BadRequest(str(err)) from err
        return SimilarityResponse(
            distance=distance, similarity=clustering.similarity(a, b)
        )
