"""
BatchDeriver - Runs the derivative pipeline over many objects.
"""

import logging
import time
from typing import Iterable, List, Optional, Sequence

from .derivation_stats import DerivationStats
from .decision import should_generate
from .derivatives import KINDS, DerivativeGenerator, DerivativeKind
from .object_store import ObjectStore, ObjectStoreError
from .reporter import Reporter


class BatchDeriver:
    """
    Generates derivatives for every object in a store, or for a list of pids.
    """

    def __init__(
        self,
        store: ObjectStore,
        generator: DerivativeGenerator,
        cadence: float = 0.0,
        dry_run: bool = False,
        reporter: Optional[Reporter] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize batch deriver.

        Args:
            store: Object store to read objects from
            generator: Derivative generator for single objects
            cadence: Seconds to wait between objects
            dry_run: If True, only report what would be generated
            reporter: Optional reporter for per-derivative output
            logger: Optional logger instance
        """
        self.store = store
        self.generator = generator
        self.cadence = cadence
        self.dry_run = dry_run
        self.reporter = reporter
        self.logger = logger or logging.getLogger(__name__)
        self.stats = DerivationStats()
        self._stop_requested = False

    def stop(self) -> None:
        """Request the run to stop after the current object."""
        self._stop_requested = True

    def derive(
        self,
        pids: Optional[Iterable[str]] = None,
        kinds: Sequence[str] = ('thumbnail', 'medium'),
        force: bool = False,
        limit: Optional[int] = None
    ) -> DerivationStats:
        """
        Generate derivatives.

        Args:
            pids: Objects to process (None = every object in the store)
            kinds: Derivative kinds ('thumbnail', 'medium')
            force: Regenerate existing derivatives
            limit: Optional limit on number of objects (for testing)

        Returns:
            DerivationStats with results
        """
        selected_kinds = [KINDS[name] for name in kinds]

        if self._stop_requested:
            self.logger.info("Stop was requested before derivation started")
            self.stats = DerivationStats()
            return self.stats

        selected = self._select(pids, limit)
        self.stats = DerivationStats(total_objects=len(selected))

        mode_str = " [DRY RUN]" if self.dry_run else ""
        names = ', '.join(k.dsid for k in selected_kinds)
        self.logger.info(f"Starting derivation: {len(selected)} objects, {names}{mode_str}")

        for pid in selected:
            if self._stop_requested:
                self.logger.info("Stop requested, halting derivation")
                break

            self._process_object(pid, selected_kinds, force)
            self.stats.objects_done += 1

            if self.cadence > 0 and not self.dry_run:
                time.sleep(self.cadence)

        self.logger.info(
            f"Derivation complete: {self.stats.succeeded} created, "
            f"{self.stats.skipped} skipped, {self.stats.failures} failed "
            f"({self.stats.elapsed_seconds:.1f}s)"
        )
        return self.stats

    def _select(self, pids: Optional[Iterable[str]], limit: Optional[int]) -> List[str]:
        source = pids if pids is not None else self.store.list_objects()
        selected = []
        for pid in source:
            selected.append(pid)
            if limit and len(selected) >= limit:
                break
        return selected

    def _process_object(self, pid: str, kinds: List[DerivativeKind], force: bool) -> None:
        try:
            obj = self.store.get_object(pid)
        except ObjectStoreError as e:
            self.logger.error(f"Error loading {pid}: {e}")
            self.stats.record_load_error(pid, str(e))
            return

        for kind in kinds:
            if self.dry_run:
                if should_generate(self.store, obj, kind.dsid, force):
                    self.stats.planned += 1
                    self.logger.info(f"[DRY RUN] Would generate: {pid} {kind.dsid}")
                else:
                    self.stats.skipped += 1
                continue

            outcome = self.generator.create(obj, kind, force)
            self.stats.record(pid, kind.dsid, outcome)
            if self.reporter:
                self.reporter.report_outcome(pid, kind.dsid, outcome)
            else:
                outcome.log_to(self.logger)
