"""
DerivationStats - Statistics for a batch derivation run.
"""

import time
from dataclasses import dataclass, field
from typing import List

from .outcome import OutcomeKind, OutcomeRecord


@dataclass
class DerivationStats:
    """
    Statistics for a batch derivation run.

    Attributes:
        total_objects: Objects selected for the run
        objects_done: Objects finished (any result)
        succeeded: Derivatives written
        skipped: Derivatives already present
        planned: Derivatives a dry run would generate
        no_source: Objects without an OBJ datastream
        scale_failed: Source images that could not be scaled
        write_failed: Derivatives the store refused
        load_errors: Objects that could not be loaded
        start_time: Start timestamp
        error_details: List of error messages
    """
    total_objects: int = 0
    objects_done: int = 0
    succeeded: int = 0
    skipped: int = 0
    planned: int = 0
    no_source: int = 0
    scale_failed: int = 0
    write_failed: int = 0
    load_errors: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    def record(self, pid: str, dsid: str, outcome: OutcomeRecord) -> None:
        """Count one pipeline outcome."""
        if outcome.kind == OutcomeKind.SUCCESS:
            self.succeeded += 1
        elif outcome.kind == OutcomeKind.SKIPPED:
            self.skipped += 1
        else:
            if outcome.kind == OutcomeKind.NO_SOURCE:
                self.no_source += 1
            elif outcome.kind == OutcomeKind.SCALE_FAILED:
                self.scale_failed += 1
            else:
                self.write_failed += 1
            detail = '; '.join(m.format() for m in outcome.messages) or outcome.kind.value
            self.error_details.append(f"{pid} {dsid}: {detail}")

    def record_load_error(self, pid: str, error: str) -> None:
        self.load_errors += 1
        self.error_details.append(f"{pid}: {error}")

    @property
    def failures(self) -> int:
        """Total failed invocations and unloadable objects."""
        return self.no_source + self.scale_failed + self.write_failed + self.load_errors

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Objects finished per minute."""
        if self.elapsed_seconds > 0:
            return self.objects_done / self.elapsed_seconds * 60
        return 0.0

    @property
    def remaining_count(self) -> int:
        """Objects not yet finished."""
        return self.total_objects - self.objects_done
