"""
Reporter - Builds outcome records and prints them for people.
"""

import logging
import sys
from typing import Optional, TextIO

from .derivation_stats import DerivationStats
from .outcome import Channel, Message, OutcomeKind, OutcomeRecord, Severity


def skipped() -> OutcomeRecord:
    """Outcome for a derivative that did not need generating."""
    return OutcomeRecord(OutcomeKind.SKIPPED, True)


def no_source(pid: str, derivative: str) -> OutcomeRecord:
    """Outcome for an object without an OBJ datastream."""
    subs = {'pid': pid, 'derivative': derivative}
    return OutcomeRecord(OutcomeKind.NO_SOURCE, False, (
        Message.create(
            "No OBJ datastream present for object {pid} - {derivative} creation was skipped.",
            subs, Channel.USER, Severity.ERROR,
        ),
        Message.create(
            "Could not create {derivative} for {pid}: no OBJ datastream.",
            subs, Channel.LOG, Severity.ERROR,
        ),
    ))


def scale_failure(pid: str, dsid: str) -> OutcomeRecord:
    """Outcome for a source image that could not be scaled."""
    return OutcomeRecord(OutcomeKind.SCALE_FAILED, False, (
        Message.create(
            "Unable to scale the image for object {pid}; the {dsid} datastream was not created.",
            {'pid': pid, 'dsid': dsid}, Channel.USER, Severity.WARNING,
        ),
    ))


def write_failure(message: str) -> OutcomeRecord:
    """Outcome for a datastream the store refused to write."""
    return OutcomeRecord(OutcomeKind.WRITE_FAILED, False, (
        Message.create(message, None, Channel.LOG, Severity.ERROR),
    ))


def success(pid: str, dsid: str) -> OutcomeRecord:
    """Outcome for a derivative written to its object."""
    return OutcomeRecord(OutcomeKind.SUCCESS, True, (
        Message.create(
            "Created {dsid} derivative for object {pid}.",
            {'pid': pid, 'dsid': dsid}, Channel.USER, Severity.INFO,
        ),
    ))


class Reporter:
    """
    Prints outcomes and run statistics to a text stream.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def _format_duration(self, seconds: float) -> str:
        """Format duration as human-readable string."""
        if seconds < 60:
            return f"{seconds:.1f} seconds"
        elif seconds < 3600:
            return f"{seconds / 60:.1f} minutes"
        else:
            return f"{seconds / 3600:.1f} hours"

    def report_outcome(self, pid: str, dsid: str, outcome: OutcomeRecord) -> None:
        """
        Print user-facing messages and route log messages to the logger.

        Skipped outcomes print a single line so the user can see the
        derivative was already there.
        """
        tag = 'OK' if outcome.success else 'ERROR'
        if outcome.kind == OutcomeKind.SKIPPED:
            self._print(f"  [SKIP] {pid} {dsid} -> already present")
        for text in outcome.user_messages():
            self._print(f"  [{tag}] {pid} {dsid} -> {text}")
        outcome.log_to(self.logger)

    def report_summary(self, stats: DerivationStats) -> None:
        """Print a summary of a batch run."""
        self._print("=" * 60)
        self._print("DERIVATION SUMMARY")
        self._print("=" * 60)
        self._print(f"  Objects:       {stats.objects_done:,} / {stats.total_objects:,}")
        self._print(f"  Created:       {stats.succeeded:,}")
        self._print(f"  Skipped:       {stats.skipped:,}")
        if stats.planned:
            self._print(f"  Planned:       {stats.planned:,}")
        self._print(f"  No source:     {stats.no_source:,}")
        self._print(f"  Scale failed:  {stats.scale_failed:,}")
        self._print(f"  Write failed:  {stats.write_failed:,}")
        if stats.load_errors:
            self._print(f"  Load errors:   {stats.load_errors:,}")
        self._print(f"  Time:          {self._format_duration(stats.elapsed_seconds)}")
        self._print(f"  Rate:          {stats.rate_per_minute:.1f} objects/min")

        if stats.error_details:
            self._print()
            self._print("Errors:")
            for detail in stats.error_details[:20]:
                self._print(f"  - {detail}")
            if len(stats.error_details) > 20:
                self._print(f"  ... and {len(stats.error_details) - 20} more")
