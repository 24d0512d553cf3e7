"""Progress tracking for bundling runs."""

import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class BundlePhase(Enum):
    """Phases of a bundling run."""
    INITIALIZING = "initializing"
    COMPILING = "compiling"
    WRITING = "writing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ProgressUpdate:
    """Progress update snapshot."""
    phase: BundlePhase
    message: str
    timestamp: datetime = field(default_factory=datetime.now)


class ProgressTracker:
    """Collects the bundler's progress messages.

    Instances are callable with a single message, so a tracker can be passed
    wherever the bundler expects a progress callback.
    """

    def __init__(self, echo: bool = True):
        self.echo = echo
        self.current_phase = BundlePhase.INITIALIZING
        self.updates: list[ProgressUpdate] = []
        self.start_time = datetime.now()
        self.processed = 0
        self.excluded = 0
        self.externs = 0

    def __call__(self, message: str):
        self.update(message)

    def update(self, message: str, phase: Optional[BundlePhase] = None):
        """Record a message, counting the kinds the bundler reports."""
        if phase is not None:
            self.current_phase = phase
        elif self.current_phase in (BundlePhase.INITIALIZING, BundlePhase.COMPILING):
            self.current_phase = BundlePhase.WRITING

        if message.startswith('Processing '):
            self.processed += 1
        elif message.startswith('Excluding '):
            self.excluded += 1
        elif message.startswith('Writing external dependency '):
            self.externs += 1

        self.updates.append(ProgressUpdate(phase=self.current_phase, message=message))
        if self.echo:
            logging.info(message)

    def mark_compiling(self):
        self.update("Compiling declarations", BundlePhase.COMPILING)

    def mark_completed(self, out: str):
        self.update(f"Wrote {out}", BundlePhase.COMPLETED)

    def mark_failed(self, error: str):
        self.update(f"Bundling failed: {error}", BundlePhase.FAILED)

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        return (datetime.now() - self.start_time).total_seconds()

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the run so far."""
        return {
            "phase": self.current_phase.value,
            "processed": self.processed,
            "excluded": self.excluded,
            "externs": self.externs,
            "messages": len(self.updates),
            "elapsed_seconds": self.get_elapsed_time(),
        }
