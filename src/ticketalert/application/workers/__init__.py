"""Background workers."""

from ticketalert.application.workers.resale_sweep_worker import (
    ResaleSweep,
    ResaleSweepWorker,
)

__all__ = ["ResaleSweep", "ResaleSweepWorker"]
