"""Console logging and fault reporting.

Faults raised inside a cycle never become exceptions; they are recorded in the
machine state and surfaced here as log lines by the host driver.
"""

import sys
import time
from collections import Counter
from typing import Dict

import numpy as np

from chipcore.errors import Fault

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


class ConsoleLogger:
    """Print-based logger: ``[elapsed][LEVEL][name] message``."""

    def __init__(
        self,
        name: str = "chipcore",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        level = log_level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.name = name
        self.threshold = LEVELS.index(level)
        self.use_colors = use_colors and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def log(self, level: str, message: str):
        if LEVELS.index(level) < self.threshold:
            return
        prefix = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{_COLORS[level]}{tag}{_RESET}"
        print(f"{prefix}{tag}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)


class FaultReporter:
    """Turns per-cycle fault records into warnings and keeps running counts."""

    def __init__(self, logger: ConsoleLogger):
        self.logger = logger
        self.counts = Counter()

    def report(self, fault, fault_opcode, fault_address) -> int:
        """Log every fault in a batch of cycles.

        Args:
            fault: fault codes, one per cycle (scalar or 1-D)
            fault_opcode: faulting instruction words
            fault_address: addresses of the faulting instructions

        Returns:
            Number of faults reported
        """
        faults = np.atleast_1d(np.asarray(fault))
        opcodes = np.atleast_1d(np.asarray(fault_opcode))
        addresses = np.atleast_1d(np.asarray(fault_address))

        reported = 0
        for index in np.flatnonzero(faults != int(Fault.NONE)):
            kind = Fault(int(faults[index]))
            self.counts[kind] += 1
            self.logger.warning(kind.describe(int(opcodes[index]), int(addresses[index])))
            reported += 1
        return reported

    def summary(self) -> Dict[str, int]:
        """Fault counts keyed by fault name."""
        return {kind.name: count for kind, count in self.counts.items()}
