"""Host-side driver owning one machine state."""

import os
from typing import Optional, Union

import jax
import numpy as np
from flax.struct import dataclass, field

from chipcore.state import MachineState, create_state
from chipcore.emulator import run_cycles
from chipcore.errors import RomLoadError
from chipcore.interfaces import load_program, set_key, consume_display, sound_active
from chipcore.logging import ConsoleLogger, FaultReporter


@dataclass(frozen=True)
class InterpreterConfig:
    """Interpreter settings.

    Attributes:
        cycles_per_tick: cycles run by each call to ``Interpreter.tick``
        seed: seed of the PRNG key used by the random instruction
        log_level: minimum level printed by the console logger
        use_colors: colour log levels when stdout is a terminal
        show_timestamps: prefix log lines with elapsed seconds
        report_faults: log faults raised during cycles
    """
    cycles_per_tick: int = field(pytree_node=False, default=1)
    seed: int = field(pytree_node=False, default=0)
    log_level: str = field(pytree_node=False, default="INFO")
    use_colors: bool = field(pytree_node=False, default=True)
    show_timestamps: bool = field(pytree_node=False, default=True)
    report_faults: bool = field(pytree_node=False, default=True)


class Interpreter:
    """Owns a ``MachineState`` and drives it one host tick at a time.

    The host loop calls ``set_key`` as input arrives, ``tick`` once per frame,
    ``consume_display`` to fetch the framebuffer when it changed and
    ``sound_active`` to gate the tone.
    """

    def __init__(self, config: Optional[InterpreterConfig] = None, logger: Optional[ConsoleLogger] = None):
        self.config = config or InterpreterConfig()
        if self.config.cycles_per_tick < 1:
            raise ValueError(
                f"cycles_per_tick must be positive, got {self.config.cycles_per_tick}"
            )

        self.logger = logger or ConsoleLogger(
            log_level=self.config.log_level,
            use_colors=self.config.use_colors,
            show_timestamps=self.config.show_timestamps,
        )
        self.fault_reporter = FaultReporter(self.logger)
        self.program = b""
        self._state = create_state(jax.random.PRNGKey(self.config.seed))

    @property
    def state(self) -> MachineState:
        return self._state

    def load_program(self, data: bytes) -> None:
        """Load a program image. Raises ``RomLoadError`` before anything runs if it does not fit."""
        try:
            self._state = load_program(self._state, data)
        except RomLoadError as e:
            self.logger.error(str(e))
            raise
        self.program = bytes(data)
        self.logger.info(f"Loaded {len(data)} bytes at 0x200")

    def load_rom(self, filename: Union[str, os.PathLike]) -> None:
        """Load a ROM file."""
        try:
            with open(filename, 'rb') as f:
                data = f.read()
        except OSError as e:
            self.logger.error(f"Failed to open ROM '{filename}': {e}")
            raise RomLoadError(f"Failed to open ROM '{filename}': {e}") from e
        self.logger.info(f"Reading ROM '{filename}'")
        self.load_program(data)

    def reset(self) -> None:
        """Return to the power-on state with the current program reloaded."""
        self._state = load_program(create_state(jax.random.PRNGKey(self.config.seed)), self.program)
        self.fault_reporter.counts.clear()
        self.logger.debug("Machine reset")

    def set_key(self, key: int, pressed: bool) -> None:
        self._state = set_key(self._state, key, pressed)

    def tick(self) -> MachineState:
        """Run one host tick worth of cycles and report the faults they raised."""
        self._state, trace = run_cycles(self._state, self.config.cycles_per_tick)
        if self.config.report_faults:
            self.fault_reporter.report(trace.fault, trace.fault_opcode, trace.fault_address)
        return self._state

    def consume_display(self) -> Optional[np.ndarray]:
        """Framebuffer as a (32, 64) boolean array if it changed since the last call, else None."""
        self._state, display, redraw = consume_display(self._state)
        if not bool(redraw):
            return None
        return np.asarray(display)

    @property
    def sound_active(self) -> bool:
        return bool(sound_active(self._state))

    @property
    def fault_counts(self) -> dict:
        return self.fault_reporter.summary()
