"""CHIP-8 virtual machine interpreter."""

from chipcore.state import MachineState, StackState, create_state
from chipcore.emulator import execute, fetch, step, tick_timers, run_cycles, CycleTrace
from chipcore.decode import DecodedInstruction, Op, decode
from chipcore.errors import Fault, RomLoadError
from chipcore.interfaces import load_program, load_rom, set_key, consume_display, sound_active
from chipcore.constants import *
from chipcore.interpreter import Interpreter, InterpreterConfig

__all__ = [
    "MachineState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run_cycles",
    "CycleTrace",
    "DecodedInstruction",
    "Op",
    "decode",
    "Fault",
    "RomLoadError",
    "load_program",
    "load_rom",
    "set_key",
    "consume_display",
    "sound_active",
    "Interpreter",
    "InterpreterConfig",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "FONT_START",
    "FONT_DATA",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "MAX_ROM_SIZE",
]
