"""Tests for the headless runner."""

import numpy as np

from chipcore.__main__ import main, display_to_text
from conftest import program


def test_display_to_text():
    display = np.zeros((2, 3), dtype=bool)
    display[1, 2] = True
    assert display_to_text(display) == "...\n..#"


def test_runs_rom_and_prints_screen(tmp_path, capsys):
    rom = tmp_path / "digit.ch8"
    rom.write_bytes(program(0xA050, 0xD005, 0x1204))

    assert main([str(rom), "--ticks", "5", "--log-level", "WARNING"]) == 0

    lines = capsys.readouterr().out.splitlines()
    screen = lines[-32:]
    assert screen[0].startswith("####....")
    assert screen[1].startswith("#..#....")
    assert all(len(line) == 64 for line in screen)


def test_missing_rom_exit_status(tmp_path):
    assert main([str(tmp_path / "missing.ch8"), "--ticks", "1"]) == 1
