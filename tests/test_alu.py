"""Tests for ALU operations (8xxx)."""

import pytest
from chipcore import execute
from conftest import set_registers


class TestBasicALU:
    """Test basic ALU operations."""

    def test_alu_set_basic(self, fresh_state):
        """8XY0 - Set VX = VY."""
        state = set_registers(fresh_state, V1=0x42, V2=0x99)

        state = execute(state, 0x8120)  # V1 = V2

        assert state.V[1] == 0x99
        assert state.V[2] == 0x99

    def test_alu_or_basic(self, fresh_state):
        """8XY1 - OR operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F)

        state = execute(state, 0x8121)  # V1 |= V2

        assert state.V[1] == 0xFF

    def test_alu_and_basic(self, fresh_state):
        """8XY2 - AND operation."""
        state = set_registers(fresh_state, V1=0xF0, V2=0xF1)

        state = execute(state, 0x8122)  # V1 &= V2

        assert state.V[1] == 0xF0

    def test_alu_xor_basic(self, fresh_state):
        """8XY3 - XOR operation."""
        state = set_registers(fresh_state, V1=0xFF, V2=0xF0)

        state = execute(state, 0x8123)  # V1 ^= V2

        assert state.V[1] == 0x0F

    def test_logic_ops_leave_vf_alone(self, fresh_state):
        """8XY1/2/3 do not touch the flag register."""
        for instruction in (0x8121, 0x8122, 0x8123):
            state = set_registers(fresh_state, V1=0x0F, V2=0xF0, VF=0x77)
            state = execute(state, instruction)
            assert state.V[15] == 0x77, f"{instruction:04X} changed VF"

    def test_alu_advances_pc(self, fresh_state):
        state = execute(fresh_state, 0x8124)
        assert state.pc == 0x202


class TestALUArithmetic:
    """Test arithmetic ALU operations."""

    def test_alu_add_no_carry(self, fresh_state):
        """8XY4 - Add without carry."""
        state = set_registers(fresh_state, V1=0x10, V2=0x20)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x30
        assert state.V[15] == 0

    def test_alu_add_with_carry(self, fresh_state):
        """8XY4 - Add with carry."""
        state = set_registers(fresh_state, V1=0xFF, V2=0x01)

        state = execute(state, 0x8124)  # V1 += V2

        assert state.V[1] == 0x00  # 256 wraps to 0
        assert state.V[15] == 1  # Carry set

    def test_alu_add_exactly_255(self, fresh_state):
        """8XY4 - A sum of 255 does not carry."""
        state = set_registers(fresh_state, V1=0xF0, V2=0x0F, VF=1)

        state = execute(state, 0x8124)

        assert state.V[1] == 0xFF
        assert state.V[15] == 0

    @pytest.mark.parametrize("vx,vy", [(0, 0), (1, 254), (1, 255), (128, 128), (200, 100), (255, 255), (17, 3)])
    def test_alu_add_carry_property(self, fresh_state, vx, vy):
        """8XY4 - VF = 1 iff VX + VY > 255, VX = low byte of the sum."""
        state = set_registers(fresh_state, V3=vx, V4=vy)

        state = execute(state, 0x8344)

        assert state.V[3] == (vx + vy) & 0xFF
        assert state.V[15] == int(vx + vy > 255)

    def test_alu_sub_xy_no_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, no borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8125)  # V1 -= V2

        assert state.V[1] == 0x20
        assert state.V[15] == 1  # No borrow (VX > VY)

    def test_alu_sub_xy_with_borrow(self, fresh_state):
        """8XY5 - Subtract VX - VY, with borrow."""
        state = set_registers(fresh_state, V3=0x10, V4=0x30)

        state = execute(state, 0x8345)  # V3 -= V4

        assert state.V[3] == 0xE0  # 16 - 48 = -32 → 224
        assert state.V[15] == 0  # Borrow (VX < VY)

    def test_alu_sub_xy_equal_operands(self, fresh_state):
        """8XY5 - Equal operands give 0 and VF = 0 (VX is not greater)."""
        state = set_registers(fresh_state, V1=0x42, V2=0x42)

        state = execute(state, 0x8125)

        assert state.V[1] == 0
        assert state.V[15] == 0

    @pytest.mark.parametrize("vx,vy", [(0, 0), (0, 1), (1, 0), (255, 0), (0, 255), (100, 99), (99, 100)])
    def test_alu_sub_xy_property(self, fresh_state, vx, vy):
        """8XY5 - VF = 1 iff VX > VY, VX = (VX - VY) mod 256."""
        state = set_registers(fresh_state, V5=vx, V6=vy)

        state = execute(state, 0x8565)

        assert state.V[5] == (vx - vy) % 256
        assert state.V[15] == int(vx > vy)

    def test_alu_sub_yx_no_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, no borrow."""
        state = set_registers(fresh_state, V1=0x10, V2=0x30)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0x20  # 48 - 16 = 32
        assert state.V[15] == 1  # No borrow (VY > VX)

    def test_alu_sub_yx_with_borrow(self, fresh_state):
        """8XY7 - Subtract VY - VX, with borrow."""
        state = set_registers(fresh_state, V1=0x30, V2=0x10)

        state = execute(state, 0x8127)  # V1 = V2 - V1

        assert state.V[1] == 0xE0
        assert state.V[15] == 0


class TestALUShifts:
    """Test shift operations."""

    def test_shift_right_even(self, fresh_state):
        """8XY6 - Shift right, even number."""
        state = set_registers(fresh_state, V1=0x04, V2=0xFF)  # V2 is ignored

        state = execute(state, 0x8126)  # V1 >>= 1

        assert state.V[1] == 0x02
        assert state.V[15] == 0  # LSB was 0

    def test_shift_right_odd(self, fresh_state):
        """8XY6 - Shift right, odd number."""
        state = set_registers(fresh_state, V3=0x05, V4=0xFF)

        state = execute(state, 0x8346)  # V3 >>= 1

        assert state.V[3] == 0x02
        assert state.V[15] == 1  # LSB was 1

    def test_shift_left_overflow(self, fresh_state):
        """8XYE - Shift left with overflow."""
        state = set_registers(fresh_state, V3=0x81, V4=0xFF)  # 10000001

        state = execute(state, 0x834E)  # V3 <<= 1

        assert state.V[3] == 0x02  # 129 << 1 = 258 → 2
        assert state.V[15] == 1  # MSB was 1

    def test_shift_left_no_overflow(self, fresh_state):
        """8XYE - Shift left, MSB clear."""
        state = set_registers(fresh_state, V3=0x41, VF=1)

        state = execute(state, 0x834E)

        assert state.V[3] == 0x82
        assert state.V[15] == 0

    def test_shift_flag_uses_value_before_shift(self, fresh_state):
        """Flag bit comes from VX before shifting, in both directions."""
        # 0x01 >> 1 = 0 but the shifted-out bit is 1
        state = execute(set_registers(fresh_state, V2=0x01), 0x8206)
        assert state.V[2] == 0x00
        assert state.V[15] == 1

        # 0x80 << 1 = 0 but the shifted-out bit is 1
        state = execute(set_registers(fresh_state, V2=0x80), 0x820E)
        assert state.V[2] == 0x00
        assert state.V[15] == 1


class TestALUEdgeCases:
    """Test edge cases and comprehensive scenarios."""

    def test_alu_undefined_operations(self, fresh_state):
        """Undefined 8XYN variants leave registers alone and report a fault."""
        from chipcore import Fault
        undefined_ops = [0x8, 0x9, 0xA, 0xB, 0xC, 0xD, 0xF]

        for op in undefined_ops:
            state = set_registers(fresh_state, V1=0x42, V2=0x99, VF=0x07)

            instruction = 0x8120 | op
            state = execute(state, instruction)

            assert state.V[1] == 0x42, f"Undefined op {op:X} changed VX"
            assert state.V[15] == 0x07, f"Undefined op {op:X} changed VF"
            assert state.fault == int(Fault.UNKNOWN_OPCODE)
            assert state.fault_opcode == instruction
            assert state.pc == 0x202

    def test_alu_self_operations(self, fresh_state):
        """Test operations where VX and VY are the same register."""
        state = set_registers(fresh_state, V5=0xAA)

        # V5 ^= V5 (should become 0)
        state = execute(state, 0x8553)
        assert state.V[5] == 0x00, "Self XOR should result in 0"

        # Reset and test self ADD
        state = set_registers(state, V5=0x80)
        state = execute(state, 0x8554)  # V5 += V5
        assert state.V[5] == 0x00, "Self ADD should wrap on overflow"
        assert state.V[15] == 1, "Self ADD should set carry flag"

    def test_vf_register_operations(self, fresh_state):
        """Test that operations on VF work correctly."""
        state = set_registers(fresh_state, VF=0x42, V1=0x10)

        state = execute(state, 0x81F4)  # V1 += VF
        assert state.V[1] == 0x52, "Addition with VF as source failed"
        assert state.V[15] == 0, "VF should be overwritten by operation result"

    def test_result_wins_when_target_is_vf(self, fresh_state):
        """With X = F the arithmetic result, not the flag, ends up in VF."""
        state = set_registers(fresh_state, VF=0xFF, V1=0x02)

        state = execute(state, 0x8F14)  # VF += V1, carry would be 1

        assert state.V[15] == 0x01
