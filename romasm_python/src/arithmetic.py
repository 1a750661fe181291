# arithmetic.py

# Copyright (C) 2025 John T. O'Donnell. License: GNU GPL Version 3
# See Sigma16/README, LICENSE, and https://jtod.github.io/home/Sigma16

# This file is part of Sigma16. Sigma16 is free software: you can
# redistribute it and/or modify it under the terms of the GNU General
# Public License as published by the Free Software Foundation, either
# version 3 of the License, or (at your option) any later version.
# Sigma16 is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details. You should have received
# a copy of the GNU General Public License along with Sigma16. If
# not, see <https://www.gnu.org/licenses/>.

# ------------------------------------------------------------------------
# arithmetic.py defines the representation of instruction words:
# packing the opcode, register bit and data fields into a 16-bit word,
# unpacking them again, range checks on the fields, and hexadecimal
# notation.
# ------------------------------------------------------------------------

import common
import architecture as arch

word16mask = 0x0000FFFF

# ------------------------------------------------------------------------
# Ensuring validity of fields
# ------------------------------------------------------------------------

# A field value must satisfy 0 <= x < 2^k for a k-bit field. Values
# out of range are errors; they are never truncated to fit.

def fits(x, k):
    return 0 <= x < 2**k

def limit16(x):
    return x & word16mask

def assert_opcode(x):
    if not fits(x, arch.opcode_bits):
        raise common.AsmSemanticError(
            f"Opcode can't be more than {arch.opcode_bits} bits but was {show_bin(x)}")
    return x

def assert_data(x):
    if not fits(x, arch.data_bits):
        raise common.AsmSemanticError(
            f"Instruction data can't be more than {arch.data_bits} bits but was {show_bin(x)}")
    return x

def show_bin(x):
    return f"-{-x:b}" if x < 0 else f"{x:b}"

# ------------------------------------------------------------------------
# Operating on fields of a word
# ------------------------------------------------------------------------

# Layout of an instruction word, most significant bit first:
#   bits 15..13  unused (zero)
#   bits 12..9   opcode
#   bit  8       register select (0 = R0, 1 = R1)
#   bits 7..0    data slot; the hardware only uses bits 6..0

def mk_word(opcode, r1, data):
    assert_opcode(opcode)
    assert_data(data)
    return (opcode << arch.opcode_shift) | (int(bool(r1)) << arch.reg_shift) | data

def split_word(x):
    y = limit16(x)
    data = y & arch.data_slot_mask
    r1 = (y >> arch.reg_shift) & 0x0001
    opcode = (y >> arch.opcode_shift) & 0x000F
    common.mode.devlog(f"split_word {word_to_hex4(x)} op={opcode} r1={r1} data={data}")
    return opcode, r1, data

# ------------------------------------------------------------------------
# Hexadecimal notation
# ------------------------------------------------------------------------

hex_digit = ['0', '1', '2', '3', '4', '5', '6', '7', '8', '9', 'a', 'b', 'c', 'd', 'e', 'f']

def word_to_hex4(x):
    y = limit16(x)
    s = y & 0x000F
    y = y >> 4
    r = y & 0x000F
    y = y >> 4
    q = y & 0x000F
    y = y >> 4
    p = y & 0x000F
    return hex_digit[p] + hex_digit[q] + hex_digit[r] + hex_digit[s]

def hex4_to_word(h):
    if len(h) != 4:
        raise common.AsmSyntaxError(f"Expected 4 hex digits but found \"{h}\"")
    return (16**3 * hex_char_to_int(h[0]) +
            16**2 * hex_char_to_int(h[1]) +
            16**1 * hex_char_to_int(h[2]) +
            hex_char_to_int(h[3]))

def hex_char_to_int(cx):
    c = ord(cx)
    if ord('0') <= c <= ord('9'):
        return c - ord('0')
    elif ord('a') <= c <= ord('f'):
        return 10 + c - ord('a')
    elif ord('A') <= c <= ord('F'):
        return 10 + c - ord('A')
    else:
        raise common.AsmSyntaxError(f"\"{cx}\" is not a hex digit")
