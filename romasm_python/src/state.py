# state.py

# Copyright (C) 2024 John T. O'Donnell. License: GNU GPL Version 3
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

# -------------------------------------------------------------------------
# state.py defines the data structures shared by the assembler, the
# command line tool and the editor: source lines and their items,
# encoded instructions, and the record of one assembler run.
# -------------------------------------------------------------------------

import re
import common
import arithmetic as arith
import architecture as arch

# -------------------------------------------------------------------------
# Items
# -------------------------------------------------------------------------

ItemLabel = arch.item_label
ItemStatement = arch.item_statement
ItemAttribute = arch.item_attribute

class Label:
    type = ItemLabel

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Label({self.name!r})"

class Statement:
    type = ItemStatement

    def __init__(self, op, reg=None, data=None, jump_label=None):
        self.op = op
        self.reg = reg
        self.data = data
        self.jump_label = jump_label

    def __repr__(self):
        return (f"Statement(op={self.op!r}, reg={self.reg!r}, "
                f"data={self.data!r}, jump_label={self.jump_label!r})")

class Attribute:
    type = ItemAttribute

    def __init__(self, content, op=None, no_default_ops=False):
        self.content = content
        self.op = op
        self.no_default_ops = no_default_ops

    def __repr__(self):
        return f"Attribute({self.content!r})"

# -------------------------------------------------------------------------
# Source lines
# -------------------------------------------------------------------------

class Line:
    def __init__(self, line, uncommented_line, item=None, comment=None, secret_comment=None):
        self.line = line
        self.uncommented_line = uncommented_line
        self.item = item
        self.comment = comment
        self.secret_comment = secret_comment

    def __repr__(self):
        return f"Line({self.line!r}, item={self.item!r})"

# -------------------------------------------------------------------------
# Instructions
# -------------------------------------------------------------------------

# An instruction as represented by the FPGA ROM editor: four hex
# digits, a semicolon, and a comment.

class Instruction:
    def __init__(self, opcode, r1, data, comment=""):
        self.opcode = arith.assert_opcode(opcode)
        self.r1 = bool(r1)
        self.data = arith.assert_data(data)
        self.comment = comment

    @property
    def word(self):
        return arith.mk_word(self.opcode, self.r1, self.data)

    def to_string(self):
        return arith.word_to_hex4(self.word) + ";" + self.comment

    def __repr__(self):
        return f"Instruction({self.to_string()!r})"

# -------------------------------------------------------------------------
# Image parser
# -------------------------------------------------------------------------

image_line_parser = re.compile(r"^([0-9a-fA-F]{4});(.*)$")

def parse_image_line(xs):
    m = image_line_parser.match(xs)
    if not m:
        raise common.AsmSyntaxError(f"image line has invalid format: \"{xs}\"")
    word = arith.hex4_to_word(m.group(1))
    if word >> arch.word_bits != 0:
        raise common.AsmSyntaxError(
            f"image word {m.group(1)} sets bits above the {arch.word_bits} bit instruction word")
    opcode, r1, data = arith.split_word(word)
    return Instruction(opcode, r1, data, m.group(2))

def parse_image(text):
    result = []
    for i, xs in enumerate(text.replace("\r", "").split("\n")):
        if not xs.strip():
            continue
        try:
            result.append(parse_image_line(xs))
        except common.AsmError as e:
            raise common.AsmLineError(f"Bad image line {i + 1}", i + 1, xs, e) from e
    return result

# -------------------------------------------------------------------------
# Assembler information record
# -------------------------------------------------------------------------

class AsmInfo:
    def __init__(self, src_text):
        self.asm_src_text = src_text.replace("\r", "")
        self.asm_src_lines = self.asm_src_text.split("\n")
        self.ops = arch.default_op_table
        self.lines = []
        self.labels = {}
        self.instructions = []
        self.warnings = []
        self.image = ""

    def add_warning(self, msg, line_index):
        self.warnings.append((msg, line_index))

    def show_short(self):
        xs = "AsmInfo\n"
        xs += f" {len(self.asm_src_lines)} source lines\n"
        xs += f" {len(self.ops)} operations: {' '.join(sorted(self.ops))}\n"
        xs += f" {len(self.instructions)} instructions\n"
        xs += f" {len(self.warnings)} warnings\n"
        return xs

# -------------------------------------------------------------------------
# Label table
# -------------------------------------------------------------------------

def show_labels(labels):
    xs = ["Label       Addr"]
    for name in sorted(labels, key=lambda k: (labels[k], k)):
        xs.append(f"{name.ljust(11)} {labels[name]:4d}")
    return "\n".join(xs)
