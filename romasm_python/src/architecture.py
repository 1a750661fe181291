# architecture.py

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

# --------------------------------------------------------------------
# architecture.py defines global constants and tables specifying
# formats, opcodes, mnemonics, and the operation definition language
# --------------------------------------------------------------------

import common

# --------------------------------------------------------------------
# Architecture constants
# --------------------------------------------------------------------

# The instruction memory holds image_size words. Each word has a 4
# bit opcode, a register select bit, and a 7 bit data field. The ROM
# editor reserves 8 bits for the data field, so the register bit sits
# at bit 8 and the opcode starts at bit 9.

image_size = 64

opcode_bits = 4
data_bits = 7
data_slot_bits = 8

reg_shift = data_slot_bits
opcode_shift = data_slot_bits + 1
data_slot_mask = (1 << data_slot_bits) - 1
word_bits = opcode_shift + opcode_bits

filler_line = "0000;"

# Registers, in encoding order: R1 sets the register bit

known_registers = ["R0", "R1"]
reg_r1 = "R1"

# Comment markers. Private comments are dropped, public comments are
# copied into the image.

private_comment = "#"
public_comment = "//"

# Item kinds. Each source line holds at most one item: a label, a
# statement, or an attribute (a directive to the assembler itself).

item_label = "label"
item_statement = "statement"
item_attribute = "attribute"

# --------------------------------------------------------------------
# Operation policies
# --------------------------------------------------------------------

# Register policy

reg_never = "never"
reg_optional = "optional"
reg_always = "always"
operation_reg_values = [reg_never, reg_optional, reg_always]

# Data policy

data_address = "address"
data_binary = "binary"
data_none = "none"
operation_data_values = [data_address, data_binary, data_none]

# Keywords of the operation definition language

unreachable_flag = "unconditional-jump"
output_arrow = "=>"
no_reg_flag = "no-reg"
no_data_flag = "no-data"

# --------------------------------------------------------------------
# Operations
# --------------------------------------------------------------------

# An operation maps one assembly statement to a sequence of machine
# words. Each output describes one word: its opcode, and whether the
# statement's register and data fields are copied into it. Operations
# are compared by identity; the operation table relies on this to
# tell the built-in definitions apart from user redefinitions.

class OperationOutput:
    def __init__(self, opcode, use_register=True, use_data=True):
        self.opcode = opcode
        self.use_register = use_register
        self.use_data = use_data

    def to_string(self):
        xs = str(self.opcode)
        if not self.use_register:
            xs += " " + no_reg_flag
        if not self.use_data:
            xs += " " + no_data_flag
        return xs

class Operation:
    def __init__(self, op, reg, data, always_branches, output):
        self.op = op
        self.reg = reg
        self.data = data
        self.always_branches = always_branches
        self.output = tuple(output)

    @property
    def key(self):
        return self.op.upper()

    def to_string(self):
        xs = f"{self.op} reg={self.reg} data={self.data}"
        if self.always_branches:
            xs += " " + unreachable_flag
        if self.output:
            xs += f" {output_arrow} " + ", ".join(o.to_string() for o in self.output)
        return xs

    def __repr__(self):
        return f"Operation({self.to_string()!r})"

# --------------------------------------------------------------------
# Operation definition language
# --------------------------------------------------------------------

# NAME reg=(always|never|optional) data=(none|binary|address)
#      [unconditional-jump] [=> OPCODE [no-reg] [no-data], ...]

def take_setting(tokens, key, values, next_hint):
    """Remove a key=value token from the front of tokens and return value."""
    if not tokens:
        raise common.AsmSyntaxError(f"Expected {key} info \"{key}=...\" {next_hint}")
    tok = tokens.pop(0)
    if not tok.startswith(key):
        raise common.AsmSyntaxError(
            f"Expected {key} info to start with \"{key}=\" but found \"{tok}\"")
    rest = tok[len(key):]
    if not rest.startswith("="):
        raise common.AsmSyntaxError(
            f"Expected {key} info to start with \"{key}=\" but found no \"=\" in \"{tok}\"")
    value = rest[1:]
    if value not in values:
        raise common.AsmSyntaxError(
            f"Expected one of {', '.join(values)} after \"{key}=\" but found \"{value}\"")
    return value

def parse_output(xs):
    fields = xs.split()
    if not fields:
        raise common.AsmSyntaxError(f"Expected an opcode number after \"{output_arrow}\" or \",\"")
    opcode_str, options = fields[0], fields[1:]
    try:
        opcode = int(opcode_str, 10)
    except ValueError:
        raise common.AsmSyntaxError(
            f"Failed to parse {opcode_str} as number to use as opcode") from None
    out = OperationOutput(opcode)
    for i, option in enumerate(options):
        if option == no_reg_flag:
            out.use_register = False
        elif option == no_data_flag:
            out.use_data = False
        else:
            raise common.AsmSyntaxError(
                f"Invalid modifier #{i + 1} \"{option}\" for output opcode \"{opcode_str}\", "
                f"if this was expected to be a new opcode then add a comma (,) before it")
    return out

def parse_operation(text):
    text = text.strip()
    if not text:
        raise common.AsmSyntaxError("Could not parse <empty string> as an operation")
    head, arrow, tail = text.partition(output_arrow)
    tokens = head.split()
    if not tokens:
        raise common.AsmSyntaxError(f"Expected operation name before \"{output_arrow}\"")
    op = tokens.pop(0)
    reg = take_setting(tokens, "reg", operation_reg_values, f"after operation name \"{op}\"")
    data = take_setting(tokens, "data", operation_data_values, "after register info")
    always_branches = bool(tokens) and tokens[0] == unreachable_flag
    if always_branches:
        tokens.pop(0)
    if tokens:
        raise common.AsmSyntaxError(
            f"Expected arrow \"{output_arrow}\" after operation definition before output "
            f"instructions but found \"{tokens[0]}\"")
    output = []
    if arrow:
        output = [parse_output(xs) for xs in tail.split(",")]
    result = Operation(op, reg, data, always_branches, output)
    common.mode.devlog(f"parse_operation {result.to_string()}")
    return result

# --------------------------------------------------------------------
# Default operations
# --------------------------------------------------------------------

default_ops_text = """
CALL reg=never data=address => 0
RET reg=never data=none unconditional-jump => 1
BZ reg=always data=address => 2
B reg=never data=address unconditional-jump => 3
ADD reg=always data=binary => 4
SUB reg=always data=binary => 5
LD reg=always data=binary => 6
IN reg=always data=none => 7
OUT reg=always data=none => 8
AND reg=always data=binary => 9
WRITE reg=optional data=binary => 6, 8 no-data
"""

def parse_default_ops(text):
    ops = []
    for i, line in enumerate(xs for xs in text.split("\n") if xs):
        try:
            ops.append(parse_operation(line))
        except common.AsmError as e:
            raise common.AsmLineError(
                f"Failed to parse default op from line {i + 1} with content \"{line}\"",
                i + 1, line, e) from e
    return ops

default_ops = parse_default_ops(default_ops_text)

# --------------------------------------------------------------------
# Operation table
# --------------------------------------------------------------------

# The operation table maps the uppercase name of an operation to its
# definition. Tables are never modified once built: each directive
# produces a new table.

def mk_op_table(ops):
    return {op.key: op for op in ops}

default_op_table = mk_op_table(default_ops)

def apply_attribute(ops, attribute):
    result = dict(ops)
    if attribute.no_default_ops:
        for op in default_ops:
            if result.get(op.key) is op:
                del result[op.key]
        common.mode.devlog(f"no_default_ops: {len(ops)} -> {len(result)} operations")
    if attribute.op is not None:
        result[attribute.op.key] = attribute.op
        common.mode.devlog(f"define {attribute.op.to_string()}")
    return result

def load_defined_ops(lines, ops=None):
    """Fold the attributes of a parsed program over an operation table.

    The result is the table in effect for the whole program; it starts
    from the default operations unless another table is given.
    """
    result = default_op_table if ops is None else ops
    for i, line in enumerate(lines):
        if line.item is None or line.item.type != item_attribute:
            continue
        try:
            result = apply_attribute(result, line.item)
        except common.AsmError as e:
            raise common.AsmLineError(
                f"Failed to apply attribute for line {i + 1} in assembly file with content:\n\t{line.line}",
                i + 1, line.line, e) from e
    return result
