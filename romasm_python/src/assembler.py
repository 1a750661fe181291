# assembler.py

# Copyright (C) 2025 John T. O'Donnell. License: GNU GPL Version 3
# See Sigma16/README, LICENSE, and https://github.com/jtod/Sigma16

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

# ---------------------------------------------------------------------
# assembler.py translates assembly language to a ROM image
# ---------------------------------------------------------------------

# Each line in the source can be:
#
# - A label like :main
# - Empty
# - An instruction like ADD R0 000 0001
# - An attribute like @define or @no_default_ops
#
# Any line can end with a # followed by a comment. If // is used
# instead then the comment is copied into the image next to the
# instruction.
#
# Branch instructions take a decimal target address, or better a
# label as in BZ R0 :main. Other instructions take binary data, as in
# ADD R0 000 1000.

import common
import state as st
import architecture as arch

# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------

def has_space(xs):
    return any(c.isspace() for c in xs)

binary_digits = "01"
decimal_digits = "0123456789"
hex_digits = "0123456789abcdefABCDEF"

def parse_digits(xs, digits, base):
    # int() would also take signs and underscores
    if not xs or any(c not in digits for c in xs):
        return None
    return int(xs, base)

def parse_number(xs, is_binary):
    if is_binary:
        return parse_digits(xs, binary_digits, 2)
    lower = xs.lower()
    if lower.startswith("0x"):
        return parse_digits(xs[2:], hex_digits, 16)
    if lower.startswith("0b"):
        return parse_digits(xs[2:], binary_digits, 2)
    return parse_digits(xs, decimal_digits, 10)

def expects_binary(op, supported_ops, expect_binary_data):
    if supported_ops is not None:
        operation = supported_ops.get(op.upper())
        return operation is not None and operation.data == arch.data_binary
    if expect_binary_data is not None:
        return expect_binary_data(op)
    return False

def parse_statement(text, supported_ops=None, expect_binary_data=None):
    fields = text.strip().split(None, 1)
    op = fields[0]
    if len(fields) == 1:
        return st.Statement(op)
    text = fields[1]

    reg = None
    for known_reg in arch.known_registers:
        if text.startswith(known_reg):
            reg = known_reg
            text = text[len(known_reg):].lstrip()
            break

    jump_label = None
    if text.startswith(":"):
        jump_label = text[1:]
        if has_space(jump_label):
            raise common.AsmSyntaxError(f"Labels can't contain spaces but found the label \"{text}\"")
        text = ""

    data = None
    if text:
        is_binary = expects_binary(op, supported_ops, expect_binary_data)
        data = parse_number("".join(text.split()), is_binary)
        if data is None:
            if text.lower().startswith("r"):
                raise common.AsmSyntaxError("This instruction didn't expect a register")
            kind = "binary number" if is_binary else "number"
            raise common.AsmSyntaxError(f"Failed to parse {text} as a {kind}")
    common.mode.devlog(f"parse_statement op={op} reg={reg} data={data} jump_label={jump_label}")
    return st.Statement(op, reg, data, jump_label)

def parse_attribute(text):
    if text.startswith("@define"):
        op = arch.parse_operation(text[len("@define"):])
        return st.Attribute(text[1:], op=op)
    elif text.lower() == "@no_default_ops":
        return st.Attribute(text[1:], no_default_ops=True)
    raise common.AsmSyntaxError(f"Expected @define or @no_default_ops but found \"{text}\"")

def parse_label(text):
    name = text[1:]
    if has_space(name):
        raise common.AsmSyntaxError(f"Labels can't contain spaces but found the label \"{text}\"")
    return st.Label(name)

def parse_line(line, supported_ops=None, expect_binary_data=None, parse_item_types=None):
    """Split one source line into its comments and its item.

    supported_ops is the operation table used to decide which
    statements take binary data; expect_binary_data is a predicate on
    the operation name used when no table is given. If
    parse_item_types is given, only items of those types are parsed
    and the others are left as None.
    """
    text = line

    # "Secret" comment, never emitted
    secret_comment = None
    ix = text.find(arch.private_comment)
    if ix >= 0:
        secret_comment = text[ix + len(arch.private_comment):]
        text = text[:ix]

    # Public comment, copied into the image
    comment = None
    ix = text.find(arch.public_comment)
    if ix >= 0:
        comment = text[ix + len(arch.public_comment):]
        text = text[:ix]

    text = text.strip()

    def can_parse(key):
        return parse_item_types is None or key in parse_item_types

    item = None
    if text.startswith("@"):
        if can_parse(st.ItemAttribute):
            item = parse_attribute(text)
    elif text.startswith(":"):
        if can_parse(st.ItemLabel):
            item = parse_label(text)
    elif text and can_parse(st.ItemStatement):
        item = parse_statement(text, supported_ops, expect_binary_data)

    return st.Line(line, text, item, comment, secret_comment)

def parse_program(content, supported_ops=None, expect_binary_data=None, parse_item_types=None):
    lines = []
    for i, line in enumerate(content.replace("\r", "").split("\n")):
        try:
            lines.append(parse_line(line, supported_ops, expect_binary_data, parse_item_types))
        except common.AsmError as e:
            raise common.AsmLineError(
                f"Syntax error at line {i + 1} with content \"{line}\"", i + 1, line, e) from e
    common.mode.devlog(f"parse_program: {len(lines)} lines")
    return lines

# ----------------------------------------------------------------------
# Statement checks
# ----------------------------------------------------------------------

def require_reg(op, s):
    if op.reg == arch.reg_always:
        if s.reg is None:
            raise common.AsmSemanticError(
                f"Must specify register using {' or '.join(arch.known_registers)}")
    elif op.reg == arch.reg_never:
        if s.reg is not None:
            raise common.AsmSemanticError(
                f"Can't specify a register for this operation, remove \"{s.reg}\"")

def require_data(op, s, data, i, unreachable, emit_warning):
    if op.data == arch.data_address:
        if data is None:
            raise common.AsmSemanticError("This instruction requires a target address")
        if not s.jump_label and not unreachable and emit_warning is not None:
            emit_warning(f"branching to hard coded address {data}", i)
    elif op.data == arch.data_binary:
        if data is None:
            raise common.AsmSemanticError("This instruction requires a binary value")
    elif op.data == arch.data_none:
        if data is not None:
            raise common.AsmSemanticError("This instruction doesn't take any data")

def label_comment(labels, address):
    return "".join(f":{name.replace(' ', '_')} "
                   for name, target in labels.items() if target == address)

def instruction_comment(line, labels, address):
    xs = line.comment or ""
    if xs:
        xs += " "
    return xs + f"(Assembly: {label_comment(labels, address)}{line.uncommented_line})"

# ----------------------------------------------------------------------
# Passes
# ----------------------------------------------------------------------

# Both passes walk the program with the same function. The label pass
# binds labels and counts words; the emit pass validates arguments,
# warns about hard coded branch targets and produces the instructions.
# Attributes have already been folded into ops, so both passes skip
# them.

def process(lines, ops, labels, resolve_labels, validate_args, emit_warning=None):
    instructions = []
    unreachable = False
    for i, line in enumerate(lines):
        s = line.item
        if s is None:
            continue
        try:
            if s.type == st.ItemLabel:
                unreachable = False
                if not resolve_labels:
                    continue
                if s.name in labels:
                    raise common.AsmSemanticError(f"Label \"{s.name}\" was defined multiple times")
                labels[s.name] = len(instructions)
                common.mode.devlog(f"label {s.name} = {len(instructions)}")
            elif s.type == st.ItemStatement:
                data = s.data
                if s.jump_label:
                    address = labels.get(s.jump_label)
                    if address is not None:
                        data = address
                    elif validate_args:
                        raise common.AsmSemanticError(f"Label \"{s.jump_label}\" was never defined")
                op = ops.get(s.op.upper())
                if op is None:
                    raise common.AsmSemanticError(f"Unknown operation \"{s.op}\"")
                if validate_args:
                    require_reg(op, s)
                    require_data(op, s, data, i, unreachable, emit_warning)
                comment = instruction_comment(line, labels, len(instructions))
                for out in op.output:
                    instructions.append(st.Instruction(
                        out.opcode,
                        out.use_register and s.reg == arch.reg_r1,
                        (data or 0) if out.use_data else 0,
                        comment))
                if op.always_branches:
                    unreachable = True
        except common.AsmError as e:
            raise common.AsmLineError(
                f"Failed to emit instruction for line {i + 1} in assembly file with content:\n\t{line.line}",
                i + 1, line.line, e) from e
    return instructions

def collect_labels(lines, ops):
    common.mode.devlog("Assembler pass 1: labels")
    labels = {}
    process(lines, ops, labels, resolve_labels=True, validate_args=False)
    common.mode.devlog(st.show_labels(labels))
    return labels

def emit_instructions(lines, ops, labels, emit_warning=None):
    common.mode.devlog("Assembler pass 2: instructions")
    return process(lines, ops, labels, resolve_labels=False, validate_args=True,
                   emit_warning=emit_warning)

def emit_image(instructions):
    n = len(instructions)
    if n > arch.image_size:
        raise common.AsmSemanticError(
            f"Program needs {n} instructions but the image only holds {arch.image_size}")
    out = "".join(inst.to_string() + "\n" for inst in instructions)
    out += (arch.filler_line + "\n") * (arch.image_size - n)
    return out

# ----------------------------------------------------------------------
# Assembler
# ----------------------------------------------------------------------

def assembler(src_text, emit_warning=None):
    ai = st.AsmInfo(src_text)

    def warn(msg, line_index):
        ai.add_warning(msg, line_index)
        if emit_warning is not None:
            emit_warning(msg, line_index)

    attributes = parse_program(ai.asm_src_text, parse_item_types={st.ItemAttribute})
    ai.ops = arch.load_defined_ops(attributes)
    ai.lines = parse_program(ai.asm_src_text, supported_ops=ai.ops)
    ai.labels = collect_labels(ai.lines, ai.ops)
    ai.instructions = emit_instructions(ai.lines, ai.ops, ai.labels, warn)
    ai.image = emit_image(ai.instructions)
    common.mode.devlog(ai.show_short())
    return ai

def assemble(content, emit_warning=None):
    return assembler(content, emit_warning).image
