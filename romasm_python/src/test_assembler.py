import re
import pytest
import common
import assembler
import architecture as arch
import state as st

countdown = """:main
LD R0 000 1010
SUB R0 000 0001
BZ R0 :Finished
B :main

:Finished"""

def collect_warnings(src):
    warnings = []
    assembler.assemble(src, emit_warning=lambda msg, i: warnings.append((msg, i)))
    return warnings

# ----------------------------------------------------------------------
# Line parser
# ----------------------------------------------------------------------

def test_parse_line_comments():
    line = assembler.parse_line("LD R0 000 1010 // hi # secret")
    assert line.comment == " hi "
    assert line.secret_comment == " secret"
    assert line.uncommented_line == "LD R0 000 1010"
    assert line.item.op == "LD"
    assert line.item.reg == "R0"

def test_parse_line_private_comment_hides_public_comment():
    line = assembler.parse_line("IN R0 # not // public")
    assert line.comment is None
    assert line.secret_comment == " not // public"

def test_parse_statement_data_base_depends_on_operation():
    decimal = assembler.parse_line("LD R0 000 1010")
    binary = assembler.parse_line("LD R0 000 1010", supported_ops=arch.default_op_table)
    predicate = assembler.parse_line("LD R0 11", expect_binary_data=lambda op: op == "LD")
    assert decimal.item.data == 1010
    assert binary.item.data == 10
    assert predicate.item.data == 3

def test_parse_statement_jump_label():
    s = assembler.parse_line("BZ R1 :loop").item
    assert s.reg == "R1"
    assert s.jump_label == "loop"
    assert s.data is None

def test_parse_statement_without_arguments():
    s = assembler.parse_line("  RET  ").item
    assert s.op == "RET"
    assert s.reg is None and s.data is None and s.jump_label is None

def test_parse_line_blank():
    line = assembler.parse_line("   # only a comment")
    assert line.item is None
    assert line.uncommented_line == ""

def test_parse_label():
    item = assembler.parse_line(":main").item
    assert item.type == st.ItemLabel
    assert item.name == "main"

def test_label_with_space_is_syntax_error():
    with pytest.raises(common.AsmSyntaxError, match="Labels can't contain spaces"):
        assembler.parse_line(":two words")

def test_jump_label_with_space_is_syntax_error():
    with pytest.raises(common.AsmSyntaxError, match="Labels can't contain spaces"):
        assembler.parse_line("B :two words")

def test_unknown_attribute_is_syntax_error():
    with pytest.raises(common.AsmSyntaxError, match="Expected @define or @no_default_ops"):
        assembler.parse_line("@include other.txt")

def test_parse_attributes():
    define = assembler.parse_line("@define CALL reg=never data=address => 0").item
    clear = assembler.parse_line("@NO_DEFAULT_OPS").item
    assert define.type == st.ItemAttribute
    assert define.op.op == "CALL"
    assert not define.no_default_ops
    assert clear.no_default_ops
    assert clear.op is None

def test_parse_item_types_filter():
    only_attributes = {st.ItemAttribute}
    assert assembler.parse_line(":main", parse_item_types=only_attributes).item is None
    assert assembler.parse_line("ADD R0 1", parse_item_types=only_attributes).item is None
    assert assembler.parse_line("@no_default_ops", parse_item_types=only_attributes).item is not None

def test_filter_skips_bad_statements():
    lines = assembler.parse_program("ADD R0 abc\n@no_default_ops", parse_item_types={st.ItemAttribute})
    assert [line.item is None for line in lines] == [True, False]

def test_bad_number():
    with pytest.raises(common.AsmSyntaxError, match="Failed to parse 12 as a binary number"):
        assembler.parse_line("ADD R0 12", supported_ops=arch.default_op_table)

@pytest.mark.parametrize("src, message", [
    ("ADD R0 -1", "Failed to parse -1 as a binary number"),
    ("ADD R0 +1", "Failed to parse \\+1 as a binary number"),
    ("ADD R0 0b1", "Failed to parse 0b1 as a binary number"),
    ("B 1_0", "Failed to parse 1_0 as a number"),
    ("B -3", "Failed to parse -3 as a number"),
    ("B 0x", "Failed to parse 0x as a number"),
    ("B 0x_f", "Failed to parse 0x_f as a number"),
])
def test_number_rejects_signs_and_underscores(src, message):
    with pytest.raises(common.AsmSyntaxError, match=message):
        assembler.parse_line(src, supported_ops=arch.default_op_table)

def test_number_prefixes():
    assert assembler.parse_line("B 0x1F", supported_ops=arch.default_op_table).item.data == 31
    assert assembler.parse_line("B 0b101", supported_ops=arch.default_op_table).item.data == 5

def test_unexpected_register():
    with pytest.raises(common.AsmSyntaxError, match="didn't expect a register"):
        assembler.parse_line("B r1", supported_ops=arch.default_op_table)

def test_parse_program_reports_line():
    with pytest.raises(common.AsmLineError) as info:
        assembler.parse_program("IN R0\n:a b\n")
    assert info.value.line_number == 2
    assert info.value.line == ":a b"
    assert isinstance(info.value.__cause__, common.AsmSyntaxError)
    assert "Syntax error at line 2" in str(info.value)
    assert "Caused by: Labels can't contain spaces" in str(info.value)

def test_parse_program_strips_carriage_returns():
    lines = assembler.parse_program("IN R0\r\nOUT R1\r\n")
    assert [line.line for line in lines] == ["IN R0", "OUT R1", ""]

# ----------------------------------------------------------------------
# Labels
# ----------------------------------------------------------------------

def test_collect_labels_counts_words():
    src = "@define NOP reg=never data=none\n:a\nNOP\n:b\nWRITE R0 1\n:c\nIN R0\n:d"
    ops = arch.load_defined_ops(assembler.parse_program(src, parse_item_types={st.ItemAttribute}))
    lines = assembler.parse_program(src, supported_ops=ops)
    labels = assembler.collect_labels(lines, ops)
    assert labels == {"a": 0, "b": 0, "c": 2, "d": 3}

def test_countdown_labels():
    ai = assembler.assembler(countdown)
    assert ai.labels == {"main": 0, "Finished": 4}

def test_duplicate_label():
    with pytest.raises(common.AsmLineError, match="defined multiple times") as info:
        assembler.assemble(":a\nIN R0\nB :a\n:a\n")
    assert info.value.line_number == 4

def test_duplicate_label_at_start():
    with pytest.raises(common.AsmLineError, match="defined multiple times"):
        assembler.assemble(":a\n:a\nIN R0")

def test_undefined_label():
    with pytest.raises(common.AsmLineError, match="Label \"nowhere\" was never defined"):
        assembler.assemble("BZ R0 :nowhere")

def test_forward_reference():
    image = assembler.assemble("B :end\nIN R0\n:end\nOUT R1").split("\n")
    assert image[0] == "0602;(Assembly: B :end)"
    assert image[2] == "1100;(Assembly: :end OUT R1)"

def test_labels_in_comment():
    image = assembler.assemble(":one\n:two\nIN R1").split("\n")
    assert image[0] == "0f00;(Assembly: :one :two IN R1)"

# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------

def test_countdown():
    image = assembler.assemble(countdown)
    lines = image.split("\n")
    assert image.endswith("\n")
    assert lines[-1] == ""
    lines = lines[:-1]
    assert len(lines) == arch.image_size
    assert lines[:4] == [
        "0c0a;(Assembly: :main LD R0 000 1010)",
        "0a01;(Assembly: SUB R0 000 0001)",
        "0404;(Assembly: BZ R0 :Finished)",
        "0600;(Assembly: B :main)",
    ]
    assert lines[4:] == ["0000;"] * 60

def test_output_format():
    for src in [countdown, "", "WRITE R1 1111111 // all ones", "CALL 3\nRET"]:
        lines = assembler.assemble(src).split("\n")[:-1]
        assert len(lines) == 64
        for xs in lines:
            assert re.match(r"^[0-9a-f]{4};.*$", xs)

def test_assemble_is_repeatable():
    src = countdown + "\nWRITE R1 101 // out\nCALL 9"
    assert assembler.assemble(src) == assembler.assemble(src)

def test_write_expands_to_two_words():
    image = assembler.assemble("WRITE R1 0000011").split("\n")
    assert image[0] == "0d03;(Assembly: WRITE R1 0000011)"
    assert image[1] == "1100;(Assembly: WRITE R1 0000011)"
    assert image[2] == "0000;"

def test_write_register_is_optional():
    image = assembler.assemble("WRITE 1").split("\n")
    assert image[0].startswith("0c01;")
    assert image[1].startswith("1000;")

def test_public_comment_is_kept():
    image = assembler.assemble("ADD R1 0000001 // add one # secret").split("\n")
    assert image[0] == "0901; add one  (Assembly: ADD R1 0000001)"

def test_operation_names_ignore_case():
    image = assembler.assemble("add R0 1\nOut R1").split("\n")
    assert image[0].startswith("0801;")
    assert image[1].startswith("1100;")

def test_data_overflow():
    with pytest.raises(common.AsmLineError, match="can't be more than 7 bits") as info:
        assembler.assemble("IN R0\nADD R0 1111 1111")
    assert info.value.line_number == 2
    assert isinstance(info.value.__cause__, common.AsmSemanticError)

def test_largest_data_fits():
    image = assembler.assemble("ADD R1 111 1111").split("\n")
    assert image[0].startswith("097f;")

def test_opcode_overflow():
    with pytest.raises(common.AsmLineError, match="can't be more than 4 bits"):
        assembler.assemble("@define BIG reg=never data=none => 16\nBIG")

def test_image_overflow():
    assembler.assemble("IN R0\n" * 64)
    with pytest.raises(common.AsmSemanticError, match="only holds 64"):
        assembler.assemble("IN R0\n" * 65)

def test_zero_word_operation():
    image = assembler.assemble("@define NOP reg=never data=none\nNOP\nIN R0").split("\n")
    assert image[0] == "0e00;(Assembly: IN R0)"

# ----------------------------------------------------------------------
# Argument validation
# ----------------------------------------------------------------------

@pytest.mark.parametrize("src, message", [
    ("ADD 0001", "Must specify register using R0 or R1"),
    ("B R0 3", "Can't specify a register for this operation, remove \"R0\""),
    ("B", "This instruction requires a target address"),
    ("ADD R0", "This instruction requires a binary value"),
    ("IN R0 1", "This instruction doesn't take any data"),
    ("FOO R0", "Unknown operation \"FOO\""),
])
def test_validation_errors(src, message):
    with pytest.raises(common.AsmLineError) as info:
        assembler.assemble("IN R0\n" + src)
    assert info.value.line_number == 2
    assert common.error_chain(info.value)[-1] == message

def test_error_message_names_line():
    with pytest.raises(common.AsmLineError) as info:
        assembler.assemble("IN R0\nFOO")
    assert str(info.value).startswith(
        "Failed to emit instruction for line 2 in assembly file with content:\n\tFOO")

# ----------------------------------------------------------------------
# Warnings
# ----------------------------------------------------------------------

def test_hard_coded_address_warning():
    assert collect_warnings("IN R0\nCALL 5") == [("branching to hard coded address 5", 1)]

def test_no_warning_for_label():
    assert collect_warnings(countdown) == []

def test_unreachable_code_suppresses_warnings():
    assert collect_warnings("B 5\nB 6") == [("branching to hard coded address 5", 0)]
    assert collect_warnings("RET\nCALL 6") == []

def test_label_ends_unreachable_code():
    assert collect_warnings("B 5\n:x\nB 6") == [
        ("branching to hard coded address 5", 0),
        ("branching to hard coded address 6", 2),
    ]

def test_warnings_are_recorded():
    ai = assembler.assembler("CALL 3")
    assert ai.warnings == [("branching to hard coded address 3", 0)]
    assert len(ai.image.split("\n")) == 65

# ----------------------------------------------------------------------
# Directives
# ----------------------------------------------------------------------

def test_user_defined_operations_only():
    src = "@no_default_ops\n@define CALL reg=never data=address => 0\n:x\nCALL :x"
    image = assembler.assemble(src).split("\n")
    assert image[0] == "0000;(Assembly: :x CALL :x)"

def test_defaults_removed():
    src = "@no_default_ops\n@define CALL reg=never data=address => 0\n:x\nCALL :x\nADD R0 1"
    with pytest.raises(common.AsmLineError, match="Unknown operation \"ADD\""):
        assembler.assemble(src)

def test_clear_defaults_applies_to_whole_file():
    with pytest.raises(common.AsmLineError, match="Unknown operation") as info:
        assembler.assemble("ADD R0 1\n@no_default_ops")
    assert info.value.line_number == 1

def test_clear_defaults_keeps_redefinitions():
    src = "@define ADD reg=always data=binary => 12\n@no_default_ops\nADD R0 1"
    image = assembler.assemble(src).split("\n")
    assert image[0].startswith("1801;")
    with pytest.raises(common.AsmLineError, match="Unknown operation \"LD\""):
        assembler.assemble(src + "\nLD R0 1")

def test_later_definition_wins():
    src = "@define X reg=never data=none => 1\nX\n@define X reg=never data=none => 2"
    image = assembler.assemble(src).split("\n")
    assert image[0].startswith("0400;")

def test_redefined_data_policy_changes_parsing():
    src = "@define CALL reg=never data=binary => 0\nCALL 11"
    image = assembler.assemble(src).split("\n")
    assert image[0].startswith("0003;")

def test_bad_definition_reports_line():
    with pytest.raises(common.AsmLineError, match="Syntax error at line 2") as info:
        assembler.assemble("IN R0\n@define X reg=maybe data=none")
    assert info.value.line_number == 2
