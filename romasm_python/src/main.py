# main.py

import sys
import os
import argparse
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).resolve().parent))

import common
import assembler
import state
import architecture as arch


def output_path_for(file_path, out_path=None):
    if not out_path:
        out_path = file_path
        base, ext = os.path.splitext(out_path)
        if ext:
            out_path = base
    if not out_path.lower().endswith('.hex'):
        out_path += '.hex'
    return out_path


def read_text(file_path):
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        common.mode.errlog(f"Error: File not found at {file_path}")
    except UnicodeDecodeError as e:
        common.mode.errlog(f"Error: {file_path} is not valid UTF-8 text: {e}")
    except OSError as e:
        common.mode.errlog(f"Error reading {file_path}: {e}")
    return None


def assemble_file(file_path, out_path=None):
    src_text = read_text(file_path)
    if src_text is None:
        return None

    try:
        hex_text = assembler.assemble(src_text, emit_warning=common.line_warning)
    except common.AsmError as e:
        common.indicate_error(str(e))
        return None

    out_path = output_path_for(file_path, out_path)
    print(f"Writing assembled file to: {out_path}")
    try:
        with open(out_path, 'w', encoding='utf-8') as f:
            f.write(hex_text)
    except OSError as e:
        common.mode.errlog(f"Error writing {out_path}: {e}")
        return None
    return out_path


def show_listing(file_path):
    text = read_text(file_path)
    if text is None:
        return None
    try:
        image = state.parse_image(text)
    except common.AsmError as e:
        common.indicate_error(str(e))
        return None

    print("Addr Code Op Reg Data Comment")
    for address, inst in enumerate(image):
        reg = arch.known_registers[int(inst.r1)]
        print(f"{address:4d} {inst.to_string()[:4]} {inst.opcode:2d} {reg:>3} "
              f"{inst.data:07b} {inst.comment}")
    return image


def main(argv=None):
    parser = argparse.ArgumentParser(description="ROM16 assembler CLI Tool")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Assemble command
    assemble_parser = subparsers.add_parser("assemble", help="Assemble a source file into a ROM image")
    assemble_parser.add_argument("file", help="Path to the assembly file")
    assemble_parser.add_argument("output", nargs="?", help="Path of the image (.hex) to write")

    # Listing command
    listing_parser = subparsers.add_parser("listing", help="Decode and print a ROM image")
    listing_parser.add_argument("file", help="Path to the image file (.hex)")

    # Edit command
    edit_parser = subparsers.add_parser("edit", help="Open the editor")
    edit_parser.add_argument("file", nargs="?", help="Path to the assembly file")

    args = parser.parse_args(argv)

    if args.verbose:
        common.mode.set_trace()

    try:
        if args.command == "assemble":
            return 0 if assemble_file(args.file, args.output) else 1
        elif args.command == "listing":
            return 0 if show_listing(args.file) is not None else 1
        elif args.command == "edit":
            import gui
            return gui.start_gui(args.file)
        else:
            parser.print_help()
            return 0
    finally:
        common.mode.clear_trace()

if __name__ == "__main__":
    sys.exit(main())
