# common.py

# Copyright (c) 2024 John T. O'Donnell. License: GNU GPL Version 3
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

# ----------------------------------------------------------------------
# common.py
# ----------------------------------------------------------------------

import sys

class Mode:
    def __init__(self):
        self.trace = False
        self.show_err = True

    def set_trace(self):
        self.trace = True

    def clear_trace(self):
        self.trace = False

    def devlog(self, xs):
        if self.trace:
            print(xs)

    def errlog(self, xs):
        if self.show_err:
            print(xs, file=sys.stderr)

mode = Mode()

# ----------------------------------------------------------------------
# Logging error message
# ----------------------------------------------------------------------

def indicate_error(xs):
    print(f"\033[91m\033[1m{xs}\033[0m", file=sys.stderr) # ANSI escape codes for red and bold

# ----------------------------------------------------------------------
# Dialogues with the user
# ----------------------------------------------------------------------

def modal_warning(msg):
    print(f"WARNING: {msg}")

def line_warning(msg, line_index):
    modal_warning(f"line {line_index + 1}: {msg}")

# ----------------------------------------------------------------------
# Assembler errors
# ----------------------------------------------------------------------

# Every failure is an AsmError. Errors detected while handling one
# source line are wrapped in an AsmLineError that records the 1-based
# line number and the raw text; the original error stays attached as
# __cause__ and is also appended to the message.

class AsmError(Exception):
    def __init__(self, message, line_number=None, line=None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.line = line

class AsmSyntaxError(AsmError):
    pass

class AsmSemanticError(AsmError):
    pass

class AsmLineError(AsmError):
    def __init__(self, message, line_number=None, line=None, cause=None):
        text = message
        if cause is not None:
            text += "\nCaused by: " + str(cause)
        super().__init__(text, line_number, line)
        self.message = message

def error_chain(e):
    """Return the messages of e and its causes, outermost first."""
    xs = []
    while e is not None:
        xs.append(e.message if isinstance(e, AsmError) else str(e))
        e = e.__cause__
    return xs
