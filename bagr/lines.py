# Copyright (c) 2008
# This code was created by the Library of Congress and its National Digital
# Information Infrastructure and Preservation Program (NDIIPP) partners.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# * Redistributions of source code must retain the above copyright notice,
# this list of conditions and the following disclaimer.
# * Redistributions in binary form must reproduce the above copyright notice,
# this list of conditions and the following disclaimer in the documentation
# and/or other materials provided with the distribution.
# * Neither the name of the Library of Congress nor the names of its
# contributors may be used to endorse or promote products derived from this
# software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT OWNER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""
Line oriented readers for tag files and manifests.

BagIt allows lines to be terminated by LF, CR or CRLF, which rules out the
universal newline handling of :func:`open` for files that may legitimately
contain other control characters, so lines are split here by hand.
"""

import re

from .errors import InvalidStringError

BUF_SIZE = 8 * 1024

_TERMINATOR = re.compile(b"\r\n|\r|\n")


def is_space_or_tab(char):
    return char == " " or char == "\t"


def decode_line(raw):
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidStringError(exc) from exc


class LineReader(object):
    """Iterates over the decoded lines of a binary stream.

    A line ends with LF, CR or CRLF and the terminator is not included in the
    yielded value. A final unterminated line is yielded when it is not empty.
    """

    def __init__(self, stream, buf_size=BUF_SIZE):
        self.stream = stream
        self.buf_size = buf_size

    def __iter__(self):
        pending = b""
        eof = False

        while True:
            match = _TERMINATOR.search(pending)

            # A CR at the very end of the buffer may be the first half of a CRLF
            if match and (
                eof or match.group() != b"\r" or match.end() < len(pending)
            ):
                yield decode_line(pending[: match.start()])
                pending = pending[match.end() :]
                continue

            if eof:
                if pending:
                    yield decode_line(pending)
                return

            block = self.stream.read(self.buf_size)
            if block:
                pending += block
            else:
                eof = True


class TagLineReader(object):
    """Iterates over logical tag lines.

    Physical lines starting with a space or a tab continue the preceding
    line: their leading whitespace is removed and the remainder is appended
    to the previous line, separated by a single space.
    """

    def __init__(self, stream, buf_size=BUF_SIZE):
        self.lines = LineReader(stream, buf_size=buf_size)

    def __iter__(self):
        current = None

        for line in self.lines:
            if current is not None and line and is_space_or_tab(line[0]):
                current += " " + line.lstrip(" \t")
            else:
                if current is not None:
                    yield current
                current = line

        if current is not None:
            yield current
