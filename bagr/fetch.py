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

"""Read-only support for ``fetch.txt``; nothing is ever downloaded"""

import logging
import re
from collections import namedtuple
from urllib.parse import urlparse

from .encoding import has_invalid_escape, percent_decode
from .errors import InvalidFetchLineError, IoReadError
from .lines import LineReader
from .manifest import is_safe_path

LOGGER = logging.getLogger(__name__)

FETCH_TXT = "fetch.txt"

_FETCH_LINE_RE = re.compile(r"(\S+)[ \t]+([0-9]+|-)[ \t]+(.+)", re.DOTALL)

FetchEntry = namedtuple("FetchEntry", "url length path")


def parse_fetch_line(line):
    """Parses ``URL LENGTH PATH``. LENGTH is None when given as ``-``"""
    match = _FETCH_LINE_RE.fullmatch(line)
    if not match:
        raise ValueError("expected a URL, a length and a path separated by whitespace")

    url, length, path = match.groups()

    if not urlparse(url).scheme:
        raise ValueError("malformed URL %s" % url)
    if has_invalid_escape(path):
        raise ValueError("invalid percent encoding in %r" % path)

    path = percent_decode(path)
    if not is_safe_path(path) or not path.startswith("data/"):
        raise ValueError("path %r is not within the payload directory" % path)

    return FetchEntry(url, None if length == "-" else int(length), path)


def read_fetch_file(path):
    LOGGER.info("Reading fetch file %s", path)

    entries = []

    try:
        with open(path, "rb") as fetch_file:
            for num, line in enumerate(LineReader(fetch_file), 1):
                try:
                    entries.append(parse_fetch_line(line))
                except ValueError as exc:
                    raise InvalidFetchLineError(path, num, str(exc)) from exc
    except OSError as exc:
        raise IoReadError(path, exc) from exc

    return entries
