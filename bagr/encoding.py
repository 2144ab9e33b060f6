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
Percent encoding of manifest and fetch file paths.

Only CR, LF and ``%`` are escaped; every other character, including spaces,
tabs and non-ASCII text, is written as-is. This is not a URL encoder.
"""

import os
import re

_ENCODINGS = {ord("\r"): "%0D", ord("\n"): "%0A", ord("%"): "%25"}
_DECODINGS = {"%0d": "\r", "%0a": "\n", "%25": "%"}

_NEEDS_ENCODING = re.compile("[\r\n%]")
_ESCAPE = re.compile("%(?:0[DdAa]|25)")
_BAD_ESCAPE = re.compile("%(?!0[DdAa]|25)")


def percent_encode(value):
    """Escapes CR, LF and % in a single pass, returning the input when untouched"""
    if not _NEEDS_ENCODING.search(value):
        return value
    return value.translate(_ENCODINGS)


def percent_decode(value):
    """Reverses :func:`percent_encode`. Unrecognized escapes are left alone"""
    if "%" not in value:
        return value
    return _ESCAPE.sub(lambda m: _DECODINGS[m.group().lower()], value)


def has_invalid_escape(value):
    """True when a % is not followed by one of 0D, 0A or 25"""
    return _BAD_ESCAPE.search(value) is not None


def to_manifest_path(path):
    """Converts a relative filesystem path to the ``/`` separated manifest form"""
    if os.sep == "\\":
        path = path.replace("\\", "/")
    return percent_encode(path)
