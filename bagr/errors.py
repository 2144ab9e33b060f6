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

"""Errors raised while creating, opening and updating bags.

Every error derives from :class:`BagError`. Filesystem failures are wrapped
in a :class:`BagIOError` subclass which keeps the path(s) involved and the
original :class:`OSError` as ``source``.
"""


class BagError(Exception):
    pass


class BagIOError(BagError):
    action = "accessing"

    def __init__(self, path, source):
        super(BagIOError, self).__init__(path, source)
        self.path = path
        self.source = source

    def __str__(self):
        return "Error %s %s: %s" % (self.action, self.path, self.source)


class IoCreateError(BagIOError):
    action = "creating"


class IoWriteError(BagIOError):
    action = "writing to"


class IoReadError(BagIOError):
    action = "reading"


class IoReadDirError(BagIOError):
    action = "reading directory"


class IoDeleteError(BagIOError):
    action = "deleting"


class IoStatError(BagIOError):
    action = "inspecting"


class WalkFileError(BagIOError):
    def __str__(self):
        return "Error walking files in %s: %s" % (self.path, self.source)


class _TransferError(BagIOError):
    verb = "transfer"

    def __init__(self, src, dst, source):
        super(_TransferError, self).__init__(src, source)
        self.src = src
        self.dst = dst

    def __str__(self):
        return "Failed to %s %s to %s: %s" % (self.verb, self.src, self.dst, self.source)


class IoMoveError(_TransferError):
    verb = "move"


class IoCopyError(_TransferError):
    verb = "copy"


class UnsupportedFileError(BagError):
    def __init__(self, path):
        super(UnsupportedFileError, self).__init__(path)
        self.path = path

    def __str__(self):
        return "Encountered an unsupported file type at %s" % self.path


class InvalidTagLineError(BagError):
    def __init__(self, details):
        super(InvalidTagLineError, self).__init__(details)
        self.details = details

    def __str__(self):
        return "Invalid tag line: %s" % self.details


class InvalidTagLineWithRefError(InvalidTagLineError):
    def __init__(self, path, num, details):
        super(InvalidTagLineWithRefError, self).__init__(details)
        self.args = (path, num, details)
        self.path = path
        self.num = num

    def __str__(self):
        return "Tag number %d in file %s is invalid: %s" % (
            self.num,
            self.path,
            self.details,
        )


class InvalidTagError(BagError):
    def __init__(self, label, details):
        super(InvalidTagError, self).__init__(label, details)
        self.label = label
        self.details = details

    def __str__(self):
        return "Invalid tag with label %r: %s" % (self.label, self.details)


class InvalidBagItVersionError(BagError):
    def __init__(self, value):
        super(InvalidBagItVersionError, self).__init__(value)
        self.value = value

    def __str__(self):
        return "Invalid BagIt version: %s" % self.value


class MissingTagError(BagError):
    def __init__(self, tag):
        super(MissingTagError, self).__init__(tag)
        self.tag = tag

    def __str__(self):
        return "Missing required tag %s" % self.tag


class UnsupportedVersionError(BagError):
    def __init__(self, version):
        super(UnsupportedVersionError, self).__init__(version)
        self.version = version

    def __str__(self):
        return "Unsupported BagIt version %s" % (self.version,)


class UnsupportedEncodingError(BagError):
    def __init__(self, encoding):
        super(UnsupportedEncodingError, self).__init__(encoding)
        self.encoding = encoding

    def __str__(self):
        return "Unsupported file encoding %s" % self.encoding


class UnsupportedAlgorithmError(BagError, ValueError):
    def __init__(self, name):
        super(UnsupportedAlgorithmError, self).__init__(name)
        self.name = name

    def __str__(self):
        return "Unsupported digest algorithm: %s" % self.name


class InvalidUtf8PathError(BagError):
    def __init__(self, path):
        super(InvalidUtf8PathError, self).__init__(path)
        self.path = path

    def __str__(self):
        return "Path cannot be represented as UTF-8: %r" % (self.path,)


class InvalidStringError(BagError):
    def __init__(self, source):
        super(InvalidStringError, self).__init__(source)
        self.source = source

    def __str__(self):
        return "Failed to decode string: %s" % self.source


class _InvalidLineError(BagError):
    kind = "Line"

    def __init__(self, path, num, details):
        super(_InvalidLineError, self).__init__(path, num, details)
        self.path = path
        self.num = num
        self.details = details

    def __str__(self):
        return "%s %d in file %s is invalid: %s" % (
            self.kind,
            self.num,
            self.path,
            self.details,
        )


class InvalidManifestLineError(_InvalidLineError):
    kind = "Manifest line"


class InvalidFetchLineError(_InvalidLineError):
    kind = "Fetch line"


class ConfigError(BagError):
    def __init__(self, path, details):
        super(ConfigError, self).__init__(path, details)
        self.path = path
        self.details = details

    def __str__(self):
        return "Invalid configuration file %s: %s" % (self.path, self.details)
