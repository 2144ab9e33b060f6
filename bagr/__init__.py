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
bagr creates and updates BagIt 1.0 (RFC 8493) bags.

    import bagr

    bag = bagr.create_bag("/path/to/dir", "/path/to/bag",
                          bag_info={"Contact-Name": "Ed Summers"},
                          algorithms=["sha256", "sha512"])

    bag = bagr.open_bag("/path/to/bag")
    bag.update().with_bagging_date("2020-01-01").finalize()
"""

from .core import VERSION, Bag, BagUpdater, create_bag, open_bag
from .digest import DigestAlgorithm
from .errors import (
    BagError,
    BagIOError,
    ConfigError,
    InvalidBagItVersionError,
    InvalidFetchLineError,
    InvalidManifestLineError,
    InvalidStringError,
    InvalidTagError,
    InvalidTagLineError,
    InvalidTagLineWithRefError,
    InvalidUtf8PathError,
    IoCopyError,
    IoCreateError,
    IoDeleteError,
    IoMoveError,
    IoReadDirError,
    IoReadError,
    IoStatError,
    IoWriteError,
    MissingTagError,
    UnsupportedAlgorithmError,
    UnsupportedEncodingError,
    UnsupportedFileError,
    UnsupportedVersionError,
    WalkFileError,
)
from .fetch import FetchEntry
from .manifest import FileMeta, ManifestEntry
from .tags import BagDeclaration, BagInfo, BagItVersion, Tag, TagList
from .validate import IssueLevel, ValidationIssue, ValidationResult, validate_bag
