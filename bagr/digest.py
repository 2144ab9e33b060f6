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

import enum
import hashlib
from functools import partial

from .errors import UnsupportedAlgorithmError

#: Number of bytes read from disk per iteration when digesting a file
HASH_BLOCK_SIZE = 1048576


class DigestAlgorithm(enum.Enum):
    """The digest algorithms which may be used for payload and tag manifests.

    Members sort in declaration order and their value is the name used in
    manifest file names, e.g. ``manifest-sha512.txt``.
    """

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"
    BLAKE2B256 = "blake2b256"
    BLAKE2B512 = "blake2b512"

    def __str__(self):
        return self.value

    def __lt__(self, other):
        if not isinstance(other, DigestAlgorithm):
            return NotImplemented
        members = list(DigestAlgorithm)
        return members.index(self) < members.index(other)

    @classmethod
    def from_name(cls, name):
        """Maps a name such as ``SHA256`` or ``blake2b512`` to an algorithm"""
        if isinstance(name, cls):
            return name
        try:
            return cls(name.lower())
        except (AttributeError, ValueError):
            raise UnsupportedAlgorithmError(name)

    def new_hasher(self):
        return _CONSTRUCTORS[self]()


_CONSTRUCTORS = {
    DigestAlgorithm.MD5: hashlib.md5,
    DigestAlgorithm.SHA1: hashlib.sha1,
    DigestAlgorithm.SHA256: hashlib.sha256,
    DigestAlgorithm.SHA512: hashlib.sha512,
    DigestAlgorithm.BLAKE2B256: partial(hashlib.blake2b, digest_size=32),
    DigestAlgorithm.BLAKE2B512: partial(hashlib.blake2b, digest_size=64),
}

DEFAULT_ALGORITHM = DigestAlgorithm.SHA512


def normalize_algorithms(algorithms):
    """
    Returns the sorted, deduplicated list of algorithms. Names are mapped to
    :class:`DigestAlgorithm` members and an empty input selects the default.
    """
    if not algorithms:
        return [DEFAULT_ALGORITHM]
    return sorted(set(DigestAlgorithm.from_name(i) for i in algorithms))


class MultiDigest(object):
    """
    A write-only sink which feeds every byte it receives to several hash
    functions at once, so that a stream only has to be read a single time
    no matter how many algorithms are in use.
    """

    def __init__(self, algorithms):
        self._hashers = [(alg, alg.new_hasher()) for alg in algorithms]
        self.bytes_written = 0

    def write(self, data):
        for _, hasher in self._hashers:
            hasher.update(data)
        self.bytes_written += len(data)
        return len(data)

    def finalize_hex(self):
        return dict((alg, hasher.hexdigest()) for alg, hasher in self._hashers)
