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
Payload and tag manifests.

Manifests are written deterministically: one ``DIGEST  PATH`` line per file,
sorted by the percent-encoded path, with ``/`` separating path components
on every platform. Reading is more forgiving to accommodate other producers.
"""

import logging
import os
import re
from collections import namedtuple
from contextlib import ExitStack

from .digest import DigestAlgorithm
from .encoding import has_invalid_escape, percent_decode, to_manifest_path
from .errors import (
    InvalidManifestLineError,
    InvalidUtf8PathError,
    IoCreateError,
    IoDeleteError,
    IoReadDirError,
    IoReadError,
    IoStatError,
    IoWriteError,
    UnsupportedAlgorithmError,
)
from .lines import LineReader

LOGGER = logging.getLogger(__name__)

PAYLOAD_MANIFEST_PREFIX = "manifest"
TAG_MANIFEST_PREFIX = "tagmanifest"

PAYLOAD_MANIFEST_RE = re.compile(r"^manifest-([A-Za-z0-9]+)\.txt$")
TAG_MANIFEST_RE = re.compile(r"^tagmanifest-([A-Za-z0-9]+)\.txt$")

# Producers disagree on the separator: one or two spaces or tabs, optionally
# with a binary mode marker (*) standing in for one of them
_ENTRY_RE = re.compile(r"([0-9A-Fa-f]+)(?:[ \t]{2}|[ \t]\*|\*[ \t]|[ \t])(.+)", re.DOTALL)


class FileMeta(object):
    """The size and digests of one file, keyed by its path relative to a bag"""

    __slots__ = ("path", "size_bytes", "digests")

    def __init__(self, path, size_bytes, digests):
        self.path = path
        self.size_bytes = size_bytes
        self.digests = digests

    def __repr__(self):
        return "FileMeta(path=%r, size_bytes=%d)" % (self.path, self.size_bytes)


ManifestEntry = namedtuple("ManifestEntry", "digest path")


def manifest_name(prefix, algorithm):
    return "%s-%s.txt" % (prefix, algorithm)


def is_safe_path(path):
    """True when a ``/`` separated relative path cannot escape the bag directory"""
    if not path or path.startswith(("/", "~")) or os.path.isabs(path):
        return False
    if os.sep == "\\" and (":" in path or "\\" in path):
        return False
    return ".." not in path.split("/")


def encode_manifest_path(path):
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidUtf8PathError(path)
    return to_manifest_path(path)


def write_manifests(algorithms, file_meta, prefix, base_dir):
    """Writes one ``<prefix>-<algorithm>.txt`` manifest per algorithm into base_dir"""
    entries = sorted(
        ((encode_manifest_path(meta.path), meta) for meta in file_meta),
        key=lambda i: i[0],
    )

    with ExitStack() as stack:
        manifests = []

        for algorithm in algorithms:
            path = os.path.join(base_dir, manifest_name(prefix, algorithm))
            LOGGER.info("Writing manifest %s", path)
            try:
                manifest = open(path, "w", encoding="utf-8", newline="\n")
            except OSError as exc:
                raise IoCreateError(path, exc) from exc
            stack.enter_context(manifest)
            manifests.append((algorithm, path, manifest))

        for algorithm, path, manifest in manifests:
            try:
                for encoded, meta in entries:
                    manifest.write("%s  %s\n" % (meta.digests[algorithm], encoded))
                manifest.flush()
            except OSError as exc:
                raise IoWriteError(path, exc) from exc


def write_payload_manifests(algorithms, file_meta, base_dir):
    write_manifests(algorithms, file_meta, PAYLOAD_MANIFEST_PREFIX, base_dir)


def write_tag_manifests(algorithms, file_meta, base_dir):
    write_manifests(algorithms, file_meta, TAG_MANIFEST_PREFIX, base_dir)


def parse_manifest_line(line):
    """
    Returns the ``(digest, path)`` of a manifest line or raises ValueError.
    The digest is lowercased and the path is percent-decoded, with any
    leading ``./`` removed.
    """
    match = _ENTRY_RE.fullmatch(line)
    if not match:
        raise ValueError("expected a digest and a path separated by whitespace")

    digest, path = match.groups()
    if path.startswith("./"):
        path = path[2:]
    if not path:
        raise ValueError("missing file path")
    if has_invalid_escape(path):
        raise ValueError("invalid percent encoding in %r" % path)

    path = percent_decode(path)
    if not is_safe_path(path):
        raise ValueError("path %r is outside of the bag" % path)

    return digest.lower(), path


def read_manifest(path):
    """Reads every entry of a manifest file in file order"""
    LOGGER.info("Reading manifest %s", path)

    entries = []

    try:
        with open(path, "rb") as manifest:
            for num, line in enumerate(LineReader(manifest), 1):
                try:
                    entries.append(ManifestEntry(*parse_manifest_line(line)))
                except ValueError as exc:
                    raise InvalidManifestLineError(path, num, str(exc)) from exc
    except OSError as exc:
        raise IoReadError(path, exc) from exc

    return entries


def iter_matching_files(base_dir, pattern):
    """Yields ``(path, match)`` for each regular file in base_dir whose name matches"""
    try:
        with os.scandir(base_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise IoReadDirError(base_dir, exc) from exc

    for entry in entries:
        try:
            is_file = entry.is_file(follow_symlinks=False)
        except OSError as exc:
            raise IoStatError(entry.path, exc) from exc
        if not is_file:
            continue
        match = pattern.match(entry.name)
        if match:
            yield entry.path, match


def detect_algorithms(base_dir, pattern=PAYLOAD_MANIFEST_RE):
    """
    Returns the sorted algorithms of the manifests found in base_dir.
    Manifests named after an unsupported algorithm are skipped with a warning.
    """
    algorithms = set()

    for path, match in iter_matching_files(base_dir, pattern):
        try:
            algorithms.add(DigestAlgorithm.from_name(match.group(1)))
        except UnsupportedAlgorithmError:
            LOGGER.warning("Detected unsupported digest algorithm: %s", match.group(1))

    return sorted(algorithms)


def delete_matching_files(base_dir, pattern):
    """
    Deletes the files in base_dir whose names match. Files which have already
    disappeared are ignored and other failures are logged; the remaining files
    are still processed.
    """
    for path, _ in list(iter_matching_files(base_dir, pattern)):
        LOGGER.info("Deleting file %s", path)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            LOGGER.error("%s", IoDeleteError(path, exc))


def delete_payload_manifests(base_dir):
    delete_matching_files(base_dir, PAYLOAD_MANIFEST_RE)


def delete_tag_manifests(base_dir):
    delete_matching_files(base_dir, TAG_MANIFEST_RE)
