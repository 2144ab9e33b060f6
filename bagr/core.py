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
Creating, opening and updating bags.

A bag is created by moving (or copying) the contents of a directory into a
``data/`` payload directory, digesting every payload byte exactly once on the
way, and then writing the manifests and tag files which describe it.
"""

import itertools
import logging
import os
import shutil
import stat
import time
from datetime import date
from importlib.metadata import PackageNotFoundError, version

from .digest import HASH_BLOCK_SIZE, DigestAlgorithm, MultiDigest, normalize_algorithms
from .errors import (
    BagError,
    IoCopyError,
    IoCreateError,
    IoDeleteError,
    IoMoveError,
    IoReadDirError,
    IoReadError,
    IoStatError,
    UnsupportedFileError,
    WalkFileError,
)
from .fetch import FETCH_TXT, read_fetch_file
from .manifest import (
    PAYLOAD_MANIFEST_PREFIX,
    PAYLOAD_MANIFEST_RE,
    TAG_MANIFEST_PREFIX,
    TAG_MANIFEST_RE,
    FileMeta,
    delete_payload_manifests,
    delete_tag_manifests,
    detect_algorithms,
    iter_matching_files,
    manifest_name,
    read_manifest,
    write_payload_manifests,
    write_tag_manifests,
)
from .tags import (
    BagDeclaration,
    BagInfo,
    TagList,
    format_payload_oxum,
    read_bag_declaration,
    read_bag_info,
    write_bag_declaration,
    write_bag_info,
)

LOGGER = logging.getLogger(__name__)

FALLBACK_VERSION = "1.0.0"


def _installed_version():
    try:
        return version("bagr")
    except PackageNotFoundError:
        return FALLBACK_VERSION


VERSION = _installed_version()

PROJECT_URL = "https://github.com/pwinckles/bagr"

DATA = "data"

_FILE = "file"
_DIR = "dir"


def create_bag(src_dir, dst_dir=None, bag_info=None, algorithms=None, include_hidden_files=False):
    """
    Creates a new bag in dst_dir from the contents of src_dir and returns it.

    When dst_dir is omitted or names the same directory as src_dir the bag is
    created in place and files are moved into the payload. Otherwise they are
    copied and the source is left untouched.

    bag_info may be a :class:`BagInfo` or a dict of labels to values (lists
    for repeated tags). algorithms defaults to SHA-512.

    Hidden files, whose names start with ``.``, are left out of the bag unless
    include_hidden_files is true. When the bag is created in place this means
    they are **deleted**.
    """
    if dst_dir is None:
        dst_dir = src_dir

    LOGGER.info("Creating bag in %s", dst_dir)

    in_place = _same_path(src_dir, dst_dir)
    algorithms = normalize_algorithms(algorithms)
    bag_info = _copy_bag_info(bag_info)

    _require_dir(src_dir)

    if not in_place:
        try:
            os.makedirs(dst_dir, exist_ok=True)
        except OSError as exc:
            raise IoCreateError(dst_dir, exc) from exc

    temp_dir = _create_staging_dir(dst_dir)
    # Neither the staging directory nor a destination nested in the source is payload
    skipped = set([_norm_path(temp_dir), _norm_path(dst_dir)])

    if in_place and not include_hidden_files:
        _delete_hidden_files(src_dir, skipped)

    payload_meta = _move_into_dir(
        not in_place, src_dir, temp_dir, algorithms, include_hidden_files, skipped
    )

    _rename(temp_dir, os.path.join(dst_dir, DATA))

    _add_data_prefix(payload_meta)
    write_payload_manifests(algorithms, payload_meta, dst_dir)

    declaration = BagDeclaration()
    write_bag_declaration(declaration, dst_dir)

    if bag_info.bagging_date is None:
        bag_info.bagging_date = current_date_str()
    if bag_info.software_agent is None:
        bag_info.software_agent = software_agent()
    bag_info.payload_oxum = build_payload_oxum(payload_meta)

    write_bag_info(bag_info, dst_dir)

    update_tag_manifests(dst_dir, algorithms)

    return Bag(dst_dir, declaration, bag_info, algorithms)


def open_bag(base_dir):
    """Opens the existing bag in base_dir"""
    LOGGER.info("Opening bag at %s", base_dir)

    declaration = read_bag_declaration(base_dir)
    algorithms = detect_algorithms(base_dir)
    bag_info = read_bag_info(base_dir)

    return Bag(base_dir, declaration, bag_info, algorithms)


class Bag(object):
    """A bag on disk. No files are held open between calls"""

    def __init__(self, base_dir, declaration, bag_info, algorithms):
        self.base_dir = base_dir
        self.declaration = declaration
        self.bag_info = bag_info
        self.algorithms = list(algorithms)

    def __str__(self):
        return str(self.base_dir)

    def __repr__(self):
        return "Bag(base_dir=%r, algorithms=%s)" % (
            self.base_dir,
            [str(i) for i in self.algorithms],
        )

    def update(self):
        """Returns a :class:`BagUpdater` for changing this bag"""
        return BagUpdater(self)

    def has_oxum(self):
        return self.bag_info.payload_oxum is not None

    def payload_manifest_files(self):
        return [path for path, _ in iter_matching_files(self.base_dir, PAYLOAD_MANIFEST_RE)]

    def tag_manifest_files(self):
        return [path for path, _ in iter_matching_files(self.base_dir, TAG_MANIFEST_RE)]

    def payload_entries(self, algorithm):
        algorithm = DigestAlgorithm.from_name(algorithm)
        return read_manifest(
            os.path.join(self.base_dir, manifest_name(PAYLOAD_MANIFEST_PREFIX, algorithm))
        )

    def tag_entries(self, algorithm):
        algorithm = DigestAlgorithm.from_name(algorithm)
        return read_manifest(
            os.path.join(self.base_dir, manifest_name(TAG_MANIFEST_PREFIX, algorithm))
        )

    def fetch_entries(self):
        fetch_file = os.path.join(self.base_dir, FETCH_TXT)
        if not os.path.isfile(fetch_file):
            return []
        return read_fetch_file(fetch_file)


class BagUpdater(object):
    """
    Collects changes to an existing bag and applies them on :meth:`finalize`,
    which rewrites bag-info.txt and the manifests.
    """

    def __init__(self, bag):
        self.bag = bag
        self.recalculate = True
        self.algorithms = []
        self.bagging_date = None
        self.software_agent = None

    def with_algorithm(self, algorithm):
        self.algorithms.append(DigestAlgorithm.from_name(algorithm))
        return self

    def with_algorithms(self, algorithms):
        """Replaces the algorithm set. An empty list keeps the bag's current algorithms"""
        self.algorithms = [DigestAlgorithm.from_name(i) for i in algorithms]
        return self

    def with_bagging_date(self, bagging_date):
        self.bagging_date = bagging_date
        return self

    def with_software_agent(self, software_agent):
        self.software_agent = software_agent
        return self

    def recalculate_payload_manifests(self, recalculate):
        """
        Payload manifests are recalculated by default. Turning this off also
        ignores any algorithm changes, since the existing payload manifests
        are kept.
        """
        self.recalculate = recalculate
        return self

    def finalize(self):
        bag = self.bag
        base_dir = bag.base_dir

        if self.recalculate:
            algorithms = normalize_algorithms(self.algorithms or bag.algorithms)
        elif bag.algorithms:
            algorithms = list(bag.algorithms)
        else:
            raise BagError(
                "%s has no payload manifests, they must be recalculated" % base_dir
            )

        bag_info = bag.bag_info
        bag_info.bagging_date = self.bagging_date or current_date_str()
        bag_info.software_agent = self.software_agent or software_agent()

        if self.recalculate:
            # Digest first so a failed walk leaves the existing manifests in place
            payload_meta = calculate_payload_digests(base_dir, algorithms)
            delete_payload_manifests(base_dir)
            write_payload_manifests(algorithms, payload_meta, base_dir)
            bag_info.payload_oxum = build_payload_oxum(payload_meta)

        write_bag_info(bag_info, base_dir)

        delete_tag_manifests(base_dir)
        update_tag_manifests(base_dir, algorithms)

        bag.algorithms = algorithms
        return bag


def calculate_payload_digests(base_dir, algorithms):
    """Digests every file under data/, returning paths prefixed with data/"""
    payload_meta = _calculate_digests(os.path.join(base_dir, DATA), algorithms, strict=True)
    _add_data_prefix(payload_meta)
    return payload_meta


def update_tag_manifests(base_dir, algorithms):
    """Digests every tag file, skipping data/ and the tag manifests themselves"""

    def is_tag_file(entry, relative):
        if relative == DATA:
            return False
        return not (relative == entry.name and TAG_MANIFEST_RE.match(entry.name))

    tag_meta = _calculate_digests(base_dir, algorithms, predicate=is_tag_file)
    write_tag_manifests(algorithms, tag_meta, base_dir)


def build_payload_oxum(file_meta):
    return format_payload_oxum(sum(i.size_bytes for i in file_meta), len(file_meta))


def software_agent():
    return "bagr v%s <%s>" % (VERSION, PROJECT_URL)


def current_date_str():
    return date.strftime(date.today(), "%Y-%m-%d")


def is_hidden_file(name):
    return name.startswith(".") and name not in (".", "..")


def _copy_bag_info(bag_info):
    if bag_info is None:
        return BagInfo()
    if isinstance(bag_info, BagInfo):
        return BagInfo(TagList(bag_info))
    return BagInfo.from_mapping(bag_info)


def _norm_path(path):
    return os.path.normcase(os.path.abspath(path))


def _same_path(a, b):
    return _norm_path(a) == _norm_path(b)


def _require_dir(path):
    try:
        mode = os.stat(path).st_mode
    except OSError as exc:
        raise IoStatError(path, exc) from exc
    if not stat.S_ISDIR(mode):
        raise IoReadDirError(path, NotADirectoryError("Not a directory"))


def _create_staging_dir(dst_dir):
    """Creates ``temp-<epoch seconds>`` in dst_dir, moving forward a second on collisions"""
    seconds = int(time.time())

    for offset in itertools.count():
        path = os.path.join(dst_dir, "temp-%d" % (seconds + offset))
        try:
            os.mkdir(path)
        except FileExistsError:
            LOGGER.debug("Staging directory %s already exists", path)
            continue
        except OSError as exc:
            raise IoCreateError(path, exc) from exc
        return path


def _entry_kind(entry):
    try:
        if entry.is_symlink():
            return None
        if entry.is_file(follow_symlinks=False):
            return _FILE
        if entry.is_dir(follow_symlinks=False):
            return _DIR
    except OSError as exc:
        raise IoStatError(entry.path, exc) from exc
    return None


def _walk(top, predicate=None, prefix=""):
    """
    Yields ``(entry, relative_path)`` for everything below top, depth first and
    in name order. Entries rejected by predicate are neither yielded nor
    descended into.
    """
    try:
        with os.scandir(top) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise WalkFileError(top, exc) from exc

    for entry in entries:
        relative = os.path.join(prefix, entry.name) if prefix else entry.name
        if predicate is not None and not predicate(entry, relative):
            continue
        yield entry, relative
        if _entry_kind(entry) == _DIR:
            yield from _walk(entry.path, predicate, relative)


def _delete_hidden_files(top, skipped):
    hidden = []

    def visible(entry, relative):
        if _norm_path(entry.path) in skipped:
            return False
        if is_hidden_file(entry.name):
            hidden.append(entry)
            return False
        return True

    for _ in _walk(top, visible):
        pass

    for entry in hidden:
        LOGGER.info("Deleting hidden file %s", entry.path)
        try:
            if _entry_kind(entry) == _DIR:
                shutil.rmtree(entry.path)
            else:
                os.remove(entry.path)
        except OSError as exc:
            raise IoDeleteError(entry.path, exc) from exc


def _move_into_dir(copy_op, src_dir, dst_dir, algorithms, include_hidden_files, skipped):
    """
    Copies or moves every file under src_dir into dst_dir, returning the
    digests of each. Directories emptied by moving are removed afterwards.
    """

    def included(entry, relative):
        if _norm_path(entry.path) in skipped:
            return False
        return include_hidden_files or not is_hidden_file(entry.name)

    file_meta = []
    dirs = []

    for entry, relative in _walk(src_dir, included):
        kind = _entry_kind(entry)

        if kind == _FILE:
            file_dst = os.path.join(dst_dir, relative)
            _makedirs(os.path.dirname(file_dst))

            if copy_op:
                file_meta.append(_digest_file(entry.path, relative, algorithms, copy_to=file_dst))
            else:
                file_meta.append(_digest_file(entry.path, relative, algorithms))
                _rename(entry.path, file_dst)
        elif kind == _DIR:
            if not copy_op:
                dirs.append(entry.path)
        else:
            raise UnsupportedFileError(entry.path)

    # Walk order puts parents first so children are removed before them
    for path in reversed(dirs):
        try:
            os.rmdir(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise IoDeleteError(path, exc) from exc

    return file_meta


def _calculate_digests(base_dir, algorithms, predicate=None, strict=False):
    file_meta = []

    for entry, relative in _walk(base_dir, predicate):
        kind = _entry_kind(entry)
        if kind == _FILE:
            file_meta.append(_digest_file(entry.path, relative, algorithms))
        elif kind is None:
            if strict:
                raise UnsupportedFileError(entry.path)
            LOGGER.warning("Skipping unsupported file %s", entry.path)

    return file_meta


def _digest_file(path, relative, algorithms, copy_to=None):
    """Digests a file, writing its bytes to copy_to as they are read when given"""
    LOGGER.info("Calculating digests for %s", path)

    digest = MultiDigest(algorithms)

    try:
        src = open(path, "rb")
    except OSError as exc:
        raise IoReadError(path, exc) from exc

    with src:
        if copy_to is None:
            _pump(src, path, digest)
        else:
            LOGGER.info("Copying %s to %s", path, copy_to)
            try:
                dst = open(copy_to, "wb")
            except OSError as exc:
                raise IoCopyError(path, copy_to, exc) from exc
            with dst:
                _pump(src, path, digest, dst, copy_to)

    if copy_to is not None:
        try:
            shutil.copystat(path, copy_to)
        except OSError as exc:
            raise IoCopyError(path, copy_to, exc) from exc

    return FileMeta(relative, digest.bytes_written, digest.finalize_hex())


def _pump(src, src_path, digest, dst=None, dst_path=None):
    while True:
        try:
            block = src.read(HASH_BLOCK_SIZE)
        except OSError as exc:
            raise IoReadError(src_path, exc) from exc
        if not block:
            break
        digest.write(block)
        if dst is not None:
            try:
                dst.write(block)
            except OSError as exc:
                raise IoCopyError(src_path, dst_path, exc) from exc

    if dst is not None:
        try:
            dst.flush()
        except OSError as exc:
            raise IoCopyError(src_path, dst_path, exc) from exc


def _add_data_prefix(file_meta):
    for meta in file_meta:
        meta.path = os.path.join(DATA, meta.path)


def _makedirs(path):
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        raise IoCreateError(path, exc) from exc


def _rename(src, dst):
    LOGGER.info("Moving %s to %s", src, dst)
    try:
        os.rename(src, dst)
    except OSError as exc:
        raise IoMoveError(src, dst, exc) from exc
