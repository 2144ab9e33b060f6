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
Structural checks of a bag on disk.

Unlike :func:`bagr.core.open_bag`, which stops at the first problem,
:func:`validate_bag` collects every problem it can find into a single
:class:`ValidationResult`. Payload digests are not verified.
"""

import enum
import logging
import os
from collections import Counter, namedtuple

from .core import DATA
from .digest import DigestAlgorithm
from .errors import BagError, UnsupportedAlgorithmError
from .manifest import PAYLOAD_MANIFEST_RE, TAG_MANIFEST_RE, iter_matching_files, read_manifest
from .tags import (
    BAG_INFO_TXT,
    LABEL_PAYLOAD_OXUM,
    fold_label,
    is_repeatable,
    parse_payload_oxum,
    read_bag_declaration,
    read_tag_file,
)

LOGGER = logging.getLogger(__name__)


class IssueLevel(enum.Enum):
    ERROR = "ERROR"
    WARN = "WARN"

    def __str__(self):
        return self.value


ValidationIssue = namedtuple("ValidationIssue", "level message")


class ValidationResult(object):
    def __init__(self, base_dir):
        self.base_dir = base_dir
        self.issues = []

    def error(self, message):
        self.issues.append(ValidationIssue(IssueLevel.ERROR, message))

    def warn(self, message):
        self.issues.append(ValidationIssue(IssueLevel.WARN, message))

    @property
    def errors(self):
        return [i for i in self.issues if i.level is IssueLevel.ERROR]

    @property
    def warnings(self):
        return [i for i in self.issues if i.level is IssueLevel.WARN]

    @property
    def is_valid(self):
        return not self.errors

    def __str__(self):
        if self.is_valid:
            return "%s is valid" % self.base_dir
        return "%s is invalid: %d error(s)" % (self.base_dir, len(self.errors))


def validate_bag(base_dir):
    """
    Checks the declaration, payload directory, manifests and bag-info of the
    bag in base_dir. Problems with the bag's contents are reported in the
    returned result rather than raised.
    """
    LOGGER.info("Validating bag at %s", base_dir)

    result = ValidationResult(base_dir)

    try:
        read_bag_declaration(base_dir)
    except BagError as exc:
        # Without a usable declaration nothing else can be trusted
        result.error(str(exc))
        return result

    if not os.path.isdir(os.path.join(base_dir, DATA)):
        result.error("Missing payload directory %s" % os.path.join(base_dir, DATA))

    if not _check_manifests(result, base_dir, PAYLOAD_MANIFEST_RE):
        result.error("No payload manifest with a supported algorithm in %s" % base_dir)

    _check_manifests(result, base_dir, TAG_MANIFEST_RE)
    _check_bag_info(result, base_dir)

    return result


def _check_manifests(result, base_dir, pattern):
    """Parses each manifest matching pattern, returning the supported algorithms found"""
    algorithms = []

    for path, match in iter_matching_files(base_dir, pattern):
        try:
            algorithm = DigestAlgorithm.from_name(match.group(1))
        except UnsupportedAlgorithmError:
            result.warn("Unsupported digest algorithm %s in %s" % (match.group(1), path))
            continue

        try:
            read_manifest(path)
        except BagError as exc:
            result.error(str(exc))

        algorithms.append(algorithm)

    return algorithms


def _check_bag_info(result, base_dir):
    path = os.path.join(base_dir, BAG_INFO_TXT)
    if not os.path.exists(path):
        return

    try:
        tags = read_tag_file(path)
    except BagError as exc:
        result.error(str(exc))
        return

    counts = Counter(fold_label(tag.label) for tag in tags)
    seen = set()
    for tag in tags:
        key = fold_label(tag.label)
        if counts[key] > 1 and not is_repeatable(tag.label) and key not in seen:
            seen.add(key)
            result.warn(
                "%s appears %d times in %s but may only appear once"
                % (tag.label, counts[key], path)
            )

    oxum = tags.get_tag(LABEL_PAYLOAD_OXUM)
    if oxum is not None and parse_payload_oxum(oxum) is None:
        result.warn("Invalid Payload-Oxum %r in %s" % (oxum, path))
