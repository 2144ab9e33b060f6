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
Tags and tag files.

A tag file such as ``bagit.txt`` or ``bag-info.txt`` is an ordered list of
``LABEL: VALUE`` lines. Long values may be folded over several physical
lines by starting the continuation lines with whitespace. Labels are
compared without regard to ASCII case.
"""

import logging
import os
import re
import string
from collections import namedtuple

from .errors import (
    InvalidBagItVersionError,
    InvalidTagError,
    InvalidTagLineError,
    InvalidTagLineWithRefError,
    IoCreateError,
    IoReadError,
    IoWriteError,
    MissingTagError,
    UnsupportedEncodingError,
    UnsupportedVersionError,
)
from .lines import TagLineReader, is_space_or_tab

LOGGER = logging.getLogger(__name__)

BAGIT_TXT = "bagit.txt"
BAG_INFO_TXT = "bag-info.txt"

UTF_8 = "UTF-8"

# bagit.txt labels
LABEL_BAGIT_VERSION = "BagIt-Version"
LABEL_FILE_ENCODING = "Tag-File-Character-Encoding"

# bag-info.txt reserved labels
LABEL_BAGGING_DATE = "Bagging-Date"
LABEL_PAYLOAD_OXUM = "Payload-Oxum"
LABEL_SOFTWARE_AGENT = "Bag-Software-Agent"
LABEL_BAG_SIZE = "Bag-Size"
LABEL_BAG_GROUP_IDENTIFIER = "Bag-Group-Identifier"
LABEL_BAG_COUNT = "Bag-Count"
LABEL_SOURCE_ORGANIZATION = "Source-Organization"
LABEL_ORGANIZATION_ADDRESS = "Organization-Address"
LABEL_CONTACT_NAME = "Contact-Name"
LABEL_CONTACT_PHONE = "Contact-Phone"
LABEL_CONTACT_EMAIL = "Contact-Email"
LABEL_EXTERNAL_DESCRIPTION = "External-Description"
LABEL_EXTERNAL_IDENTIFIER = "External-Identifier"
LABEL_INTERNAL_SENDER_IDENTIFIER = "Internal-Sender-Identifier"
LABEL_INTERNAL_SENDER_DESCRIPTION = "Internal-Sender-Description"
LABEL_BAGIT_PROFILE_IDENTIFIER = "BagIt-Profile-Identifier"

#: Reserved bag-info labels in the order they are documented, with a flag
#: marking the labels that may appear more than once.
RESERVED_LABELS = (
    (LABEL_BAGGING_DATE, False),
    (LABEL_PAYLOAD_OXUM, False),
    (LABEL_SOFTWARE_AGENT, False),
    (LABEL_BAG_SIZE, False),
    (LABEL_BAG_GROUP_IDENTIFIER, False),
    (LABEL_BAG_COUNT, False),
    (LABEL_SOURCE_ORGANIZATION, True),
    (LABEL_ORGANIZATION_ADDRESS, True),
    (LABEL_CONTACT_NAME, True),
    (LABEL_CONTACT_PHONE, True),
    (LABEL_CONTACT_EMAIL, True),
    (LABEL_EXTERNAL_DESCRIPTION, True),
    (LABEL_EXTERNAL_IDENTIFIER, True),
    (LABEL_INTERNAL_SENDER_IDENTIFIER, True),
    (LABEL_INTERNAL_SENDER_DESCRIPTION, True),
    (LABEL_BAGIT_PROFILE_IDENTIFIER, True),
)

_ASCII_FOLD = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def fold_label(label):
    """Lowercases ASCII letters only, for case-insensitive label comparison"""
    return label.translate(_ASCII_FOLD)


_REPEATABLE = dict((fold_label(label), repeatable) for label, repeatable in RESERVED_LABELS)


def is_reserved(label):
    return fold_label(label) in _REPEATABLE


def is_repeatable(label):
    """Reserved labels are repeatable only when marked so; custom labels always are"""
    return _REPEATABLE.get(fold_label(label), True)


class Tag(object):
    """A single ``label: value`` pair"""

    __slots__ = ("label", "value")

    def __init__(self, label, value):
        if not isinstance(value, str):
            value = str(value)

        _validate_label(label)
        if "\r" in value or "\n" in value:
            raise InvalidTagError(label, "value must not contain CR or LF")
        _require_utf8(label, value, "value")

        self.label = label
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return self.label == other.label and self.value == other.value

    def __hash__(self):
        return hash((self.label, self.value))

    def __repr__(self):
        return "Tag(%r, %r)" % (self.label, self.value)


def _validate_label(label):
    if not label:
        raise InvalidTagError(label, "label must not be empty")
    if label != label.strip():
        raise InvalidTagError(label, "label must not begin or end with whitespace")
    if "\r" in label or "\n" in label:
        raise InvalidTagError(label, "label must not contain CR or LF")
    if ":" in label:
        raise InvalidTagError(label, "label must not contain ':'")
    _require_utf8(label, label, "label")


def _require_utf8(label, text, part):
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidTagError(label, "%s is not valid UTF-8: %s" % (part, exc)) from exc


class TagList(object):
    """An ordered list of tags with case-insensitive label lookups"""

    def __init__(self, tags=None):
        self._tags = list(tags) if tags else []

    def add_tag(self, label, value):
        self._tags.append(Tag(label, value))

    def replace_tag(self, label, value):
        """
        Sets the value of the first tag with the label, dropping any others.
        The tag is appended when no tag has the label.
        """
        new = Tag(label, value)
        key = fold_label(label)
        replaced = False
        tags = []
        for tag in self._tags:
            if fold_label(tag.label) != key:
                tags.append(tag)
            elif not replaced:
                tags.append(new)
                replaced = True
        if not replaced:
            tags.append(new)
        self._tags = tags

    def get_tag(self, label):
        """Returns the value of the first tag with the label, or None"""
        key = fold_label(label)
        for tag in self._tags:
            if fold_label(tag.label) == key:
                return tag.value
        return None

    def get_tags(self, label):
        key = fold_label(label)
        return [tag.value for tag in self._tags if fold_label(tag.label) == key]

    def remove_tags(self, label):
        key = fold_label(label)
        self._tags = [tag for tag in self._tags if fold_label(tag.label) != key]

    def __contains__(self, label):
        return self.get_tag(label) is not None

    def __iter__(self):
        return iter(self._tags)

    def __len__(self):
        return len(self._tags)

    def __eq__(self, other):
        if not isinstance(other, TagList):
            return NotImplemented
        return self._tags == other._tags

    def __repr__(self):
        return "TagList(%r)" % (self._tags,)


class BagItVersion(namedtuple("BagItVersion", "major minor")):
    __slots__ = ()

    _PATTERN = re.compile("([0-9]+)\\.([0-9]+)")

    def __str__(self):
        return "%d.%d" % (self.major, self.minor)

    @classmethod
    def parse(cls, value):
        """Parses the ``MAJOR.MINOR`` form. Each number must fit in a byte"""
        match = cls._PATTERN.fullmatch(value)
        if not match:
            raise InvalidBagItVersionError(value)
        major, minor = int(match.group(1)), int(match.group(2))
        if major > 255 or minor > 255:
            raise InvalidBagItVersionError(value)
        return cls(major, minor)


BAGIT_1_0 = BagItVersion(1, 0)


class BagDeclaration(object):
    """The contents of ``bagit.txt``. Only BagIt 1.0 in UTF-8 is supported"""

    def __init__(self, version=BAGIT_1_0, encoding=UTF_8):
        if version != BAGIT_1_0:
            raise UnsupportedVersionError(version)
        if fold_label(encoding) != fold_label(UTF_8):
            raise UnsupportedEncodingError(encoding)
        self.version = version
        self.encoding = encoding

    def to_tags(self):
        tags = TagList()
        tags.add_tag(LABEL_BAGIT_VERSION, str(self.version))
        tags.add_tag(LABEL_FILE_ENCODING, self.encoding)
        return tags

    @classmethod
    def from_tags(cls, tags):
        version = tags.get_tag(LABEL_BAGIT_VERSION)
        if version is None:
            raise MissingTagError(LABEL_BAGIT_VERSION)
        encoding = tags.get_tag(LABEL_FILE_ENCODING)
        if encoding is None:
            raise MissingTagError(LABEL_FILE_ENCODING)
        return cls(BagItVersion.parse(version), encoding)

    def __eq__(self, other):
        if not isinstance(other, BagDeclaration):
            return NotImplemented
        return self.version == other.version and self.encoding == other.encoding

    def __repr__(self):
        return "BagDeclaration(version=%s, encoding=%s)" % (self.version, self.encoding)


def _single_valued(label):
    def getter(self):
        return self.tags.get_tag(label)

    def setter(self, value):
        if value is None:
            self.tags.remove_tags(label)
        else:
            self.tags.replace_tag(label, value)

    return property(getter, setter, doc="The %s tag, replaced on assignment" % label)


def _all_values(label):
    def getter(self):
        return self.tags.get_tags(label)

    return property(getter, doc="Every %s value, in file order" % label)


def _appender(label):
    def add(self, value):
        self.tags.add_tag(label, value)

    add.__doc__ = "Appends a %s tag" % label
    return add


class BagInfo(object):
    """
    The contents of ``bag-info.txt``.

    Reserved labels which may only appear once are exposed as properties that
    replace the existing value when assigned. Repeatable reserved labels have
    a plural property listing every value and an ``add_*`` method appending
    another one.
    """

    def __init__(self, tags=None):
        self.tags = tags if tags is not None else TagList()

    @classmethod
    def from_mapping(cls, mapping):
        """Builds a BagInfo from a dict. List or tuple values become repeated tags"""
        info = cls()
        for label, value in mapping.items():
            if isinstance(value, (list, tuple)):
                for i in value:
                    info.add_tag(label, i)
            else:
                info.add_tag(label, value)
        return info

    def add_tag(self, label, value):
        """Appends a tag, or replaces it when the label is reserved and not repeatable"""
        if is_repeatable(label):
            self.tags.add_tag(label, value)
        else:
            self.tags.replace_tag(label, value)

    def get_tag(self, label):
        return self.tags.get_tag(label)

    def get_tags(self, label):
        return self.tags.get_tags(label)

    def remove_tags(self, label):
        self.tags.remove_tags(label)

    def __iter__(self):
        return iter(self.tags)

    def __len__(self):
        return len(self.tags)

    def __eq__(self, other):
        if not isinstance(other, BagInfo):
            return NotImplemented
        return self.tags == other.tags

    def __repr__(self):
        return "BagInfo(%r)" % (self.tags,)

    bagging_date = _single_valued(LABEL_BAGGING_DATE)
    payload_oxum = _single_valued(LABEL_PAYLOAD_OXUM)
    software_agent = _single_valued(LABEL_SOFTWARE_AGENT)
    bag_size = _single_valued(LABEL_BAG_SIZE)
    bag_group_identifier = _single_valued(LABEL_BAG_GROUP_IDENTIFIER)
    bag_count = _single_valued(LABEL_BAG_COUNT)

    source_organizations = _all_values(LABEL_SOURCE_ORGANIZATION)
    organization_addresses = _all_values(LABEL_ORGANIZATION_ADDRESS)
    contact_names = _all_values(LABEL_CONTACT_NAME)
    contact_phones = _all_values(LABEL_CONTACT_PHONE)
    contact_emails = _all_values(LABEL_CONTACT_EMAIL)
    external_descriptions = _all_values(LABEL_EXTERNAL_DESCRIPTION)
    external_identifiers = _all_values(LABEL_EXTERNAL_IDENTIFIER)
    internal_sender_identifiers = _all_values(LABEL_INTERNAL_SENDER_IDENTIFIER)
    internal_sender_descriptions = _all_values(LABEL_INTERNAL_SENDER_DESCRIPTION)
    bagit_profile_identifiers = _all_values(LABEL_BAGIT_PROFILE_IDENTIFIER)

    add_source_organization = _appender(LABEL_SOURCE_ORGANIZATION)
    add_organization_address = _appender(LABEL_ORGANIZATION_ADDRESS)
    add_contact_name = _appender(LABEL_CONTACT_NAME)
    add_contact_phone = _appender(LABEL_CONTACT_PHONE)
    add_contact_email = _appender(LABEL_CONTACT_EMAIL)
    add_external_description = _appender(LABEL_EXTERNAL_DESCRIPTION)
    add_external_identifier = _appender(LABEL_EXTERNAL_IDENTIFIER)
    add_internal_sender_identifier = _appender(LABEL_INTERNAL_SENDER_IDENTIFIER)
    add_internal_sender_description = _appender(LABEL_INTERNAL_SENDER_DESCRIPTION)
    add_bagit_profile_identifier = _appender(LABEL_BAGIT_PROFILE_IDENTIFIER)


def format_payload_oxum(octets, count):
    return "%d.%d" % (octets, count)


def parse_payload_oxum(value):
    """Returns the ``(octets, count)`` pair of a Payload-Oxum value, or None"""
    octets, sep, count = value.partition(".")
    if not sep or not octets.isdigit() or not count.isdigit():
        return None
    return int(octets), int(count)


def parse_tag_line(line):
    """Splits a logical tag line into its label and value.

    The label is everything before the first ``:`` and is returned untouched.
    The ``:`` must be followed by exactly one space or tab which is not part
    of the value.
    """
    label, sep, rest = line.partition(":")
    if not sep:
        raise InvalidTagLineError("no ':' separates the label from the value in %r" % line)
    if not rest or not is_space_or_tab(rest[0]):
        raise InvalidTagLineError("expected a space or tab after ':' in %r" % line)
    return label, rest[1:]


def read_tag_file(path):
    """Reads every tag in a tag file, preserving their order"""
    LOGGER.info("Reading tag file %s", path)

    tags = TagList()

    try:
        with open(path, "rb") as tag_file:
            for num, line in enumerate(TagLineReader(tag_file), 1):
                try:
                    label, value = parse_tag_line(line)
                    tags.add_tag(label.strip(" \t"), value)
                except (InvalidTagLineError, InvalidTagError) as exc:
                    raise InvalidTagLineWithRefError(path, num, exc.details) from exc
    except OSError as exc:
        raise IoReadError(path, exc) from exc

    return tags


def write_tag_file(tags, path):
    LOGGER.info("Writing tag file %s", path)

    try:
        tag_file = open(path, "w", encoding="utf-8", newline="\n")
    except OSError as exc:
        raise IoCreateError(path, exc) from exc

    with tag_file:
        try:
            for tag in tags:
                tag_file.write("%s: %s\n" % (tag.label, tag.value))
            tag_file.flush()
        except OSError as exc:
            raise IoWriteError(path, exc) from exc


def read_bag_declaration(base_dir):
    return BagDeclaration.from_tags(read_tag_file(os.path.join(base_dir, BAGIT_TXT)))


def write_bag_declaration(declaration, base_dir):
    write_tag_file(declaration.to_tags(), os.path.join(base_dir, BAGIT_TXT))


def read_bag_info(base_dir):
    """Reads ``bag-info.txt``, returning an empty BagInfo when the file is absent"""
    path = os.path.join(base_dir, BAG_INFO_TXT)
    if not os.path.exists(path):
        return BagInfo()
    return BagInfo(read_tag_file(path))


def write_bag_info(bag_info, base_dir):
    write_tag_file(bag_info.tags, os.path.join(base_dir, BAG_INFO_TXT))
