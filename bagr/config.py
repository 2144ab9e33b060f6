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
INI configuration for the ``bagr`` command.

::

    [bagit]
    algorithms = sha256, sha512

    [metadata]
    Source-Organization = Example Org
    Contact-Email = archives@example.org
"""

import configparser
import logging

from .digest import DigestAlgorithm
from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

SECTION_BAGIT = "bagit"
SECTION_METADATA = "metadata"


class Config(object):
    def __init__(self, algorithms=None, metadata=None):
        self.algorithms = algorithms or []
        self.metadata = metadata or []


def _new_parser():
    parser = configparser.ConfigParser(interpolation=None)
    # Metadata keys are bag-info labels and keep their case
    parser.optionxform = str
    return parser


def load_config(config_file=None):
    """
    Loads the configuration in config_file. No file means an empty
    configuration; a file that cannot be read is an error.
    """
    if config_file is None:
        return Config()

    LOGGER.info("Loading configuration from %s", config_file)

    parser = _new_parser()
    try:
        with open(config_file, encoding="utf-8") as f:
            parser.read_file(f)
    except OSError as exc:
        raise ConfigError(config_file, exc.strerror or str(exc)) from exc
    except configparser.Error as exc:
        raise ConfigError(config_file, str(exc).replace("\n", " ")) from exc

    algorithms = []
    if parser.has_option(SECTION_BAGIT, "algorithms"):
        for name in parser.get(SECTION_BAGIT, "algorithms").split(","):
            name = name.strip()
            if not name:
                continue
            try:
                algorithms.append(DigestAlgorithm.from_name(name))
            except ValueError as exc:
                raise ConfigError(config_file, str(exc)) from exc

    metadata = []
    if parser.has_section(SECTION_METADATA):
        metadata = list(parser.items(SECTION_METADATA))

    return Config(algorithms, metadata)
