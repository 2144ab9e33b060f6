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
The ``bagr`` command.

    bagr bag --source photos --destination photos-bag --digest-algorithm sha256
    bagr rebag --bag-path photos-bag --bagging-date 2020-01-01
    bagr validate --bag-path photos-bag
"""

import argparse
import logging
import os
import sys

from .config import load_config
from .core import VERSION, create_bag, open_bag
from .digest import DigestAlgorithm
from .errors import BagError, UnsupportedAlgorithmError
from .tags import (
    LABEL_BAGGING_DATE,
    LABEL_PAYLOAD_OXUM,
    LABEL_SOFTWARE_AGENT,
    RESERVED_LABELS,
    BagInfo,
)
from .validate import validate_bag

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Reserved labels settable through their own option. The rest are either
# computed or have a shorter option of their own.
_TYPED_LABELS = [
    (label, repeatable)
    for label, repeatable in RESERVED_LABELS
    if label not in (LABEL_BAGGING_DATE, LABEL_PAYLOAD_OXUM, LABEL_SOFTWARE_AGENT)
]


def _label_dest(label):
    return label.lower().replace("-", "_")


def _algorithm(value):
    try:
        return DigestAlgorithm.from_name(value)
    except UnsupportedAlgorithmError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def _tag(value):
    label, sep, tag_value = value.partition(":")
    if not sep or not label.strip():
        raise argparse.ArgumentTypeError("expected LABEL:VALUE, got %r" % value)
    return label.strip(), tag_value.strip()


def _add_common_options(subparser):
    subparser.add_argument(
        "--digest-algorithm",
        "-a",
        dest="digest_algorithms",
        action="append",
        type=_algorithm,
        metavar="ALGORITHM",
        help="Digest algorithm to use, may be repeated. One of: %s. Defaults to %s"
        % (", ".join(str(i) for i in DigestAlgorithm), DigestAlgorithm.SHA512),
    )
    subparser.add_argument(
        "--bagging-date", help="Bagging-Date to record, defaults to today (YYYY-MM-DD)"
    )
    subparser.add_argument(
        "--software-agent", help="Bag-Software-Agent to record, defaults to bagr"
    )


def _make_parser():
    parser = argparse.ArgumentParser(
        prog="bagr", description="Create, update and check BagIt 1.0 bags"
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + VERSION)
    parser.add_argument("--config", help="INI file with default algorithms and bag-info tags")
    parser.add_argument("--log", help="The name of the log file (default: stderr)")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Suppress all logging")
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Log every action taken")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    bag = subparsers.add_parser("bag", help="Create a new bag")
    bag.set_defaults(func=_bag)
    bag.add_argument(
        "--source", help="Directory to bag, defaults to the current directory"
    )
    bag.add_argument(
        "--destination",
        help="Directory to write the bag to, defaults to the source. "
        "Bagging in place moves the source files into data/",
    )
    bag.add_argument(
        "--include-hidden-files",
        action="store_true",
        help="Include files whose names start with '.'. When bagging in place "
        "without this option they are deleted",
    )
    _add_common_options(bag)

    metadata = bag.add_argument_group(
        "Optional bag-info.txt metadata",
        "Options which may be repeated add one tag per use",
    )
    for label, repeatable in _TYPED_LABELS:
        metadata.add_argument(
            "--%s" % label.lower(),
            dest=_label_dest(label),
            action="append" if repeatable else "store",
            metavar="VALUE",
        )
    metadata.add_argument(
        "--tag",
        "-t",
        dest="tags",
        action="append",
        type=_tag,
        metavar="LABEL:VALUE",
        help="Custom bag-info.txt tag, may be repeated",
    )

    rebag = subparsers.add_parser(
        "rebag", help="Rewrite the manifests and bag-info.txt of an existing bag"
    )
    rebag.set_defaults(func=_rebag)
    rebag.add_argument("--bag-path", help="Bag to update, defaults to the current directory")
    rebag.add_argument(
        "--no-manifest-recalculation",
        action="store_true",
        help="Keep the existing payload manifests. Algorithm changes are ignored",
    )
    _add_common_options(rebag)

    validate = subparsers.add_parser(
        "validate", help="Check the structure of a bag without verifying digests"
    )
    validate.set_defaults(func=_validate)
    validate.add_argument("--bag-path", help="Bag to check, defaults to the current directory")

    return parser


def _configure_logging(args):
    if args.quiet:
        level = logging.CRITICAL
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(filename=args.log, level=level, format=LOG_FORMAT)


def _build_bag_info(args, config):
    bag_info = BagInfo()

    for label, value in config.metadata:
        bag_info.add_tag(label, value)

    for label, _ in _TYPED_LABELS:
        value = getattr(args, _label_dest(label))
        if value is None:
            continue
        if isinstance(value, list):
            for i in value:
                bag_info.add_tag(label, i)
        else:
            bag_info.add_tag(label, value)

    for label, value in args.tags or []:
        bag_info.add_tag(label, value)

    if args.bagging_date:
        bag_info.bagging_date = args.bagging_date
    if args.software_agent:
        bag_info.software_agent = args.software_agent

    return bag_info


def _bag(args, config):
    source = args.source or os.getcwd()
    destination = args.destination or source

    bag = create_bag(
        source,
        destination,
        bag_info=_build_bag_info(args, config),
        algorithms=args.digest_algorithms or config.algorithms,
        include_hidden_files=args.include_hidden_files,
    )
    LOGGER.info("Created bag %s", bag)
    return 0


def _rebag(args, config):
    bag = open_bag(args.bag_path or os.getcwd())

    updater = bag.update().recalculate_payload_manifests(not args.no_manifest_recalculation)

    algorithms = args.digest_algorithms or config.algorithms
    if algorithms:
        updater.with_algorithms(algorithms)
    if args.bagging_date:
        updater.with_bagging_date(args.bagging_date)
    if args.software_agent:
        updater.with_software_agent(args.software_agent)

    updater.finalize()
    LOGGER.info("Updated bag %s", bag)
    return 0


def _validate(args, config):
    result = validate_bag(args.bag_path or os.getcwd())

    for issue in result.issues:
        print("%s: %s" % (issue.level, issue.message))
    print(result)

    return 0 if result.is_valid else 1


def main(argv=None):
    parser = _make_parser()
    args = parser.parse_args(argv)

    _configure_logging(args)

    try:
        config = load_config(args.config)
        return args.func(args, config)
    except BagError as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
