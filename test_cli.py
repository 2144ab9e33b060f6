# encoding: utf-8

import io
import os
import unittest
from os.path import join as j

import mock

import bagr
from bagr.cli import main
from bagr.digest import DigestAlgorithm

from test_bag import HI_MD5, SOFTWARE_AGENT, SelfCleaningTestCase, slurp_text_file


@mock.patch("bagr.core.VERSION", new="1.0.0")
class TestCommandLine(SelfCleaningTestCase):
    def setUp(self):
        super(TestCommandLine, self).setUp()
        self.write_file("hello.txt", "hi\n")

    def run_cli(self, *argv):
        with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout:
            code = main(list(argv))
        return code, stdout.getvalue()

    def test_bag_in_place(self):
        code, _ = self.run_cli(
            "bag",
            "--source",
            self.src,
            "--digest-algorithm",
            "sha256",
            "-a",
            "MD5",
            "--contact-name",
            "Ed",
            "--source-organization",
            "Library of Congress",
            "--contact-name",
            "Alice",
            "--tag",
            "Custom:  value",
            "--bagging-date",
            "2020-01-01",
        )

        self.assertEqual(code, 0)
        self.assertEqual(
            bagr.open_bag(self.src).algorithms,
            [DigestAlgorithm.MD5, DigestAlgorithm.SHA256],
        )
        self.assertEqual(
            slurp_text_file(j(self.src, "bag-info.txt")),
            "Source-Organization: Library of Congress\n"
            "Contact-Name: Ed\n"
            "Contact-Name: Alice\n"
            "Custom: value\n"
            "Bagging-Date: 2020-01-01\n"
            "Bag-Software-Agent: %s\n"
            "Payload-Oxum: 3.1\n" % SOFTWARE_AGENT,
        )

    def test_bag_single_valued_options(self):
        code, _ = self.run_cli(
            "bag",
            "--source",
            self.src,
            "--bag-count",
            "1 of 2",
            "--bag-group-identifier",
            "group",
            "--software-agent",
            "my agent",
        )

        self.assertEqual(code, 0)
        bag = bagr.open_bag(self.src)
        self.assertEqual(bag.bag_info.bag_count, "1 of 2")
        self.assertEqual(bag.bag_info.bag_group_identifier, "group")
        self.assertEqual(bag.bag_info.software_agent, "my agent")

    def test_bag_copy(self):
        dst = j(self.tmpdir, "bag")

        code, _ = self.run_cli("bag", "--source", self.src, "--destination", dst)

        self.assertEqual(code, 0)
        self.assertEqual(os.listdir(self.src), ["hello.txt"])
        self.assertTrue(os.path.isfile(j(dst, "data", "hello.txt")))
        self.assertTrue(os.path.isfile(j(dst, "manifest-sha512.txt")))

    def test_bag_current_directory(self):
        with mock.patch("bagr.cli.os.getcwd", return_value=self.src):
            code, _ = self.run_cli("bag")

        self.assertEqual(code, 0)
        self.assertTrue(os.path.isfile(j(self.src, "data", "hello.txt")))

    def test_bag_hidden_files(self):
        self.write_file(".hidden", "hi\n")

        code, _ = self.run_cli("bag", "--source", self.src, "--include-hidden-files")

        self.assertEqual(code, 0)
        self.assertTrue(os.path.isfile(j(self.src, "data", ".hidden")))

    def test_bag_with_config(self):
        config = self.write_file(
            "bagr.ini",
            "[bagit]\nalgorithms = md5, sha1\n\n"
            "[metadata]\nContact-Name = Config Person\nSource-Organization = Org\n",
            base=self.tmpdir,
        )

        code, _ = self.run_cli(
            "--config", config, "bag", "--source", self.src, "--contact-name", "Ed"
        )

        self.assertEqual(code, 0)
        bag = bagr.open_bag(self.src)
        self.assertEqual(bag.algorithms, [DigestAlgorithm.MD5, DigestAlgorithm.SHA1])
        self.assertEqual(bag.bag_info.contact_names, ["Config Person", "Ed"])
        self.assertEqual(bag.bag_info.source_organizations, ["Org"])
        self.assertEqual(
            slurp_text_file(j(self.src, "manifest-md5.txt")), "%s  data/hello.txt\n" % HI_MD5
        )

    def test_command_line_algorithms_override_config(self):
        config = self.write_file(
            "bagr.ini", "[bagit]\nalgorithms = md5\n", base=self.tmpdir
        )

        code, _ = self.run_cli("--config", config, "bag", "--source", self.src, "-a", "sha1")

        self.assertEqual(code, 0)
        self.assertEqual(bagr.open_bag(self.src).algorithms, [DigestAlgorithm.SHA1])

    def test_missing_config(self):
        with self.assertLogs("bagr.cli", level="ERROR"):
            code, _ = self.run_cli(
                "--config", j(self.tmpdir, "missing.ini"), "bag", "--source", self.src
            )
        self.assertEqual(code, 1)
        self.assertTrue(os.path.isfile(j(self.src, "hello.txt")))

    def test_invalid_config_algorithm(self):
        config = self.write_file("bagr.ini", "[bagit]\nalgorithms = sha3\n", base=self.tmpdir)
        code, _ = self.run_cli("--config", config, "bag", "--source", self.src)
        self.assertEqual(code, 1)

    def test_bag_error(self):
        with self.assertLogs("bagr.cli", level="ERROR") as logs:
            code, _ = self.run_cli("bag", "--source", j(self.tmpdir, "missing"))

        self.assertEqual(code, 1)
        self.assertIn("missing", logs.output[0])

    def test_bag_unencodable_tag_value(self):
        with self.assertLogs("bagr.cli", level="ERROR"):
            code, _ = self.run_cli(
                "bag", "--source", self.src, "--contact-name", "bad\udcff"
            )

        self.assertEqual(code, 1)
        self.assertEqual(os.listdir(self.src), ["hello.txt"])

    def test_invalid_arguments(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO):
            for argv in (
                ["bag", "--digest-algorithm", "sha3"],
                ["bag", "--tag", "no separator"],
                ["--quiet", "--verbose", "bag"],
                ["unknown"],
                [],
            ):
                with self.assertRaises(SystemExit) as cm:
                    main(argv)
                self.assertEqual(cm.exception.code, 2, argv)

    def test_version(self):
        with mock.patch("bagr.cli.VERSION", new="1.2.3"):
            with self.assertRaises(SystemExit) as cm:
                self.run_cli("--version")
        self.assertEqual(cm.exception.code, 0)

    def test_rebag(self):
        self.run_cli("bag", "--source", self.src, "--bagging-date", "1999-12-31")

        code, _ = self.run_cli(
            "rebag", "--bag-path", self.src, "--bagging-date", "2020-01-01", "-a", "md5"
        )

        self.assertEqual(code, 0)
        bag = bagr.open_bag(self.src)
        self.assertEqual(bag.algorithms, [DigestAlgorithm.MD5])
        self.assertEqual(bag.bag_info.bagging_date, "2020-01-01")
        self.assertFalse(os.path.exists(j(self.src, "tagmanifest-sha512.txt")))
        self.assertTrue(os.path.isfile(j(self.src, "tagmanifest-md5.txt")))

    def test_rebag_without_recalculation(self):
        self.run_cli("bag", "--source", self.src)

        code, _ = self.run_cli(
            "rebag", "--bag-path", self.src, "--no-manifest-recalculation", "-a", "md5"
        )

        self.assertEqual(code, 0)
        self.assertEqual(bagr.open_bag(self.src).algorithms, [DigestAlgorithm.SHA512])
        self.assertFalse(os.path.exists(j(self.src, "manifest-md5.txt")))

    def test_rebag_not_a_bag(self):
        code, _ = self.run_cli("--quiet", "rebag", "--bag-path", self.src)
        self.assertEqual(code, 1)

    def test_validate(self):
        self.run_cli("bag", "--source", self.src)

        code, out = self.run_cli("validate", "--bag-path", self.src)

        self.assertEqual(code, 0)
        self.assertEqual(out, "%s is valid\n" % self.src)

    def test_validate_invalid(self):
        self.run_cli("bag", "--source", self.src)
        os.remove(j(self.src, "manifest-sha512.txt"))

        code, out = self.run_cli("validate", "--bag-path", self.src)

        self.assertEqual(code, 1)
        self.assertIn("ERROR: No payload manifest", out)
        self.assertIn("is invalid", out)


if __name__ == "__main__":
    unittest.main()
