from __future__ import annotations

import unittest

from _testutil import ensure_repo_on_path


class TestSemver(unittest.TestCase):
    def test_parse_forms(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.versioning.semver import SemVer, parse_version

        self.assertEqual(parse_version("1.2.3"), SemVer(1, 2, 3))
        self.assertEqual(parse_version("v1.2.3"), SemVer(1, 2, 3))
        v = parse_version("1.2.3-alpha.4+build.5")
        self.assertEqual((v.prerelease, v.build), ("alpha.4", "build.5"))
        self.assertEqual(str(v), "1.2.3-alpha.4+build.5")
        self.assertEqual(v.core, "1.2.3")

        sub = parse_version("api/v2.0.0")
        self.assertEqual(sub.subproject, "api")
        self.assertEqual(sub.tag(), "api/v2.0.0")

    def test_parse_rejects_malformed(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.versioning.semver import is_valid_version, parse_version

        for bad in ("", "1.2", "1.2.3.4", "v1.x.3", "1.2.3-", "1.2.3-al pha"):
            with self.assertRaises(ValidationError):
                parse_version(bad)
            self.assertFalse(is_valid_version(bad))

    def test_precedence(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.versioning.semver import compare_versions

        ordered = [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-beta.2",
            "1.0.0-beta.11",
            "1.0.0-rc.1",
            "1.0.0",
            "1.0.1",
            "1.10.0",
        ]
        for lo, hi in zip(ordered, ordered[1:]):
            self.assertTrue(compare_versions(lo, "lt", hi), f"{lo} < {hi}")
            self.assertTrue(compare_versions(hi, "gt", lo), f"{hi} > {lo}")

        self.assertTrue(compare_versions("1.0.0+build.1", "eq", "1.0.0+build.2"))
        self.assertTrue(compare_versions("v1.0.0", "eq", "1.0.0"))
        self.assertTrue(compare_versions("1.0.0", "ne", "1.0.1"))
        self.assertTrue(compare_versions("1.0.0", "ge", "1.0.0"))
        self.assertTrue(compare_versions("1.0.0", "le", "1.0.0"))

    def test_unknown_operator(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.versioning.semver import compare_versions

        with self.assertRaises(ValidationError):
            compare_versions("1.0.0", "~=", "1.0.0")

    def test_increment(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.versioning.semver import increment_version, is_prerelease

        self.assertEqual(str(increment_version("1.2.3-rc.1+b", "patch")), "1.2.4")
        self.assertEqual(str(increment_version("1.2.3", "minor")), "1.3.0")
        self.assertEqual(str(increment_version("1.2.3", "major")), "2.0.0")
        with self.assertRaises(ValidationError):
            increment_version("1.2.3", "build")

        self.assertTrue(is_prerelease("1.2.3-alpha"))
        self.assertFalse(is_prerelease("1.2.3+build"))


if __name__ == "__main__":
    unittest.main()
