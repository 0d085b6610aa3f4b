from __future__ import annotations

import unittest

from _testutil import ensure_repo_on_path


class TestVersionCalculator(unittest.TestCase):
    def test_core_increments_strip_prerelease(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.versioning.calculator import next_version

        for current in ("0.0.0", "1.2.3", "9.19.29", "1.2.3-alpha.2", "1.2.3+build.7"):
            v = next_version(current, "patch")
            base = next_version(current, "major")
            self.assertEqual(v.prerelease, "")
            self.assertEqual(v.build, "")
            self.assertEqual((base.minor, base.patch), (0, 0))

        self.assertEqual(str(next_version("1.2.3", "patch")), "1.2.4")
        self.assertEqual(str(next_version("1.2.3", "minor")), "1.3.0")
        self.assertEqual(str(next_version("1.2.3", "major")), "2.0.0")

    def test_pre_core_types(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.versioning.calculator import next_version

        self.assertEqual(str(next_version("1.2.3", "premajor", "alpha")), "2.0.0-alpha")
        self.assertEqual(str(next_version("1.2.3", "preminor", "beta")), "1.3.0-beta")
        self.assertEqual(str(next_version("1.2.3", "prepatch", "rc")), "1.2.4-rc")

    def test_prerelease_sequence(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.versioning.calculator import next_version

        first = next_version("1.2.3", "prerelease", "alpha")
        self.assertEqual(str(first), "1.2.4-alpha")
        second = next_version(first, "prerelease", "alpha")
        self.assertEqual(str(second), "1.2.4-alpha.1")
        self.assertEqual(str(next_version(second, "prerelease", "alpha")), "1.2.4-alpha.2")
        self.assertEqual(str(next_version("1.2.4-alpha.9", "prerelease", "alpha")), "1.2.4-alpha.10")

    def test_label_switch_keeps_core(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.versioning.calculator import next_version

        self.assertEqual(str(next_version("1.2.4-alpha", "prerelease", "beta")), "1.2.4-beta")
        self.assertEqual(str(next_version("1.2.4-alpha.3", "prerelease", "beta")), "1.2.4-beta")

    def test_default_label(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.versioning.calculator import next_version

        self.assertEqual(str(next_version("1.2.3", "prerelease")), "1.2.4-alpha")
        self.assertEqual(str(next_version("1.2.3", "prerelease", "")), "1.2.4-alpha")

    def test_errors(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.versioning.calculator import next_version

        with self.assertRaises(ValidationError) as cm:
            next_version("1.2.3", "bogus")
        self.assertIn("Unknown release type", str(cm.exception))

        with self.assertRaises(ValidationError):
            next_version("not-a-version", "patch")
        with self.assertRaises(ValidationError):
            next_version("1.2.4-alpha.x", "prerelease", "alpha")
        with self.assertRaises(ValidationError):
            next_version("1.2.3", "prerelease", "al.pha")


if __name__ == "__main__":
    unittest.main()
