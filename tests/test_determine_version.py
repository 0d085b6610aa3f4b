from __future__ import annotations

import unittest

from _testutil import GitRepo, ensure_repo_on_path


class TestDetermineVersion(unittest.TestCase):
    def test_defaults_without_tags(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.config import CiConfig
        from ci_excellence.versioning.determine import current_version, determine_next_version

        with GitRepo() as repo:
            repo.commit("feat: initial")
            cfg = CiConfig()
            self.assertEqual(str(current_version(cfg, repo.path)), "0.0.1-alpha")
            self.assertEqual(str(determine_next_version("prerelease", "alpha", cfg, repo.path)), "0.0.1-alpha.1")

    def test_uses_latest_reachable_tag(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.config import CiConfig
        from ci_excellence.versioning.determine import determine_next_version, version_outputs

        with GitRepo() as repo:
            repo.commit("feat: one")
            repo.tag("v1.2.2")
            repo.commit("fix: two")
            repo.tag("v1.2.3", message="release 1.2.3")
            repo.commit("chore: three")

            cfg = CiConfig()
            self.assertEqual(str(determine_next_version("prerelease", "alpha", cfg, repo.path)), "1.2.4-alpha")
            self.assertEqual(str(determine_next_version("premajor", None, cfg, repo.path)), "2.0.0-alpha")
            self.assertEqual(str(determine_next_version("minor", None, cfg, repo.path)), "1.3.0")

            out = version_outputs("patch", False, cfg, repo.path)
            self.assertEqual((out.version, out.is_prerelease), ("1.2.4", False))
            self.assertTrue(version_outputs("patch", True, cfg, repo.path).is_prerelease)
            self.assertTrue(version_outputs("prepatch", False, cfg, repo.path).is_prerelease)

    def test_malformed_tag_fails_fast(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.config import CiConfig
        from ci_excellence.errors import ValidationError
        from ci_excellence.versioning.determine import determine_next_version

        with GitRepo() as repo:
            repo.commit("feat: one")
            repo.tag("vnext")
            with self.assertRaises(ValidationError):
                determine_next_version("patch", None, CiConfig(), repo.path)

    def test_state_tags_are_not_versions(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.config import CiConfig
        from ci_excellence.versioning.determine import current_version, determine_next_version

        with GitRepo() as repo:
            repo.commit("feat: one")
            repo.tag("v1.2.3")
            repo.tag("v1.2.3-stable", message="state")
            repo.commit("fix: two")
            repo.tag("v1.2.3-deprecated")

            cfg = CiConfig()
            self.assertEqual(str(current_version(cfg, repo.path)), "1.2.3")
            self.assertEqual(str(determine_next_version("prerelease", "alpha", cfg, repo.path)), "1.2.4-alpha")

    def test_select_version(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.versioning.determine import select_version

        self.assertEqual(select_version("release", "v1.2.3", "9.9.9"), "v1.2.3")
        self.assertEqual(select_version("workflow_dispatch", "", "1.2.3"), "1.2.3")
        self.assertEqual(select_version("release", "", "1.2.3"), "1.2.3")
        with self.assertRaises(ValidationError):
            select_version("workflow_dispatch", "", "")

    def test_post_release_version(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.versioning.determine import post_release_version

        self.assertEqual(post_release_version("release", "v1.2.3"), "v1.2.3")
        self.assertEqual(post_release_version("workflow_dispatch", "", "1.2.3-alpha"), "1.2.3-alpha")
        with self.assertRaises(ValidationError):
            post_release_version("push", "v1.2.3")
        with self.assertRaises(ValidationError):
            post_release_version("workflow_dispatch", "", "")
        with self.assertRaises(ValidationError):
            post_release_version("workflow_dispatch", "", "latest")


if __name__ == "__main__":
    unittest.main()
