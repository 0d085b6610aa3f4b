from __future__ import annotations

import unittest

from _testutil import GitRepo, ensure_repo_on_path, git


class TestStabilityTag(unittest.TestCase):
    def test_stable_points_at_version_commit(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.tags.stability import apply_stability_tag

        with GitRepo() as repo:
            repo.commit("feat: one")
            repo.tag("v1.2.3", message="release 1.2.3")
            repo.commit("feat: two")

            res = apply_stability_tag("stable", "v1.2.3", repo=repo.path, push=False)
            self.assertEqual(repo.commit_of("stable"), repo.commit_of("v1.2.3"))
            self.assertEqual(res.commit, repo.commit_of("v1.2.3"))
            self.assertFalse(res.pushed)
            # A plain version resolves through the tag prefix.
            res = apply_stability_tag("unstable", "1.2.3", repo=repo.path, push=False)
            self.assertEqual(res.version_ref, "v1.2.3")

    def test_moves_existing_tag(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.tags.stability import apply_stability_tag

        with GitRepo() as repo:
            repo.commit("feat: one")
            repo.tag("v1.0.0")
            repo.commit("feat: two")
            repo.tag("v1.1.0")

            apply_stability_tag("stable", "v1.0.0", repo=repo.path, push=False)
            apply_stability_tag("stable", "v1.1.0", repo=repo.path, push=False)
            self.assertEqual(repo.commit_of("stable"), repo.commit_of("v1.1.0"))

    def test_force_push_to_origin(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.tags.stability import apply_stability_tag

        with GitRepo(bare=True) as origin, GitRepo() as repo:
            git(repo.path, "remote", "add", "origin", str(origin.path))
            repo.commit("feat: one")
            repo.tag("v1.0.0")
            repo.commit("feat: two")
            repo.tag("v1.1.0")

            apply_stability_tag("stable", "v1.0.0", repo=repo.path)
            apply_stability_tag("stable", "v1.1.0", repo=repo.path)
            remote_sha = git(origin.path, "rev-parse", "refs/tags/stable^{commit}")
            self.assertEqual(remote_sha, repo.commit_of("v1.1.0"))

    def test_rejects_bad_arguments(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.tags.stability import apply_stability_tag

        with GitRepo() as repo:
            repo.commit("feat: one")
            repo.tag("v1.0.0")
            with self.assertRaises(ValidationError):
                apply_stability_tag("", "v1.0.0", repo=repo.path, push=False)
            with self.assertRaises(ValidationError):
                apply_stability_tag("production", "v1.0.0", repo=repo.path, push=False)
            with self.assertRaises(ValidationError):
                apply_stability_tag("stable", "v9.9.9", repo=repo.path, push=False)


if __name__ == "__main__":
    unittest.main()
