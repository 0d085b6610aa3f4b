from __future__ import annotations

import unittest

from _testutil import GitRepo, ensure_repo_on_path, git


class TestTagNames(unittest.TestCase):
    def test_names_per_kind(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.tags.assign import assignment_tag_name

        self.assertEqual(assignment_tag_name("version", version="1.2.3"), "v1.2.3")
        self.assertEqual(assignment_tag_name("version", version="v1.2.3", subproject="api"), "api/v1.2.3")
        self.assertEqual(assignment_tag_name("environment", environment="staging"), "staging")
        self.assertEqual(assignment_tag_name("state", version="v1.2.3", state="stable"), "v1.2.3-stable")
        self.assertEqual(
            assignment_tag_name("state", version="1.2.3-rc.1", state="deprecated", subproject="web-ui"),
            "web-ui/v1.2.3-rc.1-deprecated",
        )

    def test_rejects_bad_input(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.tags.assign import assignment_tag_name

        bad = [
            ("rollback", {"version": "1.0.0"}),
            ("version", {}),
            ("version", {"version": "1.0"}),
            ("environment", {}),
            ("environment", {"environment": "qa"}),
            ("state", {"version": "1.0.0"}),
            ("state", {"version": "1.0.0", "state": "testing"}),
            ("version", {"version": "1.0.0", "subproject": "Api"}),
        ]
        for kind, kwargs in bad:
            with self.assertRaises(ValidationError, msg=f"{kind} {kwargs}"):
                assignment_tag_name(kind, **kwargs)


class TestAssignTag(unittest.TestCase):
    def test_version_tags_are_immutable(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ConflictError
        from ci_excellence.tags.assign import assign_tag

        with GitRepo() as repo:
            c1 = repo.commit("feat: one")
            c2 = repo.commit("feat: two")

            res = assign_tag("version", version="1.0.0", commit=c1, repo=repo.path)
            self.assertEqual((res.tag, res.commit, res.previous, res.moved), ("v1.0.0", c1, None, False))
            self.assertFalse(res.should_deploy)
            self.assertEqual(git(repo.path, "cat-file", "-t", "v1.0.0"), "tag")

            with self.assertRaises(ConflictError):
                assign_tag("version", version="1.0.0", commit=c2, repo=repo.path)
            with self.assertRaises(ConflictError):
                assign_tag("version", version="1.0.0", commit=c1, repo=repo.path)
            self.assertEqual(repo.commit_of("v1.0.0"), c1)

            res = assign_tag("version", version="1.0.0", commit=c2, force_move=True, repo=repo.path)
            self.assertEqual((res.previous, res.moved), (c1, True))
            self.assertEqual(repo.commit_of("v1.0.0"), c2)

    def test_state_tags_are_immutable(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ConflictError
        from ci_excellence.tags.assign import assign_tag

        with GitRepo() as repo:
            c1 = repo.commit("feat: one")
            repo.commit("feat: two")

            assign_tag("state", version="1.0.0", state="stable", commit=c1, repo=repo.path)
            with self.assertRaises(ConflictError):
                assign_tag("state", version="1.0.0", state="stable", repo=repo.path)
            self.assertEqual(repo.commit_of("v1.0.0-stable"), c1)

    def test_environment_tags_move(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.github.git import BOT_NAME
        from ci_excellence.tags.assign import assign_tag

        with GitRepo() as repo:
            c1 = repo.commit("feat: one")
            c2 = repo.commit("feat: two")

            res = assign_tag("environment", environment="production", commit=c1, repo=repo.path)
            self.assertTrue(res.should_deploy)
            self.assertEqual(repo.commit_of("production"), c1)

            res = assign_tag("environment", environment="production", repo=repo.path)
            self.assertEqual((res.commit, res.previous, res.moved), (c2, c1, True))
            self.assertEqual(repo.commit_of("production"), c2)
            self.assertEqual(git(repo.path, "cat-file", "-t", "production"), "tag")
            self.assertEqual(git(repo.path, "for-each-ref", "--format=%(taggername)", "refs/tags/production"), BOT_NAME)
            self.assertIn(f"Old commit: {c1}", git(repo.path, "tag", "-l", "--format=%(contents)", "production"))

            res = assign_tag("environment", environment="production", repo=repo.path)
            self.assertFalse(res.moved)

    def test_unknown_commit(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import NotFoundError
        from ci_excellence.tags.assign import assign_tag

        with GitRepo() as repo:
            repo.commit("feat: one")
            with self.assertRaises(NotFoundError):
                assign_tag("environment", environment="staging", commit="deadbeef", repo=repo.path)

    def test_push_moves_remote_tag(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.tags.assign import assign_tag

        with GitRepo(bare=True) as origin, GitRepo() as repo:
            git(repo.path, "remote", "add", "origin", str(origin.path))
            c1 = repo.commit("feat: one")
            c2 = repo.commit("feat: two")

            assign_tag("environment", environment="staging", commit=c1, repo=repo.path, push=True)
            res = assign_tag("environment", environment="staging", commit=c2, repo=repo.path, push=True)
            self.assertTrue(res.pushed)
            self.assertEqual(git(origin.path, "rev-parse", "refs/tags/staging^{commit}"), c2)


if __name__ == "__main__":
    unittest.main()
