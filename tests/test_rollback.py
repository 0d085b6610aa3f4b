from __future__ import annotations

import os
import unittest
from datetime import datetime, timezone
from unittest import mock

from _testutil import GitRepo, ensure_repo_on_path, git


NOW = datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


class TestRollback(unittest.TestCase):
    def test_tag_name(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import ValidationError
        from ci_excellence.tags.rollback import rollback_tag_name

        self.assertEqual(rollback_tag_name("production", NOW), "rollback-20260304-050607-production")
        self.assertEqual(rollback_tag_name("", NOW), "rollback-20260304-050607-all")
        with self.assertRaises(ValidationError):
            rollback_tag_name("prod env", NOW)

    def test_target_precedence(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import NotFoundError
        from ci_excellence.tags.rollback import find_rollback_target

        with GitRepo() as repo:
            c1 = repo.commit("feat: one")
            repo.tag("v1.0.0", message="1.0.0")
            c2 = repo.commit("feat: two")
            repo.tag("stable", ref=c1)
            repo.tag("production", ref=c2)

            with self.assertRaises(NotFoundError):
                find_rollback_target(explicit_tag="v9.9.9", repo=repo.path)

            t = find_rollback_target(explicit_tag="v1.0.0", use_latest_stable=True, repo=repo.path)
            self.assertEqual((t.ref, t.commit, t.source), ("v1.0.0", c1, "explicit"))

            t = find_rollback_target(use_latest_stable=True, environment="production", repo=repo.path)
            self.assertEqual((t.ref, t.commit), ("stable", c1))

            t = find_rollback_target(environment="production", repo=repo.path)
            self.assertEqual((t.source, t.commit), ("environment", c2))

    def test_latest_rollback_tag_fallback(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.errors import NotFoundError
        from ci_excellence.tags.rollback import find_rollback_target

        with GitRepo() as repo:
            c1 = repo.commit("feat: one")
            with self.assertRaises(NotFoundError):
                find_rollback_target(repo=repo.path)
            with self.assertRaises(NotFoundError):
                find_rollback_target(use_latest_stable=True, repo=repo.path)

            c2 = repo.commit("feat: two")
            repo.tag("rollback-20250101-000000-staging", ref=c2)
            repo.tag("rollback-20260101-000000-staging", ref=c1)
            t = find_rollback_target(environment="staging", repo=repo.path)
            self.assertEqual((t.ref, t.commit, t.source), ("rollback-20260101-000000-staging", c1, "rollback"))

    def test_create_rollback_tag(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.tags.rollback import RollbackTarget, create_rollback_tag

        with GitRepo() as repo:
            c1 = repo.commit("feat: one")
            repo.commit("feat: two")
            target = RollbackTarget("v1.0.0", c1, "explicit")

            name = create_rollback_tag("production", target, repo=repo.path, dry_run=True, now=NOW)
            self.assertEqual(name, "rollback-20260304-050607-production")
            self.assertEqual(git(repo.path, "tag", "-l", name), "")

            name = create_rollback_tag("production", target, repo=repo.path, now=NOW)
            self.assertEqual(repo.commit_of(name), c1)

    def test_create_rollback_tag_without_identity(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.github.git import BOT_NAME
        from ci_excellence.tags.rollback import RollbackTarget, create_rollback_tag

        with GitRepo() as repo:
            c1 = repo.commit("feat: one")
            repo.commit("feat: two")
            git(repo.path, "config", "--unset", "user.name")
            git(repo.path, "config", "--unset", "user.email")
            git(repo.path, "config", "user.useConfigOnly", "true")

            env = {
                k: v
                for k, v in os.environ.items()
                if not k.startswith(("GIT_AUTHOR_", "GIT_COMMITTER_")) and k != "EMAIL"
            }
            env.update(GIT_CONFIG_GLOBAL=os.devnull, GIT_CONFIG_NOSYSTEM="1")
            with mock.patch.dict(os.environ, env, clear=True):
                name = create_rollback_tag("production", RollbackTarget("v1.0.0", c1, "explicit"), repo=repo.path, now=NOW)

            self.assertEqual(repo.commit_of(name), c1)
            tagger = git(repo.path, "for-each-ref", "--format=%(taggername)", f"refs/tags/{name}")
            self.assertEqual(tagger, BOT_NAME)

    def test_confirm_message(self) -> None:
        ensure_repo_on_path()

        from ci_excellence.tags.rollback import confirm_rollback_message

        msg = confirm_rollback_message("1.2.3")
        self.assertIn("WARNING: Rolling back version 1.2.3", msg)
        self.assertIn("Deprecate NPM package version (if enabled)", msg)
        self.assertIn("Mark GitHub release as draft (if enabled)", msg)

        msg = confirm_rollback_message("1.2.3", ["docker_publish"])
        self.assertIn("Tag Docker images as deprecated", msg)
        self.assertNotIn("NPM", msg)

        self.assertIn("Nothing", confirm_rollback_message("1.2.3", []))


if __name__ == "__main__":
    unittest.main()
