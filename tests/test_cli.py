"""End-to-end tests for the ``rollback`` command."""

import os
from pathlib import Path

import pytest
from click.testing import CliRunner
from git import Repo

from rollout_rollback.cli.main import main


def commit_file(repo, project_path, rel_path, content, message):
    path = project_path / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([rel_path])
    return repo.index.commit(message)


@pytest.fixture
def project(tmp_path):
    """A git repository on a feature branch, used as working directory."""
    repo = Repo.init(tmp_path)
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test User")
        config.set_value("user", "email", "test@example.com")
        config.set_value("commit", "gpgsign", "false")
    repo.git.symbolic_ref("HEAD", "refs/heads/feature/rollback")

    commits = [
        commit_file(repo, tmp_path, "rollout.yaml", f"replicas: {n}\n", f"release {n}")
        for n in range(1, 4)
    ]
    commit_file(repo, tmp_path, "notes.txt", "hello\n", "add notes")

    old_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path, repo, commits
    finally:
        os.chdir(old_cwd)


def test_requires_exactly_one_argument():
    """Test that a missing or extra argument is a usage error."""
    runner = CliRunner()

    assert runner.invoke(main, []).exit_code != 0
    assert runner.invoke(main, ["a", "b"]).exit_code != 0


def test_missing_path(project):
    """Test that a nonexistent path exits 1 with an error."""
    result = CliRunner().invoke(main, ["does-not-exist.yaml"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "does not exist" in result.output


def test_outside_repository(tmp_path):
    """Test that running outside a git work tree exits 1."""
    (tmp_path / "rollout.yaml").write_text("x: 1\n")
    old_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        result = CliRunner().invoke(main, ["rollout.yaml"])
    finally:
        os.chdir(old_cwd)

    assert result.exit_code == 1
    assert "not a git repository" in result.output


@pytest.mark.parametrize("branch", ["master", "develop", "main"])
def test_protected_branch_refused(project, branch):
    """Test that protected branches stop the run before any commit."""
    _, repo, _ = project
    repo.git.checkout("-B", branch)
    before = repo.head.commit.hexsha

    result = CliRunner().invoke(main, ["rollout.yaml"], input="\n")

    assert result.exit_code == 1
    assert f"'{branch}' is a protected branch" in result.output
    assert "Git history" not in result.output
    assert repo.head.commit.hexsha == before


def test_non_rollout_file_is_ignored(project):
    """Test that other files are reported as not applicable and left alone."""
    _, repo, _ = project
    before = repo.head.commit.hexsha

    result = CliRunner().invoke(main, ["notes.txt"])

    assert result.exit_code == 0
    assert "nothing to do" in result.output
    assert repo.head.commit.hexsha == before


def test_default_choice_rolls_back_previous_commit(project):
    """Test that pressing enter rolls back to the commit before the latest."""
    project_path, repo, commits = project

    result = CliRunner().invoke(main, ["rollout.yaml"], input="\n")

    assert result.exit_code == 0, result.output
    assert "Git history for 'rollout.yaml':" in result.output
    assert " 1. " in result.output
    assert " 3. " in result.output
    assert "[2]" in result.output
    assert (project_path / "rollout.yaml").read_text() == "replicas: 2\n"
    short = repo.git.rev_parse("--short", commits[1].hexsha)
    assert repo.head.commit.message.strip() == f"Rolled back 'rollout.yaml' to commit {short}"
    assert f"Successfully rolled back 'rollout.yaml' to commit {short}." in result.output


def test_choosing_latest_is_a_no_op(project):
    """Test that selecting 1 reports a no-op and creates no commit."""
    project_path, repo, _ = project
    before = repo.head.commit.hexsha

    result = CliRunner().invoke(main, ["rollout.yaml"], input="1\n")

    assert result.exit_code == 0
    assert "No rollback has been done for 'rollout.yaml'" in result.output
    assert repo.head.commit.hexsha == before
    assert (project_path / "rollout.yaml").read_text() == "replicas: 3\n"


def test_invalid_choices_reprompt(project):
    """Test that bad input re-prompts without exiting or changing anything."""
    project_path, repo, _ = project
    before = repo.head.commit.hexsha

    result = CliRunner().invoke(main, ["rollout.yaml"], input="abc\n7\n0\n1\n")

    assert result.exit_code == 0
    assert result.output.count("Invalid number. Please try again.") == 3
    assert repo.head.commit.hexsha == before


def test_rollback_to_oldest(project):
    """Test that an explicit index rolls back to that entry's revision."""
    project_path, repo, commits = project

    result = CliRunner().invoke(main, ["rollout.yaml"], input="3\n")

    assert result.exit_code == 0, result.output
    assert (project_path / "rollout.yaml").read_text() == "replicas: 1\n"
    assert commits[0].hexsha.startswith(
        repo.head.commit.message.strip().rsplit(" ", 1)[-1]
    )


def test_commit_failure_reports_modified_tree(project):
    """Test that a rejected commit exits 1 and warns about the dirty tree."""
    project_path, repo, _ = project
    hook = project_path / ".git" / "hooks" / "pre-commit"
    hook.parent.mkdir(exist_ok=True)
    hook.write_text("#!/bin/sh\nexit 1\n")
    hook.chmod(0o755)

    result = CliRunner().invoke(main, ["rollout.yaml"], input="\n")

    assert result.exit_code == 1
    assert "failed to create commit" in result.output
    assert "git status" in result.output
    assert (project_path / "rollout.yaml").read_text() == "replicas: 2\n"


def test_empty_directory_reports_zero(project):
    """Test that a directory without rollout files only reports the count."""
    project_path, _, _ = project
    (project_path / "empty").mkdir()

    result = CliRunner().invoke(main, ["empty"])

    assert result.exit_code == 0
    assert "Found 0 rollout.yaml files:" in result.output
    assert "Would you like to continue" not in result.output


def test_directory_abort(project):
    """Test that answering anything but yes aborts with exit 0."""
    project_path, repo, _ = project
    before = repo.head.commit.hexsha

    result = CliRunner().invoke(main, ["."], input="no\n")

    assert result.exit_code == 0
    assert "Found 1 rollout.yaml files:" in result.output
    assert "Operation aborted by the user." in result.output
    assert repo.head.commit.hexsha == before


def test_directory_rolls_back_each_file(project):
    """Test that yes walks every file with its own revision prompt."""
    project_path, repo, _ = project
    for n in range(1, 3):
        commit_file(repo, project_path, "services/api/Rollout.YAML", f"api: {n}\n", f"api {n}")

    result = CliRunner().invoke(main, ["."], input="yes\n1\n\n")

    assert result.exit_code == 0, result.output
    assert "Found 2 rollout.yaml files:" in result.output
    assert "Proceeding with rollback for all rollout.yaml files..." in result.output
    assert result.output.count("Enter the number of the commit to rollback to") == 2
    assert "No rollback has been done" in result.output
    assert "Successfully rolled back" in result.output
    assert repo.head.commit.message.startswith("Rolled back")


def test_protected_branches_from_config(project):
    """Test that a config file can add protected branches."""
    project_path, repo, _ = project
    (project_path / ".rollout-rollback.json").write_text('{"protected_branches": ["feature/rollback"]}')

    result = CliRunner().invoke(main, ["rollout.yaml"], input="\n")

    assert result.exit_code == 1
    assert "'feature/rollback' is a protected branch" in result.output


def test_invalid_config(project):
    """Test that a broken config file is a fatal error."""
    project_path, _, _ = project
    (project_path / ".rollout-rollback.json").write_text("{not json")

    result = CliRunner().invoke(main, ["rollout.yaml"])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_path_is_resolved_relative_to_cwd(project):
    """Test that a nested rollout file path works from the repository root."""
    project_path, repo, _ = project
    for n in range(1, 3):
        commit_file(repo, project_path, "deploy/prod/rollout.yaml", f"prod: {n}\n", f"prod {n}")

    result = CliRunner().invoke(main, [str(Path("deploy/prod/rollout.yaml"))], input="2\n")

    assert result.exit_code == 0, result.output
    assert (project_path / "deploy/prod/rollout.yaml").read_text() == "prod: 1\n"


def test_prefixed_rollout_file_is_rolled_back(project):
    """Test that prod-rollout.yaml goes through the single-file flow."""
    project_path, repo, _ = project
    commits = [
        commit_file(repo, project_path, "prod-rollout.yaml", f"prod: {n}\n", f"prod {n}")
        for n in range(1, 3)
    ]

    result = CliRunner().invoke(main, ["prod-rollout.yaml"], input="\n")

    assert result.exit_code == 0, result.output
    assert "nothing to do" not in result.output
    assert (project_path / "prod-rollout.yaml").read_text() == "prod: 1\n"
    short = repo.git.rev_parse("--short", commits[0].hexsha)
    assert repo.head.commit.message.strip() == f"Rolled back 'prod-rollout.yaml' to commit {short}"


def test_missing_path_reported_before_broken_config(project):
    """Test that a missing path wins over an unreadable config file."""
    project_path, _, _ = project
    (project_path / ".rollout-rollback.json").write_text("{not json")

    result = CliRunner().invoke(main, ["missing/rollout.yaml"])

    assert result.exit_code == 1
    assert "does not exist" in result.output
    assert "Invalid configuration" not in result.output
    assert "Failed to read" not in result.output


def test_directory_run_prints_summary(project):
    """Test that a directory run lists the files it rolled back."""
    project_path, repo, _ = project
    for n in range(1, 3):
        commit_file(repo, project_path, "svc/rollout.yaml", f"svc: {n}\n", f"svc {n}")

    result = CliRunner().invoke(main, ["svc"], input="yes\n\n")

    assert result.exit_code == 0, result.output
    assert "Rolled back 1 of 1 files." in result.output
    assert "svc/rollout.yaml" in result.output
