from __future__ import annotations

from pathlib import Path

import pytest
from gitx.errors import RemoteError
from gitx.git_sync import GitSync
from gitx.remote import (
    BindingChange,
    canonical_url,
    ensure_remote_binding,
    ensure_remote_repository,
    repo_name_for,
)

CANONICAL = "https://github.com/alice/project.git"


def test_canonical_url_and_repo_name(tmp_path: Path) -> None:
    assert canonical_url("github.com", "alice", "demo") == (
        "https://github.com/alice/demo.git"
    )
    assert repo_name_for(tmp_path / "demo") == "demo"


def test_existing_repository_is_not_recreated(forge) -> None:
    forge.add_repository("project", private=True)

    with forge.factory("ghp_testtoken") as client:
        record = ensure_remote_repository(client, "alice", "project", private=False)

    assert not record.created
    assert record.private is True
    assert forge.mutations == []


def test_missing_repository_is_created(forge) -> None:
    with forge.factory("ghp_testtoken") as client:
        record = ensure_remote_repository(client, "alice", "project", private=True)

    assert record.created
    assert forge.repos == {"project": True}
    assert forge.mutations == [("POST", "/user/repos")]


def test_creation_race_counts_as_success(forge) -> None:
    forge.create_status = 422

    with forge.factory("ghp_testtoken") as client:
        record = ensure_remote_repository(client, "alice", "project", private=False)

    assert record.full_name == "alice/project"
    assert not record.created


def test_unexpected_lookup_status_is_fatal(forge) -> None:
    forge.lookup_status = 500

    with forge.factory("ghp_testtoken") as client:
        with pytest.raises(RemoteError) as excinfo:
            ensure_remote_repository(client, "alice", "project", private=False)
    assert excinfo.value.status_code == 500
    assert forge.mutations == []


def test_failed_creation_is_fatal(forge) -> None:
    forge.create_status = 403

    with forge.factory("ghp_testtoken") as client:
        with pytest.raises(RemoteError) as excinfo:
            ensure_remote_repository(client, "alice", "project", private=False)
    assert excinfo.value.status_code == 403


@pytest.mark.parametrize(
    ("existing", "expected"),
    [
        (None, BindingChange.ADDED),
        (CANONICAL, BindingChange.UNCHANGED),
        ("https://github.com/old-name/project.git", BindingChange.UPDATED),
        ("git@github.com:alice/project.git", BindingChange.UPDATED),
    ],
)
def test_binding_converges_to_canonical_url(
    project: Path, run_git, existing: str | None, expected: BindingChange
) -> None:
    run_git(project, "init", "-q")
    if existing is not None:
        run_git(project, "remote", "add", "origin", existing)
    git = GitSync(project)

    change = ensure_remote_binding(
        git, "alice", "project", forge_host="github.com", remote_name="origin"
    )

    assert change is expected
    assert git.get_remote_url("origin") == CANONICAL
    assert run_git(project, "remote") == "origin"

    again = ensure_remote_binding(
        git, "alice", "project", forge_host="github.com", remote_name="origin"
    )
    assert again is BindingChange.UNCHANGED
