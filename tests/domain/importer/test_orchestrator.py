from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from blogimport.domain.errors import ImportAbortedError, ImportRejected, PipelineOrderError
from blogimport.domain.importer import ImportOrchestrator, ImportPhase, StageResult, run_import
from blogimport.domain.importer.stages import PostsStage, RolesStage, UsersStage
from blogimport.domain.model import TableName
from tests.helpers.fakes import (
    OWNER_EMAIL,
    STARTED_AT,
    FakeUnitOfWork,
    make_destination_repositories,
    make_owner,
)
from tests.helpers.snapshots import (
    OWNER_ROLE_ID,
    make_snapshot,
    raw_post,
    raw_role_user,
    raw_tag,
    raw_user,
)

if TYPE_CHECKING:
    from blogimport.domain.importer import StageContext
    from blogimport.domain.model import Snapshot


class ExplodingStage:
    table: TableName = TableName.SUBSCRIBERS
    requires: tuple[TableName, ...] = ()

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        raise RuntimeError("boom")


def _orchestrator(uow: FakeUnitOfWork, **kwargs: object) -> ImportOrchestrator:
    return ImportOrchestrator(
        unit_of_work_factory=lambda: uow,
        clock=lambda: STARTED_AT,
        **kwargs,  # type: ignore[arg-type]
    )


def test_run_commits_and_reports_counts() -> None:
    uow = FakeUnitOfWork()
    orchestrator = _orchestrator(uow)
    snapshot = make_snapshot(
        users=[raw_user(1, name="Joe", email=OWNER_EMAIL)],
        tags=[raw_tag(1, name="News")],
        posts=[raw_post(1, title="Hello"), raw_post(2, title="World")],
    )

    result = orchestrator.run(snapshot)

    assert orchestrator.phase is ImportPhase.COMMITTED
    assert uow.committed
    assert not uow.rolled_back
    assert result.count(TableName.POSTS) == 2
    assert result.count(TableName.TAGS) == 1
    assert result.count(TableName.SUBSCRIBERS) == 0
    assert result.problems == ()
    assert result.original_data is snapshot


def test_validation_errors_reject_before_opening_unit_of_work() -> None:
    uow = FakeUnitOfWork()
    orchestrator = _orchestrator(uow)
    snapshot = make_snapshot(posts=[raw_post(1, title="x" * 2001)])

    with pytest.raises(ImportRejected) as excinfo:
        orchestrator.run(snapshot)

    assert orchestrator.phase is ImportPhase.ROLLED_BACK
    assert uow.entered == 0
    (error,) = excinfo.value.errors
    assert (error.table, error.column) == ("posts", "title")
    assert uow.repositories.posts.list_all() == ()


def test_stage_failure_rolls_back_and_propagates() -> None:
    uow = FakeUnitOfWork()
    orchestrator = _orchestrator(uow, stages=(RolesStage(), ExplodingStage()))

    with pytest.raises(RuntimeError, match="boom"):
        orchestrator.run(make_snapshot())

    assert orchestrator.phase is ImportPhase.ROLLED_BACK
    assert uow.rolled_back
    assert not uow.committed


def test_stage_order_is_checked_on_construction() -> None:
    with pytest.raises(PipelineOrderError, match="posts requires users"):
        _orchestrator(FakeUnitOfWork(), stages=(RolesStage(), PostsStage(), UsersStage()))


def test_destination_without_owner_aborts() -> None:
    uow = FakeUnitOfWork(repositories=make_destination_repositories(with_owner=False))

    with pytest.raises(ImportAbortedError, match="no owner"):
        _orchestrator(uow).run(make_snapshot())

    assert uow.rolled_back


def test_destination_without_owner_aborts_even_with_acting_user() -> None:
    repositories = make_destination_repositories(with_owner=False)
    admin = make_owner()
    admin.email = "admin@example.com"
    repositories.users.add(admin)
    uow = FakeUnitOfWork(repositories=repositories)
    snapshot = make_snapshot(
        users=[raw_user(1, name="Joe", email=OWNER_EMAIL)],
        roles_users=[raw_role_user(OWNER_ROLE_ID, 1)],
    )

    with pytest.raises(ImportAbortedError, match="no owner"):
        _orchestrator(uow).run(snapshot, acting_user_id=admin.id)

    assert uow.rolled_back
    assert not uow.committed
    assert repositories.users.get_by_email(OWNER_EMAIL) is None


def test_unknown_acting_user_aborts() -> None:
    uow = FakeUnitOfWork()

    with pytest.raises(ImportAbortedError, match="does not exist"):
        _orchestrator(uow).run(make_snapshot(), acting_user_id="missing")


def test_explicit_acting_user_is_recorded_on_rows() -> None:
    repositories = make_destination_repositories()
    owner = repositories.users.find_owner()
    assert owner is not None
    uow = FakeUnitOfWork(repositories=repositories)

    post_row = raw_post(1, title="Hello", author_id=None, created_by=None, published_by=None)

    result = _orchestrator(uow).run(
        make_snapshot(posts=[post_row]),
        acting_user_id=owner.id,
    )

    (post,) = result.data[TableName.POSTS]
    assert post.updated_by == owner.id  # type: ignore[union-attr]
    assert post.author_id == owner.id  # type: ignore[union-attr]


def test_problems_list_sanitizer_findings_first() -> None:
    uow = FakeUnitOfWork()
    snapshot = make_snapshot(
        users=[raw_user(1, name="Joe", email=OWNER_EMAIL)],
        tags=[raw_tag(1, name="News"), raw_tag(2, name="news")],
        posts=[raw_post(1, title="Hello", published_by=9)],
    )

    result = run_import(snapshot, unit_of_work_factory=lambda: uow)

    assert [problem.help for problem in result.problems] == ["Tag", "Post"]
    assert result.count(TableName.TAGS) == 1
    assert len(result.original_data.table(TableName.TAGS)) == 1
