from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from blogimport.domain.diagnostics import DUPLICATE_ENTRY_MESSAGE
from blogimport.domain.importer.normalize import is_valid_uuid
from blogimport.domain.importer.stages import (
    PostsStage,
    PostsTagsStage,
    RolesStage,
    SettingsStage,
    SubscribersStage,
    TagsStage,
    UsersStage,
)
from blogimport.domain.importer.stages.posts import REPAIRED_UUID_MESSAGE
from blogimport.domain.model import Post, PostStatus, SubscriberStatus, TableName, Tag
from tests.helpers.fakes import OWNER_EMAIL, STARTED_AT, make_stage_context
from tests.helpers.snapshots import (
    make_snapshot,
    raw_post,
    raw_post_tag,
    raw_setting,
    raw_subscriber,
    raw_tag,
    raw_user,
)

if TYPE_CHECKING:
    from blogimport.domain.importer import StageContext
    from blogimport.domain.model import Snapshot

EXPORTED_AT = datetime(2013, 12, 29, 11, 58, 30, tzinfo=UTC)
EXPORTED_OWNER = raw_user(1, name="Joe", email=OWNER_EMAIL)


def _run_content(snapshot: Snapshot, context: StageContext) -> None:
    for stage in (RolesStage(), UsersStage(), TagsStage(), PostsStage(), PostsTagsStage()):
        stage.run(snapshot, context=context)


def _owner_id(context: StageContext) -> str:
    owner = context.repositories.users.find_owner()
    assert owner is not None
    return owner.id


def test_tags_stage_records_authors_and_parents() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        tags=[
            raw_tag(1, name="Parent"),
            raw_tag(2, name="Child", parent_id=1, created_by=1),
            raw_tag(3, name="Orphan", created_by=42, parent_id=99),
        ],
    )

    _run_content(snapshot, context)

    tags = {tag.slug: tag for tag in context.repositories.tags.list_all()}
    assert set(tags) == {"parent", "child", "orphan"}
    assert tags["child"].parent_id == tags["parent"].id
    assert tags["child"].created_by == _owner_id(context)
    assert tags["child"].updated_by == _owner_id(context)
    assert tags["child"].created_at == EXPORTED_AT
    assert tags["orphan"].created_by is None
    assert tags["orphan"].parent_id is None
    messages = [problem.message for problem in context.diagnostics.problems]
    assert messages == [
        "Entry was imported, but we were not able to update parent tag reference.",
        "Entry was imported, but we were not able to update user reference field: created_by",
    ]
    assert all(problem.help == "Tag" for problem in context.diagnostics.problems)


def test_tags_stage_links_to_existing_tag_on_slug_collision() -> None:
    context = make_stage_context()
    existing = Tag(name="Getting Started", slug="getting-started")
    context.repositories.tags.add(existing)
    snapshot = make_snapshot(
        tags=[raw_tag(5, name="Getting started")],
        posts=[raw_post(1, title="Welcome", author_id=None, created_by=None, published_by=None)],
        posts_tags=[raw_post_tag(1, 5)],
    )

    _run_content(snapshot, context)

    assert context.repositories.tags.list_all() == (existing,)
    assert context.resolver.resolve(TableName.TAGS, 5) == existing.id
    links = context.repositories.posts_tags.list_all()
    assert [link.tag_id for link in links] == [existing.id]
    problem = context.diagnostics.problems[0]
    assert (problem.message, problem.help) == (DUPLICATE_ENTRY_MESSAGE, "Tag")


def test_posts_stage_keeps_raw_author_and_nulls_other_unknown_users() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        posts=[raw_post(1, title="Unknown Author", author_id=2, published_by=2, created_by=1)],
    )

    _run_content(snapshot, context)

    (post,) = context.repositories.posts.list_all()
    assert post.author_id == "2"
    assert post.published_by is None
    assert post.created_by == _owner_id(context)
    assert post.updated_by == _owner_id(context)
    assert post.created_at == EXPORTED_AT
    assert post.updated_at == EXPORTED_AT
    assert post.published_at == EXPORTED_AT
    assert post.status is PostStatus.PUBLISHED
    messages = [problem.message for problem in context.diagnostics.problems]
    assert messages == [
        "Entry was imported, but we were not able to update user reference field: author_id",
        "Entry was imported, but we were not able to update user reference field: published_by",
    ]
    assert {problem.help for problem in context.diagnostics.problems} == {"Post"}


def test_posts_stage_repairs_invalid_uuids() -> None:
    context = make_stage_context()
    missing = raw_post(3, title="Missing UUID")
    del missing["uuid"]
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        posts=[
            raw_post(1, title="Old Ghost UUID", uuid="2cbd5ad9-42f1-4d8f-a8ab"),
            raw_post(2, title="Empty UUID", uuid=""),
            missing,
            raw_post(4, title="Malformed UUID", uuid="not a uuid at all"),
        ]
    )

    _run_content(snapshot, context)

    uuids = [post.uuid for post in context.repositories.posts.list_all()]
    assert len(uuids) == 4
    assert all(is_valid_uuid(uuid) for uuid in uuids)
    assert len(set(uuids)) == 4
    messages = [problem.message for problem in context.diagnostics.problems]
    assert messages == [REPAIRED_UUID_MESSAGE] * 4


def test_posts_stage_skips_posts_colliding_with_destination() -> None:
    context = make_stage_context()
    context.repositories.posts.add(Post(uuid="u", title="Welcome", slug="welcome"))
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        tags=[raw_tag(1, name="News")],
        posts=[raw_post(1, title="Welcome"), raw_post(2, title="Fresh")],
        posts_tags=[raw_post_tag(1, 1), raw_post_tag(2, 1)],
    )

    _run_content(snapshot, context)

    assert len(context.repositories.posts.list_all()) == 2
    assert context.resolver.was_skipped(TableName.POSTS, 1)
    links = context.repositories.posts_tags.list_all()
    assert len(links) == 1
    assert [problem.help for problem in context.diagnostics.problems] == ["Post"]


def test_posts_tags_stage_orders_links() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        tags=[raw_tag(1, name="One"), raw_tag(2, name="Two"), raw_tag(3, name="Three")],
        posts=[raw_post(1, title="Explicit"), raw_post(2, title="Implicit")],
        posts_tags=[
            raw_post_tag(1, 1, sort_order=2),
            raw_post_tag(1, 2, sort_order=0),
            raw_post_tag(1, 3, sort_order=1),
            raw_post_tag(2, 2),
            raw_post_tag(2, 1),
        ],
    )

    _run_content(snapshot, context)

    def tag_names(post_local_id: int) -> list[str]:
        post_id = context.resolver.resolve(TableName.POSTS, post_local_id)
        assert post_id is not None
        names: list[str] = []
        for link in context.repositories.posts_tags.for_post(post_id):
            tag = context.repositories.tags.get(link.tag_id)
            assert tag is not None
            names.append(tag.name)
        return names

    assert tag_names(1) == ["Two", "Three", "One"]
    assert tag_names(2) == ["Two", "One"]


def test_posts_tags_stage_reports_unresolved_links_and_collapses_repeats() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        tags=[raw_tag(1, name="One")],
        posts=[raw_post(1, title="Post")],
        posts_tags=[raw_post_tag(1, 1), raw_post_tag(1, 1), raw_post_tag(1, 77), raw_post_tag(9, 1)],
    )

    _run_content(snapshot, context)

    assert len(context.repositories.posts_tags.list_all()) == 1
    messages = [problem.message for problem in context.diagnostics.problems]
    assert messages == [
        "Entry was not imported: could not resolve tag_id.",
        "Entry was not imported: could not resolve post_id.",
    ]
    assert {problem.help for problem in context.diagnostics.problems} == {"PostTag"}


def test_settings_stage_updates_only_known_unprotected_keys() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        settings=[
            raw_setting("title", "Imported Blog"),
            raw_setting("active_theme", "imported-theme"),
            raw_setting("fancy_key", "ignored"),
            raw_setting("navigation", [{"label": "Home", "url": "/"}]),
        ]
    )

    result = SettingsStage().run(snapshot, context=context)

    settings = {setting.key: setting for setting in context.repositories.settings.list_all()}
    assert "fancy_key" not in settings
    assert settings["title"].value == "Imported Blog"
    assert settings["title"].updated_by == _owner_id(context)
    assert settings["active_theme"].value == "casper"
    assert settings["navigation"].value == '[{"label": "Home", "url": "/"}]'
    assert [setting.key for setting in result.persisted] == ["title", "navigation"]
    assert result.problems == ()


def test_subscribers_stage_links_posts_and_skips_repeated_emails() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        posts=[raw_post(1, title="Launch")],
        subscribers=[
            raw_subscriber(1, email="reader@example.com", post_id=1),
            raw_subscriber(2, email="READER@example.com"),
            raw_subscriber(3, email="lost@example.com", post_id=7),
        ],
    )

    _run_content(snapshot, context)
    SubscribersStage().run(snapshot, context=context)

    subscribers = {sub.email: sub for sub in context.repositories.subscribers.list_all()}
    assert set(subscribers) == {"reader@example.com", "lost@example.com"}
    assert subscribers["reader@example.com"].post_id == context.resolver.resolve(TableName.POSTS, 1)
    assert subscribers["reader@example.com"].status is SubscriberStatus.SUBSCRIBED
    assert subscribers["lost@example.com"].post_id is None
    assert [problem.help for problem in context.diagnostics.problems] == ["Subscriber", "Subscriber"]
    assert context.diagnostics.problems[0].message == DUPLICATE_ENTRY_MESSAGE


def test_stages_accept_numbers_in_text_columns() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        tags=[{**raw_tag(1, name="2017"), "name": 2017, "slug": None}],
        posts=[{**raw_post(1, title="404", slug=None), "title": 404, "slug": None}],
        posts_tags=[raw_post_tag(1, 1)],
    )

    _run_content(snapshot, context)

    (tag,) = context.repositories.tags.list_all()
    assert (tag.name, tag.slug) == ("2017", "2017")
    (post,) = context.repositories.posts.list_all()
    assert (post.title, post.slug) == ("404", "404")
    assert len(context.repositories.posts_tags.list_all()) == 1


def test_stages_fall_back_when_timestamps_are_out_of_range() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[EXPORTED_OWNER],
        tags=[raw_tag(1, name="News", created_at=float("nan"), updated_at="²")],
        posts=[
            raw_post(
                1,
                title="Hello",
                created_at=99999999999999999999,
                updated_at="--5",
                published_at=float("inf"),
            )
        ],
    )

    _run_content(snapshot, context)

    (tag,) = context.repositories.tags.list_all()
    assert (tag.created_at, tag.updated_at) == (STARTED_AT, STARTED_AT)
    (post,) = context.repositories.posts.list_all()
    assert (post.created_at, post.updated_at) == (STARTED_AT, STARTED_AT)
    assert post.published_at is None
