from __future__ import annotations

from typing import TYPE_CHECKING

from blogimport.domain.importer.stages import RolesStage, RolesUsersStage, UsersStage
from blogimport.domain.model import RoleName, RoleUser, TableName, User, UserStatus
from tests.helpers.fakes import (
    OWNER_EMAIL,
    OWNER_PASSWORD,
    STARTED_AT,
    make_destination_repositories,
    make_stage_context,
)
from tests.helpers.snapshots import (
    ADMIN_ROLE_ID,
    OWNER_ROLE_ID,
    make_snapshot,
    raw_role_user,
    raw_user,
)

if TYPE_CHECKING:
    from blogimport.domain.importer import StageContext
    from blogimport.domain.model import Snapshot


def _import_users(snapshot: Snapshot, context: StageContext) -> None:
    for stage in (RolesStage(), UsersStage(), RolesUsersStage()):
        stage.run(snapshot, context=context)


def _role_names(context: StageContext, user: User) -> list[str]:
    names: list[str] = []
    for link in context.repositories.roles_users.roles_for(user.id):
        role = context.repositories.roles.get(link.role_id)
        assert role is not None
        names.append(role.name)
    return names


def _user_named(context: StageContext, name: str) -> User:
    for user in context.repositories.users.list_all():
        if user.name == name:
            return user
    raise AssertionError(f"No user named {name}")


def test_users_stage_merges_exported_owner_and_locks_new_users() -> None:
    context = make_stage_context()
    owner = context.repositories.users.find_owner()
    assert owner is not None
    snapshot = make_snapshot(
        users=[
            raw_user(1, name="Joe Exported", email="joe@exported.com", bio="Exported bio"),
            raw_user(2, name="Josephine Bloggs", email="josephine@example.com"),
            raw_user(3, name="Smith Wellingsworth", email="smith@example.com"),
        ],
        roles_users=[raw_role_user(OWNER_ROLE_ID, 1), raw_role_user(ADMIN_ROLE_ID, 2)],
    )

    _import_users(snapshot, context)

    users = context.repositories.users.list_all()
    assert len(users) == 3
    assert owner.name == "Joe Exported"
    assert owner.slug == "joe-exported"
    assert owner.email == OWNER_EMAIL
    assert owner.password == OWNER_PASSWORD
    assert owner.status is UserStatus.ACTIVE
    assert owner.bio is None

    josephine = _user_named(context, "Josephine Bloggs")
    smith = _user_named(context, "Smith Wellingsworth")
    for user in (josephine, smith):
        assert user.status is UserStatus.LOCKED
        assert user.created_by == owner.id
        assert user.updated_by == owner.id
        assert user.created_at == STARTED_AT
        assert user.updated_at == STARTED_AT
        assert user.password.startswith("!")

    assert _role_names(context, owner) == [RoleName.OWNER]
    assert _role_names(context, josephine) == [RoleName.ADMINISTRATOR]
    assert _role_names(context, smith) == [RoleName.AUTHOR]
    assert len(context.repositories.roles_users.list_all()) == 3

    assert context.resolver.resolve(TableName.USERS, 1) == owner.id
    assert context.resolver.resolve(TableName.USERS, 2) == josephine.id
    assert context.diagnostics.problems == []


def test_users_stage_demotes_additional_owners_and_keeps_existing_roles() -> None:
    repositories = make_destination_repositories()
    admin_role = repositories.roles.get_by_name(RoleName.ADMINISTRATOR)
    assert admin_role is not None
    existing = User(name="Existing Admin", slug="existing", email="existing@example.com", password="x")
    repositories.users.add(existing)
    repositories.roles_users.add(RoleUser(role_id=admin_role.id, user_id=existing.id))
    context = make_stage_context(repositories)
    snapshot = make_snapshot(
        users=[
            raw_user(1, name="First Owner", email="first@example.com"),
            raw_user(2, name="Second Owner", email="second@example.com"),
            raw_user(3, name="Existing Renamed", email="EXISTING@example.com"),
        ],
        roles_users=[
            raw_role_user(OWNER_ROLE_ID, 1),
            raw_role_user(OWNER_ROLE_ID, 2),
            raw_role_user(OWNER_ROLE_ID, 3),
        ],
    )

    _import_users(snapshot, context)

    assert len(repositories.users.list_all()) == 3
    second = _user_named(context, "Second Owner")
    assert _role_names(context, second) == [RoleName.ADMINISTRATOR]
    assert existing.name == "Existing Renamed"
    assert _role_names(context, existing) == [RoleName.ADMINISTRATOR]
    assert len(repositories.roles_users.list_all()) == 3


def test_users_stage_uses_first_role_entry_per_user() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[raw_user(7, name="Editor Person", email="editor@example.com")],
        roles_users=[raw_role_user(2, 7), raw_role_user(ADMIN_ROLE_ID, 7)],
    )

    _import_users(snapshot, context)

    assert _role_names(context, _user_named(context, "Editor Person")) == [RoleName.EDITOR]


def test_users_stage_suffixes_colliding_slugs() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        users=[
            raw_user(2, name="Joe Bloggs", email="other-joe@example.com", slug="joe-bloggs"),
            raw_user(3, name="Joe Bloggs", email="third-joe@example.com", slug="joe-bloggs"),
        ]
    )

    _import_users(snapshot, context)

    slugs = sorted(user.slug for user in context.repositories.users.list_all())
    assert slugs == ["joe-bloggs", "joe-bloggs-2", "joe-bloggs-3"]


def test_roles_stage_falls_back_for_unknown_roles() -> None:
    context = make_stage_context()
    snapshot = make_snapshot(
        roles=[{"id": 9, "name": "Superhero"}],
        users=[raw_user(1, name="Hero", email="hero@example.com")],
        roles_users=[raw_role_user(9, 1)],
    )

    _import_users(snapshot, context)

    assert [problem.help for problem in context.diagnostics.problems] == ["Role"]
    assert _role_names(context, _user_named(context, "Hero")) == [RoleName.AUTHOR]
