"""Entity importers, one per destination table."""

from __future__ import annotations

from .base import ImportStage, StageResult
from .posts import PostsStage
from .posts_tags import PostsTagsStage
from .roles import RolesStage
from .roles_users import RolesUsersStage
from .settings import SettingsStage
from .subscribers import SubscribersStage
from .tags import TagsStage
from .users import UsersStage

__all__ = [
    "ImportStage",
    "PostsStage",
    "PostsTagsStage",
    "RolesStage",
    "RolesUsersStage",
    "SettingsStage",
    "StageResult",
    "SubscribersStage",
    "TagsStage",
    "UsersStage",
    "default_stages",
]


def default_stages() -> tuple[ImportStage, ...]:
    """Stages in dependency order: users exist before anything records ``created_by``."""

    return (
        RolesStage(),
        SettingsStage(),
        UsersStage(),
        TagsStage(),
        PostsStage(),
        SubscribersStage(),
        PostsTagsStage(),
        RolesUsersStage(),
    )
