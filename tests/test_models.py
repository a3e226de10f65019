"""
Photoshare Backend - Model Metadata Tests
==========================================

Table definitions as declared on the ORM models: columns, server defaults
and the feed/comment indexes the queries rely on.
"""

import pytest

from photoshare.models.comment import Comment
from photoshare.models.like import Like
from photoshare.models.photo import Photo
from photoshare.models.user import User


class TestTableDefinitions:

    def test_comment_columns(self):
        columns = Comment.__table__.c

        assert {"id", "photo_id", "author_id", "text", "created_at"} <= set(columns.keys())
        assert columns.text.nullable is False

    @pytest.mark.parametrize("model", [User, Photo, Like, Comment])
    def test_created_at_has_server_default(self, model):
        default = model.__table__.c.created_at.server_default

        assert default is not None
        assert "CURRENT_TIMESTAMP" in str(default.arg)

    def test_comment_index_covers_photo_then_time(self):
        index = next(i for i in Comment.__table__.indexes if i.name == "idx_comments_photo_created")

        assert [c.name for c in index.columns] == ["photo_id", "created_at"]

    def test_feed_index_exists(self):
        assert "idx_photos_created_at" in {i.name for i in Photo.__table__.indexes}
