"""
Photoshare Backend - Photo Service Tests
=========================================

Photo creation, feed pagination and ordering, single lookup, and the like
membership rules (idempotent like/unlike, counts always exact).
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from photoshare.exceptions import DatabaseError, NotFoundError, UnauthorizedError
from photoshare.models.like import Like
from photoshare.models.photo import Photo
from photoshare.services.photo_service import (
    MAX_OFFSET,
    PhotoService,
    normalize_pagination,
    parse_id,
)


@pytest.fixture
def service():
    return PhotoService()


@pytest.fixture
def make_photos(db_session):
    """Insert `count` photos for `owner`, one minute apart; index 0 is the oldest."""

    async def _make(owner, count):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        photos = [
            Photo(
                owner_id=owner.id,
                url=f"/uploads/image-{i}.jpg",
                caption=f"photo {i}",
                created_at=base + timedelta(minutes=i),
            )
            for i in range(count)
        ]
        db_session.add_all(photos)
        await db_session.flush()
        return photos

    return _make


class TestHelpers:

    def test_parse_id(self):
        value = uuid.uuid4()
        assert parse_id(value) == value
        assert parse_id(str(value)) == value
        assert parse_id("not-a-uuid") is None
        assert parse_id("") is None
        assert parse_id(None) is None

    @pytest.mark.parametrize(
        "page, limit, expected",
        [
            (None, None, (1, 10)),
            ("2", "5", (2, 5)),
            (3, 20, (3, 20)),
            ("abc", "xyz", (1, 10)),
            ("0", "-4", (1, 10)),
            ("1", "100000", (1, 100)),
            ("100000000000000000000", "10", (214748365, 10)),
            ("100000000000000000000", "100", (21474837, 100)),
        ],
    )
    def test_normalize_pagination(self, page, limit, expected):
        assert normalize_pagination(page, limit) == expected

    @pytest.mark.parametrize("limit", [1, 7, 10, 100])
    def test_huge_page_offset_stays_bounded(self, limit):
        page, limit = normalize_pagination(10**30, limit)
        assert 0 <= (page - 1) * limit <= MAX_OFFSET


class TestUploadAndGet:

    @pytest.mark.asyncio
    async def test_upload_photo(self, service, db_session, make_user):
        alice = await make_user("alice")

        photo = await service.upload_photo(db_session, alice.id, "/uploads/image-1.jpg", "sunset")

        assert photo.owner_id == alice.id
        assert photo.owner.username == "alice"
        assert photo.caption == "sunset"
        assert photo.likes_count == 0
        assert photo.created_at is not None

    @pytest.mark.asyncio
    async def test_empty_caption_stored_as_none(self, service, db_session, make_user):
        alice = await make_user("alice")

        photo = await service.upload_photo(db_session, alice.id, "/uploads/image-1.jpg", "")

        assert photo.caption is None

    @pytest.mark.asyncio
    async def test_upload_for_deleted_account_rejected(self, service, db_session):
        with pytest.raises(UnauthorizedError):
            await service.upload_photo(db_session, uuid.uuid4(), "/uploads/x.jpg")

    @pytest.mark.asyncio
    async def test_get_photo(self, service, db_session, make_user):
        alice = await make_user("alice")
        created = await service.upload_photo(db_session, alice.id, "/uploads/image-1.jpg")

        fetched = await service.get_photo(db_session, str(created.id))

        assert fetched.id == created.id
        assert fetched.owner.email == "alice@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("photo_id", [str(uuid.uuid4()), "definitely-not-a-uuid"])
    async def test_get_missing_photo(self, service, db_session, photo_id):
        with pytest.raises(NotFoundError):
            await service.get_photo(db_session, photo_id)


class TestListPhotos:

    @pytest.mark.asyncio
    async def test_newest_first_with_total(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        photos = await make_photos(alice, 3)

        page = await service.list_photos(db_session)

        assert page.total == 3
        assert page.page == 1
        assert page.limit == 10
        assert [p.id for p in page.items] == [photos[2].id, photos[1].id, photos[0].id]

    @pytest.mark.asyncio
    async def test_second_page_holds_ranks_six_to_ten(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        photos = await make_photos(alice, 12)
        newest_first = list(reversed(photos))

        page = await service.list_photos(db_session, page=2, limit=5)

        assert page.total == 12
        assert [p.id for p in page.items] == [p.id for p in newest_first[5:10]]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        await make_photos(alice, 3)

        page = await service.list_photos(db_session, page=5, limit=10)

        assert page.items == []
        assert page.total == 3

    @pytest.mark.asyncio
    async def test_items_carry_like_counts(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        bob = await make_user("bob")
        older, newer = await make_photos(alice, 2)
        await service.like_photo(db_session, older.id, alice.id)
        await service.like_photo(db_session, older.id, bob.id)

        page = await service.list_photos(db_session)
        counts = {p.id: p.likes_count for p in page.items}

        assert counts == {older.id: 2, newer.id: 0}

    @pytest.mark.asyncio
    async def test_database_failure_wrapped(self, service, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await service.list_photos(mock_db_session)


class TestLikes:

    @pytest.mark.asyncio
    async def test_like_is_idempotent(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        (photo,) = await make_photos(alice, 1)

        assert await service.like_photo(db_session, photo.id, alice.id) == 1
        assert await service.like_photo(db_session, photo.id, alice.id) == 1

        rows = await db_session.execute(select(func.count()).select_from(Like))
        assert rows.scalar() == 1

    @pytest.mark.asyncio
    async def test_likes_from_different_users_add_up(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        bob = await make_user("bob")
        (photo,) = await make_photos(alice, 1)

        await service.like_photo(db_session, photo.id, alice.id)

        assert await service.like_photo(db_session, str(photo.id), bob.id) == 2

    @pytest.mark.asyncio
    async def test_unlike_removes_only_own_like(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        bob = await make_user("bob")
        (photo,) = await make_photos(alice, 1)
        await service.like_photo(db_session, photo.id, alice.id)
        await service.like_photo(db_session, photo.id, bob.id)

        assert await service.unlike_photo(db_session, photo.id, bob.id) == 1
        assert await service.unlike_photo(db_session, photo.id, bob.id) == 1

    @pytest.mark.asyncio
    async def test_unlike_without_like_is_not_an_error(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        (photo,) = await make_photos(alice, 1)

        assert await service.unlike_photo(db_session, photo.id, alice.id) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("photo_id", [str(uuid.uuid4()), "bogus"])
    async def test_unlike_missing_photo_returns_zero(self, service, db_session, photo_id):
        assert await service.unlike_photo(db_session, photo_id, uuid.uuid4()) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("photo_id", [str(uuid.uuid4()), "bogus"])
    async def test_like_missing_photo(self, service, db_session, photo_id):
        with pytest.raises(NotFoundError):
            await service.like_photo(db_session, photo_id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_like_count_matches_get_photo(self, service, db_session, make_user, make_photos):
        alice = await make_user("alice")
        (photo,) = await make_photos(alice, 1)

        count = await service.like_photo(db_session, photo.id, alice.id)

        assert (await service.get_photo(db_session, photo.id)).likes_count == count
