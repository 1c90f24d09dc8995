import uuid
from datetime import datetime, timedelta, timezone

import pytest

from services.scheduling.controllers.conflicts import can_schedule, find_overlapping, to_naive_utc
from services.scheduling.locks import advisory_key
from services.scheduling.models.sessions import Session
from services.user_management.models.users import Role
from shared.errors import NotFoundError, ValidationError
from helpers import at


async def book(db, teacher, subject, start, end):
    session = Session(start_time=start, end_time=end, teacher_id=teacher.id, subject_id=subject.id)
    db.add(session)
    await db.commit()
    return session


class TestOverlapQuery:
    """Half-open interval intersection per teacher."""

    async def test_partial_overlap_is_found(self, db, teacher, subject):
        existing = await book(db, teacher, subject, at(9), at(10))
        found = await find_overlapping(db, teacher.id, at(9, 30), at(10, 30))
        assert [s.id for s in found] == [existing.id]

    async def test_touching_endpoints_do_not_overlap(self, db, teacher, subject):
        await book(db, teacher, subject, at(9), at(10))
        assert await find_overlapping(db, teacher.id, at(10), at(11)) == []
        assert await find_overlapping(db, teacher.id, at(8), at(9)) == []

    async def test_containing_and_contained_ranges_overlap(self, db, teacher, subject):
        await book(db, teacher, subject, at(9), at(12))
        assert len(await find_overlapping(db, teacher.id, at(10), at(11))) == 1
        assert len(await find_overlapping(db, teacher.id, at(8), at(13))) == 1

    async def test_other_teachers_sessions_are_ignored(self, db, make_user, teacher, subject):
        other = await make_user(Role.TEACHER)
        await book(db, other, subject, at(9), at(10))
        assert await find_overlapping(db, teacher.id, at(9), at(10)) == []

    async def test_excluded_session_is_skipped(self, db, teacher, subject):
        existing = await book(db, teacher, subject, at(9), at(10))
        found = await find_overlapping(db, teacher.id, at(9, 15), at(10, 15), exclude_session_id=existing.id)
        assert found == []

    async def test_start_not_before_end_is_rejected(self, db, teacher):
        with pytest.raises(ValidationError):
            await find_overlapping(db, teacher.id, at(10), at(10))
        with pytest.raises(ValidationError):
            await find_overlapping(db, teacher.id, at(11), at(10))

    async def test_unknown_teacher_is_not_found(self, db):
        with pytest.raises(NotFoundError):
            await find_overlapping(db, uuid.uuid4(), at(9), at(10))

    async def test_non_teacher_account_is_not_found(self, db, make_user):
        student = await make_user(Role.STUDENT)
        with pytest.raises(NotFoundError):
            await find_overlapping(db, student.id, at(9), at(10))


class TestCanSchedule:
    """Boolean decision over the overlap query."""

    async def test_free_slot(self, db, teacher, subject):
        await book(db, teacher, subject, at(9), at(10))
        assert await can_schedule(db, teacher.id, at(10), at(11)) is True

    async def test_taken_slot(self, db, teacher, subject):
        await book(db, teacher, subject, at(9), at(10))
        assert await can_schedule(db, teacher.id, at(9, 59), at(11)) is False

    async def test_identical_range_for_another_teacher(self, db, make_user, teacher, subject):
        await book(db, teacher, subject, at(9), at(10))
        other = await make_user(Role.TEACHER)
        assert await can_schedule(db, other.id, at(9), at(10)) is True

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            ((8, 0), (9, 0), True),
            ((8, 0), (9, 1), False),
            ((9, 59), (10, 30), False),
            ((10, 0), (10, 30), True),
            ((9, 15), (9, 45), False),
        ],
    )
    async def test_boundaries(self, db, teacher, subject, start, end, expected):
        await book(db, teacher, subject, at(9), at(10))
        assert await can_schedule(db, teacher.id, at(*start), at(*end)) is expected


class TestTimeNormalisation:
    def test_aware_datetime_becomes_naive_utc(self):
        aware = datetime(2026, 3, 2, 10, 0, tzinfo=timezone(timedelta(hours=1)))
        assert to_naive_utc(aware) == datetime(2026, 3, 2, 9, 0)

    def test_naive_datetime_is_kept(self):
        assert to_naive_utc(at(9)) == at(9)

    def test_advisory_key_fits_in_bigint(self):
        key = advisory_key(uuid.UUID("ffffffff-ffff-ffff-ffff-ffffffffffff"))
        assert -(2 ** 63) <= key < 2 ** 63
