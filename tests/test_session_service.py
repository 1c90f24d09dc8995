import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from services.scheduling.controllers import session_service
from services.scheduling.models.sessions import Session
from services.scheduling.schemas.sessions import SessionCreate
from services.user_management.models.users import Role
from shared.errors import ConflictError, NotFoundError, ValidationError
from helpers import at


def slot(teacher, subject, start, end):
    return SessionCreate(start_time=start, end_time=end, teacher_id=teacher.id, subject_id=subject.id)


class TestCreateSession:
    """Validation order and conflict handling on create."""

    async def test_touching_session_is_accepted(self, db, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        created = await session_service.create_session(db, slot(teacher, subject, at(10), at(11)))
        assert created.start_time == at(10)
        assert created.end_time == at(11)

    async def test_overlap_raises_conflict(self, db, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        with pytest.raises(ConflictError):
            await session_service.create_session(db, slot(teacher, subject, at(9, 30), at(10, 30)))

    async def test_other_teacher_same_slot_is_accepted(self, db, make_user, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        other = await make_user(Role.TEACHER)
        created = await session_service.create_session(db, slot(other, subject, at(9), at(10)))
        assert created.teacher_id == other.id

    async def test_short_session_fails_validation_even_when_slot_is_taken(self, db, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        with pytest.raises(ValidationError, match="at least 30 minutes"):
            await session_service.create_session(db, slot(teacher, subject, at(9), at(9, 20)))

    async def test_exactly_minimum_duration_is_accepted(self, db, teacher, subject):
        created = await session_service.create_session(db, slot(teacher, subject, at(14), at(14, 30)))
        assert created.id is not None

    async def test_start_after_end_fails_before_reference_checks(self, db, subject):
        payload = SessionCreate(start_time=at(10), end_time=at(9), teacher_id=uuid.uuid4(), subject_id=subject.id)
        with pytest.raises(ValidationError, match="before end time"):
            await session_service.create_session(db, payload)

    async def test_equal_start_and_end_fail_validation(self, db, teacher, subject):
        with pytest.raises(ValidationError):
            await session_service.create_session(db, slot(teacher, subject, at(9), at(9)))

    async def test_missing_times_fail_validation(self, db, teacher, subject):
        with pytest.raises(ValidationError, match="required"):
            await session_service.create_session(db, SessionCreate(teacher_id=teacher.id, subject_id=subject.id))

    async def test_missing_teacher_fails_validation(self, db, subject):
        payload = SessionCreate(start_time=at(9), end_time=at(10), subject_id=subject.id)
        with pytest.raises(ValidationError, match="teacher"):
            await session_service.create_session(db, payload)

    async def test_missing_subject_fails_validation(self, db, teacher):
        payload = SessionCreate(start_time=at(9), end_time=at(10), teacher_id=teacher.id)
        with pytest.raises(ValidationError, match="subject"):
            await session_service.create_session(db, payload)

    async def test_unknown_teacher_is_not_found(self, db, subject):
        payload = SessionCreate(start_time=at(9), end_time=at(10), teacher_id=uuid.uuid4(), subject_id=subject.id)
        with pytest.raises(NotFoundError, match="Teacher"):
            await session_service.create_session(db, payload)

    async def test_student_cannot_be_booked_as_teacher(self, db, make_user, subject):
        student = await make_user(Role.STUDENT)
        with pytest.raises(NotFoundError):
            await session_service.create_session(db, slot(student, subject, at(9), at(10)))

    async def test_unknown_subject_is_not_found(self, db, teacher):
        payload = SessionCreate(start_time=at(9), end_time=at(10), teacher_id=teacher.id, subject_id=uuid.uuid4())
        with pytest.raises(NotFoundError, match="Subject"):
            await session_service.create_session(db, payload)

    async def test_aware_times_are_stored_as_utc(self, db, teacher, subject):
        plus_one = timezone(timedelta(hours=1))
        payload = slot(
            teacher, subject,
            datetime(2026, 3, 2, 10, 0, tzinfo=plus_one),
            datetime(2026, 3, 2, 11, 0, tzinfo=plus_one),
        )
        created = await session_service.create_session(db, payload)
        assert created.start_time == at(9)
        assert created.end_time == at(10)

    async def test_aware_times_conflict_with_naive_utc_sessions(self, db, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        plus_two = timezone(timedelta(hours=2))
        payload = slot(
            teacher, subject,
            datetime(2026, 3, 2, 11, 30, tzinfo=plus_two),
            datetime(2026, 3, 2, 12, 30, tzinfo=plus_two),
        )
        with pytest.raises(ConflictError):
            await session_service.create_session(db, payload)


class TestConcurrentScheduling:
    """Two simultaneous bookings for one teacher."""

    async def test_only_one_overlapping_request_wins(self, session_factory, teacher, subject):
        async def attempt(start, end):
            async with session_factory() as session:
                return await session_service.create_session(session, slot(teacher, subject, start, end))

        results = await asyncio.gather(
            attempt(at(9), at(10)),
            attempt(at(9, 30), at(10, 30)),
            return_exceptions=True,
        )

        created = [r for r in results if isinstance(r, Session)]
        conflicts = [r for r in results if isinstance(r, ConflictError)]
        assert len(created) == 1
        assert len(conflicts) == 1

        async with session_factory() as session:
            assert await session_service.count_by_teacher(session, teacher.id) == 1

    async def test_different_teachers_proceed_independently(self, session_factory, make_user, teacher, subject):
        other = await make_user(Role.TEACHER)

        async def attempt(who):
            async with session_factory() as session:
                return await session_service.create_session(session, slot(who, subject, at(9), at(10)))

        results = await asyncio.gather(attempt(teacher), attempt(other))
        assert {r.teacher_id for r in results} == {teacher.id, other.id}


class TestUpdateSession:
    """Rescheduling re-checks conflicts while excluding the session itself."""

    async def test_shifting_own_slot_does_not_self_conflict(self, db, teacher, subject):
        session = await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        updated = await session_service.update_session(db, session.id, slot(teacher, subject, at(9, 15), at(10, 15)))
        assert updated.start_time == at(9, 15)

    async def test_same_slot_update_succeeds(self, db, teacher, subject, make_subject):
        session = await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        physics = await make_subject("Physics")
        updated = await session_service.update_session(db, session.id, slot(teacher, physics, at(9), at(10)))
        assert updated.subject_id == physics.id

    async def test_moving_onto_another_session_conflicts(self, db, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        second = await session_service.create_session(db, slot(teacher, subject, at(11), at(12)))
        with pytest.raises(ConflictError):
            await session_service.update_session(db, second.id, slot(teacher, subject, at(9, 30), at(10, 30)))

    async def test_reassigning_to_a_busy_teacher_conflicts(self, db, make_user, teacher, subject):
        other = await make_user(Role.TEACHER)
        await session_service.create_session(db, slot(other, subject, at(9), at(10)))
        mine = await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        with pytest.raises(ConflictError):
            await session_service.update_session(db, mine.id, slot(other, subject, at(9), at(10)))

    async def test_failed_update_leaves_session_unchanged(self, db, session_factory, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        second = await session_service.create_session(db, slot(teacher, subject, at(11), at(12)))
        with pytest.raises(ConflictError):
            await session_service.update_session(db, second.id, slot(teacher, subject, at(9), at(10)))
        async with session_factory() as fresh:
            stored = await session_service.get_session(fresh, second.id)
        assert stored.start_time == at(11)

    async def test_update_applies_validation(self, db, teacher, subject):
        session = await session_service.create_session(db, slot(teacher, subject, at(9), at(10)))
        with pytest.raises(ValidationError):
            await session_service.update_session(db, session.id, slot(teacher, subject, at(9), at(9, 10)))

    async def test_unknown_session_is_not_found(self, db, teacher, subject):
        with pytest.raises(NotFoundError, match="Session"):
            await session_service.update_session(db, uuid.uuid4(), slot(teacher, subject, at(9), at(10)))


class TestSessionQueries:
    """Read models and aggregates."""

    @pytest.fixture
    async def timetable(self, db, make_user, teacher, subject, make_subject):
        physics = await make_subject("Physics")
        other = await make_user(Role.TEACHER, first_name="Sara", last_name="Alaoui")
        for payload in (
            slot(teacher, subject, at(8), at(9)),
            slot(teacher, subject, at(9), at(10, 30)),
            slot(teacher, physics, at(14), at(16)),
            slot(other, physics, at(9), at(10)),
            slot(teacher, subject, at(9, day=3), at(10, day=3)),
        ):
            await session_service.create_session(db, payload)
        return {"physics": physics, "other": other}

    async def test_find_by_teacher_is_ordered(self, db, teacher, timetable):
        sessions = await session_service.find_by_teacher(db, teacher.id)
        assert [s.start_time for s in sessions] == [at(8), at(9), at(14), at(9, day=3)]

    async def test_paginated_by_subject(self, db, timetable):
        page = await session_service.find_by_subject_paginated(db, timetable["physics"].id, 0, 1)
        assert page["total"] == 2
        assert page["pages"] == 2
        assert len(page["items"]) == 1

    async def test_date_range_returns_contained_sessions_only(self, db, timetable):
        sessions = await session_service.find_by_date_range(db, at(8, 30), at(16))
        assert len(sessions) == 3
        assert {s.start_time for s in sessions} == {at(9), at(14)}

    async def test_all_overlapping_spans_teachers(self, db, timetable):
        sessions = await session_service.find_all_overlapping(db, at(9, 30), at(9, 45))
        assert len(sessions) == 2

    async def test_reversed_read_range_is_rejected(self, db, timetable):
        with pytest.raises(ValidationError):
            await session_service.find_by_date_range(db, at(12), at(8))

    async def test_counts(self, db, teacher, subject, timetable):
        assert await session_service.count_by_teacher(db, teacher.id) == 4
        assert await session_service.count_by_subject(db, subject.id) == 3

    async def test_teacher_total_hours(self, db, teacher, timetable):
        hours = await session_service.teacher_total_hours(db, teacher.id, at(0), at(23, 59))
        assert hours == 4.5

    async def test_hours_keep_seconds(self, db, teacher, subject):
        await session_service.create_session(db, slot(teacher, subject, at(8), at(8, 45) + timedelta(seconds=30)))
        await session_service.create_session(db, slot(teacher, subject, at(9), at(9, 44) + timedelta(seconds=30)))

        assert await session_service.teacher_total_hours(db, teacher.id, at(0), at(23, 59)) == 1.5
        stats = await session_service.get_teacher_statistics(db, teacher.id, at(0), at(23, 59))
        assert stats["average_session_duration"] == 0.75

    async def test_statistics(self, db, timetable):
        stats = await session_service.get_statistics(db, at(0), at(23, 59))
        assert stats["total_sessions"] == 4
        assert stats["total_hours"] == 5.5
        assert stats["sessions_by_subject"] == {"Mathematics": 2, "Physics": 2}
        assert stats["sessions_by_teacher"]["Sara Alaoui"] == 1
        assert stats["average_session_duration"] == 1.38

    async def test_statistics_for_empty_range(self, db, timetable):
        stats = await session_service.get_statistics(db, at(0, day=20), at(23, day=20))
        assert stats["total_sessions"] == 0
        assert stats["average_session_duration"] == 0.0

    async def test_teacher_statistics(self, db, teacher, timetable):
        stats = await session_service.get_teacher_statistics(db, teacher.id, at(0), at(23, 59))
        assert stats["teacher_name"] == teacher.full_name
        assert stats["total_sessions"] == 3
        assert stats["hours_by_subject"] == {"Mathematics": 2.5, "Physics": 2.0}
        assert stats["sessions_by_subject"] == {"Mathematics": 2, "Physics": 1}

    async def test_delete_by_teacher(self, db, teacher, timetable):
        await session_service.delete_by_teacher(db, teacher.id)
        assert await session_service.count_by_teacher(db, teacher.id) == 0
        assert await session_service.count_by_teacher(db, timetable["other"].id) == 1

    async def test_delete_unknown_session(self, db):
        with pytest.raises(NotFoundError):
            await session_service.delete_session(db, uuid.uuid4())
