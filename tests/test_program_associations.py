import uuid

import pytest

from services.academics.controllers import class_service, program_associations, subject_service
from services.academics.models.classes import Class
from services.academics.models.programs import Program
from services.academics.schemas.classes import ClassCreate
from shared.errors import NotFoundError, ValidationError


@pytest.fixture
def make_class(db):
    async def _make_class(name, program_id=None) -> Class:
        school_class = Class(name=name, program_id=program_id)
        db.add(school_class)
        await db.commit()
        await db.refresh(school_class)
        return school_class

    return _make_class


@pytest.fixture
async def program(db):
    program = Program(description="Sciences Math")
    db.add(program)
    await db.commit()
    await db.refresh(program)
    return program


class TestAssignAndDetach:
    """The program_id column on each side is the only owner of the link."""

    async def test_assign_class(self, db, make_class, program):
        school_class = await make_class("2BAC-SM-1")
        assigned = await program_associations.assign_class(db, school_class.id, program.id)
        assert assigned.program_id == program.id
        assert [c.id for c in await class_service.find_by_program(db, program.id)] == [school_class.id]

    async def test_assign_to_unknown_program(self, db, make_class):
        school_class = await make_class("2BAC-SM-1")
        with pytest.raises(NotFoundError, match="Program"):
            await program_associations.assign_class(db, school_class.id, uuid.uuid4())

    async def test_detach_subject_keeps_program(self, db, make_subject, program):
        subject = await make_subject("Physics", program_id=program.id)
        detached = await program_associations.detach_subject(db, subject.id)
        assert detached.program_id is None
        assert await db.get(Program, program.id) is not None

    async def test_class_update_without_program_keeps_assignment(self, db, make_class, program):
        school_class = await make_class("2BAC-SM-1", program_id=program.id)
        updated = await class_service.update_class(db, school_class.id, ClassCreate(name="2BAC-SM-2"))
        assert updated.name == "2BAC-SM-2"
        assert updated.program_id == program.id


class TestLinkSubjectToClass:
    """Class and subject end up sharing one program."""

    async def test_creates_program_when_neither_has_one(self, db, make_class, make_subject):
        school_class = await make_class("1BAC-SE")
        subject = await make_subject("Biology")
        program = await program_associations.link_subject_to_class(db, school_class.id, subject.id, "Life sciences")
        assert program.description == "Life sciences"
        assert (await db.get(Class, school_class.id)).program_id == program.id
        assert await program_associations.exists_by_class_and_subject(db, school_class.id, subject.id)

    async def test_default_description(self, db, make_class, make_subject):
        school_class = await make_class("1BAC-SE")
        subject = await make_subject("Biology")
        program = await program_associations.link_subject_to_class(db, school_class.id, subject.id)
        assert program.description == "1BAC-SE - Biology"

    async def test_reuses_class_program(self, db, make_class, make_subject, program):
        school_class = await make_class("2BAC-SM-1", program_id=program.id)
        subject = await make_subject("Chemistry")
        linked = await program_associations.link_subject_to_class(db, school_class.id, subject.id)
        assert linked.id == program.id

    async def test_reuses_subject_program(self, db, make_class, make_subject, program):
        school_class = await make_class("2BAC-SM-1")
        subject = await make_subject("Chemistry", program_id=program.id)
        linked = await program_associations.link_subject_to_class(db, school_class.id, subject.id)
        assert linked.id == program.id

    async def test_emptied_subject_program_is_removed(self, db, make_class, make_subject, program):
        target = Program(description="Target")
        db.add(target)
        await db.commit()
        school_class = await make_class("2BAC-SM-1", program_id=target.id)
        subject = await make_subject("Chemistry", program_id=program.id)
        await program_associations.link_subject_to_class(db, school_class.id, subject.id)
        assert await db.get(Program, program.id) is None

    async def test_find_by_class_and_subject_not_linked(self, db, make_class, make_subject):
        school_class = await make_class("1BAC-SE")
        subject = await make_subject("Biology")
        with pytest.raises(NotFoundError):
            await program_associations.find_by_class_and_subject(db, school_class.id, subject.id)
        assert not await program_associations.exists_by_class_and_subject(db, school_class.id, subject.id)


class TestUnlinkAndRemove:
    """Emptied programs are cleaned up."""

    async def test_unlink_last_subject_detaches_class_and_deletes_program(self, db, make_class, make_subject):
        school_class = await make_class("1BAC-SE")
        subject = await make_subject("Biology")
        program = await program_associations.link_subject_to_class(db, school_class.id, subject.id)

        await program_associations.unlink_subject_from_class(db, school_class.id, subject.id)

        assert (await db.get(Class, school_class.id)).program_id is None
        assert await db.get(Program, program.id) is None

    async def test_unlink_keeps_program_with_other_subjects(self, db, make_class, make_subject, program):
        school_class = await make_class("2BAC-SM-1", program_id=program.id)
        math = await make_subject("Math", program_id=program.id)
        await make_subject("Physics", program_id=program.id)

        await program_associations.unlink_subject_from_class(db, school_class.id, math.id)

        assert (await db.get(Class, school_class.id)).program_id == program.id
        assert [s.name for s in await subject_service.find_by_program(db, program.id)] == ["Physics"]

    async def test_unlink_when_not_linked(self, db, make_class, make_subject):
        school_class = await make_class("1BAC-SE")
        subject = await make_subject("Biology")
        with pytest.raises(ValidationError):
            await program_associations.unlink_subject_from_class(db, school_class.id, subject.id)

    async def test_remove_last_member_deletes_program(self, db, make_class, program):
        school_class = await make_class("2BAC-SM-1", program_id=program.id)
        await program_associations.remove_class_from_program(db, school_class.id)
        assert await db.get(Program, program.id) is None

    async def test_remove_subject_keeps_program_with_classes(self, db, make_class, make_subject, program):
        await make_class("2BAC-SM-1", program_id=program.id)
        subject = await make_subject("Math", program_id=program.id)
        await program_associations.remove_subject_from_program(db, subject.id)
        assert await db.get(Program, program.id) is not None

    async def test_delete_program_detaches_members(self, db, make_class, make_subject, program):
        school_class = await make_class("2BAC-SM-1", program_id=program.id)
        subject = await make_subject("Math", program_id=program.id)
        await program_associations.delete_program(db, program.id)
        assert (await db.get(Class, school_class.id)).program_id is None
        assert (await subject_service.get_subject(db, subject.id)).program_id is None


class TestProgramStatistics:
    async def test_class_statistics(self, db, make_class, make_subject, program):
        school_class = await make_class("2BAC-SM-1", program_id=program.id)
        await make_subject("Physics", program_id=program.id)
        await make_subject("Math", program_id=program.id)
        stats = await program_associations.class_program_statistics(db, school_class.id)
        assert stats["program_description"] == "Sciences Math"
        assert stats["subject_count"] == 2
        assert stats["subjects"] == ["Math", "Physics"]
        assert await program_associations.count_programs_by_class(db, school_class.id) == 1

    async def test_subject_without_program(self, db, make_subject):
        subject = await make_subject("Music")
        stats = await program_associations.subject_program_statistics(db, subject.id)
        assert stats["program_id"] is None
        assert stats["class_count"] == 0
        assert await program_associations.count_programs_by_subject(db, subject.id) == 0
