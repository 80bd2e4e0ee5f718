"""
Test data factories for the organization hierarchy and class sessions.
"""

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from cprtrack.core.models import (
    Batch,
    Center,
    ClassSession,
    Division,
    Room,
    School,
    Semester,
    Subject,
    Teacher,
)


@dataclass
class Org:
    """One center → school → batch → division → semester chain with a subject."""

    center: Center
    school: School
    batch: Batch
    division: Division
    semester: Semester
    teacher: Teacher
    room: Room
    subject: Subject


async def create_subject(
    db: AsyncSession,
    semester: Semester,
    teacher: Teacher,
    *,
    name: str = "Data Structures",
    code: str = "CS201",
) -> Subject:
    subject = Subject(name=name, code=code, semester_id=semester.id, teacher_id=teacher.id)
    db.add(subject)
    await db.commit()
    return subject


async def create_org(
    db: AsyncSession,
    *,
    center_code: int = 1,
    school_name: str = "SOT",
    batch_name: str = "2024",
    division_code: str = "A",
    semester_start: date = date(2026, 1, 1),
    semester_end: date | None = None,
    teacher_email: str = "asha@example.edu",
    room_name: str = "Room 101",
) -> Org:
    """Create a full hierarchy with one teacher, one room and one subject."""
    center = Center(name=f"Center {center_code}", code=center_code)
    school = School(name=school_name, center_id=center.id)
    batch = Batch(name=batch_name, school_id=school.id)
    division = Division(code=division_code, batch_id=batch.id)
    semester = Semester(
        number=1, division_id=division.id, start_date=semester_start, end_date=semester_end
    )
    teacher = Teacher(name="Asha Rao", email=teacher_email)
    room = Room(name=room_name)
    db.add_all([center, school, batch, division, semester, teacher, room])
    await db.flush()

    subject = await create_subject(db, semester, teacher)
    return Org(center, school, batch, division, semester, teacher, room, subject)


async def add_session(
    db: AsyncSession,
    org: Org,
    start_at: datetime,
    end_at: datetime,
    lecture_number: str,
    *,
    room: Room | None = None,
    subject: Subject | None = None,
    teacher: Teacher | None = None,
) -> ClassSession:
    """Insert a session directly, bypassing the timetable service."""
    class_session = ClassSession(
        subject_id=(subject or org.subject).id,
        division_id=org.division.id,
        teacher_id=(teacher or org.teacher).id,
        room_id=room.id if room else None,
        start_at=start_at,
        end_at=end_at,
        lecture_number=lecture_number,
    )
    db.add(class_session)
    await db.commit()
    return class_session


