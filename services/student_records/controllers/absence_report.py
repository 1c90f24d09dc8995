# services/student_records/controllers/absence_report.py
import logging
import tempfile
from datetime import date, timedelta
from typing import Optional

import openpyxl
from openpyxl.chart import PieChart, Reference
from openpyxl.styles import Alignment, Font
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.classes import Class
from services.student_records.models.absences import Absence, AbsenceStatus
from services.user_management.models.users import User, Role
from shared.crud import get_or_404
from shared.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DAYS = 30
BASE_HEADERS = ["Student", "Username", "Total Absences", "Justified", "Unjustified"]


async def build_absence_workbook(
    db: AsyncSession,
    class_id,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> openpyxl.Workbook:
    """One row per student of the class with absence totals, then a summary block and a pie chart."""
    to_date = to_date or date.today()
    from_date = from_date or to_date - timedelta(days=DEFAULT_REPORT_DAYS)
    if from_date > to_date:
        raise ValidationError("Start date must be before end date")

    school_class = await get_or_404(db, Class, class_id, "Class")

    result = await db.execute(
        select(User)
        .where(User.class_id == class_id, User.role == Role.STUDENT)
        .order_by(User.last_name, User.first_name)
    )
    students = result.scalars().all()
    if not students:
        raise NotFoundError("Students", "class", school_class.name)

    absence_result = await db.execute(
        select(Absence)
        .where(
            Absence.student_id.in_([student.id for student in students]),
            Absence.date >= from_date,
            Absence.date <= to_date,
        )
    )
    absences = absence_result.scalars().all()

    by_student = {}
    for absence in absences:
        by_student.setdefault(absence.student_id, []).append(absence)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Absence Report"

    status_headers = [status.value.capitalize() for status in AbsenceStatus]
    ws.append(BASE_HEADERS + status_headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")

    class_justified = 0
    class_unjustified = 0
    for student in students:
        records = by_student.get(student.id, [])
        justified = sum(1 for record in records if record.justified)
        unjustified = len(records) - justified
        per_status = [sum(1 for record in records if record.status == status) for status in AbsenceStatus]
        ws.append([student.full_name, student.username, len(records), justified, unjustified] + per_status)
        class_justified += justified
        class_unjustified += unjustified

    # Summary block below the student rows
    summary_row_start = len(students) + 3
    ws[f"A{summary_row_start}"] = f"Class Summary: {school_class.name}"
    ws[f"A{summary_row_start}"].font = Font(bold=True)

    ws[f"A{summary_row_start + 1}"] = "Period"
    ws[f"B{summary_row_start + 1}"] = f"{from_date.isoformat()} to {to_date.isoformat()}"

    ws[f"A{summary_row_start + 2}"] = "Total Students"
    ws[f"B{summary_row_start + 2}"] = len(students)

    ws[f"A{summary_row_start + 3}"] = "Justified"
    ws[f"B{summary_row_start + 3}"] = class_justified

    ws[f"A{summary_row_start + 4}"] = "Unjustified"
    ws[f"B{summary_row_start + 4}"] = class_unjustified

    chart = PieChart()
    labels = Reference(ws, min_col=1, min_row=summary_row_start + 3, max_row=summary_row_start + 4)
    data = Reference(ws, min_col=2, min_row=summary_row_start + 3, max_row=summary_row_start + 4)
    chart.add_data(data, titles_from_data=False)
    chart.set_categories(labels)
    chart.title = "Justified vs Unjustified Absences"
    ws.add_chart(chart, f"E{summary_row_start + 1}")

    logger.info("Built absence report for class %s (%d students)", school_class.name, len(students))
    return wb


async def export_absences_excel(db: AsyncSession, class_id, from_date=None, to_date=None) -> str:
    """Write the report to a temporary ``.xlsx`` file and return its path."""
    wb = await build_absence_workbook(db, class_id, from_date, to_date)
    with tempfile.NamedTemporaryFile(delete=False, suffix=".xlsx") as tmp:
        wb.save(tmp.name)
        return tmp.name
