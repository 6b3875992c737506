"""
Academic Service Layer

Staff-facing record keeping (grades, attendance, assignments, timetable) and
the student-portal read side: GPA, attendance rate, assignment status,
progress and term reports.
"""

from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, ResourceNotFoundError, StudentNotFoundError, ValidationError
from app.core.logging_config import logger
from app.models.academic import (
    Assignment,
    AssignmentSubmission,
    AttendanceRecord,
    AttendanceStatus,
    DayOfWeek,
    GradeRecord,
    SubmissionStatus,
    TimetableEntry,
)
from app.models.activity_tracking import ActivityType
from app.models.student import Student
from app.services.activity_service import log_activity


# (minimum percentage, letter, grade points), highest band first
GRADE_BANDS: List[Tuple[float, str, float]] = [
    (90, "A", 4.0),
    (85, "A-", 3.7),
    (80, "B+", 3.3),
    (75, "B", 3.0),
    (70, "B-", 2.7),
    (65, "C+", 2.3),
    (60, "C", 2.0),
    (50, "D", 1.0),
]

WEEKDAYS = list(DayOfWeek)


def letter_grade(percentage: float) -> Tuple[str, float]:
    """Map a percentage to (letter, grade points on a 4.0 scale)"""
    for minimum, letter, points in GRADE_BANDS:
        if percentage >= minimum:
            return letter, points
    return "F", 0.0


def attendance_rate(present: int, late: int, total: int) -> float:
    """Late arrivals count as attended"""
    if total == 0:
        return 0.0
    return round((present + late) / total * 100, 2)


def summarize_subjects(grades: List[GradeRecord]) -> Dict[str, Any]:
    """Per-subject averages, credit-weighted GPA and letter distribution"""
    by_subject: Dict[str, List[GradeRecord]] = defaultdict(list)
    for grade in grades:
        by_subject[grade.subject].append(grade)

    subjects = []
    weighted_points = 0.0
    total_credits = 0.0
    distribution: Dict[str, int] = defaultdict(int)

    for subject in sorted(by_subject):
        records = by_subject[subject]
        average = round(sum(r.percentage for r in records) / len(records), 2)
        letter, points = letter_grade(average)
        credits = max(r.credits or 0 for r in records) or 1.0

        weighted_points += points * credits
        total_credits += credits
        distribution[letter] += 1
        subjects.append({
            "subject": subject,
            "assessments": len(records),
            "average_percentage": average,
            "letter_grade": letter,
            "grade_points": points,
            "credits": credits,
        })

    gpa = round(weighted_points / total_credits, 2) if total_credits else 0.0
    overall = round(sum(s["average_percentage"] for s in subjects) / len(subjects), 2) if subjects else 0.0

    return {
        "subjects": subjects,
        "gpa": gpa,
        "overall_percentage": overall,
        "overall_letter_grade": letter_grade(overall)[0] if subjects else None,
        "grade_distribution": dict(distribution),
    }


def serialize_grade(grade: GradeRecord) -> dict:
    letter, points = letter_grade(grade.percentage)
    return {
        "id": grade.id,
        "subject": grade.subject,
        "assessment_type": grade.assessment_type.value,
        "assessment_name": grade.assessment_name,
        "score": grade.score,
        "max_score": grade.max_score,
        "percentage": grade.percentage,
        "letter_grade": letter,
        "grade_points": points,
        "credits": grade.credits,
        "academic_year": grade.academic_year,
        "term": grade.term,
        "remarks": grade.remarks,
        "assessed_on": grade.assessed_on.isoformat() if grade.assessed_on else None,
        "updated_at": grade.updated_at.isoformat() if grade.updated_at else None,
    }


def serialize_attendance(record: AttendanceRecord) -> dict:
    return {
        "id": record.id,
        "student_id": record.student_id,
        "date": record.date.isoformat(),
        "status": record.status.value,
        "remarks": record.remarks,
    }


def serialize_timetable_entry(entry: TimetableEntry) -> dict:
    return {
        "id": entry.id,
        "day_of_week": entry.day_of_week.value,
        "period": entry.period,
        "start_time": entry.start_time.strftime("%H:%M"),
        "end_time": entry.end_time.strftime("%H:%M"),
        "subject": entry.subject,
        "teacher_name": entry.teacher_name,
        "room": entry.room,
    }


def serialize_assignment(assignment: Assignment, submission: Optional[AssignmentSubmission] = None,
                         now: Optional[datetime] = None) -> dict:
    data = {
        "id": assignment.id,
        "subject": assignment.subject,
        "title": assignment.title,
        "description": assignment.description,
        "grade_level": assignment.grade_level,
        "section": assignment.section,
        "due_date": assignment.due_date.isoformat(),
        "max_score": assignment.max_score,
        "attachments": assignment.attachments or [],
    }
    if now is not None:
        data["status"] = assignment_status(assignment, submission, now)
        data["submission"] = serialize_submission(submission) if submission else None
    return data


def serialize_submission(submission: AssignmentSubmission) -> dict:
    return {
        "id": submission.id,
        "assignment_id": submission.assignment_id,
        "student_id": submission.student_id,
        "content": submission.content,
        "attachments": submission.attachments or [],
        "status": submission.status.value,
        "is_late": submission.is_late,
        "score": submission.score,
        "feedback": submission.feedback,
        "submitted_at": submission.submitted_at.isoformat() if submission.submitted_at else None,
        "graded_at": submission.graded_at.isoformat() if submission.graded_at else None,
    }


def assignment_status(assignment: Assignment, submission: Optional[AssignmentSubmission], now: datetime) -> str:
    if submission:
        return "graded" if submission.status == SubmissionStatus.GRADED else "submitted"
    return "overdue" if assignment.due_date < now else "pending"


class AcademicService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # STAFF RECORD KEEPING
    # =====================================================

    async def _school_student(self, school_id: str, student_id: str) -> Student:
        result = await self.db.execute(
            select(Student).where(Student.id == student_id, Student.school_id == school_id)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError(student_id)
        return student

    async def record_grade(self, school_id: str, data: Dict[str, Any], recorded_by: str) -> GradeRecord:
        await self._school_student(school_id, data["student_id"])
        if data["score"] > data.get("max_score", 100.0):
            raise ValidationError("Score cannot exceed the maximum score", field="score")

        grade = GradeRecord(
            school_id=school_id,
            recorded_by=recorded_by,
            academic_year=data.pop("academic_year", None) or settings.CURRENT_ACADEMIC_YEAR,
            **data,
        )
        self.db.add(grade)
        await self.db.commit()

        logger.info(f"Recorded {grade.subject} grade for student {grade.student_id}")
        return grade

    async def mark_attendance(
        self, school_id: str, attendance_date: date, entries: List[Dict[str, Any]], marked_by: str
    ) -> List[AttendanceRecord]:
        """Upsert one attendance row per student for the date"""
        student_ids = {entry["student_id"] for entry in entries}
        result = await self.db.execute(
            select(Student.id).where(Student.school_id == school_id, Student.id.in_(student_ids))
        )
        known = {row[0] for row in result.all()}
        missing = student_ids - known
        if missing:
            raise StudentNotFoundError(sorted(missing)[0])

        existing_rows = await self.db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.date == attendance_date,
                AttendanceRecord.student_id.in_(student_ids),
            )
        )
        existing = {record.student_id: record for record in existing_rows.scalars().all()}

        records = []
        for entry in entries:
            record = existing.get(entry["student_id"])
            if record:
                record.status = entry["status"]
                record.remarks = entry.get("remarks")
                record.marked_by = marked_by
            else:
                record = AttendanceRecord(
                    school_id=school_id,
                    student_id=entry["student_id"],
                    date=attendance_date,
                    status=entry["status"],
                    remarks=entry.get("remarks"),
                    marked_by=marked_by,
                )
                self.db.add(record)
                existing[entry["student_id"]] = record
            records.append(record)

        await self.db.commit()
        logger.info(f"Marked attendance for {len(records)} students on {attendance_date}")
        return records

    async def create_assignment(self, school_id: str, data: Dict[str, Any], created_by: str) -> Assignment:
        assignment = Assignment(school_id=school_id, created_by=created_by, **data)
        self.db.add(assignment)
        await self.db.commit()
        return assignment

    async def list_assignments(
        self,
        school_id: str,
        grade_level: Optional[str] = None,
        section: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> List[Assignment]:
        query = select(Assignment).where(Assignment.school_id == school_id)
        if grade_level:
            query = query.where(Assignment.grade_level == grade_level)
        if section:
            query = query.where(or_(Assignment.section.is_(None), Assignment.section == section))
        if subject:
            query = query.where(Assignment.subject == subject)
        result = await self.db.execute(query.order_by(Assignment.due_date.desc()))
        return list(result.scalars().all())

    async def get_assignment(self, school_id: str, assignment_id: str) -> Assignment:
        result = await self.db.execute(
            select(Assignment).where(Assignment.id == assignment_id, Assignment.school_id == school_id)
        )
        assignment = result.scalar_one_or_none()
        if not assignment:
            raise ResourceNotFoundError("Assignment", assignment_id)
        return assignment

    async def grade_submission(
        self,
        school_id: str,
        assignment_id: str,
        submission_id: str,
        score: float,
        feedback: Optional[str],
        graded_by: str,
    ) -> AssignmentSubmission:
        assignment = await self.get_assignment(school_id, assignment_id)
        result = await self.db.execute(
            select(AssignmentSubmission).where(
                AssignmentSubmission.id == submission_id,
                AssignmentSubmission.assignment_id == assignment.id,
            )
        )
        submission = result.scalar_one_or_none()
        if not submission:
            raise ResourceNotFoundError("Submission", submission_id)
        if score > assignment.max_score:
            raise ValidationError("Score cannot exceed the maximum score", field="score")

        submission.score = score
        submission.feedback = feedback
        submission.status = SubmissionStatus.GRADED
        submission.graded_by = graded_by
        submission.graded_at = datetime.utcnow()
        await self.db.commit()
        return submission

    async def add_timetable_entry(self, school_id: str, data: Dict[str, Any]) -> TimetableEntry:
        if data["end_time"] <= data["start_time"]:
            raise ValidationError("Period must end after it starts", field="end_time")

        clash = await self.db.execute(
            select(TimetableEntry.id).where(
                TimetableEntry.school_id == school_id,
                TimetableEntry.grade_level == data["grade_level"],
                TimetableEntry.section == data.get("section"),
                TimetableEntry.day_of_week == data["day_of_week"],
                TimetableEntry.period == data["period"],
            )
        )
        if clash.first():
            raise ConflictError("This period is already scheduled for the class")

        entry = TimetableEntry(school_id=school_id, **data)
        self.db.add(entry)
        await self.db.commit()
        return entry

    # =====================================================
    # STUDENT PORTAL
    # =====================================================

    async def get_grades(
        self,
        student: Student,
        academic_year: Optional[str] = None,
        term: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> List[GradeRecord]:
        query = select(GradeRecord).where(GradeRecord.student_id == student.id)
        if academic_year:
            query = query.where(GradeRecord.academic_year == academic_year)
        if term:
            query = query.where(GradeRecord.term == term)
        if subject:
            query = query.where(GradeRecord.subject == subject)
        result = await self.db.execute(query.order_by(GradeRecord.created_at.desc()))
        return list(result.scalars().all())

    async def get_grade_summary(self, student: Student, academic_year: Optional[str] = None,
                                term: Optional[str] = None) -> Dict[str, Any]:
        grades = await self.get_grades(student, academic_year=academic_year, term=term)
        summary = summarize_subjects(grades)
        summary.update({"student_id": student.id, "academic_year": academic_year, "term": term})
        return summary

    async def get_attendance(
        self, student: Student, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[AttendanceRecord]:
        query = select(AttendanceRecord).where(AttendanceRecord.student_id == student.id)
        if start_date:
            query = query.where(AttendanceRecord.date >= start_date)
        if end_date:
            query = query.where(AttendanceRecord.date <= end_date)
        result = await self.db.execute(query.order_by(AttendanceRecord.date.desc()))
        return list(result.scalars().all())

    async def get_attendance_summary(
        self, student: Student, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Dict[str, Any]:
        records = await self.get_attendance(student, start_date, end_date)
        counts = {status.value: 0 for status in AttendanceStatus}
        for record in records:
            counts[record.status.value] += 1

        return {
            "student_id": student.id,
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
            "total_days": len(records),
            "present": counts["present"],
            "absent": counts["absent"],
            "late": counts["late"],
            "excused": counts["excused"],
            "attendance_rate": attendance_rate(counts["present"], counts["late"], len(records)),
        }

    async def _class_assignments(self, student: Student) -> List[Assignment]:
        query = select(Assignment).where(
            Assignment.school_id == student.school_id,
            Assignment.grade_level == student.grade_level,
            or_(Assignment.section.is_(None), Assignment.section == student.section),
        )
        result = await self.db.execute(query.order_by(Assignment.due_date))
        return list(result.scalars().all())

    async def _submissions_by_assignment(self, student: Student) -> Dict[str, AssignmentSubmission]:
        result = await self.db.execute(
            select(AssignmentSubmission).where(AssignmentSubmission.student_id == student.id)
        )
        return {submission.assignment_id: submission for submission in result.scalars().all()}

    async def get_student_assignments(self, student: Student, status: Optional[str] = None) -> List[dict]:
        now = datetime.utcnow()
        assignments = await self._class_assignments(student)
        submissions = await self._submissions_by_assignment(student)

        items = [serialize_assignment(a, submissions.get(a.id), now) for a in assignments]
        if status:
            items = [item for item in items if item["status"] == status]
        return items

    async def submit_assignment(
        self,
        student: Student,
        assignment_id: str,
        content: Optional[str],
        attachments: Optional[List[str]] = None,
    ) -> AssignmentSubmission:
        assignment = await self.get_assignment(student.school_id, assignment_id)
        if assignment.grade_level != student.grade_level or (
            assignment.section and assignment.section != student.section
        ):
            raise ResourceNotFoundError("Assignment", assignment_id)

        now = datetime.utcnow()
        is_late = now > assignment.due_date

        result = await self.db.execute(
            select(AssignmentSubmission).where(
                AssignmentSubmission.assignment_id == assignment.id,
                AssignmentSubmission.student_id == student.id,
            )
        )
        submission = result.scalar_one_or_none()
        if submission and submission.status == SubmissionStatus.GRADED:
            raise ConflictError("Assignment has already been graded")

        if submission:
            submission.content = content
            submission.attachments = attachments or []
            submission.submitted_at = now
        else:
            submission = AssignmentSubmission(
                assignment_id=assignment.id,
                student_id=student.id,
                content=content,
                attachments=attachments or [],
                submitted_at=now,
            )
            self.db.add(submission)
        submission.is_late = is_late
        submission.status = SubmissionStatus.LATE if is_late else SubmissionStatus.SUBMITTED

        await log_activity(
            self.db, student.id, ActivityType.ASSIGNMENT_SUBMIT,
            f"Submitted assignment: {assignment.title}",
            resource_type="assignment", resource_id=assignment.id,
            details={"late": is_late},
        )
        await self.db.commit()
        return submission

    async def get_timetable(self, student: Student, day: Optional[DayOfWeek] = None) -> List[TimetableEntry]:
        query = select(TimetableEntry).where(
            TimetableEntry.school_id == student.school_id,
            TimetableEntry.grade_level == student.grade_level,
            or_(TimetableEntry.section.is_(None), TimetableEntry.section == student.section),
        )
        if day:
            query = query.where(TimetableEntry.day_of_week == day)
        result = await self.db.execute(query)
        entries = list(result.scalars().all())
        entries.sort(key=lambda e: (WEEKDAYS.index(e.day_of_week), e.period))
        return entries

    async def get_weekly_timetable(self, student: Student) -> Dict[str, List[dict]]:
        week: Dict[str, List[dict]] = {day.value: [] for day in WEEKDAYS}
        for entry in await self.get_timetable(student):
            week[entry.day_of_week.value].append(serialize_timetable_entry(entry))
        return week

    async def get_today_timetable(self, student: Student, today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        day = WEEKDAYS[today.weekday()]
        entries = await self.get_timetable(student, day=day)
        return {
            "date": today.isoformat(),
            "day_of_week": day.value,
            "periods": [serialize_timetable_entry(e) for e in entries],
        }

    async def get_progress(self, student: Student) -> Dict[str, Any]:
        summary = await self.get_grade_summary(student)
        attendance = await self.get_attendance_summary(student)
        assignments = await self.get_student_assignments(student)

        completed = sum(1 for a in assignments if a["status"] in ("submitted", "graded"))
        completion_rate = round(completed / len(assignments) * 100, 2) if assignments else 0.0

        return {
            "student_id": student.id,
            "gpa": summary["gpa"],
            "overall_percentage": summary["overall_percentage"],
            "attendance_rate": attendance["attendance_rate"],
            "assignments_total": len(assignments),
            "assignments_completed": completed,
            "assignment_completion_rate": completion_rate,
            "subjects": summary["subjects"],
        }

    async def get_reports(self, student: Student) -> List[Dict[str, Any]]:
        """One report card per (academic year, term), newest year first"""
        grades = await self.get_grades(student)
        grouped: Dict[Tuple[str, str], List[GradeRecord]] = defaultdict(list)
        for grade in grades:
            grouped[(grade.academic_year, grade.term)].append(grade)

        reports = []
        for (year, term) in sorted(grouped, key=lambda k: (k[0], k[1]), reverse=True):
            summary = summarize_subjects(grouped[(year, term)])
            reports.append({
                "academic_year": year,
                "term": term,
                "gpa": summary["gpa"],
                "overall_percentage": summary["overall_percentage"],
                "overall_letter_grade": summary["overall_letter_grade"],
                "passed": summary["overall_percentage"] >= settings.PASSING_PERCENTAGE,
                "subjects": summary["subjects"],
            })
        return reports


def get_academic_service(db: AsyncSession) -> AcademicService:
    return AcademicService(db)
