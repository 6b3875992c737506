"""
Student Service Layer
Enrollment records, student logins, parent links and the student lifecycle
(promotion, graduation, transfer out)
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    CapacityExceededError,
    ConflictError,
    DuplicateResourceError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    StudentNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.security import get_password_hash
from app.models.audit_log import AuditAction, AuditSeverity
from app.models.school import School
from app.models.student import Student, StudentStatus, ParentStudentLink, StudentTransfer, TransferStatus
from app.models.user import User, UserRole
from app.services.audit_service import AuditService
from app.utils.pagination import paginate


UPDATABLE_FIELDS = (
    "first_name", "last_name", "date_of_birth", "gender", "grade_level", "section",
    "roll_number", "status", "email", "phone", "address", "blood_group",
    "medical_info", "emergency_contact",
)

TRANSFER_DECISIONS = (TransferStatus.APPROVED, TransferStatus.REJECTED, TransferStatus.CANCELLED)

GRADE_NUMBER = re.compile(r"^(.*?)(\d+)$")


def next_grade_level(grade_level: str) -> Optional[str]:
    """'Grade 10' -> 'Grade 11'; None when the grade has no trailing number"""
    match = GRADE_NUMBER.match(grade_level.strip())
    if not match:
        return None
    return f"{match.group(1)}{int(match.group(2)) + 1}"


class StudentService:
    def __init__(self, db: AsyncSession, school_id: str):
        self.db = db
        self.school_id = school_id
        self.audit = AuditService(db)

    async def _ensure_email_free(self, email: str) -> None:
        taken = await self.db.execute(select(User.id).where(User.email == email))
        if taken.first():
            raise DuplicateResourceError("Email is already registered", field="email")

    async def create_student(self, data: Dict[str, Any], created_by: str) -> Student:
        existing = await self.db.execute(
            select(Student.id).where(
                Student.school_id == self.school_id,
                Student.admission_number == data["admission_number"],
            )
        )
        if existing.first():
            raise DuplicateResourceError(
                f"Admission number '{data['admission_number']}' already exists in this school",
                field="admission_number",
            )

        school = await self.db.get(School, self.school_id)
        enrolled = (await self.db.execute(
            select(func.count(Student.id)).where(
                Student.school_id == self.school_id,
                Student.status == StudentStatus.ACTIVE,
            )
        )).scalar() or 0
        if school and enrolled >= school.max_students:
            raise CapacityExceededError("School has reached its student limit", limit=school.max_students)

        password = data.pop("password", None)
        student = Student(school_id=self.school_id, **data)

        if password:
            if not student.email:
                raise ValidationError("Email is required to create a student login", field="email")
            await self._ensure_email_free(student.email)
            user = User(
                email=student.email,
                full_name=student.full_name,
                hashed_password=get_password_hash(password),
                role=UserRole.STUDENT,
                school_id=self.school_id,
                phone=student.phone,
                is_verified=True,
            )
            self.db.add(user)
            await self.db.flush()
            student.user_id = user.id

        self.db.add(student)
        await self.db.flush()

        await self.audit.record(
            AuditAction.DATA_CREATED,
            "student",
            student.id,
            user_id=created_by,
            school_id=self.school_id,
            severity=AuditSeverity.MEDIUM,
            details={"admission_number": student.admission_number, "has_login": bool(password)},
        )
        await self.db.commit()

        logger.info(f"Enrolled student {student.admission_number} ({student.id})")
        return student

    async def get_student(self, student_id: str) -> Student:
        result = await self.db.execute(
            select(Student).where(Student.id == student_id, Student.school_id == self.school_id)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError(student_id)
        return student

    async def list_students(
        self,
        grade_level: Optional[str] = None,
        section: Optional[str] = None,
        status: Optional[StudentStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> dict:
        query = select(Student).where(Student.school_id == self.school_id)
        if grade_level:
            query = query.where(Student.grade_level == grade_level)
        if section:
            query = query.where(Student.section == section)
        if status:
            query = query.where(Student.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.admission_number.ilike(pattern),
            ))
        query = query.order_by(Student.grade_level, Student.section, Student.last_name)
        return await paginate(self.db, query, page, page_size)

    async def update_student(self, student_id: str, data: Dict[str, Any], updated_by: str) -> Student:
        student = await self.get_student(student_id)

        changes = {}
        for key in UPDATABLE_FIELDS:
            if key in data and data[key] is not None and data[key] != getattr(student, key):
                changes[key] = data[key]
                setattr(student, key, data[key])

        if changes:
            await self.audit.record(
                AuditAction.DATA_UPDATED,
                "student",
                student.id,
                user_id=updated_by,
                school_id=self.school_id,
                severity=AuditSeverity.LOW,
                details={"changes": changes},
            )
            await self.db.commit()
        return student

    async def link_parent(self, student_id: str, data: Dict[str, Any], linked_by: str) -> ParentStudentLink:
        """Link a parent login to a student, creating the parent account for a new email"""
        student = await self.get_student(student_id)

        result = await self.db.execute(select(User).where(User.email == data["email"]))
        parent = result.scalar_one_or_none()
        if parent:
            if parent.role != UserRole.PARENT or str(parent.school_id) != str(self.school_id):
                raise ConflictError("Email belongs to an account that cannot be linked as a parent")
        else:
            if not data.get("password"):
                raise ValidationError("Password is required for a new parent account", field="password")
            parent = User(
                email=data["email"],
                full_name=data.get("full_name"),
                hashed_password=get_password_hash(data["password"]),
                role=UserRole.PARENT,
                school_id=self.school_id,
                phone=data.get("phone"),
                is_verified=True,
            )
            self.db.add(parent)
            await self.db.flush()

        existing = await self.db.execute(
            select(ParentStudentLink.id).where(
                ParentStudentLink.parent_user_id == parent.id,
                ParentStudentLink.student_id == student.id,
            )
        )
        if existing.first():
            raise ConflictError("Parent is already linked to this student")

        link = ParentStudentLink(
            parent_user_id=parent.id,
            student_id=student.id,
            relationship_type=data.get("relationship_type") or "guardian",
            is_primary=bool(data.get("is_primary")),
        )
        self.db.add(link)
        await self.db.flush()

        await self.audit.record(
            AuditAction.ACCESS_GRANTED,
            "student",
            student.id,
            user_id=linked_by,
            school_id=self.school_id,
            severity=AuditSeverity.MEDIUM,
            details={"parent_user_id": parent.id, "relationship_type": link.relationship_type},
        )
        await self.db.commit()

        logger.info(f"Linked parent {parent.id} to student {student.id}")
        return link

    # =====================================================
    # LIFECYCLE
    # =====================================================

    async def promote_students(self, data: Dict[str, Any], promoted_by: str) -> Dict[str, Any]:
        """
        Move the active students of one grade to the next.

        The selection narrows by section and/or explicit student ids. Each
        promoted student gets a promotion_history entry; students in other
        grades or with another status are left alone.
        """
        from_grade = data["grade_level"]
        to_grade = data.get("target_grade_level") or next_grade_level(from_grade)
        if not to_grade:
            raise ValidationError(
                f"Cannot work out the grade after '{from_grade}'; give target_grade_level",
                field="target_grade_level",
            )
        if to_grade == from_grade:
            raise ValidationError("Target grade must differ from the current grade", field="target_grade_level")

        query = select(Student).where(
            Student.school_id == self.school_id,
            Student.grade_level == from_grade,
            Student.status == StudentStatus.ACTIVE,
        )
        if data.get("section"):
            query = query.where(Student.section == data["section"])
        if data.get("student_ids"):
            query = query.where(Student.id.in_(data["student_ids"]))
        students = list((await self.db.execute(query)).scalars().all())

        now = datetime.utcnow()
        for student in students:
            entry = {
                "from_grade": from_grade,
                "to_grade": to_grade,
                "from_section": student.section,
                "academic_year": settings.CURRENT_ACADEMIC_YEAR,
                "promoted_at": now.isoformat(),
            }
            # Reassign so the JSON column is flagged dirty
            student.promotion_history = [*(student.promotion_history or []), entry]
            student.grade_level = to_grade
            if data.get("target_section"):
                student.section = data["target_section"]
            await self.audit.record(
                AuditAction.DATA_UPDATED,
                "student",
                student.id,
                user_id=promoted_by,
                school_id=self.school_id,
                severity=AuditSeverity.LOW,
                details={"promotion": entry},
            )

        await self.db.commit()
        logger.info(f"Promoted {len(students)} students from {from_grade} to {to_grade}")
        return {
            "from_grade": from_grade,
            "to_grade": to_grade,
            "promoted": len(students),
            "student_ids": [s.id for s in students],
        }

    async def graduate_students(
        self,
        graduated_by: str,
        student_ids: Optional[List[str]] = None,
        graduation_year: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Graduate active final-grade students.

        Without student_ids every active student of FINAL_GRADE_LEVEL
        graduates. Listed students that are unknown, not active or not in the
        final grade are reported in errors and left unchanged.
        """
        year = graduation_year or date.today().year
        final_grade = settings.FINAL_GRADE_LEVEL
        errors = []

        if student_ids:
            result = await self.db.execute(
                select(Student).where(Student.school_id == self.school_id, Student.id.in_(student_ids))
            )
            students = list(result.scalars().all())
            found = {s.id for s in students}
            errors.extend(
                {"student_id": sid, "reason": "not_found"} for sid in student_ids if sid not in found
            )
        else:
            result = await self.db.execute(
                select(Student).where(
                    Student.school_id == self.school_id,
                    Student.grade_level == final_grade,
                    Student.status == StudentStatus.ACTIVE,
                )
            )
            students = list(result.scalars().all())

        graduated = []
        for student in students:
            if student.status != StudentStatus.ACTIVE:
                errors.append({"student_id": student.id, "reason": f"status_{student.status.value}"})
                continue
            if student.grade_level != final_grade:
                errors.append({"student_id": student.id, "reason": "not_final_grade"})
                continue

            student.status = StudentStatus.GRADUATED
            student.graduation_year = year
            graduated.append(student.id)
            await self.audit.record(
                AuditAction.STATUS_CHANGED,
                "student",
                student.id,
                user_id=graduated_by,
                school_id=self.school_id,
                severity=AuditSeverity.MEDIUM,
                details={"status": StudentStatus.GRADUATED.value, "graduation_year": year},
            )

        await self.db.commit()
        logger.info(f"Graduated {len(graduated)} students ({len(errors)} not eligible)")
        return {"graduated": len(graduated), "student_ids": graduated, "errors": errors}

    async def request_transfer(self, student_id: str, data: Dict[str, Any], requested_by: str) -> StudentTransfer:
        student = await self.get_student(student_id)
        if student.status != StudentStatus.ACTIVE:
            raise ValidationError(f"Student is {student.status.value} and cannot be transferred")

        pending = await self.db.execute(
            select(StudentTransfer.id).where(
                StudentTransfer.student_id == student.id,
                StudentTransfer.status == TransferStatus.INITIATED,
            )
        )
        if pending.first():
            raise ConflictError("Student already has a pending transfer request")

        transfer = StudentTransfer(
            school_id=self.school_id,
            student_id=student.id,
            from_grade=student.grade_level,
            from_section=student.section,
            requested_by=requested_by,
            **data,
        )
        self.db.add(transfer)
        await self.db.flush()

        await self.audit.record(
            AuditAction.DATA_CREATED,
            "student_transfer",
            transfer.id,
            user_id=requested_by,
            school_id=self.school_id,
            severity=AuditSeverity.MEDIUM,
            details={"student_id": student.id, "to_school_name": transfer.to_school_name},
        )
        await self.db.commit()
        return transfer

    async def list_transfers(self, status: Optional[TransferStatus] = None) -> List[StudentTransfer]:
        query = select(StudentTransfer).where(StudentTransfer.school_id == self.school_id)
        if status:
            query = query.where(StudentTransfer.status == status)
        result = await self.db.execute(query.order_by(StudentTransfer.created_at.desc()))
        return list(result.scalars().all())

    async def review_transfer(
        self, transfer_id: str, status: TransferStatus, notes: Optional[str], reviewed_by: str
    ) -> StudentTransfer:
        """Decide an initiated transfer; approval marks the student transferred"""
        result = await self.db.execute(
            select(StudentTransfer).where(
                StudentTransfer.id == transfer_id,
                StudentTransfer.school_id == self.school_id,
            )
        )
        transfer = result.scalar_one_or_none()
        if not transfer:
            raise ResourceNotFoundError("Transfer", transfer_id)
        if status not in TRANSFER_DECISIONS or transfer.status != TransferStatus.INITIATED:
            raise InvalidStatusTransitionError(transfer.status.value, status.value)

        transfer.status = status
        transfer.review_notes = notes
        transfer.reviewed_by = reviewed_by
        transfer.reviewed_at = datetime.utcnow()

        if status == TransferStatus.APPROVED:
            student = await self.get_student(transfer.student_id)
            student.status = StudentStatus.TRANSFERRED

        await self.audit.record(
            AuditAction.STATUS_CHANGED,
            "student_transfer",
            transfer.id,
            user_id=reviewed_by,
            school_id=self.school_id,
            severity=AuditSeverity.MEDIUM,
            details={"student_id": transfer.student_id, "status": status.value},
        )
        await self.db.commit()

        logger.info(f"Transfer {transfer.id} for student {transfer.student_id} {status.value}")
        return transfer


async def get_children(db: AsyncSession, parent: User) -> list:
    result = await db.execute(
        select(Student)
        .join(ParentStudentLink, ParentStudentLink.student_id == Student.id)
        .where(ParentStudentLink.parent_user_id == parent.id)
        .order_by(Student.first_name)
    )
    return list(result.scalars().all())


def get_student_service(db: AsyncSession, school_id: str) -> StudentService:
    return StudentService(db, school_id)
