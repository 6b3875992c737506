# Re-export all models for convenient imports
from app.models.school import School, SchoolType, SchoolStatus, SubscriptionPlan
from app.models.user import User, UserRole
from app.models.staff import (
    Department, DepartmentType, Staff, StaffType, StaffStatus, EmploymentType, staff_departments,
)
from app.models.student import (
    Student, StudentStatus, Gender, ParentStudentLink, StudentTransfer, TransferType, TransferReason, TransferStatus,
)
from app.models.academic import (
    GradeRecord, AssessmentType, AttendanceRecord, AttendanceStatus, Assignment,
    AssignmentSubmission, SubmissionStatus, TimetableEntry, DayOfWeek,
)
from app.models.wellness import (
    WellnessRecord, WellnessGoal, CounselingRequest, MoodLevel, WellnessStatus,
    PhysicalActivity, GoalStatus, CounselingCategory, CounselingStatus,
)
from app.models.career import (
    CareerProfile, CareerAssessmentAttempt, CareerGoal, OpportunityApplication, CollegeFavorite,
    AssessmentStatus, CareerGoalStatus, ApplicationStatus,
)
from app.models.fee import (
    FeeItem, FeePayment, PaymentPlan, Scholarship, ScholarshipApplication, FeeCategory,
    PaymentMethod, PaymentStatus, PlanFrequency, ScholarshipApplicationStatus,
)
from app.models.library import (
    Book, BookLoan, BookReservation, LibraryFine, BookFormat, LoanStatus, ReservationStatus, FineStatus,
)
from app.models.transportation import TransportRoute, StudentTransport, TransportFeedback
from app.models.emergency import (
    EmergencyReport, SafetyCheck, EmergencyType, EmergencySeverity, EmergencyStatus, SafetyStatus,
)
from app.models.self_service import (
    LeaveRequest, DocumentRequest, ServiceRequest, LeaveType, RequestStatus, DocumentType,
)
from app.models.notification import Notification
from app.models.mobile_device import MobileDevice
from app.models.audit_log import AuditLog, AuditAction, AuditSeverity
from app.models.activity_tracking import StudentActivity, ActivityType

__all__ = [
    # Tenancy
    "School",
    "SchoolType",
    "SchoolStatus",
    "SubscriptionPlan",
    "User",
    "UserRole",
    # Staff
    "Department",
    "DepartmentType",
    "Staff",
    "StaffType",
    "StaffStatus",
    "EmploymentType",
    "staff_departments",
    # Students
    "Student",
    "StudentStatus",
    "Gender",
    "ParentStudentLink",
    "StudentTransfer",
    "TransferType",
    "TransferReason",
    "TransferStatus",
    # Academic
    "GradeRecord",
    "AssessmentType",
    "AttendanceRecord",
    "AttendanceStatus",
    "Assignment",
    "AssignmentSubmission",
    "SubmissionStatus",
    "TimetableEntry",
    "DayOfWeek",
    # Wellness
    "WellnessRecord",
    "WellnessGoal",
    "CounselingRequest",
    "MoodLevel",
    "WellnessStatus",
    "PhysicalActivity",
    "GoalStatus",
    "CounselingCategory",
    "CounselingStatus",
    # Career
    "CareerProfile",
    "CareerAssessmentAttempt",
    "CareerGoal",
    "OpportunityApplication",
    "CollegeFavorite",
    "AssessmentStatus",
    "CareerGoalStatus",
    "ApplicationStatus",
    # Fees
    "FeeItem",
    "FeePayment",
    "PaymentPlan",
    "Scholarship",
    "ScholarshipApplication",
    "FeeCategory",
    "PaymentMethod",
    "PaymentStatus",
    "PlanFrequency",
    "ScholarshipApplicationStatus",
    # Library
    "Book",
    "BookLoan",
    "BookReservation",
    "LibraryFine",
    "BookFormat",
    "LoanStatus",
    "ReservationStatus",
    "FineStatus",
    # Transportation
    "TransportRoute",
    "StudentTransport",
    "TransportFeedback",
    # Emergency
    "EmergencyReport",
    "SafetyCheck",
    "EmergencyType",
    "EmergencySeverity",
    "EmergencyStatus",
    "SafetyStatus",
    # Self-service
    "LeaveRequest",
    "DocumentRequest",
    "ServiceRequest",
    "LeaveType",
    "RequestStatus",
    "DocumentType",
    # Misc
    "Notification",
    "MobileDevice",
    "AuditLog",
    "AuditAction",
    "AuditSeverity",
    "StudentActivity",
    "ActivityType",
]
