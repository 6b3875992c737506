from app.services.auth_service import AuthService
from app.services.school_service import SchoolService
from app.services.school_context_service import SchoolContext, SchoolContextService
from app.services.department_service import DepartmentService
from app.services.staff_service import StaffService
from app.services.student_service import StudentService

# Student portal services
from app.services.academic_service import AcademicService
from app.services.wellness_service import WellnessService
from app.services.career_service import CareerService
from app.services.fee_service import FeeService
from app.services.library_service import LibraryService
from app.services.transportation_service import TransportationService
from app.services.emergency_service import EmergencyService
from app.services.self_service_service import SelfServiceService
from app.services.dashboard_service import DashboardService
from app.services.mobile_service import MobileService

# Cross-cutting
from app.services.notification_service import NotificationService
from app.services.audit_service import AuditService

__all__ = [
    # Core services
    "AuthService",
    "SchoolService",
    "SchoolContext",
    "SchoolContextService",
    "DepartmentService",
    "StaffService",
    "StudentService",
    # Portal services
    "AcademicService",
    "WellnessService",
    "CareerService",
    "FeeService",
    "LibraryService",
    "TransportationService",
    "EmergencyService",
    "SelfServiceService",
    "DashboardService",
    "MobileService",
    # Cross-cutting
    "NotificationService",
    "AuditService",
]
