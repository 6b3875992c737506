# Pydantic schemas
from app.schemas.auth import (
    UserLogin,
    RefreshRequest,
    PasswordChange,
    Token,
    UserResponse,
    LoginResponse,
)
from app.schemas.school import (
    SchoolCreate,
    SchoolUpdate,
    SchoolResponse,
    SchoolListResponse,
    SchoolStatistics,
    SchoolAdminCreate,
)
from app.schemas.department import (
    DepartmentCreate,
    DepartmentUpdate,
    DepartmentResponse,
    DepartmentWithStaffResponse,
    DepartmentStatistics,
)
from app.schemas.staff import (
    StaffCreate,
    StaffStatusUpdate,
    StaffResponse,
    StaffDetailResponse,
    StaffListResponse,
)
from app.schemas.student import (
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    StudentListResponse,
    ParentLinkCreate,
    ParentLinkResponse,
)
