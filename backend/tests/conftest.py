"""
Academia Pro - Test Configuration and Fixtures
"""
import os
from datetime import date
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_academia.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['REDIS_URL'] = ''

from app.main import app
from app.core.database import Base, get_db
from app.core.security import get_password_hash, create_token_pair
from app.models.school import School
from app.models.staff import Staff, StaffType
from app.models.student import Student, ParentStudentLink
from app.models.user import User, UserRole

fake = Faker()

PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_academia.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def auth_header(user: User) -> dict:
    """Bearer header for a user"""
    token = create_token_pair(user)['access_token']
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def _add(db_session: AsyncSession, *objects):
    db_session.add_all(objects)
    await db_session.commit()
    for obj in objects:
        await db_session.refresh(obj)
    return objects[0] if len(objects) == 1 else objects


def _user(role: UserRole, school: School = None, **kwargs) -> User:
    return User(
        email=kwargs.pop('email', None) or f"{fake.user_name()}.{fake.random_int(1000, 9999)}@example.com",
        hashed_password=get_password_hash(PASSWORD),
        full_name=kwargs.pop('full_name', None) or fake.name(),
        role=role,
        school_id=school.id if school else None,
        is_active=True,
        is_verified=True,
        **kwargs
    )


@pytest.fixture
async def school(db_session: AsyncSession) -> School:
    return await _add(db_session, School(name='Greenwood High', code='GWH001'))


@pytest.fixture
async def other_school(db_session: AsyncSession) -> School:
    return await _add(db_session, School(name='Riverside Academy', code='RSA002'))


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await _add(db_session, _user(UserRole.SUPER_ADMIN))


@pytest.fixture
async def school_admin(db_session: AsyncSession, school: School) -> User:
    return await _add(db_session, _user(UserRole.SCHOOL_ADMIN, school))


@pytest.fixture
async def other_school_admin(db_session: AsyncSession, other_school: School) -> User:
    return await _add(db_session, _user(UserRole.SCHOOL_ADMIN, other_school))


@pytest.fixture
async def teacher_user(db_session: AsyncSession, school: School) -> User:
    return await _add(db_session, _user(UserRole.STAFF, school))


@pytest.fixture
async def teacher(db_session: AsyncSession, school: School, teacher_user: User) -> Staff:
    return await _add(db_session, Staff(
        school_id=school.id,
        user_id=teacher_user.id,
        employee_id='EMP001',
        first_name='Maya',
        last_name='Rao',
        email=teacher_user.email,
        staff_type=StaffType.TEACHING,
        designation='Mathematics Teacher',
    ))


@pytest.fixture
async def student_user(db_session: AsyncSession, school: School) -> User:
    return await _add(db_session, _user(UserRole.STUDENT, school))


@pytest.fixture
async def student(db_session: AsyncSession, school: School, student_user: User) -> Student:
    return await _add(db_session, Student(
        school_id=school.id,
        user_id=student_user.id,
        admission_number='ADM001',
        first_name='Aarav',
        last_name='Shah',
        grade_level='Grade 10',
        section='A',
        roll_number='1',
        email=student_user.email,
        enrollment_date=date(2024, 6, 1),
    ))


@pytest.fixture
async def classmate(db_session: AsyncSession, school: School) -> Student:
    """A student without a login"""
    return await _add(db_session, Student(
        school_id=school.id,
        admission_number='ADM002',
        first_name='Diya',
        last_name='Menon',
        grade_level='Grade 10',
        section='A',
        roll_number='2',
    ))


@pytest.fixture
async def outside_student(db_session: AsyncSession, other_school: School) -> Student:
    return await _add(db_session, Student(
        school_id=other_school.id,
        admission_number='ADM001',
        first_name='Kabir',
        last_name='Das',
        grade_level='Grade 10',
    ))


@pytest.fixture
async def parent_user(db_session: AsyncSession, school: School, student: Student) -> User:
    parent = await _add(db_session, _user(UserRole.PARENT, school))
    await _add(db_session, ParentStudentLink(
        parent_user_id=parent.id,
        student_id=student.id,
        relationship_type='mother',
        is_primary=True,
    ))
    return parent


@pytest.fixture
def admin_headers(school_admin: User) -> dict:
    return auth_header(school_admin)


@pytest.fixture
def teacher_headers(teacher_user: User, teacher: Staff) -> dict:
    return auth_header(teacher_user)


@pytest.fixture
def student_headers(student_user: User, student: Student) -> dict:
    return auth_header(student_user)


@pytest.fixture
def parent_headers(parent_user: User) -> dict:
    return auth_header(parent_user)


@pytest.fixture
def super_admin_headers(super_admin: User) -> dict:
    return auth_header(super_admin)


@pytest.fixture
def headers_for():
    """Build auth headers for any user created inside a test"""
    return auth_header
