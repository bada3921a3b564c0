import os
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from portal.auth.authorizer import CurrentUser  # noqa: E402
from portal.auth.dependencies import get_db  # noqa: E402
from portal.auth.passwords import hash_password  # noqa: E402
from portal.database import Base  # noqa: E402
from portal.main import app  # noqa: E402
from portal.models.admin_info import AdminProfile  # noqa: E402
from portal.models.alumni_profile import AlumniProfile  # noqa: E402
from portal.models.auth_session import AuthSessionRecord  # noqa: E402, F401
from portal.models.inquiry import Inquiry  # noqa: E402
from portal.models.student_info import StudentProfile  # noqa: E402
from portal.models.user import Role, User  # noqa: E402
from portal.remote.tables import TableClient  # noqa: E402

TEST_PASSWORD = 'correct-horse'


def at(day: int, hour: int = 9) -> datetime:
    return datetime(2026, 10, day, hour, 0, tzinfo=timezone.utc)


class Seeder:
    """Writes fixture rows straight through the session."""

    def __init__(self, db):
        self.db = db

    def _commit(self, *rows):
        self.db.add_all(rows)
        self.db.commit()

    def user(self, uid: str, email: str, role: str, password: str | None = None, created_at: datetime | None = None) -> User:
        user = User(
            uid=uid,
            email=email,
            role=role,
            hashed_password=hash_password(password, rounds=4) if password else None,
            created_at=created_at or at(1),
        )
        self._commit(user)
        return user

    def admin(
        self,
        uid: str = 'admin-1',
        email: str = 'admin@example.com',
        role: str = Role.ADMIN.value,
        full_name: str = 'Ada Admin',
        password: str | None = TEST_PASSWORD,
        created_at: datetime | None = None,
    ) -> User:
        user = self.user(uid, email, role, password=password, created_at=created_at)
        self._commit(AdminProfile(user_uid=uid, staff_id='ADMIN000001', full_name=full_name, department='Registry'))
        return user

    def alumni(self, uid: str, email: str, full_name: str, is_verified: bool = False, created_at: datetime | None = None, **fields) -> AlumniProfile:
        self.user(uid, email, Role.ALUMNI.value, created_at=created_at)
        profile = AlumniProfile(
            user_uid=uid,
            full_name=full_name,
            course_code=fields.pop('course_code', 'CS101'),
            graduation_year=fields.pop('graduation_year', 2020),
            is_verified=is_verified,
            created_at=created_at or at(1),
            **fields,
        )
        self._commit(profile)
        return profile

    def student(self, uid: str, email: str, full_name: str, student_id: str = 'S1001', created_at: datetime | None = None) -> StudentProfile:
        self.user(uid, email, Role.STUDENT.value, created_at=created_at)
        profile = StudentProfile(user_uid=uid, student_id=student_id, full_name=full_name, course_code='CS101')
        self._commit(profile)
        return profile

    def inquiry(
        self,
        student_uid: str | None,
        alumni_uid: str | None,
        subject_area: str = 'Career advice',
        status: str = 'pending',
        message: str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Inquiry:
        inquiry = Inquiry(
            student_uid=student_uid,
            alumni_uid=alumni_uid,
            subject_area=subject_area,
            status=status,
            message=message,
            created_at=created_at or at(1),
            updated_at=updated_at,
        )
        self._commit(inquiry)
        return inquiry


@pytest.fixture()
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def table_client(db_session) -> TableClient:
    return TableClient(db_session)


@pytest.fixture()
def seed(db_session) -> Seeder:
    return Seeder(db_session)


@pytest.fixture()
def admin_user() -> CurrentUser:
    return CurrentUser(uid='admin-1', email='admin@example.com', role=Role.ADMIN, full_name='Ada Admin')


@pytest.fixture()
def super_admin_user() -> CurrentUser:
    return CurrentUser(uid='root-1', email='root@example.com', role=Role.SUPER_ADMIN, full_name='Root Admin')


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def login(client):
    def _login(email: str, password: str = TEST_PASSWORD):
        response = client.post('/login', data={'email': email, 'password': password}, follow_redirects=False)
        assert response.status_code == 303, response.text
        return response

    return _login
