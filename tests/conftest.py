import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["LOG_TO_FILE"] = "false"
os.environ["COOKIE_SECURE"] = "false"

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

import pytest
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from schoolportal import create_app
from schoolportal.core.database import get_db
from schoolportal.core.redis import get_redis
from schoolportal.core.security import create_access_token, get_password_hash
from schoolportal.models import Base, Class, School, Student, User
from schoolportal.schemas.enums import UserRole

PASSWORD = "correct-horse-battery"
# bcrypt is slow on purpose; hash once for the whole run
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def redis():
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def app(session_factory, redis):
    app = create_app()

    async def override_get_db():
        session = session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def override_get_redis():
        return redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class QueryCounter:
    """Collects every SQL statement the engine sends"""

    def __init__(self):
        self.statements: List[str] = []

    def __call__(self, conn, cursor, statement, parameters, context, executemany):
        self.statements.append(statement)

    def matching(self, fragment: str) -> List[str]:
        return [s for s in self.statements if fragment in s]

    def reset(self):
        self.statements.clear()


@pytest.fixture
def query_counter(engine):
    counter = QueryCounter()
    event.listen(engine.sync_engine, "before_cursor_execute", counter)
    yield counter
    event.remove(engine.sync_engine, "before_cursor_execute", counter)


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user.id, user.role, user.school_id)
    return {"Authorization": f"Bearer {token}"}


async def make_user(
    session: AsyncSession,
    name: str,
    email: str,
    role: UserRole,
    school_id: Optional[int] = None,
    is_active: bool = True
) -> User:
    user = User(
        name=name,
        email=email,
        role=role,
        school_id=school_id,
        password_hash=PASSWORD_HASH,
        is_active=is_active
    )
    session.add(user)
    await session.flush()
    return user


@dataclass
class SeededSchool:
    school: School
    admin: User
    teacher: User
    other_teacher: User
    school_class: Class
    students: List[Student] = field(default_factory=list)
    student_users: List[User] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.school.id

    def headers(self, user: User) -> Dict[str, str]:
        return auth_headers(user)

    @property
    def admin_headers(self) -> Dict[str, str]:
        return auth_headers(self.admin)

    @property
    def teacher_headers(self) -> Dict[str, str]:
        return auth_headers(self.teacher)

    @property
    def student_headers(self) -> Dict[str, str]:
        return auth_headers(self.student_users[0])


async def seed_school(session: AsyncSession, slug: str, student_count: int = 2) -> SeededSchool:
    admin = await make_user(session, f"{slug} Admin", f"admin@{slug}.example.com", UserRole.SCHOOLADMIN)
    school = School(name=f"{slug.title()} High", address="1 Main Road", location="Town", admin_id=admin.id)
    session.add(school)
    await session.flush()
    admin.school_id = school.id

    teacher = await make_user(session, f"{slug} Teacher", f"teacher@{slug}.example.com", UserRole.TEACHER, school.id)
    other_teacher = await make_user(session, f"{slug} Aaron", f"aaron@{slug}.example.com", UserRole.TEACHER, school.id)

    school_class = Class(school_id=school.id, name="Grade 5", section="A", teacher_id=teacher.id)
    session.add(school_class)
    await session.flush()

    seeded = SeededSchool(
        school=school,
        admin=admin,
        teacher=teacher,
        other_teacher=other_teacher,
        school_class=school_class
    )
    for index in range(student_count):
        user = await make_user(
            session,
            f"{slug} Student {index}",
            f"student{index}@{slug}.example.com",
            UserRole.STUDENT,
            school.id
        )
        student = Student(
            user_id=user.id,
            school_id=school.id,
            class_id=school_class.id,
            father_name=f"Father {index}",
            phone_no="9999999999",
            aadhaar_no=f"1234{index}",
            dob=date(2012, 1, index + 1)
        )
        session.add(student)
        await session.flush()
        seeded.students.append(student)
        seeded.student_users.append(user)

    await session.commit()
    return seeded


@pytest.fixture
async def school_a(db) -> SeededSchool:
    return await seed_school(db, "alpha")


@pytest.fixture
async def school_b(db) -> SeededSchool:
    return await seed_school(db, "beta")
