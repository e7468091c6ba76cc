"""Shared fixtures: an in-memory database per test, model factories and an API client."""

import os

# Configure before any healthcomm import reads settings.
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "warning"

import uuid
from typing import Iterable, Optional, Tuple

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from healthcomm.auth.tokens import create_access_token
from healthcomm.common.database.database import get_db_session
from healthcomm.models.models import (
    Availability, Base, CareProvider, CareTeamRole, Patient, User, UserRole,
)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class Factory:
    """Creates committed users, patients and providers."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _user(self, role: UserRole, first_name: str, last_name: str,
                    email: Optional[str], user_id: Optional[uuid.UUID], is_active: bool = True) -> User:
        user_id = user_id or uuid.uuid4()
        user = User(
            id=user_id,
            email=email or f"{first_name.lower()}.{user_id.hex}@example.com",
            role=role,
            first_name=first_name,
            last_name=last_name,
            is_active=is_active,
        )
        self.session.add(user)
        return user

    async def user(self, role: UserRole, first_name: str = "Robin", last_name: str = "Gray",
                   email: Optional[str] = None) -> User:
        """A bare account with no patient or provider record."""
        user = await self._user(role, first_name, last_name, email, None)
        await self.session.commit()
        return user

    async def patient(self, first_name: str = "Pat", last_name: str = "Smith",
                      conditions: Iterable[str] = (), email: Optional[str] = None,
                      user_id: Optional[uuid.UUID] = None, **fields) -> Tuple[User, Patient]:
        user = await self._user(UserRole.PATIENT, first_name, last_name, email, user_id)
        patient = Patient(user_id=user.id, chronic_conditions=list(conditions), **fields)
        self.session.add(patient)
        await self.session.commit()
        return user, patient

    async def doctor(self, first_name: str = "Dana", last_name: str = "House",
                     specialization: Optional[str] = "Family Medicine", years_in_practice: int = 0,
                     availability: Availability = Availability.AVAILABLE,
                     max_patients: Optional[int] = None, email: Optional[str] = None,
                     user_id: Optional[uuid.UUID] = None, is_active: bool = True) -> User:
        user = await self._user(UserRole.MEDICAL, first_name, last_name, email, user_id, is_active)
        self.session.add(CareProvider(
            user_id=user.id,
            provider_type=CareTeamRole.DOCTOR,
            availability=availability,
            specialization=specialization,
            years_in_practice=years_in_practice,
            max_patients=max_patients,
        ))
        await self.session.commit()
        return user

    async def caretaker(self, first_name: str = "Casey", last_name: str = "Jones",
                        certified: bool = False, experience_years: int = 0,
                        availability: Availability = Availability.AVAILABLE,
                        max_patients: Optional[int] = None, email: Optional[str] = None,
                        user_id: Optional[uuid.UUID] = None) -> User:
        user = await self._user(UserRole.CARETAKER, first_name, last_name, email, user_id)
        self.session.add(CareProvider(
            user_id=user.id,
            provider_type=CareTeamRole.CARETAKER,
            availability=availability,
            certified=certified,
            experience_years=experience_years,
            max_patients=max_patients,
        ))
        await self.session.commit()
        return user


@pytest.fixture
def make(db):
    return Factory(db)


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory):
    from healthcomm.main import app

    async def override_session():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return auth_headers
