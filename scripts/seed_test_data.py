# scripts/seed_test_data.py
"""
Seed script for local HealthComm testing.
Creates one patient with a caretaker on the care team, plus a small pool of
doctors and caretakers for the matcher to choose from.

Characters:
- PATIENT: Maria Lopez - 68, type 2 diabetes and hypertension, opted in to auto-escalation
- CARETAKER: Sam Rivera - certified home-care aide, assigned to Maria
- DOCTORS: Dr. Priya Nair (cardiology), Dr. Tom Becker (endocrinology), Dr. Ana Costa (offline)

Run: python -m scripts.seed_test_data
"""

import asyncio
import uuid
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.auth.tokens import create_access_token
from healthcomm.common.database.database import async_session, close_db_connection, connect_to_db
from healthcomm.models.models import (
    Alert, AuditLog, Availability, CareProvider, CareTeamRole, CredentialVerification,
    DailyReport, Invitation, Notification, Patient, User, UserRole, VitalsReading,
)


async def clear_existing_data(db: AsyncSession):
    """Clear all test data (if needed for re-seeding)."""
    print("Clearing existing data...")

    # Delete in reverse order of dependencies
    for model in (
        Notification, AuditLog, Alert, VitalsReading, DailyReport,
        CredentialVerification, Invitation, CareProvider, Patient, User,
    ):
        await db.execute(delete(model))

    await db.commit()
    print("Data cleared")


def _user(email: str, role: UserRole, first_name: str, last_name: str) -> User:
    return User(id=uuid.uuid4(), email=email, role=role, first_name=first_name, last_name=last_name)


async def create_doctor(
    db: AsyncSession,
    email: str,
    first_name: str,
    last_name: str,
    specialization: str,
    years_in_practice: int,
    availability: Availability = Availability.AVAILABLE,
    max_patients: Optional[int] = None,
) -> User:
    print(f"Creating doctor: Dr. {first_name} {last_name}...")
    user = _user(email, UserRole.MEDICAL, first_name, last_name)
    db.add(user)
    db.add(CareProvider(
        user_id=user.id,
        provider_type=CareTeamRole.DOCTOR,
        availability=availability,
        specialization=specialization,
        years_in_practice=years_in_practice,
        max_patients=max_patients,
    ))
    return user


async def create_caretaker(
    db: AsyncSession,
    email: str,
    first_name: str,
    last_name: str,
    certified: bool,
    experience_years: int,
) -> User:
    print(f"Creating caretaker: {first_name} {last_name}...")
    user = _user(email, UserRole.CARETAKER, first_name, last_name)
    db.add(user)
    db.add(CareProvider(
        user_id=user.id,
        provider_type=CareTeamRole.CARETAKER,
        certified=certified,
        experience_years=experience_years,
    ))
    return user


async def create_patient(db: AsyncSession, caretaker: User) -> User:
    print("Creating patient: Maria Lopez...")
    user = _user("maria@test.com", UserRole.PATIENT, "Maria", "Lopez")
    db.add(user)
    db.add(Patient(
        user_id=user.id,
        chronic_conditions=["Type 2 Diabetes", "Hypertension"],
        assigned_caretaker_id=caretaker.id,
        auto_escalate_to_doctor=True,
    ))
    return user


async def seed_all_data(db: AsyncSession):
    """Seed all test data and print bearer tokens for each account."""
    print("\nStarting HealthComm Test Data Seed")
    print("=" * 50)

    await clear_existing_data(db)

    sam = await create_caretaker(db, "sam@test.com", "Sam", "Rivera", certified=True, experience_years=6)
    jo = await create_caretaker(db, "jo@test.com", "Jo", "Kim", certified=False, experience_years=1)
    priya = await create_doctor(db, "priya@test.com", "Priya", "Nair", "Cardiology", 15)
    tom = await create_doctor(db, "tom@test.com", "Tom", "Becker", "Endocrinology", 8, max_patients=5)
    ana = await create_doctor(db, "ana@test.com", "Ana", "Costa", "Family Medicine", 20, availability=Availability.OFFLINE)
    maria = await create_patient(db, sam)

    await db.commit()

    print("\n" + "=" * 50)
    print("Seed complete! Bearer tokens:")
    for label, user in (
        ("Patient", maria), ("Caretaker", sam), ("Caretaker", jo),
        ("Doctor", priya), ("Doctor", tom), ("Doctor", ana),
    ):
        print(f"   {label:<9} {user.email}: {create_access_token({'sub': str(user.id)})}")
    print(f"\n   Patient id: {maria.id}")
    print("=" * 50 + "\n")


# =============================================================================
# MAIN
# =============================================================================

async def main():
    """Run the seed script."""
    await connect_to_db()
    try:
        async with async_session() as db:
            try:
                await seed_all_data(db)
            except Exception as e:
                await db.rollback()
                print(f"\nError during seeding: {e}")
                raise
    finally:
        await close_db_connection()


if __name__ == "__main__":
    asyncio.run(main())
