# This project was developed with assistance from AI tools.
"""Schema tests against an in-memory SQLite database."""

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from db import Base, Case, CaseNumberSequence, CaseTimelineEntry, DatabaseService
from db.enums import CaseStatus


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await DatabaseService(engine=eng).create_all()
    yield eng
    await eng.dispose()


def _case(number: str) -> Case:
    return Case(
        case_number=number,
        subcontractor_id="sc-1",
        created_by="user-1",
        buyer_details={"buyer_name": "Acme EPC", "project_name": "Metro"},
        invoice_details={"invoice_number": "INV-1", "invoice_amount": "600000"},
        cwc_request={"requested_amount": "500000", "requested_tenure": 30},
        interest_preference={"preference_type": "RANGE"},
    )


@pytest.mark.asyncio
async def test_database_connection(engine):
    assert await DatabaseService(engine=engine).health_check() is True
    async with engine.connect() as conn:
        result = await conn.execute(text("SELECT 1"))
        assert result.scalar() == 1


@pytest.mark.asyncio
async def test_case_defaults(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add(_case("CWCRF-000001"))
        await session.commit()

        row = (await session.execute(select(Case))).scalar_one()
        assert row.status == CaseStatus.SUBMITTED
        assert row.version == 1
        assert len(row.id) == 36


@pytest.mark.asyncio
async def test_case_number_unique(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add(_case("CWCRF-000001"))
        await session.commit()
        session.add(_case("CWCRF-000001"))
        with pytest.raises(IntegrityError):
            await session.commit()


@pytest.mark.asyncio
async def test_timeline_sequence_unique_per_case(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        case = _case("CWCRF-000002")
        session.add(case)
        await session.flush()
        session.add(CaseTimelineEntry(case_id=case.id, sequence=1, status=CaseStatus.SUBMITTED))
        session.add(CaseTimelineEntry(case_id=case.id, sequence=1, status=CaseStatus.BUYER_PENDING))
        with pytest.raises(IntegrityError):
            await session.commit()


@pytest.mark.asyncio
async def test_sequence_allocates_increasing_ids(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        first = CaseNumberSequence()
        second = CaseNumberSequence()
        session.add(first)
        await session.flush()
        session.add(second)
        await session.flush()
        assert second.id > first.id
