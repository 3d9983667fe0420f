"""
Pytest configuration and fixtures for survey analytics tests.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from survey_analytics.config import SecurityConfig, SurveyServiceConfig
from survey_analytics.domain.questionnaires import MENTAL_HEALTH_QUESTIONS, PHOBIA_QUESTIONS
from survey_analytics.domain.scoring import categorize_phobia, categorize_wellness
from survey_analytics.exceptions import StoreError
from survey_analytics.infrastructure.repository import InMemoryRecordStore
from survey_analytics.schemas import AgeGroup, MentalHealthRecord, PhobiaRecord
from survey_analytics.security import AdminCapability, JWTIdentityProvider

JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes"


class FlakyRecordStore(InMemoryRecordStore):
    """In-memory store that can fail or stall selected tables."""

    def __init__(self, failing: set[str] | None = None, slow: set[str] | None = None,
                 delay: float = 0.5, fail_inserts: bool = False,
                 broken: set[str] | None = None) -> None:
        super().__init__()
        self.failing = failing or set()
        self.broken = broken or set()
        self.slow = slow or set()
        self.delay = delay
        self.fail_inserts = fail_inserts
        self.insert_calls = 0
        self.queried: list[str] = []

    async def insert(self, table_key, record):
        self.insert_calls += 1
        if self.fail_inserts:
            raise StoreError("insert rejected", table_key=table_key)
        await super().insert(table_key, record)

    async def query(self, table_key, since=None):
        self.queried.append(table_key)
        if table_key in self.failing:
            raise StoreError("query failed", table_key=table_key)
        if table_key in self.broken:
            raise RuntimeError(f"driver crashed on {table_key}")
        if table_key in self.slow:
            await asyncio.sleep(self.delay)
        return await super().query(table_key, since=since)


def _mental_health_record(score: int = 60, category: str | None = None, region: str = "North",
                          age_group: str = "25-34", submitted_at: datetime | None = None,
                          answer: int = 3) -> MentalHealthRecord:
    return MentalHealthRecord(
        **{q.id: answer for q in MENTAL_HEALTH_QUESTIONS},
        wellness_score=score,
        severity_category=category or categorize_wellness(score),
        region=region,
        age_group=AgeGroup(age_group),
        submitted_at=submitted_at,
    )


def _phobia_record(intensity: int = 50, risk: str | None = None, region: str = "North",
                   age_group: str = "25-34", duration_months: int = 6,
                   submitted_at: datetime | None = None, answer: int = 3) -> PhobiaRecord:
    return PhobiaRecord(
        **{q.id: answer for q in PHOBIA_QUESTIONS},
        duration_months=duration_months,
        intensity_percentage=intensity,
        risk_level=risk or categorize_phobia(intensity),
        region=region,
        age_group=AgeGroup(age_group),
        submitted_at=submitted_at,
    )


@pytest.fixture
def mental_health_record():
    """Factory for mental-wellness records."""
    return _mental_health_record


@pytest.fixture
def phobia_record():
    """Factory for phobia records."""
    return _phobia_record


@pytest.fixture
def store():
    """Create an in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def flaky_store_factory():
    """Factory for stores with failing or slow tables."""
    return FlakyRecordStore


@pytest.fixture
def seed(store):
    """Insert records into the shared in-memory store."""
    async def _seed(table_key, records):
        for record in records:
            await store.insert(table_key, record)
    return _seed


def make_token(sub: str = "admin-user", role: str | list[str] | None = "admin",
               secret: str = JWT_SECRET, expires_in: timedelta = timedelta(hours=1),
               **claims) -> str:
    """Sign a bearer JWT shaped like the hosted auth service's session tokens."""
    now = datetime.now(timezone.utc)
    payload = {"sub": sub, "aud": "authenticated", "iat": now, "exp": now + expires_in, **claims}
    if role is not None:
        payload["app_metadata"] = {"role": role}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def token_factory():
    """Factory for signed bearer JWTs."""
    return make_token


@pytest.fixture
def capability():
    """Create an admin capability."""
    return AdminCapability(subject="admin")


@pytest.fixture
def identity_provider():
    """Create a JWT identity provider."""
    return JWTIdentityProvider(JWT_SECRET, audience="authenticated")


@pytest.fixture
def service_config():
    """Create a service configuration with a JWT secret."""
    return SurveyServiceConfig(security=SecurityConfig(jwt_secret=JWT_SECRET))


@pytest.fixture
def admin_headers():
    """Bearer headers carrying an admin JWT."""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def fixed_now():
    """Fixed reference time for window calculations."""
    return datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)
