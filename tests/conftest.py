import os
import sys
import tempfile
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

_TEST_DB = Path(tempfile.gettempdir()) / "boost_portal_test.db"

os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DB}")
os.environ.setdefault("CLERK_JWT_ISSUER", "https://clerk.boost.test")
os.environ.setdefault("CLERK_JWKS_URL", "https://clerk.boost.test/.well-known/jwks.json")
os.environ.setdefault("SUPER_ADMIN_EMAIL_DOMAIN", "boostdata.io")
os.environ.setdefault("SITE_URL", "https://portal.boost.test")

import pytest
from fastapi.testclient import TestClient

from boost_portal.auth import clerk
from boost_portal.auth import dependencies as auth_dependencies
from boost_portal.auth.resolution import Principal, resolve_actor
from boost_portal.db.base import Base, SessionLocal, engine, init_db
from boost_portal.db.enums import CampaignStatusEnum, UserRoleEnum
from boost_portal.db.models import Campaign, Company, UserProfile
from boost_portal.main import app


def fake_verify_clerk_token(token: str) -> dict:
    """Test tokens are ``<user id>:<email>``."""
    user_id, _, email = token.partition(":")
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    return claims


class Seeder:
    """Writes rows directly, bypassing the policy engine, to set up scenarios."""

    def __init__(self, session) -> None:
        self.session = session
        self.emails: dict[str, str] = {}

    def company(self, name: str = "Acme Media", account_id: str | None = None) -> Company:
        company = Company(name=name, account_id=account_id)
        self.session.add(company)
        self.session.commit()
        self.session.refresh(company)
        return company

    def profile(
        self,
        user_id: str,
        *,
        company: Company | None = None,
        role: UserRoleEnum = UserRoleEnum.user,
        email: str | None = None,
    ) -> UserProfile:
        email = email or f"{user_id}@example.com"
        profile = UserProfile(
            id=user_id,
            email=email,
            name=user_id.capitalize(),
            role=role,
            company_id=company.id if company else None,
        )
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)
        self.emails[user_id] = email
        return profile

    def campaign(
        self,
        owner_id: str,
        *,
        name: str = "Spring launch",
        status: CampaignStatusEnum = CampaignStatusEnum.draft,
    ) -> Campaign:
        campaign = Campaign(name=name, client_id=owner_id, status=status)
        self.session.add(campaign)
        self.session.commit()
        self.session.refresh(campaign)
        return campaign

    def email_for(self, user_id: str) -> str:
        return self.emails.get(user_id, f"{user_id}@example.com")

    def actor(self, user_id: str, email: str | None = None):
        return resolve_actor(self.session, Principal(id=user_id, email=email or self.email_for(user_id)))

    def headers(self, user_id: str, email: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {user_id}:{email or self.email_for(user_id)}"}


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    init_db()
    clerk._cache.clear()
    yield


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seed(db_session) -> Seeder:
    return Seeder(db_session)


@pytest.fixture()
def api_client(monkeypatch):
    monkeypatch.setattr(auth_dependencies, "verify_clerk_token", fake_verify_clerk_token)
    app.dependency_overrides.clear()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
