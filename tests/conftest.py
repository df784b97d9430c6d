import base64
import os
import tempfile
import time

# settings are read at import time, so the environment is prepared first
_tmp_dir = tempfile.mkdtemp(prefix="skyyield-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["CLERK_JWT_KEY"] = "test-secret"
os.environ["CLERK_JWT_ALGORITHM"] = "HS256"
os.environ["CLERK_AUTHORIZED_PARTIES"] = ""
os.environ["CLERK_SECRET_KEY"] = ""
os.environ["CLERK_WEBHOOK_SECRET"] = "whsec_" + base64.b64encode(b"clerk-webhook-secret").decode()
os.environ["TIPALTI_WEBHOOK_SECRET"] = "tipalti-webhook-secret"
os.environ["DOCUSEAL_WEBHOOK_SECRET"] = "docuseal-webhook-secret"
os.environ["TIPALTI_API_KEY"] = "tipalti-api-key"
os.environ["TIPALTI_HMAC_SECRET"] = "tipalti-hmac-secret"
os.environ["TIPALTI_PAYER_NAME"] = "SkyYield"
os.environ["COINGECKO_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from shared.core.database import Base, SessionLocal, engine
from shared.models.partners import LocationPartner, ReferralPartner
from shared.models.users import User
from identity_service.app.main import app as identity_app
from portal_service.app.main import app as portal_app

TEST_JWT_KEY = "test-secret"


def make_token(sub: str, expires_in: int = 3600, **claims) -> str:
    payload = {"sub": sub, "sid": f"sess_{sub}", "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, TEST_JWT_KEY, algorithm="HS256")


def auth_headers(sub: str, **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, **claims)}"}


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def identity_client():
    return TestClient(identity_app)


@pytest.fixture
def portal_client():
    return TestClient(portal_app)


@pytest.fixture
def make_user(db):
    def factory(clerk_id: str, user_type: str = None, is_admin: bool = False,
                status: str = "approved", location_partner_ids=None,
                referral_partner_ids=None, email: str = None, **fields) -> User:
        user = User(
            clerk_id=clerk_id,
            email=email or f"{clerk_id}@example.com",
            first_name=fields.pop("first_name", clerk_id.title()),
            last_name=fields.pop("last_name", "Tester"),
            user_type=user_type,
            is_admin=is_admin,
            roles=[user_type] if user_type else [],
            status=status,
            is_approved=status == "approved",
            location_partner_ids=[str(i) for i in (location_partner_ids or [])],
            referral_partner_ids=[str(i) for i in (referral_partner_ids or [])],
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return factory


@pytest.fixture
def admin(make_user):
    return make_user("admin_1", user_type="admin", is_admin=True)


@pytest.fixture
def employee(make_user):
    return make_user("employee_1", user_type="employee")


@pytest.fixture
def location_partner(db):
    partner = LocationPartner(
        company_legal_name="Coffee Co LLC",
        dba_name="Coffee Co",
        contact_first_name="Ada",
        contact_last_name="Barista",
        contact_email="ada@coffee.example.com",
        pipeline_stage="initial_review",
        tags=[],
    )
    db.add(partner)
    db.commit()
    db.refresh(partner)
    return partner


@pytest.fixture
def other_location_partner(db):
    partner = LocationPartner(
        company_legal_name="Gym Corp",
        contact_email="owner@gym.example.com",
        pipeline_stage="application",
        tags=[],
    )
    db.add(partner)
    db.commit()
    db.refresh(partner)
    return partner


@pytest.fixture
def referral_partner(db):
    partner = ReferralPartner(
        contact_name="Rita Referrer",
        contact_email="rita@example.com",
        referral_code="SKYTEST01",
        commission_percentage=15,
    )
    db.add(partner)
    db.commit()
    db.refresh(partner)
    return partner


@pytest.fixture
def partner_user(make_user, location_partner):
    return make_user("partner_1", user_type="location_partner",
                     location_partner_ids=[location_partner.id])
