import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_CACHE_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.models import Property, PropertyType, User  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
FixtureSessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = FixtureSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app_db():
    """A session configured like the ones the API handlers get"""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, email: str, role: str) -> User:
    user = User(email=email, name=email.split("@")[0], role=role)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@hosteed.com", "ADMIN")


@pytest.fixture
def host(db):
    return _make_user(db, "host@hosteed.com", "HOST")


@pytest.fixture
def other_host(db):
    return _make_user(db, "other.host@hosteed.com", "HOST")


@pytest.fixture
def guest(db):
    return _make_user(db, "guest@hosteed.com", "USER")


@pytest.fixture
def villa_type(db):
    property_type = PropertyType(name="Villa", description="Whole villa")
    db.add(property_type)
    db.commit()
    return property_type


@pytest.fixture
def villa(db, host, villa_type):
    prop = Property(
        name="Villa Ivato",
        owner_id=host.id,
        type_id=villa_type.id,
        base_price=100,
        base_price_mga=450000,
        latitude=-18.8792,
        longitude=47.5079,
    )
    db.add(prop)
    db.commit()
    return prop


@pytest.fixture
async def client():
    from app.main import app, lifespan

    app.dependency_overrides[get_db] = override_get_db
    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
    app.dependency_overrides.clear()
