import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from estatehub.core.config import settings
from estatehub.core.database import Base, get_db
from estatehub.main import app
from estatehub.models import (
    User, UserRole, Property, DealType, PropertyType, PropertyStatus,
)
from estatehub.utils.auth import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.BUYER, name=None, **extra):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=f"user{counter['n']}@estatehub.io",
            password_hash="not-a-real-hash",
            role=role,
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def owner(make_user):
    return make_user(UserRole.OWNER, name="Olivia Owner", phone="+919800000001")


@pytest.fixture
def broker(make_user):
    return make_user(UserRole.BROKER, name="Bram Broker")


@pytest.fixture
def buyer(make_user):
    return make_user(UserRole.BUYER, name="Bea Buyer")


@pytest.fixture
def make_property(db):
    def _make(listed_by, **overrides):
        fields = dict(
            title="Sunny 3BHK",
            description="Close to the metro",
            price=100,
            deal_type=DealType.SALE,
            property_type=PropertyType.APARTMENT,
            beds=3,
            baths=2,
            area=1200,
            city="Pune",
            locality="Baner",
            address="12 Hill Road",
            pincode="411045",
            images=["/a.jpg"],
            status=PropertyStatus.ACTIVE,
        )
        fields.update(overrides)
        prop = Property(listed_by_id=listed_by.id, **fields)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop

    return _make


def auth_headers(user) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
