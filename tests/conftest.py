import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from mmc_admin.main import app
from mmc_admin.database.engine import get_db
from mmc_admin.core.storage import UploadManager, get_upload_manager
from mmc_admin.core.audit_log import get_audit_logger
from mmc_admin.models.user import User, UserRole
from mmc_admin.core.auth import get_password_hash

# Test database setup
@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session

@pytest.fixture(name="upload_manager")
def upload_manager_fixture(tmp_path):
    manager = UploadManager(upload_dir=str(tmp_path / "uploads"), url_prefix="/uploads")
    manager.ensure_directories()
    return manager

@pytest.fixture(name="client")
def client_fixture(session: Session, upload_manager: UploadManager):
    def get_session_override():
        return session

    app.dependency_overrides[get_db] = get_session_override
    app.dependency_overrides[get_upload_manager] = lambda: upload_manager
    # Unhandled errors must come back as 500 responses, not test failures
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()

@pytest.fixture(autouse=True)
def clear_audit_log():
    get_audit_logger().clear()
    yield
    get_audit_logger().clear()

@pytest.fixture(name="admin_headers")
def admin_headers_fixture(client: TestClient):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture(name="stored_user")
def stored_user_fixture(session: Session):
    user = User(
        username="manager",
        email="manager@example.com",
        password_hash=get_password_hash("ManagerPass123"),
        role=UserRole.admin,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

@pytest.fixture(name="editor_headers")
def editor_headers_fixture(client: TestClient, session: Session):
    user = User(
        username="writer",
        email="writer@example.com",
        password_hash=get_password_hash("WriterPass123"),
        role=UserRole.editor,
    )
    session.add(user)
    session.commit()

    response = client.post("/api/auth/login", json={"username": "writer", "password": "WriterPass123"})
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}
