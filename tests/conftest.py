"""
Pytest configuration and fixtures for backend testing
"""

import io
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.pool import NullPool

# Set test environment before the app reads it
_session_data_dir = tempfile.mkdtemp(prefix="scorm-data-")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATA_DIR"] = _session_data_dir
os.environ["AUTO_MIGRATE"] = "false"

from app.core.settings import Settings, get_settings  # noqa: E402
from app.db.config import get_session  # noqa: E402
from app.main import app as real_app  # noqa: E402
from app.models.persisted import Base as PersistedBase  # noqa: E402


IMSCP_NS = "http://www.imsproject.org/xsd/imscp_rootv1p1p2"
ADLCP_NS = "http://www.adlnet.org/xsd/adlcp_rootv1p2"


def manifest(organizations: str = "", resources: str = "") -> str:
    """Wrap organization/resource markup in a SCORM 1.2 manifest document."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="MANIFEST-1" version="1.0"
          xmlns="{IMSCP_NS}"
          xmlns:adlcp="{ADLCP_NS}">
  <metadata>
    <schema>ADL SCORM</schema>
    <schemaversion>1.2</schemaversion>
  </metadata>
  {organizations}
  <resources>
    {resources}
  </resources>
</manifest>
"""


SIMPLE_MANIFEST = manifest(
    organizations="""
  <organizations default="ORG-A">
    <organization identifier="ORG-A">
      <title>Course A</title>
      <item identifier="I1" identifierref="R1" parameters="?page=1">
        <title>Lesson 1</title>
      </item>
      <item identifier="I2" identifierref="R2">
        <title>Lesson 2</title>
      </item>
    </organization>
  </organizations>
""",
    resources="""
    <resource identifier="R1" type="webcontent" adlcp:scormtype="sco" href="a.html">
      <file href="a.html"/>
    </resource>
    <resource identifier="R2" type="webcontent" adlcp:scormtype="sco" href="lesson2/index.html"/>
""",
)


def make_package(files: Dict[str, str]) -> bytes:
    """Build an in-memory zip archive; names ending in '/' become directories."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in files.items():
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), "")
            else:
                zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def simple_package() -> bytes:
    return make_package(
        {
            "imsmanifest.xml": SIMPLE_MANIFEST,
            "a.html": "<html><body>A</body></html>",
            "lesson2/": "",
            "lesson2/index.html": "<html><body>Lesson 2</body></html>",
        }
    )


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing file operations"""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return Settings(data_dir=data_dir, max_upload_size=1024 * 1024)


@pytest.fixture
async def test_app(tmp_path: Path, test_settings: Settings):
    # Isolated SQLite file per test
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        future=True,
        poolclass=NullPool,
    )
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(PersistedBase.metadata.create_all)

    async def override_session():
        async with async_session() as session:  # type: ignore
            yield session

    real_app.dependency_overrides[get_session] = override_session
    real_app.dependency_overrides[get_settings] = lambda: test_settings

    yield real_app

    real_app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture
async def client(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def upload(client: AsyncClient, data: bytes, title: Optional[str] = "Test Course"):
    form = {"title": title} if title is not None else {}
    return await client.post(
        "/api/v1/courses/upload",
        files={"file": ("package.zip", data, "application/zip")},
        data=form,
    )


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_session_data_dir, ignore_errors=True)


# Helper functions for tests
def assert_response_success(response, expected_status=200):
    """Assert that response is successful"""
    assert response.status_code == expected_status, f"Expected {expected_status}, got {response.status_code}: {response.text}"


def assert_response_error(response, expected_status=400):
    """Assert that response is an error"""
    assert response.status_code == expected_status, f"Expected error {expected_status}, got {response.status_code}"
