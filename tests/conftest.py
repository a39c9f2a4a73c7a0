"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory SQLite sessions, in-memory storage/queue/Redis fakes,
image byte builders and seeded jobs
Dependencies: pytest, sqlalchemy, Pillow
System role: Test infrastructure and fixture management
"""

import io
from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from PIL import Image


class FakeStorage:
    """In-memory stand-in for ObjectStorage with the same method surface."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.deleted: list[str] = []
        self.failing_keys: set[str] = set()
        self.healthy = True

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.objects[key] = data
        self.content_types[key] = content_type

    def get(self, key: str) -> bytes:
        from vecta.core.exceptions import StorageError

        if key not in self.objects:
            raise StorageError("download", key, "NoSuchKey")
        return self.objects[key]

    def get_stream(self, key: str, chunk_size: int = 4) -> Iterator[bytes]:
        data = self.get(key)
        for start in range(0, len(data), chunk_size):
            yield data[start:start + chunk_size]

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)
        self.deleted.append(key)

    def delete_many(self, keys: list[str]) -> None:
        from vecta.core.exceptions import StorageError

        failing = [key for key in keys if key in self.failing_keys]
        if failing:
            raise StorageError("bulk delete", ", ".join(failing), "AccessDenied")
        for key in keys:
            self.delete(key)

    def exists(self, key: str) -> bool:
        return key in self.objects

    def presign_upload(self, key: str, content_type: str, expires_in: int | None = None):
        return (
            f"https://storage.test/{key}?method=PUT",
            datetime.now(timezone.utc) + timedelta(seconds=expires_in or 3600),
        )

    def presign_download(self, key: str, expires_in: int | None = None) -> str:
        return f"https://storage.test/{key}?method=GET"

    def check_bucket(self) -> bool:
        return self.healthy


class FakeQueue:
    """Records enqueued ConversionTasks instead of publishing them."""

    def __init__(self) -> None:
        self.tasks = []

    def enqueue(self, task) -> str:
        self.tasks.append(task)
        return f"task-{len(self.tasks)}"

    def enqueue_many(self, tasks) -> list[str]:
        return [self.enqueue(task) for task in tasks]


class FakeRedis:
    """Subset of redis.asyncio.Redis used by UsageCounter."""

    def __init__(self) -> None:
        self.values: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str):
        value = self.values.get(key)
        return None if value is None else str(value)

    async def incr(self, key: str) -> int:
        self.values[key] = self.values.get(key, 0) + 1
        return self.values[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


def _build_image(
    fmt: str = "PNG",
    size: tuple[int, int] = (200, 200),
    mode: str = "RGB",
    color=(200, 30, 30),
    **save_kwargs,
) -> bytes:
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    """
    Build encoded image bytes.

    Returns:
        Callable: make_image(fmt="PNG", size=(200, 200), mode="RGB", color=..., **save_kwargs)
    """
    return _build_image


@pytest.fixture
def png_bytes() -> bytes:
    return _build_image("PNG")


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def fake_queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def usage_counter(fake_redis: FakeRedis):
    from vecta.boundary.cache.usage_counter import UsageCounter

    return UsageCounter(fake_redis)


@pytest.fixture
def settings():
    """Settings with small limits so tests can hit them cheaply."""
    from vecta.configs.settings import Settings
    from vecta.configs.limits import LimitsSettings

    return Settings(
        limits=LimitsSettings(
            max_file_size=1024 * 1024,
            max_files_per_job=3,
            max_total_job_size=2 * 1024 * 1024,
            max_conversions_per_day=2,
            session_ttl=7200,
        )
    )


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
    from sqlalchemy.pool import StaticPool
    from vecta.boundary.db.base import Base
    from vecta.boundary.db import models  # noqa: F401

    # Use SQLite in-memory database for tests
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session factory
    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    # Create session for test
    async with async_session() as session:
        yield session
        await session.rollback()

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def file_session_factory(tmp_path):
    """
    Session factory over a file-backed SQLite database.

    Separate sessions get separate connections, which concurrency tests need.
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from vecta.boundary.db.connection import build_session_factory
    from vecta.boundary.db.create_tables import create_all_tables

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}",
        connect_args={"timeout": 30},
    )
    await create_all_tables(engine)

    yield build_session_factory(engine)

    await engine.dispose()


async def _seed_job(
    db,
    session_token: str = "session-a",
    file_names: tuple[str, ...] = ("a.png", "b.png"),
    status=None,
    output_format=None,
    expires_in: timedelta = timedelta(hours=2),
):
    from vecta.boundary.db.base import utcnow
    from vecta.boundary.db.CRUD import job_crud, job_file_crud
    from vecta.boundary.db.models import FileStatus, JobStatus
    from vecta.core.conversion import OutputFormat

    job = await job_crud.create(
        db,
        session_token=session_token,
        output_format=output_format or OutputFormat.WEBP,
        quality=82,
        total_files=len(file_names),
        status=status or JobStatus.PENDING,
        expires_at=utcnow() + expires_in,
    )
    files = []
    for position, name in enumerate(file_names):
        files.append(
            await job_file_crud.create(
                db,
                job_id=job.id,
                position=position,
                original_name=name,
                original_key=f"inputs/{job.id}/{name}",
                original_size=1000,
                original_format="png",
                status=FileStatus.PENDING,
            )
        )
    await db.commit()
    return job, files


@pytest.fixture
def seed_job():
    """
    Insert a job with files directly through the CRUD layer.

    Returns:
        Callable: await seed_job(db, session_token=..., file_names=..., status=..., expires_in=...)
    """
    return _seed_job
