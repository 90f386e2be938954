"""
CredenSuite - Test Configuration and Fixtures
"""
import os
import tempfile
from datetime import datetime, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from faker import Faker
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

# Set testing environment before the application reads its settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_credensuite.db'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'
os.environ['DEBUG'] = 'false'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['UPLOADS_DIR'] = tempfile.mkdtemp(prefix='credensuite-uploads-')

from credensuite.main import app
from credensuite.core.database import Base, get_db, get_engine, get_session_local
from credensuite.models import Member
from credensuite.schemas import MemberCreate
from credensuite.services.activity_service import ActivityLog
from credensuite.services.member_id_sequencer import MemberIdSequencer
from credensuite.services.member_service import MemberService

fake = Faker()


# ==================== Database ====================

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema and session for each test"""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session_local()() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory():
    """Factory for independent sessions on the test database"""
    return get_session_local()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Clock ====================

class SteppingClock:
    """Deterministic clock; every call is one second after the previous one"""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def service(clock: SteppingClock) -> MemberService:
    """Member service pinned to March 2024"""
    return MemberService(sequencer=MemberIdSequencer(clock=clock), activity=ActivityLog(), clock=clock)


# ==================== Member data ====================

def member_payload(**overrides) -> dict:
    """Valid camelCase member form body"""
    payload = {
        'fullName': fake.name(),
        'designation': 'volunteer',
        'joiningDate': '2024-01-15',
        'contactNumber': fake.numerify('555-###-####'),
    }
    payload.update(overrides)
    return payload


def member_create(**overrides) -> MemberCreate:
    return MemberCreate.model_validate(member_payload(**overrides))


@pytest_asyncio.fixture
async def member(db_session: AsyncSession, service: MemberService) -> Member:
    """A stored member with all optional fields left empty"""
    return await service.create_member(db_session, member_create(fullName='Jane Doe'))


# ==================== Playwright fakes ====================

class FakePage:
    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.closed = False
        self.html = None
        self.set_content_kwargs = None
        self.media_kwargs = None
        self.pdf_kwargs = None
        self.default_timeout = None

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout

    async def set_content(self, html, **kwargs):
        if self.fail_on == 'set_content':
            raise PlaywrightTimeoutError('Timeout 15000ms exceeded.')
        self.html = html
        self.set_content_kwargs = kwargs

    async def emulate_media(self, **kwargs):
        self.media_kwargs = kwargs

    async def pdf(self, **kwargs):
        if self.fail_on == 'pdf':
            raise RuntimeError('Target page, context or browser has been closed')
        self.pdf_kwargs = kwargs
        pages = self.html.count('class="card-page') + self.html.count('class="directory-page')
        return b'%PDF-1.4\n' + b'1 0 obj << /Type /Page >> endobj\n' * pages + b'%%EOF'

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page: FakePage, fail_on: Optional[str] = None):
        self.page = page
        self.fail_on = fail_on
        self.closed = False

    async def new_page(self):
        if self.fail_on == 'new_page':
            raise RuntimeError('Browser has been closed')
        return self.page

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser: FakeBrowser, fail_on: Optional[str] = None):
        self.browser = browser
        self.fail_on = fail_on
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        if self.fail_on == 'launch':
            raise RuntimeError("Executable doesn't exist")
        self.launch_kwargs = kwargs
        return self.browser


class FakePlaywright:
    """Stands in for ``async_playwright``: call it, then ``async with`` the result"""

    def __init__(self, fail_on: Optional[str] = None):
        self.page = FakePage(fail_on)
        self.browser = FakeBrowser(self.page, fail_on)
        self.chromium = FakeChromium(self.browser, fail_on)
        self.entered = False
        self.exited = False

    def __call__(self):
        return self

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exited = True
        return False


@pytest.fixture
def fake_playwright() -> FakePlaywright:
    return FakePlaywright()
