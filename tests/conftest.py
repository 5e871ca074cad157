"""
pytest 공통 fixture

- 테스트마다 tmp_path 아래 SQLite 파일 DB를 새로 만듭니다.
  (집계기가 워커 스레드마다 세션을 열기 때문에 메모리 DB 대신 파일 DB 사용)
- PDF 백엔드는 WeasyPrint 대신 HTML을 그대로 담는 가짜 백엔드로 교체합니다.

Run: pytest tests/ -v
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import time
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database.db import Base, get_db
from main import app
from models.career import CareerHistory
from models.courses import Course
from models.evaluations import StudentEvaluation
from models.professional import ProfessionalDevelopment
from models.research import ResearchOutput
from models.service import ServiceContribution
from models.teachers import Teacher
from routers.exports import get_data_source, get_export_service
from services.report_aggregator import ReportAggregator
from services.report_data import ReportDataSource
from services.report_export import ReportExportService
from services.report_packager import ReportPackager
from services.report_renderer import RendererPool, ReportRenderer

PDF_MAGIC = b"%PDF-1.4 fake\n"


# --- PDF backends ---

class FakeBackend:
    """렌더링된 HTML을 PDF 헤더 뒤에 그대로 붙여 돌려줌"""

    def __init__(self):
        self.calls = 0

    def write_pdf(self, html: str) -> bytes:
        self.calls += 1
        return PDF_MAGIC + html.encode("utf-8")


class SlowBackend:
    def __init__(self, delay: float = 0.5):
        self.delay = delay

    def write_pdf(self, html: str) -> bytes:
        time.sleep(self.delay)
        return PDF_MAGIC


class BrokenBackend:
    def write_pdf(self, html: str) -> bytes:
        raise RuntimeError("pango not available")


class EmptyBackend:
    def write_pdf(self, html: str) -> bytes:
        return b""


# --- Database ---

@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'reports.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def add(session_factory):
    """
    ORM 행 1개를 추가하고 id를 돌려주는 헬퍼.

    Usage:
        def test_something(add, teacher_id):
            add(ResearchOutput, teacher_id=teacher_id, type="grant", title="NSF", funding_amount=1000)
    """
    def _add(model, **fields):
        db = session_factory()
        try:
            row = model(**fields)
            db.add(row)
            db.commit()
            return row.id
        finally:
            db.close()
    return _add


@pytest.fixture
def teacher_id(add):
    return add(
        Teacher,
        name="Dr. Jane Doe",
        email="jane.doe@university.edu",
        department="Computer Science",
        position="Associate Professor",
        hire_date=date(2015, 8, 15),
        bio="Research interests include machine learning and data mining.",
    )


@pytest.fixture
def seed_portfolio(add, teacher_id):
    """모든 도메인에 기록이 1건 이상 있는 교원"""
    course_id = add(Course, teacher_id=teacher_id, course_code="CS101",
                    course_name="Introduction to Programming", semester="Fall", year=2023, enrollment=45)
    add(Course, teacher_id=teacher_id, course_code="CS301",
        course_name="Data Structures", semester="Spring", year=2024, enrollment=30)
    for rating in (4.5, 4.0):
        add(StudentEvaluation, course_id=course_id, teacher_id=teacher_id, semester="Fall", year=2023,
            overall_rating=rating, teaching_quality=4.5, course_content=4.0, availability=5.0)
    add(ResearchOutput, teacher_id=teacher_id, type="publication", title="Deep Learning Approaches",
        date=date(2023, 3, 15), impact_factor=4.0, citation_count=25, status="Published")
    add(ResearchOutput, teacher_id=teacher_id, type="grant", title="NSF Research Grant",
        date=date(2022, 9, 1), funding_amount=250000, status="Active")
    add(ServiceContribution, teacher_id=teacher_id, type="committee", title="Curriculum Committee",
        organization="CS Department", role="Chair", start_date=date(2022, 1, 1), workload_hours=40)
    add(ProfessionalDevelopment, teacher_id=teacher_id, type="certification", title="AWS Certified",
        institution="Amazon", date_completed=date(2023, 6, 1), duration_hours=40)
    add(CareerHistory, teacher_id=teacher_id, type="award", title="Teaching Excellence Award",
        organization="University", start_date=date(2023, 5, 1), achievement_level="university")
    return teacher_id


@pytest.fixture
def data_source(session_factory):
    return ReportDataSource(session_factory)


# --- Report pipeline ---

@pytest.fixture
def renderer():
    return ReportRenderer(pool=RendererPool(FakeBackend, size=1), timeout=5)


@pytest.fixture
def export_service(data_source, renderer):
    return ReportExportService(ReportAggregator(data_source), renderer, ReportPackager())


@pytest.fixture
def client(session_factory, data_source, export_service):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_data_source] = lambda: data_source
    app.dependency_overrides[get_export_service] = lambda: export_service
    yield TestClient(app)
    app.dependency_overrides.clear()
