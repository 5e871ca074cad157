"""
services/report_data.py

- 보고서 집계기가 사용하는 읽기 전용 데이터 소스
- 메서드마다 세션을 새로 열기 때문에 워커 스레드에서 동시에 호출해도 안전합니다.
- SQLAlchemy 오류와 알 수 없는 type 값은 DataSourceError로 감싸 원본 메시지를 보존합니다.
"""

import logging
from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.db import SessionLocal
from models.career import CareerHistory as CareerModel
from models.courses import Course as CourseModel
from models.evaluations import StudentEvaluation as EvaluationModel
from models.professional import ProfessionalDevelopment as ProfessionalModel
from models.research import ResearchOutput as ResearchModel
from models.service import ServiceContribution as ServiceModel
from models.teachers import Teacher as TeacherModel
from schemas.records import (
    Course,
    EvaluationTerm,
    career_adapter,
    professional_adapter,
    research_adapter,
    service_adapter,
)
from schemas.reports import DateRange
from schemas.teachers import Teacher
from services.report_errors import DataSourceError

logger = logging.getLogger(__name__)


def _row_to_dict(row) -> dict:
    return {c.key: getattr(row, c.key) for c in row.__table__.columns}


def _apply_date_range(query, column, date_range: Optional[DateRange]):
    if date_range is None:
        return query
    if date_range.start is not None:
        query = query.filter(column >= date_range.start)
    if date_range.end is not None:
        query = query.filter(column <= date_range.end)
    return query


def _apply_year_range(query, column, date_range: Optional[DateRange]):
    # 강의/강의평가는 연도 단위로만 기록되어 있어 연도로 비교
    if date_range is None:
        return query
    if date_range.start is not None:
        query = query.filter(column >= date_range.start.year)
    if date_range.end is not None:
        query = query.filter(column <= date_range.end.year)
    return query


class ReportDataSource:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _read(self, label: str, teacher_id: int, fn):
        db = self.session_factory()
        try:
            return fn(db)
        except SQLAlchemyError as e:
            logger.error(f"{label} 조회 실패: teacher_id={teacher_id}, {e}")
            raise DataSourceError(f"{label} 조회 실패: {e}") from e
        except ValidationError as e:
            logger.error(f"{label} 데이터 형식 오류: teacher_id={teacher_id}, {e}")
            raise DataSourceError(f"{label} 데이터 형식 오류: {e}") from e
        finally:
            db.close()

    # ✅ 교원 기본 정보 (없으면 None)
    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        def fn(db: Session):
            row = db.query(TeacherModel).filter(TeacherModel.id == teacher_id).first()
            return Teacher.model_validate(row) if row else None
        return self._read("교원", teacher_id, fn)

    # ✅ 강의 목록 (최신 학기 순)
    def list_courses(self, teacher_id: int, date_range: Optional[DateRange] = None) -> list[Course]:
        def fn(db: Session):
            q = db.query(CourseModel).filter(CourseModel.teacher_id == teacher_id)
            q = _apply_year_range(q, CourseModel.year, date_range)
            rows = q.order_by(CourseModel.year.desc(), CourseModel.semester.desc(), CourseModel.id).all()
            return [Course.model_validate(_row_to_dict(r)) for r in rows]
        return self._read("강의", teacher_id, fn)

    # ✅ 강의평가: (semester, year) 단위로 평균/응답 수 집계
    def list_evaluation_terms(self, teacher_id: int, date_range: Optional[DateRange] = None) -> list[EvaluationTerm]:
        def fn(db: Session):
            q = (
                db.query(
                    EvaluationModel.semester,
                    EvaluationModel.year,
                    func.avg(EvaluationModel.overall_rating).label("avg_overall"),
                    func.avg(EvaluationModel.teaching_quality).label("avg_teaching_quality"),
                    func.avg(EvaluationModel.course_content).label("avg_course_content"),
                    func.avg(EvaluationModel.availability).label("avg_availability"),
                    func.count(EvaluationModel.id).label("response_count"),
                )
                .filter(EvaluationModel.teacher_id == teacher_id)
            )
            q = _apply_year_range(q, EvaluationModel.year, date_range)
            rows = (
                q.group_by(EvaluationModel.semester, EvaluationModel.year)
                .order_by(EvaluationModel.year.desc(), EvaluationModel.semester.desc())
                .all()
            )
            return [
                EvaluationTerm(
                    teacher_id=teacher_id,
                    semester=r.semester,
                    year=r.year,
                    avg_overall=round(float(r.avg_overall), 2),
                    avg_teaching_quality=round(float(r.avg_teaching_quality), 2) if r.avg_teaching_quality is not None else None,
                    avg_course_content=round(float(r.avg_course_content), 2) if r.avg_course_content is not None else None,
                    avg_availability=round(float(r.avg_availability), 2) if r.avg_availability is not None else None,
                    response_count=r.response_count,
                )
                for r in rows
            ]
        return self._read("강의평가", teacher_id, fn)

    # ✅ 연구 성과 (publication / grant / patent)
    def list_research(self, teacher_id: int, date_range: Optional[DateRange] = None, type: Optional[str] = None) -> list:
        def fn(db: Session):
            q = db.query(ResearchModel).filter(ResearchModel.teacher_id == teacher_id)
            if type:
                q = q.filter(ResearchModel.type == type)
            q = _apply_date_range(q, ResearchModel.date, date_range)
            rows = q.order_by(ResearchModel.date.desc(), ResearchModel.id).all()
            return [research_adapter.validate_python(_row_to_dict(r)) for r in rows]
        return self._read("연구 성과", teacher_id, fn)

    # ✅ 봉사/기여 (committee / review / community)
    def list_service(self, teacher_id: int, date_range: Optional[DateRange] = None) -> list:
        def fn(db: Session):
            q = db.query(ServiceModel).filter(ServiceModel.teacher_id == teacher_id)
            q = _apply_date_range(q, ServiceModel.start_date, date_range)
            rows = q.order_by(ServiceModel.start_date.desc(), ServiceModel.id).all()
            return [service_adapter.validate_python(_row_to_dict(r)) for r in rows]
        return self._read("봉사 기록", teacher_id, fn)

    # ✅ 전문성 개발 (certification / training / conference / education)
    def list_professional(self, teacher_id: int, date_range: Optional[DateRange] = None) -> list:
        def fn(db: Session):
            q = db.query(ProfessionalModel).filter(ProfessionalModel.teacher_id == teacher_id)
            q = _apply_date_range(q, ProfessionalModel.date_completed, date_range)
            rows = q.order_by(ProfessionalModel.date_completed.desc(), ProfessionalModel.id).all()
            return [professional_adapter.validate_python(_row_to_dict(r)) for r in rows]
        return self._read("전문성 개발", teacher_id, fn)

    # ✅ 경력 (position / award / recognition)
    def list_career(self, teacher_id: int, date_range: Optional[DateRange] = None) -> list:
        def fn(db: Session):
            q = db.query(CareerModel).filter(CareerModel.teacher_id == teacher_id)
            q = _apply_date_range(q, CareerModel.start_date, date_range)
            rows = q.order_by(CareerModel.start_date.desc(), CareerModel.id).all()
            return [career_adapter.validate_python(_row_to_dict(r)) for r in rows]
        return self._read("경력", teacher_id, fn)
