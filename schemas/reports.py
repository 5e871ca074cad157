"""
schemas/reports.py

- 보고서 내보내기 파이프라인의 요청 단위 자료형
  1) ReportScope: 보고서 범위 열거형
  2) DateRange: from/to 기간 필터
  3) *Stats / ScopeStats: 집계 결과 (불변)
  4) ReportBundle: 교원 1명 + 기록 컬렉션 + 통계 (요청마다 생성, 저장하지 않음)
  5) RatingTrendPoint / EvaluationScore: 분석 API 응답 값
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.records import (
    CareerEvent,
    Course,
    EvaluationTerm,
    ProfessionalActivity,
    ResearchOutput,
    ServiceContribution,
)
from schemas.teachers import Teacher


# =========================================================
# 1) 범위 / 기간
# =========================================================

class ReportScope(str, Enum):
    OVERVIEW = "overview"
    TEACHING = "teaching"
    RESEARCH = "research"
    SERVICE = "service"
    PROFESSIONAL = "professional"
    CAREER = "career"
    PORTFOLIO = "portfolio"

    @property
    def label(self) -> str:
        return SCOPE_LABELS[self]

    @property
    def domains(self) -> frozenset[str]:
        """이 범위에서 조회하는 컬렉션 도메인"""
        return SCOPE_DOMAINS[self]


ALL_DOMAINS = frozenset({"teaching", "research", "service", "professional", "career"})

SCOPE_DOMAINS = {
    ReportScope.OVERVIEW: ALL_DOMAINS,
    ReportScope.PORTFOLIO: ALL_DOMAINS,
    ReportScope.TEACHING: frozenset({"teaching"}),
    ReportScope.RESEARCH: frozenset({"research"}),
    ReportScope.SERVICE: frozenset({"service"}),
    ReportScope.PROFESSIONAL: frozenset({"professional"}),
    ReportScope.CAREER: frozenset({"career"}),
}

SCOPE_LABELS = {
    ReportScope.OVERVIEW: "Performance Overview",
    ReportScope.TEACHING: "Teaching Performance",
    ReportScope.RESEARCH: "Research Portfolio",
    ReportScope.SERVICE: "Service Contributions",
    ReportScope.PROFESSIONAL: "Professional Development",
    ReportScope.CAREER: "Career History",
    ReportScope.PORTFOLIO: "Academic Portfolio",
}


class DateRange(BaseModel):
    """양 끝 포함 기간. 한쪽이 None이면 그쪽은 열린 구간."""
    model_config = ConfigDict(frozen=True)

    start: Optional[date] = None
    end: Optional[date] = None

    @model_validator(mode="after")
    def _check_order(self):
        if self.start and self.end and self.start > self.end:
            raise ValueError("from 날짜가 to 날짜보다 늦습니다")
        return self

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


# =========================================================
# 2) 집계 통계 (모든 평균은 빈 컬렉션에서 0)
# =========================================================

class _Stats(BaseModel):
    model_config = ConfigDict(frozen=True)


class TeachingStats(_Stats):
    course_count: int = 0
    total_enrollment: int = 0
    evaluation_terms: int = 0
    avg_rating: float = 0.0                  # 학기별 평균의 단순 평균 (응답 수 가중치 없음)
    avg_teaching_quality: float = 0.0
    avg_course_content: float = 0.0
    avg_availability: float = 0.0
    total_responses: int = 0


class ResearchStats(_Stats):
    total_outputs: int = 0
    publications: int = 0
    grants: int = 0
    patents: int = 0
    total_funding: float = 0.0
    total_citations: int = 0
    avg_impact_factor: float = 0.0


class ServiceStats(_Stats):
    total_contributions: int = 0
    committees: int = 0
    reviews: int = 0
    community: int = 0
    ongoing: int = 0
    total_hours: int = 0
    avg_hours_per_service: float = 0.0


class ProfessionalStats(_Stats):
    total_activities: int = 0
    certifications: int = 0
    trainings: int = 0
    conferences: int = 0
    education: int = 0
    total_hours: int = 0
    avg_hours_per_activity: float = 0.0


class CareerStats(_Stats):
    total_events: int = 0
    positions: int = 0
    awards: int = 0
    recognitions: int = 0
    university: int = 0
    national: int = 0
    international: int = 0


class ScopeStats(_Stats):
    """범위 밖 도메인은 None"""
    teaching: Optional[TeachingStats] = None
    research: Optional[ResearchStats] = None
    service: Optional[ServiceStats] = None
    professional: Optional[ProfessionalStats] = None
    career: Optional[CareerStats] = None


# =========================================================
# 3) 보고서 번들
# =========================================================

class ReportBundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    teacher: Teacher
    scope: ReportScope
    date_range: DateRange = Field(default_factory=DateRange)
    courses: tuple[Course, ...] = ()
    evaluations: tuple[EvaluationTerm, ...] = ()
    research: tuple[ResearchOutput, ...] = ()
    service: tuple[ServiceContribution, ...] = ()
    professional: tuple[ProfessionalActivity, ...] = ()
    career: tuple[CareerEvent, ...] = ()
    stats: ScopeStats = Field(default_factory=ScopeStats)
    generated_at: datetime                   # 유일하게 허용되는 비결정 값


# =========================================================
# 4) 분석 (학기별 추이 / 종합 평가 점수)
# =========================================================

class TrendMetrics(_Stats):
    overall_rating: float
    teaching_quality: Optional[float] = None
    course_content: Optional[float] = None
    availability: Optional[float] = None


class RatingTrendPoint(_Stats):
    """학기 1개의 강의평가 평균 (시간순 정렬된 목록의 한 점)"""
    period: str                              # 예: "2023 Fall"
    year: int
    semester: str
    metrics: TrendMetrics
    evaluation_count: int = 0


class EvaluationScore(_Stats):
    """5점 만점 종합 평가 점수 (모두 소수 첫째 자리 반올림)"""
    overall_score: float = 0.0
    teaching_effectiveness: float = 0.0
    research_output: float = 0.0
    service_contribution: float = 0.0
    grant_funding: float = 0.0
