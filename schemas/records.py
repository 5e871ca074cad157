"""
schemas/records.py

- 보고서 집계에 쓰이는 교원 하위 기록 스키마 (읽기 전용, frozen)
- 연구/봉사/전문성 개발/경력 기록은 `type` 필드를 판별자로 쓰는 닫힌 태그 유니온
  (pydantic discriminated union)으로 정의합니다. 새 종류를 추가하면 유니온과
  services/report_stats.py, services/report_tables.py의 match 분기를 함께 고쳐야 합니다.
- 시간/금액/인용 수는 None 대신 0으로 정규화되어 합계 계산에 None이 섞이지 않습니다.
"""

import datetime as dt
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    teacher_id: int


# =========================================================
# 1) 강의 / 강의평가
# =========================================================

class Course(_Record):
    course_code: str
    course_name: str
    semester: str
    year: int
    enrollment: int = 0

    @field_validator("enrollment", mode="before")
    @classmethod
    def _zero_if_none(cls, v):
        return 0 if v is None else v


class EvaluationTerm(BaseModel):
    """학기 단위로 미리 집계된 강의평가 (개별 학생 응답은 보고서 계층에 노출되지 않음)"""
    model_config = ConfigDict(frozen=True)

    teacher_id: int
    semester: str
    year: int
    avg_overall: float
    avg_teaching_quality: Optional[float] = None
    avg_course_content: Optional[float] = None
    avg_availability: Optional[float] = None
    response_count: int = 0

    @property
    def term(self) -> str:
        return f"{self.semester} {self.year}"


# =========================================================
# 2) 연구 성과: publication | grant | patent
# =========================================================

class _Research(_Record):
    title: str
    description: Optional[str] = None
    date: Optional[dt.date] = None
    status: Optional[str] = None
    url: Optional[str] = None


class Publication(_Research):
    type: Literal["publication"]
    impact_factor: Optional[float] = None
    citation_count: int = 0

    @field_validator("citation_count", mode="before")
    @classmethod
    def _zero_if_none(cls, v):
        return 0 if v is None else v


class Grant(_Research):
    type: Literal["grant"]
    funding_amount: float = 0

    @field_validator("funding_amount", mode="before")
    @classmethod
    def _zero_if_none(cls, v):
        return 0 if v is None else v


class Patent(_Research):
    type: Literal["patent"]


ResearchOutput = Annotated[Union[Publication, Grant, Patent], Field(discriminator="type")]


# =========================================================
# 3) 봉사/기여: committee | review | community
# =========================================================

class _Service(_Record):
    title: str
    organization: Optional[str] = None
    role: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    description: Optional[str] = None
    workload_hours: int = 0

    @field_validator("workload_hours", mode="before")
    @classmethod
    def _zero_if_none(cls, v):
        return 0 if v is None else v

    @property
    def ongoing(self) -> bool:
        return self.end_date is None


class Committee(_Service):
    type: Literal["committee"]


class Review(_Service):
    type: Literal["review"]


class Community(_Service):
    type: Literal["community"]


ServiceContribution = Annotated[Union[Committee, Review, Community], Field(discriminator="type")]


# =========================================================
# 4) 전문성 개발: certification | training | conference | education
# =========================================================

class _Professional(_Record):
    title: str
    institution: Optional[str] = None
    date_completed: Optional[dt.date] = None
    duration_hours: int = 0
    certificate_url: Optional[str] = None
    description: Optional[str] = None

    @field_validator("duration_hours", mode="before")
    @classmethod
    def _zero_if_none(cls, v):
        return 0 if v is None else v


class Certification(_Professional):
    type: Literal["certification"]


class Training(_Professional):
    type: Literal["training"]


class Conference(_Professional):
    type: Literal["conference"]


class Education(_Professional):
    type: Literal["education"]


ProfessionalActivity = Annotated[
    Union[Certification, Training, Conference, Education], Field(discriminator="type")
]


# =========================================================
# 5) 경력: position | award | recognition
# =========================================================

AchievementLevel = Literal["university", "national", "international"]


class _Career(_Record):
    title: str
    organization: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    description: Optional[str] = None
    achievement_level: Optional[AchievementLevel] = None


class Position(_Career):
    type: Literal["position"]


class Award(_Career):
    type: Literal["award"]


class Recognition(_Career):
    type: Literal["recognition"]


CareerEvent = Annotated[Union[Position, Award, Recognition], Field(discriminator="type")]


# ✅ ORM 행(dict) → 태그 유니온 변환기
research_adapter = TypeAdapter(ResearchOutput)
service_adapter = TypeAdapter(ServiceContribution)
professional_adapter = TypeAdapter(ProfessionalActivity)
career_adapter = TypeAdapter(CareerEvent)
