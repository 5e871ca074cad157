from sqlalchemy import Column, Integer, String, Date
from sqlalchemy.orm import relationship
from database.db import Base
from models.courses import Course                    # ✅ 하위 테이블 직접 import (relationship 해석용)
from models.evaluations import StudentEvaluation
from models.research import ResearchOutput
from models.service import ServiceContribution
from models.professional import ProfessionalDevelopment
from models.career import CareerHistory


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)      # 교원 고유 ID (PK)
    name = Column(String(100), nullable=False)              # 이름
    email = Column(String(100), unique=True)                # 이메일
    department = Column(String(100), nullable=False)        # 소속 학과
    position = Column(String(100), nullable=False)          # 직위 (예: Associate Professor)
    hire_date = Column(Date)                                # 임용일
    photo_url = Column(String(500))                         # 프로필 사진 경로
    bio = Column(String(2000))                              # 소개

    # ✅ 교원 삭제 시 하위 기록도 함께 삭제 (1:N 관계)
    courses = relationship(Course, cascade="all, delete-orphan")
    evaluations = relationship(StudentEvaluation, cascade="all, delete-orphan")
    research_outputs = relationship(ResearchOutput, cascade="all, delete-orphan")
    service_contributions = relationship(ServiceContribution, cascade="all, delete-orphan")
    professional_development = relationship(ProfessionalDevelopment, cascade="all, delete-orphan")
    career_history = relationship(CareerHistory, cascade="all, delete-orphan")
