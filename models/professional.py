from sqlalchemy import Column, Integer, String, Date, ForeignKey
from database.db import Base


class ProfessionalDevelopment(Base):
    __tablename__ = "professional_development"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)            # 'certification' | 'training' | 'conference' | 'education'
    title = Column(String(300), nullable=False)
    institution = Column(String(200))                    # 주관 기관
    date_completed = Column(Date)                        # 이수일
    duration_hours = Column(Integer)                     # 이수 시간
    certificate_url = Column(String(500))                # 수료증/자격증 링크
    description = Column(String(1000))
