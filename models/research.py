from sqlalchemy import Column, Integer, String, Float, Date, ForeignKey
from database.db import Base


class ResearchOutput(Base):
    __tablename__ = "research_outputs"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)            # 'publication' | 'grant' | 'patent'
    title = Column(String(300), nullable=False)
    description = Column(String(1000))
    date = Column(Date)                                  # 게재일 / 선정일 / 출원일
    impact_factor = Column(Float)                        # 논문 전용
    citation_count = Column(Integer, default=0)          # 논문 전용
    funding_amount = Column(Float)                       # 연구비 전용
    status = Column(String(50))                          # 예: Active, Pending, Published
    url = Column(String(500))
