from sqlalchemy import Column, Integer, String, Date, ForeignKey
from database.db import Base


class ServiceContribution(Base):
    __tablename__ = "service_contributions"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)            # 'committee' | 'review' | 'community'
    title = Column(String(300), nullable=False)
    organization = Column(String(200))                   # 소속 기관/위원회
    role = Column(String(100))                           # 역할 (위원장, 위원, 심사위원 등)
    start_date = Column(Date)
    end_date = Column(Date)                              # NULL = 진행 중
    description = Column(String(1000))
    workload_hours = Column(Integer)                     # 투입 시간
