from sqlalchemy import Column, Integer, String, Date, ForeignKey
from database.db import Base


class CareerHistory(Base):
    __tablename__ = "career_history"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)            # 'position' | 'award' | 'recognition'
    title = Column(String(300), nullable=False)
    organization = Column(String(200))
    start_date = Column(Date)
    end_date = Column(Date)
    description = Column(String(1000))
    achievement_level = Column(String(20))               # 'university' | 'national' | 'international'
