from sqlalchemy import Column, Integer, String, ForeignKey
from database.db import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)                          # 강좌 고유 ID (PK)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)  # 담당 교원 ID (FK)
    course_code = Column(String(20), nullable=False)                            # 강좌 코드 (예: CS101)
    course_name = Column(String(200), nullable=False)                           # 강좌명
    semester = Column(String(20), nullable=False)                               # 학기 (Spring/Summer/Fall/Winter)
    year = Column(Integer, nullable=False)                                      # 연도
    enrollment = Column(Integer, default=0)                                     # 수강 인원
