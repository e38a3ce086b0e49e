from sqlalchemy import JSON, Column, Integer, String, UniqueConstraint

from .database import Base


class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("form_type", "id", name="uq_submissions_form_type_id"),)

    # Autoincrement key keeps insertion order for _rowIndex
    row_index = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(16), nullable=False, index=True)
    form_type = Column(String(20), nullable=False, index=True)  # DENTAL, CHECKUP
    timestamp = Column(String(32), nullable=False)
    fields = Column(JSON, nullable=False)  # lower-cased column name -> text
