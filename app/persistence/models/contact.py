"""Contact model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from app.persistence.database import Base


class Contact(Base):
    """Contact model representing a directory entry."""

    __tablename__ = "contacts"
    __table_args__ = (
        Index("ix_contacts_name", "first_name", "last_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)  # not unique
    phone = Column(String(20), nullable=True)
    company = Column(String(255), nullable=True)
    job_title = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    zip_code = Column(String(255), nullable=True)
    country = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Photo file name and storage path are set together or not at all
    photo_file_name = Column(String(512), nullable=True)
    photo_path = Column(String(512), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, name={self.first_name} {self.last_name}, email={self.email})>"
