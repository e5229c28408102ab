# base.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base, declared_attr
from sqlalchemy.sql import func

Base = declarative_base()

class TenantModel(Base):
    """
    A base for multi-tenant rows.
    Every subclass belongs to exactly one school; the column is written once at
    creation and no update path touches it.
    """
    __abstract__ = True

    @declared_attr
    def school_id(cls):
        return Column(
            Integer,
            ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )

class PrincipalMixin:
    """Columns shared by every record that can log in"""
    ROLE = None

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def role(self) -> str:
        return self.ROLE.value

    def __repr__(self):
        # __dict__ avoids triggering a load on detached rows
        return f"<{type(self).__name__}(id={self.__dict__.get('id')}, email={self.__dict__.get('email')})>"
