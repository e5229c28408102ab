from sqlalchemy import Column, String, Integer, Text
from .base import Base, PrincipalMixin
from school_saas.schemas.role import Role


class School(PrincipalMixin, Base):
    """
    The root of the tenant hierarchy.
    Rows of every other entity carry a school_id pointing here.
    """
    __tablename__ = "schools"
    ROLE = Role.SCHOOL

    id = Column(Integer, primary_key=True)
    address = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    website = Column(String(255), nullable=True)

    @property
    def school_id(self):
        return self.id


class Admin(PrincipalMixin, Base):
    """Platform operator; sees every school"""
    __tablename__ = "admins"
    ROLE = Role.ADMIN

    id = Column(Integer, primary_key=True)

    @property
    def school_id(self):
        return None
