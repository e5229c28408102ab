from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import TenantModel, PrincipalMixin
from school_saas.schemas.role import Role

class Parent(PrincipalMixin, TenantModel):
    __tablename__ = "parents"
    ROLE = Role.PARENT

    id = Column(Integer, primary_key=True, index=True)
    address = Column(Text, nullable=True)
    occupation = Column(String(255), nullable=True)

    children = relationship("Student", back_populates="parent")

    @property
    def children_ids(self):
        return [child.id for child in self.children]
