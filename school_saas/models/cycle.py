from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import TenantModel

class Cycle(TenantModel):
    """A group of classes, e.g. primary or middle school"""
    __tablename__ = "cycles"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    classes = relationship("Class", back_populates="cycle")

    @property
    def class_ids(self):
        return [class_.id for class_ in self.classes]
