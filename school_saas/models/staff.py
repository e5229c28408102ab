from sqlalchemy import Column, Integer, String, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import TenantModel, PrincipalMixin
from .associations import transportation_accompaniments
from school_saas.schemas.role import Role


class Guard(PrincipalMixin, TenantModel):
    """Delegated staff acting on behalf of its school"""
    __tablename__ = "guards"
    ROLE = Role.GUARD

    id = Column(Integer, primary_key=True, index=True)
    shift = Column(String(50), nullable=True)


class Driver(PrincipalMixin, TenantModel):
    __tablename__ = "drivers"
    __table_args__ = (
        UniqueConstraint("school_id", "license_number", name="uq_driver_school_license"),
    )
    ROLE = Role.DRIVER

    id = Column(Integer, primary_key=True, index=True)
    license_number = Column(String(50), nullable=False)
    license_expiry = Column(Date, nullable=True)

    # Vehicles whose Transportation.driver_id points here
    vehicles = relationship("Transportation", back_populates="driver")

    @property
    def vehicle_ids(self):
        return [vehicle.id for vehicle in self.vehicles]


class Accompaniment(PrincipalMixin, TenantModel):
    __tablename__ = "accompaniments"
    ROLE = Role.ACCOMPANIMENT

    id = Column(Integer, primary_key=True, index=True)

    transportations = relationship(
        "Transportation",
        secondary=transportation_accompaniments,
        back_populates="accompaniments"
    )

    @property
    def transportation_ids(self):
        return [vehicle.id for vehicle in self.transportations]
