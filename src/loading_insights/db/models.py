"""ORM models for railway loading operations."""

from sqlalchemy import Column, DateTime, Integer, Numeric, Text, func
from sqlalchemy.orm import DeclarativeBase

from loading_insights.discovery.loading_stats import OperationRecord


class Base(DeclarativeBase):
    pass


class LoadingOperation(Base):
    """One imported loading row (a rake movement) from the operations sheet."""

    __tablename__ = "railway_loading_operations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    p_date = Column(DateTime, nullable=True, index=True)  # date the loading is booked against
    station = Column(Text, nullable=True)
    siding = Column(Text, nullable=True)
    imported = Column(Text, nullable=True)
    commodity = Column(Text, nullable=True)
    comm_type = Column(Text, nullable=True)
    comm_cg = Column(Text, nullable=True)
    demand = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    rly = Column(Text, nullable=True)
    wagons = Column(Integer, nullable=True)
    type = Column(Text, nullable=True)  # wagon type, e.g. BOXNHL
    units = Column(Numeric, nullable=True)
    loading_type = Column(Text, nullable=True)
    rr_no_from = Column(Integer, nullable=True)
    rr_no_to = Column(Integer, nullable=True)
    rr_date = Column(DateTime, nullable=True)
    tonnage = Column(Numeric, nullable=True)  # MT
    freight = Column(Numeric, nullable=True)
    t_indents = Column(Integer, nullable=True)
    os_indents = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_record(self) -> OperationRecord:
        """Detach the fields the analytics core reads."""
        return OperationRecord(
            date=self.p_date,
            commodity=self.commodity,
            station=self.station,
            wagons=self.wagons,
            tonnage=self.tonnage,
            freight=self.freight,
        )

    def to_dict(self) -> dict:
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if hasattr(value, "isoformat"):
                value = value.isoformat()
            elif column.name in ("units", "tonnage", "freight") and value is not None:
                value = float(value)
            data[column.name] = value
        return data
