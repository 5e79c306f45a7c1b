from sqlalchemy import Column, String, Integer, Numeric, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from database.base import Base


class Catalog(Base):
    """Admin-authored tour package. Bookings copy its items, they never reference them live."""
    __tablename__ = "catalogs"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    package_name = Column(String(150), nullable=False)
    destination = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    no_of_days = Column(Integer, nullable=False, default=1)
    budget = Column(Numeric(10, 2), nullable=True)
    departure = Column(Date, nullable=True)
    arrival = Column(Date, nullable=True)

    hotels = relationship("CatalogHotel", back_populates="catalog", cascade="all, delete-orphan")
    transport = relationship("CatalogTransport", back_populates="catalog", cascade="all, delete-orphan")
    food = relationship("CatalogFood", back_populates="catalog", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Catalog {self.package_name}>"


class CatalogHotel(Base):
    __tablename__ = "catalog_hotels"

    catalog_id = Column(Integer, ForeignKey("catalogs.id", ondelete="CASCADE"), primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), primary_key=True)
    rooms_included = Column(Integer, nullable=False, default=1)

    catalog = relationship("Catalog", back_populates="hotels")
    hotel = relationship("Hotel")


class CatalogTransport(Base):
    __tablename__ = "catalog_transport"

    catalog_id = Column(Integer, ForeignKey("catalogs.id", ondelete="CASCADE"), primary_key=True)
    transport_id = Column(Integer, ForeignKey("transport.id"), primary_key=True)
    seats_included = Column(Integer, nullable=False, default=1)

    catalog = relationship("Catalog", back_populates="transport")
    transport = relationship("Transport")


class CatalogFood(Base):
    __tablename__ = "catalog_food"

    catalog_id = Column(Integer, ForeignKey("catalogs.id", ondelete="CASCADE"), primary_key=True)
    food_id = Column(Integer, ForeignKey("food.id"), primary_key=True)

    catalog = relationship("Catalog", back_populates="food")
    food = relationship("Food")
