"""Inventory tables. Counts are informational, nothing here is decremented or locked."""
from sqlalchemy import Column, String, Integer, Numeric
from database.base import Base


class Hotel(Base):
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String(150), nullable=False)
    address = Column(String(255), nullable=True)
    available_rooms = Column(Integer, default=0)
    rent = Column(Numeric(10, 2), nullable=False)  # per room per night

    def __repr__(self):
        return f"<Hotel {self.name}>"


class Transport(Base):
    __tablename__ = "transport"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    type = Column(String(50), nullable=False)
    no_of_seats = Column(Integer, default=0)
    fare = Column(Numeric(10, 2), nullable=False)  # per seat

    def __repr__(self):
        return f"<Transport {self.type}>"


class Food(Base):
    __tablename__ = "food"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    meals = Column(String(150), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    def __repr__(self):
        return f"<Food {self.meals}>"
