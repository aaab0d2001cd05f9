from sqlalchemy import Column, String, Integer, Text, DateTime, func
from checkout.database import Base

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, unique=True, index=True, nullable=False)   # Stripe Checkout Session ID
    email = Column(String)
    name = Column(String)
    line1 = Column(String)
    line2 = Column(String)
    city = Column(String)
    postal_code = Column(String)
    country = Column(String)
    phone = Column(String)
    items = Column(Text)                                                   # JSON list of purchased line items
    total = Column(Integer)                                                # smallest currency unit
    created_at = Column(DateTime, server_default=func.now())
