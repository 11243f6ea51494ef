from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, CheckConstraint
from sqlalchemy.sql import func

from app.database import Base


class Product(Base):
    """
    Product model, the single entity managed by the admin.

    Attributes:
        id: Unique identifier assigned by the database
        name: Product name (non-empty)
        description: Optional free text
        price: Fixed-point price (must be positive)
        stock: Available quantity (must be non-negative)
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('price > 0', name='check_price_positive'),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"
