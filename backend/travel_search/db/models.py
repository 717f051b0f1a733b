"""
Database models -- SQLAlchemy ORM definitions.
products + product_countries hold the searchable catalog,
search_logs is the append-only analytics trail.
Compatible with both PostgreSQL and SQLite.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, Numeric,
    String, Text, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    """
    A searchable travel product. data_gb, days and countries only carry
    meaning for eSIM plans; they stay NULL/empty for the other categories.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    product_type = Column(String(16), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False, index=True)
    data_gb = Column(Integer)
    days = Column(Integer)
    description = Column(Text)
    image_url = Column(String(500))
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    countries = relationship(
        "ProductCountry",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def country_names(self):
        return sorted({c.country for c in self.countries if c.country})


class ProductCountry(Base):
    """One row per (product, country) -- the product's country set."""
    __tablename__ = "product_countries"
    __table_args__ = (
        UniqueConstraint("product_id", "country", name="uq_product_country"),
        Index("idx_product_countries_country", "country"),
    )

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    country = Column(String(100), nullable=False)

    product = relationship("Product", back_populates="countries")


class SearchLog(Base):
    """One row per completed search attempt. Written once, never updated."""
    __tablename__ = "search_logs"
    __table_args__ = (
        Index("idx_search_logs_product_type", "product_type"),
        Index("idx_search_logs_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    search_term = Column(String(255))
    filters = Column(JSON)
    product_type = Column(String(50))
    results_count = Column(Integer)
    user_ip = Column(String(45))
    user_agent = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
