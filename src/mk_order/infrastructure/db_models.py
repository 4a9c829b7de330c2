# src/mk_order/infrastructure/db_models.py
"""SQLAlchemy ORM models for orders / order_items (DDL reference only — queries use raw SQL).

Tables are created by Alembic migration: alembic/versions/004_create_orders.py
"""
from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.mk_common.database import Base


class OrderORM(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="placed")
    customer_info: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    shipment_fee_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    cadre_profit_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class OrderItemORM(Base):
    __tablename__ = "order_items"

    order_id: Mapped[str] = mapped_column(
        String(16), ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True
    )
    # No FK: a listing deleted out-of-band must not take order history with it
    listing_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(62), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    seller_info: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    profit_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    selected_size: Mapped[str | None] = mapped_column(String(10), nullable=True)
    dimensions: Mapped[str | None] = mapped_column(String(2), nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    depth: Mapped[int | None] = mapped_column(Integer, nullable=True)
    item_received: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    item_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    item_packed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ready_for_shipment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
