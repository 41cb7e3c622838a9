import time

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from .db import Base
from .permissions import Permission


def _default_permissions():
    return [Permission.USER.value]


def _now_ms() -> int:
    return int(time.time() * 1000)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="")
    # always stored lower-cased
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    # list of Permission names; replaced wholesale, never mutated in place
    permissions = Column(JSON, nullable=False, default=_default_permissions)
    reset_token = Column(String, nullable=True, index=True)
    # epoch milliseconds
    reset_token_expiry = Column(BigInteger, nullable=True)

    items = relationship("Item", back_populates="user", cascade="all, delete-orphan")
    cart = relationship(
        "CartItem", back_populates="user", cascade="all, delete-orphan", order_by="CartItem.id"
    )
    orders = relationship(
        "Order", back_populates="user", cascade="all, delete-orphan", order_by="Order.id"
    )


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    image = Column(String, nullable=True)
    large_image = Column(String, nullable=True)
    # integer minor units (cents)
    price = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="items")


class CartItem(Base):
    __tablename__ = "cart_items"

    # No unique (user_id, item_id) constraint: lines are merged by the cart module
    id = Column(Integer, primary_key=True, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="cart")
    item = relationship("Item")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # amount captured by the gateway, integer minor units
    total = Column(Integer, nullable=False)
    charge = Column(String, nullable=False, index=True)
    created_at = Column(BigInteger, nullable=False, default=_now_ms)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )


class OrderItem(Base):
    """Price snapshot of an Item at purchase time; never points at the live Item."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    image = Column(String, nullable=True)
    large_image = Column(String, nullable=True)
    price = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="items")
