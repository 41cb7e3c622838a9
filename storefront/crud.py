from typing import Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from . import models

# Data access only: not-found is returned as None/empty, never raised.

ITEM_FIELDS = ("title", "price", "description", "image", "large_image")


# -------------------- users --------------------

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def create_user(db: Session, name: str, email: str, password_hash: str, permissions: List[str]) -> models.User:
    db_user = models.User(name=name, email=email, password_hash=password_hash, permissions=permissions)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user(db: Session, user: models.User, **fields) -> models.User:
    for key, value in fields.items():
        setattr(user, key, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def find_user_by_reset_token(db: Session, reset_token: str, expiry_gte: int) -> Optional[models.User]:
    return (
        db.query(models.User)
        .filter(models.User.reset_token == reset_token, models.User.reset_token_expiry >= expiry_gte)
        .first()
    )


def get_user_with_cart(db: Session, user_id: int) -> Optional[models.User]:
    return (
        db.query(models.User)
        .options(selectinload(models.User.cart).selectinload(models.CartItem.item))
        .filter(models.User.id == user_id)
        .first()
    )


# -------------------- items --------------------

def get_item(db: Session, item_id: int) -> Optional[models.Item]:
    return db.get(models.Item, item_id)


def create_item(db: Session, user_id: int, **fields) -> models.Item:
    db_item = models.Item(user_id=user_id, **{k: v for k, v in fields.items() if k in ITEM_FIELDS})
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


def update_item(db: Session, item_id: int, **fields) -> Optional[models.Item]:
    item = db.get(models.Item, item_id)
    if not item:
        return None
    for key, value in fields.items():
        if key in ITEM_FIELDS:
            setattr(item, key, value)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, item: models.Item) -> models.Item:
    db.delete(item)
    db.commit()
    return item


# -------------------- cart --------------------

def get_cart_item(db: Session, cart_item_id: int) -> Optional[models.CartItem]:
    return db.get(models.CartItem, cart_item_id)


def find_cart_item(db: Session, user_id: int, item_id: int) -> Optional[models.CartItem]:
    return (
        db.query(models.CartItem)
        .filter(models.CartItem.user_id == user_id, models.CartItem.item_id == item_id)
        .order_by(models.CartItem.id)
        .first()
    )


def create_cart_item(db: Session, user_id: int, item_id: int) -> models.CartItem:
    cart_item = models.CartItem(user_id=user_id, item_id=item_id, quantity=1)
    db.add(cart_item)
    db.commit()
    db.refresh(cart_item)
    return cart_item


def increment_cart_item(db: Session, cart_item_id: int, by: int = 1) -> Optional[models.CartItem]:
    # Single UPDATE so concurrent increments are applied by the database, not lost
    db.execute(
        update(models.CartItem)
        .where(models.CartItem.id == cart_item_id)
        .values(quantity=models.CartItem.quantity + by)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    cart_item = db.get(models.CartItem, cart_item_id)
    if cart_item is not None:
        db.refresh(cart_item)
    return cart_item


def delete_cart_item(db: Session, cart_item: models.CartItem) -> models.CartItem:
    db.delete(cart_item)
    db.commit()
    return cart_item


def delete_cart_items(db: Session, cart_item_ids: Iterable[int]) -> int:
    ids = list(cart_item_ids)
    if not ids:
        return 0
    count = (
        db.query(models.CartItem)
        .filter(models.CartItem.id.in_(ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    return count


def list_cart(db: Session, user_id: int) -> List[models.CartItem]:
    return (
        db.query(models.CartItem)
        .filter(models.CartItem.user_id == user_id)
        .order_by(models.CartItem.id)
        .all()
    )


# -------------------- orders --------------------

def create_order(db: Session, user_id: int, total: int, charge_id: str, lines: List[dict]) -> models.Order:
    """Insert the order and all its OrderItems in a single commit."""
    db_order = models.Order(
        user_id=user_id,
        total=total,
        charge=charge_id,
        items=[models.OrderItem(user_id=user_id, **line) for line in lines],
    )
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    return db_order


def list_orders(db: Session, user_id: int) -> List[models.Order]:
    return (
        db.query(models.Order)
        .filter(models.Order.user_id == user_id)
        .order_by(models.Order.id)
        .all()
    )
