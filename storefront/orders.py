"""Turn a user's cart into a paid order.

Ordering: charge the gateway, then persist the order, then clear the cart.
A gateway failure leaves the store untouched. A store failure after a
successful charge is raised as OrderPersistenceAfterChargeError and the cart is
left in place; a failure to clear the cart after the order is saved is raised
as CartClearAfterOrderError. There is no compensating refund.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud, models
from .config import get_settings
from .errors import (
    CartClearAfterOrderError,
    NotFoundError,
    OrderPersistenceAfterChargeError,
    PaymentFailedError,
    UnauthenticatedError,
)
from .payments import PaymentGateway, PaymentGatewayError
from .permissions import CallerContext

logger = logging.getLogger(__name__)


def cart_total(cart: List[models.CartItem]) -> int:
    return sum(line.item.price * line.quantity for line in cart)


def snapshot_cart(cart: List[models.CartItem]) -> List[dict]:
    """Copy each line's item fields; the item id is deliberately left out."""
    return [
        {
            "title": line.item.title,
            "description": line.item.description,
            "image": line.item.image,
            "large_image": line.item.large_image,
            "price": line.item.price,
            "quantity": line.quantity,
        }
        for line in cart
    ]


def create_order(
    db: Session,
    gateway: PaymentGateway,
    caller: CallerContext,
    token: str,
    currency: Optional[str] = None,
) -> models.Order:
    if not caller.authenticated:
        raise UnauthenticatedError("You need to be signed in!")
    currency = currency or get_settings().currency

    user = crud.get_user_with_cart(db, caller.user_id)
    if not user:
        raise NotFoundError("user", caller.user_id)
    cart = list(user.cart)
    cart_item_ids = [line.id for line in cart]
    lines = snapshot_cart(cart)

    amount = cart_total(cart)
    logger.info("charging user %s %s %s for %d cart lines", user.id, amount, currency, len(cart))
    try:
        charge = gateway.charge(amount, currency, token)
    except PaymentGatewayError as e:
        logger.info("charge for user %s declined: %s", user.id, e)
        raise PaymentFailedError(amount, currency, str(e)) from e

    try:
        order = crud.create_order(db, user.id, total=charge.amount, charge_id=charge.id, lines=lines)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "charge %s (%s %s) captured for user %s but the order was not saved",
            charge.id, charge.amount, currency, user.id, exc_info=True,
        )
        raise OrderPersistenceAfterChargeError(user.id, charge.id, charge.amount) from e

    order_id = order.id
    try:
        removed = crud.delete_cart_items(db, cart_item_ids)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "order %s saved for charge %s but cart lines %s of user %s were not cleared",
            order_id, charge.id, cart_item_ids, user.id, exc_info=True,
        )
        raise CartClearAfterOrderError(user.id, charge.id, order_id) from e
    logger.info("order %s saved for charge %s, %d cart lines cleared", order.id, charge.id, removed)
    return order
