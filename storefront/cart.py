import logging

from sqlalchemy.orm import Session

from . import crud, models
from .errors import ForbiddenError, NotFoundError, UnauthenticatedError
from .permissions import CallerContext

logger = logging.getLogger(__name__)


def add_to_cart(db: Session, caller: CallerContext, item_id: int) -> models.CartItem:
    """Add one unit of `item_id` to the caller's cart.

    Repeated adds bump the quantity of the existing line instead of creating a
    second one. The increment is atomic in the database; two concurrent first
    adds for the same item can still both insert a line.
    """
    if not caller.authenticated:
        raise UnauthenticatedError("You need to be signed in!")

    existing = crud.find_cart_item(db, caller.user_id, item_id)
    if existing:
        cart_item = crud.increment_cart_item(db, existing.id)
        if cart_item is None:
            # line removed between lookup and update
            raise NotFoundError("cart item", existing.id)
        return cart_item

    if not crud.get_item(db, item_id):
        raise NotFoundError("item", item_id)
    cart_item = crud.create_cart_item(db, caller.user_id, item_id)
    logger.debug("user %s started cart line %s for item %s", caller.user_id, cart_item.id, item_id)
    return cart_item


def remove_from_cart(db: Session, caller: CallerContext, cart_item_id: int) -> models.CartItem:
    cart_item = crud.get_cart_item(db, cart_item_id)
    if not cart_item:
        raise NotFoundError("cart item", cart_item_id)
    if cart_item.user_id != caller.user_id:
        raise ForbiddenError(
            "You don't have permissions to delete this item!",
            details={"cart_item_id": cart_item_id, "user_id": caller.user_id},
        )
    return crud.delete_cart_item(db, cart_item)
