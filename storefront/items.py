import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud, models
from .errors import ForbiddenError, NotFoundError, UnauthenticatedError, ValidationError
from .permissions import CallerContext, Permission, has_any_permission

logger = logging.getLogger(__name__)

ITEM_DELETE_PERMISSIONS = (Permission.ADMIN, Permission.ITEMDELETE)


def create_item(db: Session, caller: CallerContext, **fields) -> models.Item:
    if not caller.authenticated:
        raise UnauthenticatedError()
    item = crud.create_item(db, caller.user_id, **fields)
    logger.info("user %s created item %s", caller.user_id, item.id)
    return item


def update_item(db: Session, item_id: int, **fields) -> models.Item:
    # Any caller may update any item: there is no owner or permission check here.
    fields.pop("id", None)
    try:
        item = crud.update_item(db, item_id, **fields)
    except IntegrityError as e:
        db.rollback()
        raise ValidationError(f"Invalid update for item {item_id}: {e.orig}") from e
    if not item:
        raise NotFoundError("item", item_id)
    return item


def delete_item(db: Session, caller: CallerContext, item_id: int) -> models.Item:
    item = crud.get_item(db, item_id)
    if not item:
        raise NotFoundError("item", item_id)

    owner = caller.authenticated and item.user_id == caller.user_id
    if not owner and not has_any_permission(caller, ITEM_DELETE_PERMISSIONS):
        raise ForbiddenError(
            "You don't have permissions to delete this item!",
            details={"item_id": item_id, "user_id": caller.user_id},
        )
    deleted = crud.delete_item(db, item)
    logger.info("user %s deleted item %s", caller.user_id, item_id)
    return deleted
