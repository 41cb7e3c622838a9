import pytest

from storefront import cart, crud
from storefront.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from storefront.permissions import ANONYMOUS


def test_repeat_add_merges_into_one_line(db_session, make_user, make_item, as_caller):
    user = make_user()
    item = make_item(user)

    first = cart.add_to_cart(db_session, as_caller(user), item.id)
    second = cart.add_to_cart(db_session, as_caller(user), item.id)

    assert first.id == second.id
    assert second.quantity == 2
    lines = crud.list_cart(db_session, user.id)
    assert len(lines) == 1
    assert lines[0].quantity == 2


def test_lines_are_per_user(db_session, make_user, make_item, as_caller):
    alice = make_user()
    bob = make_user(email="bob@example.com")
    item = make_item(alice)
    cart.add_to_cart(db_session, as_caller(alice), item.id)
    line = cart.add_to_cart(db_session, as_caller(bob), item.id)
    assert line.quantity == 1
    assert line.user_id == bob.id


def test_add_requires_caller(db_session):
    with pytest.raises(UnauthenticatedError):
        cart.add_to_cart(db_session, ANONYMOUS, 1)


def test_add_unknown_item(db_session, make_user, as_caller):
    with pytest.raises(NotFoundError):
        cart.add_to_cart(db_session, as_caller(make_user()), 777)


def test_remove_own_line(db_session, make_user, make_item, as_caller):
    user = make_user()
    line = cart.add_to_cart(db_session, as_caller(user), make_item(user).id)
    removed = cart.remove_from_cart(db_session, as_caller(user), line.id)
    assert removed.id == line.id
    assert crud.get_cart_item(db_session, line.id) is None


def test_remove_someone_elses_line(db_session, make_user, make_item, as_caller):
    alice = make_user()
    mallory = make_user(email="mallory@example.com", permissions=["ADMIN"])
    line = cart.add_to_cart(db_session, as_caller(alice), make_item(alice).id)
    with pytest.raises(ForbiddenError):
        cart.remove_from_cart(db_session, as_caller(mallory), line.id)
    assert crud.get_cart_item(db_session, line.id) is not None


def test_remove_missing_line(db_session, make_user, as_caller):
    with pytest.raises(NotFoundError):
        cart.remove_from_cart(db_session, as_caller(make_user()), 31337)


def test_line_removed_before_increment(db_session, make_user, make_item, as_caller, monkeypatch):
    user = make_user()
    line = cart.add_to_cart(db_session, as_caller(user), make_item(user).id)
    stale = crud.delete_cart_item(db_session, line)
    monkeypatch.setattr(crud, "find_cart_item", lambda *args, **kwargs: stale)

    with pytest.raises(NotFoundError):
        cart.add_to_cart(db_session, as_caller(user), stale.item_id)
    assert crud.list_cart(db_session, user.id) == []
