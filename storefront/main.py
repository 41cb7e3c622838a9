from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List
import jwt
import logging

from .db import Base, engine, SessionLocal
from . import accounts, auth, cart, crud, items, orders, schemas
from .config import Settings, get_settings
from .errors import StorefrontError
from .logging_config import configure_logging
from .mail import Mailer, SMTPMailer
from .payments import FakeGateway, PaymentGateway
from .permissions import ANONYMOUS, CallerContext, permission_set
from .transport import CookieTransport

# Create tables if not existing (for demo). In production, use migrations.
Base.metadata.create_all(bind=engine)

configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Storefront")

_gateway = FakeGateway()


# Dependencies; tests swap these through app.dependency_overrides

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_gateway() -> PaymentGateway:
    return _gateway


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return SMTPMailer(settings.smtp_host, settings.smtp_port)


def get_caller(request: Request, db: Session = Depends(get_db)) -> CallerContext:
    """Resolve the caller from the session cookie; bad or missing tokens are anonymous."""
    token = request.cookies.get(auth.COOKIE_NAME)
    if not token:
        return ANONYMOUS
    try:
        user_id = int(auth.decode_session_token(token)["userId"])
    except (jwt.PyJWTError, KeyError, TypeError, ValueError):
        logger.info("ignoring unreadable session token")
        return ANONYMOUS
    user = crud.get_user(db, user_id)
    if not user:
        return ANONYMOUS
    return CallerContext(user_id=user.id, permissions=permission_set(user.permissions))


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health")
async def health():
    return {"status": "ok"}


# -------------------- session & credentials --------------------

@app.post("/mutations/signup", response_model=schemas.UserRead)
async def signup(payload: schemas.SignupIn, response: Response, db: Session = Depends(get_db)):
    return accounts.signup(db, CookieTransport(response), payload.email, payload.password, name=payload.name)


@app.post("/mutations/signin", response_model=schemas.UserRead)
async def signin(payload: schemas.SigninIn, response: Response, db: Session = Depends(get_db)):
    return accounts.signin(db, CookieTransport(response), payload.email, payload.password)


@app.post("/mutations/signout", response_model=schemas.MessageOut)
async def signout(response: Response):
    return accounts.signout(CookieTransport(response))


@app.post("/mutations/requestReset", response_model=schemas.MessageOut)
async def request_reset(
    payload: schemas.RequestResetIn,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    return accounts.request_password_reset(db, mailer, payload.email, settings)


@app.post("/mutations/resetPassword", response_model=schemas.UserRead)
async def reset_password(payload: schemas.ResetPasswordIn, response: Response, db: Session = Depends(get_db)):
    return accounts.reset_password(
        db, CookieTransport(response), payload.resetToken, payload.password, payload.confirmPassword
    )


@app.post("/mutations/updatePermissions", response_model=schemas.UserRead)
async def update_permissions(
    payload: schemas.UpdatePermissionsIn,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return accounts.update_permissions(db, caller, payload.userId, payload.permissions)


# -------------------- items --------------------

@app.post("/mutations/createItem", response_model=schemas.ItemRead)
async def create_item(
    payload: schemas.ItemCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return items.create_item(db, caller, **payload.fields())


@app.post("/mutations/updateItem", response_model=schemas.ItemRead)
async def update_item(payload: schemas.ItemUpdate, db: Session = Depends(get_db)):
    return items.update_item(db, payload.id, **payload.fields())


@app.post("/mutations/deleteItem", response_model=schemas.ItemRead)
async def delete_item(
    payload: schemas.IdIn,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return items.delete_item(db, caller, payload.id)


# -------------------- cart --------------------

@app.post("/mutations/addToCart", response_model=schemas.CartItemRead)
async def add_to_cart(
    payload: schemas.IdIn,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return cart.add_to_cart(db, caller, payload.id)


@app.post("/mutations/removeFromCart", response_model=schemas.CartItemRead)
async def remove_from_cart(
    payload: schemas.IdIn,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return cart.remove_from_cart(db, caller, payload.id)


# -------------------- orders --------------------

@app.post("/mutations/createOrder", response_model=schemas.OrderRead)
async def create_order(
    payload: schemas.CreateOrderIn,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
    caller: CallerContext = Depends(get_caller),
    settings: Settings = Depends(get_settings),
):
    return orders.create_order(db, gateway, caller, payload.token, settings.currency)


@app.get("/orders", response_model=List[schemas.OrderRead])
async def my_orders(db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    if not caller.authenticated:
        return []
    return crud.list_orders(db, caller.user_id)
