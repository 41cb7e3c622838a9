"""
Error taxonomy for the storefront mutations.

StorefrontError (base)
├── UnauthenticatedError             401
├── ForbiddenError                   403
├── NotFoundError                    404
├── ValidationError                  400
├── InvalidCredentialsError          401
├── InvalidOrExpiredTokenError       400
├── PaymentFailedError               402
├── OrderPersistenceAfterChargeError 500
└── CartClearAfterOrderError         500

Operations raise these directly; the HTTP layer turns them into
``{"detail": message}`` responses using ``status_code``.
"""


class StorefrontError(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (entity IDs, etc.)
    """

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class UnauthenticatedError(StorefrontError):
    status_code = 401

    def __init__(self, message: str = "You must be logged in!"):
        super().__init__(message)


class ForbiddenError(StorefrontError):
    status_code = 403

    def __init__(self, message: str = "You don't have permission to do that!", details: dict | None = None):
        super().__init__(message, details)


class NotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, entity: str, key):
        super().__init__(f"No {entity} found for {key}", details={"entity": entity, "key": key})
        self.entity = entity
        self.key = key


class ValidationError(StorefrontError):
    status_code = 400


class InvalidCredentialsError(StorefrontError):
    status_code = 401

    def __init__(self):
        super().__init__("Invalid password!")


class InvalidOrExpiredTokenError(StorefrontError):
    status_code = 400

    def __init__(self):
        super().__init__("This token is either invalid or expired!")


class PaymentFailedError(StorefrontError):
    """Raised when the gateway declines or cannot be reached; nothing was written."""

    status_code = 402

    def __init__(self, amount: int, currency: str, reason: str):
        super().__init__(
            f"Payment of {amount} {currency} failed: {reason}",
            details={"amount": amount, "currency": currency, "reason": reason},
        )
        self.amount = amount
        self.currency = currency
        self.reason = reason


class OrderPersistenceAfterChargeError(StorefrontError):
    """
    The customer was charged but the order could not be written.

    The cart is left untouched. Operators reconcile by ``charge_id``.
    """

    status_code = 500

    def __init__(self, user_id: int, charge_id: str, amount: int):
        super().__init__(
            f"Charge {charge_id} for {amount} succeeded but the order for user {user_id} was not saved",
            details={"user_id": user_id, "charge_id": charge_id, "amount": amount},
        )
        self.user_id = user_id
        self.charge_id = charge_id
        self.amount = amount


class CartClearAfterOrderError(StorefrontError):
    """
    The order was saved for a successful charge but the cart lines were not removed.

    Retrying checkout would charge again; operators clear the cart by ``order_id``.
    """

    status_code = 500

    def __init__(self, user_id: int, charge_id: str, order_id: int):
        super().__init__(
            f"Order {order_id} was saved for charge {charge_id} but the cart of user {user_id} was not cleared",
            details={"user_id": user_id, "charge_id": charge_id, "order_id": order_id},
        )
        self.user_id = user_id
        self.charge_id = charge_id
        self.order_id = order_id
