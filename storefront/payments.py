"""Payment gateway port and adapters.

The order orchestrator only ever talks to a ``PaymentGateway``; the concrete
adapter is handed in by the caller (the HTTP layer resolves it through a
FastAPI dependency, tests pass a ``FakeGateway``).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class Charge:
    """A captured payment as reported by the gateway."""

    id: str
    amount: int


class PaymentGatewayError(Exception):
    """Decline or transport failure reported by a gateway adapter."""


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def charge(self, amount: int, currency: str, source: str) -> Charge:
        """Capture `amount` minor units from the tokenized `source`."""
        ...


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway for development and testing."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        # when set, reported as the captured amount instead of the requested one
        self.captured_amount: int | None = None
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Card declined",
        captured_amount: int | None = None,
    ) -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.captured_amount = captured_amount

    def charge(self, amount: int, currency: str, source: str) -> Charge:
        self.calls.append({"amount": amount, "currency": currency, "source": source})

        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)
        captured = amount if self.captured_amount is None else self.captured_amount
        return Charge(id=f"ch_fake_{uuid4().hex[:12]}", amount=captured)
