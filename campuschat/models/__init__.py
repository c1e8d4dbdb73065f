from campuschat.models.user import User
from campuschat.models.payment_transaction import PaymentTransaction
from campuschat.models.message import ChatMessage

__all__ = ["User", "PaymentTransaction", "ChatMessage"]
