from .account import Account
from .change_request import ChangeRequest
from .payment import PaymentRecord
from .feedback import FeedbackItem
from .notification import Notification

__all__ = ["Account", "ChangeRequest", "PaymentRecord", "FeedbackItem", "Notification"]
