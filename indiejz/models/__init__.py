from .checkout_order import CheckoutOrder
from .coupon import Coupon
from .donation import Donation
from .error_log import ErrorLog
from .game import Game
from .notification_job import NotificationJob
from .purchase import Purchase
from .user import User

__all__ = [
    "CheckoutOrder",
    "Coupon",
    "Donation",
    "ErrorLog",
    "Game",
    "NotificationJob",
    "Purchase",
    "User",
]
