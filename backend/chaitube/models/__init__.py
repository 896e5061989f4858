from chaitube.models.subscription import Subscription
from chaitube.models.user import User

__all__ = [
    "Subscription",
    "User",
]
