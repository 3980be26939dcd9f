from tokenauth.models.base import FieldValueError
from tokenauth.models.user import User

__all__ = [
    "FieldValueError",
    "User",
]
