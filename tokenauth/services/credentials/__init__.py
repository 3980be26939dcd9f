from .dto import LoginIn, RegisterIn
from .service import CONSTRAINT_FIELDS, CredentialService

__all__ = ["CONSTRAINT_FIELDS", "CredentialService", "LoginIn", "RegisterIn"]
