"""
Identity — guest and registered sessions over signed bearer tokens.

    from storefront import identity as I

    auth = I.AuthService(config, customers=I.MemoryCustomerStore())

    grant = (await auth.create_guest()).unwrap()
    # ... guest shops, then registers with the same bearer token:
    grant = (await auth.register(
        "ann@example.com", "s3cret!", "s3cret!", bearer_token=grant.access_token,
    )).unwrap()
"""

from storefront.identity._types import (
    UserType,
    SessionIdentity,
    TokenClaims,
    DecodeErrorKind,
    DecodeError,
    RefreshToken,
    RefreshCheck,
    Customer,
    LoginOutcome,
    CustomerInfo,
    TokenGrant,
    CustomerRegistered,
)
from storefront.identity._codec import TokenCodec
from storefront.identity._store import CustomerStore, MemoryCustomerStore
from storefront.identity._sqlalchemy import (
    CustomerTable,
    SQLAlchemyCustomerStore,
    create_database,
)
from storefront.identity._refresh import RefreshTokenStore
from storefront.identity._resolver import (
    IdentityResolver,
    TOKEN_EXPIRED,
    bearer_from_header,
)
from storefront.identity._manager import CustomerManager, PasswordCustomerManager
from storefront.identity._events import EventPublisher, InMemoryEventBus
from storefront.identity._service import AuthService

__all__ = (
    # Types
    "UserType",
    "SessionIdentity",
    "TokenClaims",
    "DecodeErrorKind",
    "DecodeError",
    "RefreshToken",
    "RefreshCheck",
    "Customer",
    "LoginOutcome",
    "CustomerInfo",
    "TokenGrant",
    "CustomerRegistered",
    # Tokens
    "TokenCodec",
    "RefreshTokenStore",
    "IdentityResolver",
    "TOKEN_EXPIRED",
    "bearer_from_header",
    # Stores
    "CustomerStore",
    "MemoryCustomerStore",
    "CustomerTable",
    "SQLAlchemyCustomerStore",
    "create_database",
    # Collaborators
    "CustomerManager",
    "PasswordCustomerManager",
    "EventPublisher",
    "InMemoryEventBus",
    # Service
    "AuthService",
)
