"""
apicontract - typed request/response contracts shared by API clients and servers.
"""

from loguru import logger

from apicontract.catalog import (
    ApiSpec,
    OperationCatalog,
    OperationDefinition,
    OperationDraft,
    define_api,
    define_catalog,
)
from apicontract.client import ApiClient, ErrorContext, ErrorFormatter, Resolver, ResolverCall
from apicontract.errors import (
    ApiContractError,
    ErrorCategory,
    ErrorStage,
    InvalidOperationDefinition,
    ListenerError,
    MissingImplementation,
    OperationNotFound,
    RequestCancelled,
    RequestValidationError,
    ResponseValidationError,
    SchemaIssue,
    SchemaValidationError,
    TransportError,
)
from apicontract.router import (
    ApiRouter,
    FinalizedRoute,
    HandlerRequest,
    ImplementedRouter,
    Route,
    define_router,
)
from apicontract.schema import Shape
from apicontract.topic import FailureMessage, SuccessMessage, Topic

__version__ = "0.1.0"

logger.disable("apicontract")

__all__ = [
    "ApiClient",
    "ApiContractError",
    "ApiRouter",
    "ApiSpec",
    "ErrorCategory",
    "ErrorContext",
    "ErrorFormatter",
    "ErrorStage",
    "FailureMessage",
    "FinalizedRoute",
    "HandlerRequest",
    "ImplementedRouter",
    "InvalidOperationDefinition",
    "ListenerError",
    "MissingImplementation",
    "OperationCatalog",
    "OperationDefinition",
    "OperationDraft",
    "OperationNotFound",
    "RequestCancelled",
    "RequestValidationError",
    "Resolver",
    "ResolverCall",
    "ResponseValidationError",
    "Route",
    "SchemaIssue",
    "SchemaValidationError",
    "Shape",
    "SuccessMessage",
    "Topic",
    "TransportError",
    "define_api",
    "define_catalog",
    "define_router",
]
