"""
对外统一入口（Public Surface）：
- 从这里 import 需要的类/函数，内部实现可自由演进。
"""

from .client.client import Client, build_middlewares, get, new, post
from .client.credential import CredentialSchema, Violation, merge_credentials, validate
from .client.errors import (
    ConfigError,
    CredentialValidationError,
    PayloadDecodeError,
    PayloadEncodeError,
    SigningError,
    TiktokShopError,
)
from .client.models import RawResponse, Request
from .client.response import DefaultResponseHandler, ResponseHandler
from .client.result import Err, Ok, Result
from .client.signer import RequestSigner, build_canonical_string, compute_sign
from .core.config import DEFAULT_ENDPOINT, ClientConfig, load_config


__all__ = [
    "Client", "new", "get", "post", "build_middlewares",
    "CredentialSchema", "Violation", "merge_credentials", "validate",
    "TiktokShopError", "CredentialValidationError", "SigningError", "ConfigError",
    "PayloadEncodeError", "PayloadDecodeError",
    "Request", "RawResponse",
    "ResponseHandler", "DefaultResponseHandler",
    "Ok", "Err", "Result",
    "RequestSigner", "build_canonical_string", "compute_sign",
    "ClientConfig", "DEFAULT_ENDPOINT", "load_config",
]
