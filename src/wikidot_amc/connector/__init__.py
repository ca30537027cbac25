"""Transport layer: the ajax-module-connector pipeline and its collaborators."""

from .amc_client import ROOT_SITE, AMCClient, encode_request_body, mask_sensitive_data
from .auth import login, logout
from .backoff import calculate_backoff
from .header import SESSION_COOKIE_NAME, WIKIDOT_TOKEN7, AMCHeader
from .limiter import ConcurrencyLimiter
from .types import AMCRequestBody, AMCResponse, AMCResponseSchema, is_success_response, parse_amc_response


__all__ = [
    "ROOT_SITE",
    "SESSION_COOKIE_NAME",
    "WIKIDOT_TOKEN7",
    "AMCClient",
    "AMCHeader",
    "AMCRequestBody",
    "AMCResponse",
    "AMCResponseSchema",
    "ConcurrencyLimiter",
    "calculate_backoff",
    "encode_request_body",
    "is_success_response",
    "login",
    "logout",
    "mask_sensitive_data",
    "parse_amc_response",
]
