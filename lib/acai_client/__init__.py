from .client import AsyncHttpClient, HttpClient
from .config_types import ClientConfig
from .errors import AcaiClientError, InvalidURL, Timeout, TransportError
from .models import METHODS, RequestOptions, ResponseData

__all__ = [
    "HttpClient",
    "AsyncHttpClient",
    "ClientConfig",
    "RequestOptions",
    "ResponseData",
    "METHODS",
    "AcaiClientError",
    "InvalidURL",
    "Timeout",
    "TransportError",
]
