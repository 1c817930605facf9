"""
Deployment shell around the fee router: configuration and signed requests
"""

from .config import FeeRouterConfig, build_router, config_from_env, load_config
from .requests import RequestDispatcher, RequestEnvelope, parse_request

__all__ = [
    "FeeRouterConfig",
    "build_router",
    "config_from_env",
    "load_config",
    "RequestDispatcher",
    "RequestEnvelope",
    "parse_request",
]
