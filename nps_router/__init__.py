"""
NPS Router - Net Promoter Score surveys with per-band redirects.

This package collects NPS responses through shareable per-campaign links,
redirects respondents by score band and aggregates results for a dashboard.
"""

# Client interface (main entry point)
from nps_router.client.nps_router import NPSRouter

# Factory for wiring components
from nps_router.factories.app_factory import NPSRouterFactory

# Useful functions
from nps_router.services.nps import calculate_nps
from nps_router.services.portable import decode_portable, encode_portable
from nps_router.services.route_parser import parse_route
from nps_router.domains.responses import classify_score

# Package metadata
__all__ = [
    # Main client interface
    "NPSRouter",
    # Factory
    "NPSRouterFactory",
    # Core functions
    "calculate_nps",
    "classify_score",
    "decode_portable",
    "encode_portable",
    "parse_route",
]
