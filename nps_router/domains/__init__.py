"""
Domain models for the NPS router.

This package contains the campaign, response and score band models.
"""

from nps_router.domains.campaigns import *
from nps_router.domains.responses import *
from nps_router.domains.errors import *
