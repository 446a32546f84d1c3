"""Pydantic schemas for request/response validation."""

from .assignment import *  # noqa: F403
from .booking import *  # noqa: F403
from .booking_request import *  # noqa: F403
from .common import *  # noqa: F403
from .health import *  # noqa: F403
from .payment import *  # noqa: F403
