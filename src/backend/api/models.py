"""
Request bodies for the HTTP API.
"""

from models import ProviderSelection
from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Body for ``POST /api/sessions``."""

    provider: ProviderSelection | None = Field(
        default=None, description="Provider to chat with (can be selected later)"
    )
