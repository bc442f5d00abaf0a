"""AI gateway proxy: structured extraction and streamed production assistants."""

from .client import AIGatewayClient
from .service import AIToolsService

__all__ = ["AIGatewayClient", "AIToolsService"]
