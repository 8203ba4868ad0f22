"""
Provider Gateway Step

Single chat-completion call per generation over httpx.
"""

from .client import ChatCompletionProvider, CREATIVITY_TEMPERATURES, DEFAULT_API_URL
from .main import ProviderGatewayStep

__all__ = ["ChatCompletionProvider", "ProviderGatewayStep", "CREATIVITY_TEMPERATURES", "DEFAULT_API_URL"]
