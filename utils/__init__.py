# Utils package - Utility modules organized by domain
# Import from subpackages for convenience

from .parsing.json import extract_json
from .images.processor import prepare_screenshot_for_model
from .storage import LocalObjectStorage, get_storage
from .clients.anthropic import AnthropicGateway, ModelGateway, get_model_gateway

__all__ = [
    "extract_json",
    "prepare_screenshot_for_model",
    "LocalObjectStorage",
    "get_storage",
    "AnthropicGateway",
    "ModelGateway",
    "get_model_gateway",
]
