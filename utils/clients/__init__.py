# Clients subpackage - External API clients
from .anthropic import (
    AnthropicGateway,
    ModelGateway,
    call_anthropic_api_with_retry,
    get_model_gateway,
)
from .screenshots import (
    PlaywrightCapturer,
    ScreenshotCapturer,
    ScreenshotOneCapturer,
    get_screenshot_capturer,
)

__all__ = [
    "AnthropicGateway",
    "ModelGateway",
    "call_anthropic_api_with_retry",
    "get_model_gateway",
    "PlaywrightCapturer",
    "ScreenshotCapturer",
    "ScreenshotOneCapturer",
    "get_screenshot_capturer",
]
