# Images subpackage - screenshot preparation for the model
from .processor import prepare_screenshot_for_model

__all__ = [
    "prepare_screenshot_for_model",
]
