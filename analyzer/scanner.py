"""
Scan step: capture a screenshot of a URL and put it in object storage.
"""

import logging
import time
from typing import Dict

from core.exceptions import AdvisorError, UpstreamError
from core.store import RecommendationStore
from utils.clients.screenshots import ScreenshotCapturer
from utils.storage import LocalObjectStorage

logger = logging.getLogger(__name__)


def screenshot_path_for(scan_id: str) -> str:
    return f"scans/{scan_id}/homepage.png"


def scan_url(
    store: RecommendationStore,
    capturer: ScreenshotCapturer,
    storage: LocalObjectStorage,
    url: str,
) -> Dict[str, str]:
    """
    Capture and store a screenshot for url.

    The scan row is inserted first with status "processing". Capture or
    storage failures mark it "failed" with the error text and are re-raised.

    Returns:
        {"id": scan_id, "screenshotPath": storage path, "screenshotUrl": public URL}
    """
    scan_id = store.create_scan(url)

    try:
        start = time.time()
        image_bytes = capturer.capture(url)
        logger.info(f"⏱️  Screenshot captured in {time.time() - start:.2f}s")
        path = storage.save(screenshot_path_for(scan_id), image_bytes)
        store.complete_scan(scan_id, [path])
    except AdvisorError as e:
        store.fail_scan(scan_id, e.message)
        raise
    except Exception as e:
        store.fail_scan(scan_id, str(e))
        raise UpstreamError(f"Screenshot capture failed: {e}") from e

    logger.info(f"✅ Scan {scan_id} completed: {path}")
    return {
        "id": scan_id,
        "screenshotPath": path,
        "screenshotUrl": storage.public_url(path),
    }
