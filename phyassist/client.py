import logging

import requests

from phyassist.errors import FeedbackError

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to get feedback from the server."


class FeedbackClient:
    """Talks to the proxy's ``/api/feedback`` endpoint. One POST per call, never retried."""

    def __init__(self, api_url: str, timeout: float = 90.0, session=None):
        self.url = f"{api_url.rstrip('/')}/api/feedback"
        self.timeout = timeout
        # module-level requests.post opens a fresh session per call
        self.session = session or requests

    def request_feedback(self, question: str, image_b64: str, mime_type: str) -> str:
        try:
            r = self.session.post(
                self.url,
                json={"image": image_b64, "mimeType": mime_type, "question": question},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Feedback request to %s failed: %s", self.url, e)
            raise FeedbackError(GENERIC_FAILURE) from e

        try:
            data = r.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not r.ok:
            raise FeedbackError(data.get("error") or GENERIC_FAILURE)
        if "feedback" not in data:
            raise FeedbackError(GENERIC_FAILURE)
        return str(data["feedback"] or "")
