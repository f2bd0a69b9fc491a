"""One student's form: question, chosen image, and the lifecycle of a submission.

The lifecycle is an explicit state machine so that every terminal state
(IDLE, SUCCESS, FAILED) clears the loading indicator, whatever path led there.
"""
import base64, io, logging
from enum import Enum
from typing import Optional

from PIL import Image

from phyassist.errors import (
    ConfigurationError,
    EncodingError,
    FeedbackError,
    InvalidTransition,
    ValidationError,
)

logger = logging.getLogger(__name__)

MISSING_INPUT = "Please provide a question and upload an image of your solution."
CONFIG_MISSING = (
    "Configuration error: The API URL is not set. "
    "The administrator must configure PHYASSIST_API_URL."
)
UNREADABLE_IMAGE = "Could not read the selected image. Please choose a PNG or JPEG photo of your solution."
UNSUPPORTED_IMAGE = "Unsupported image type. Please upload a PNG or JPEG image."
GENERIC_FAILURE = "Failed to get feedback from the server."

IMAGE_FORMATS = {"PNG": "image/png", "JPEG": "image/jpeg"}


class SubmissionState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class Event(Enum):
    FILE_CHOSEN = "file chosen"
    SUBMIT_PRESSED = "submit pressed"
    INPUT_REJECTED = "input rejected"
    ENCODE_COMPLETE = "encode complete"
    RESPONSE_RECEIVED = "response received"
    RESPONSE_FAILED = "response failed"


S, E = SubmissionState, Event
TRANSITIONS = {
    (S.IDLE, E.FILE_CHOSEN): S.IDLE,
    (S.SUCCESS, E.FILE_CHOSEN): S.IDLE,
    (S.FAILED, E.FILE_CHOSEN): S.IDLE,
    (S.IDLE, E.SUBMIT_PRESSED): S.VALIDATING,
    (S.SUCCESS, E.SUBMIT_PRESSED): S.VALIDATING,
    (S.FAILED, E.SUBMIT_PRESSED): S.VALIDATING,
    (S.VALIDATING, E.INPUT_REJECTED): S.FAILED,
    (S.VALIDATING, E.ENCODE_COMPLETE): S.SUBMITTING,
    (S.SUBMITTING, E.RESPONSE_RECEIVED): S.SUCCESS,
    (S.SUBMITTING, E.RESPONSE_FAILED): S.FAILED,
}
LOADING_STATES = {S.VALIDATING, S.SUBMITTING}


def encode_image(data: bytes):
    """Return ``(base64 text, mime type)`` for PNG/JPEG bytes, else raise EncodingError."""
    if not data:
        raise EncodingError(UNREADABLE_IMAGE)
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except Exception as e:
        raise EncodingError(UNREADABLE_IMAGE) from e
    mime = IMAGE_FORMATS.get(fmt or "")
    if mime is None:
        raise EncodingError(UNSUPPORTED_IMAGE)
    return base64.b64encode(data).decode("ascii"), mime


class Submission:
    def __init__(self, client=None):
        # client: anything with request_feedback(question, image_b64, mime_type); None = API URL not configured
        self.client = client
        self.state = SubmissionState.IDLE
        self.image: Optional[bytes] = None
        self.filename = ""
        self.error: Optional[str] = None
        self.feedback = ""

    @property
    def loading(self) -> bool:
        return self.state in LOADING_STATES

    def _fire(self, event: Event):
        nxt = TRANSITIONS.get((self.state, event))
        if nxt is None:
            raise InvalidTransition(f"{event.value!r} not allowed while {self.state.value}")
        logger.debug("submission %s --%s--> %s", self.state.value, event.value, nxt.value)
        self.state = nxt

    def _fail(self, message: str, event: Event = Event.INPUT_REJECTED) -> SubmissionState:
        self.error = message
        self.feedback = ""
        self._fire(event)
        return self.state

    def choose_file(self, data: Optional[bytes], filename: str = ""):
        self._fire(Event.FILE_CHOSEN)
        self.image = data
        self.filename = filename
        self.error = None
        self.feedback = ""

    def prepare(self, question: str):
        """Validate and encode the form; returns ``(question, image_b64, mime_type)``."""
        question = (question or "").strip()
        if not question or self.image is None:
            raise ValidationError(MISSING_INPUT)
        image_b64, mime_type = encode_image(self.image)
        if self.client is None:
            raise ConfigurationError(CONFIG_MISSING)
        return question, image_b64, mime_type

    def submit(self, question: str) -> SubmissionState:
        """Run one submission to completion. Raises InvalidTransition if one is already in flight."""
        self._fire(Event.SUBMIT_PRESSED)
        self.error = None
        self.feedback = ""

        try:
            question, image_b64, mime_type = self.prepare(question)
        except (ValidationError, EncodingError, ConfigurationError) as e:
            return self._fail(str(e))

        self._fire(Event.ENCODE_COMPLETE)
        try:
            feedback = self.client.request_feedback(question, image_b64, mime_type)
        except FeedbackError as e:
            return self._fail(str(e), Event.RESPONSE_FAILED)
        except Exception:
            logger.exception("Unexpected error while requesting feedback")
            return self._fail(GENERIC_FAILURE, Event.RESPONSE_FAILED)

        self.feedback = feedback
        self._fire(Event.RESPONSE_RECEIVED)
        return self.state
