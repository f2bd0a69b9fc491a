class PhyAssistError(Exception):
    """Base class for every error raised by phyassist."""


class ValidationError(PhyAssistError):
    pass


class ConfigurationError(PhyAssistError):
    pass


class EncodingError(PhyAssistError):
    pass


class FeedbackError(PhyAssistError):
    """The feedback request failed; the message is safe to show to the student."""


class InvalidTransition(PhyAssistError):
    pass
