from phyassist.render import render_feedback, parse_segments
from phyassist.submission import Submission, SubmissionState

__version__ = "1.0.0"

__all__ = ["render_feedback", "parse_segments", "Submission", "SubmissionState"]
