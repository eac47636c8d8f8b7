"""
Browser Automation Package

Browser session management, challenge detection and form filling.
"""

from .session import BrowserManager
from .captcha import ChallengeDetector, DEFAULT_CHALLENGE_MARKERS
from .filler import FormFiller, SUBMIT_KEY


__all__ = [
    "BrowserManager",
    "ChallengeDetector",
    "DEFAULT_CHALLENGE_MARKERS",
    "FormFiller",
    "SUBMIT_KEY",
]
