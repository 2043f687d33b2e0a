"""
Rule-based responder: the terminal fallback when no provider answers.

Messages are matched against an ordered list of rules; the last rule always
matches. The picked template is then personalised by intensity first and
style second, because some style substitutions target text the intensity
pass introduces.
"""

import math
import random
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from nudge.personality.prompts import PersonalitySettings

GREETINGS = [
    "Hello! 👋 Great to meet you!",
    "Hi there! 😊 How can I help?",
    "Hey! 🌟 What's on your mind?",
]
HELP = [
    "I'm here to help! 🚀 I can answer questions, provide information, or just chat. What would you like to explore?",
]
THANKS = [
    "You're welcome! 😊 Happy to help!",
    "Anytime! Great working with you! 🌟",
]
WELLBEING = [
    "I'm doing great, thanks for asking! 😊 How about you?",
    "Great! 🌟 Ready to get things done. How are you?",
]
DEFAULTS = [
    "That's interesting! 🌟 Tell me more about your perspective.",
    "Great point! 💡 What drew you to this topic?",
    "I appreciate you sharing that! 😊",
    "Fascinating! 🚀 What would you like to explore next?",
]

_GREETING_RE = re.compile(
    r"^(hi|hello|hey|sup|good morning|good afternoon|good evening)[!.\s]*$"
)
_NUMBER = r"(-?\d+(?:\.\d+)?)"
_ARITHMETIC_RE = re.compile(
    rf"^(?:what(?:'s| is)\s+|calculate\s+)?{_NUMBER}\s*([+\-*/])\s*{_NUMBER}\s*[=?]*$"
)
_CLOCK_RE = re.compile(r"\b(time|date)\b")

_LOUD_AFFIRMATION_RE = re.compile(r"Great!|Amazing!", re.IGNORECASE)
_GREAT_RE = re.compile(r"Great!", re.IGNORECASE)


def _replace_great(replacement: str) -> Callable[[str], str]:
    return lambda text: _GREAT_RE.sub(replacement, text)


def _systematic(text: str) -> str:
    text = re.sub(r"\bI'm\b", "SYSTEM is", text)
    return re.sub(r"\bI\b", "SYSTEM", text)


STYLE_TRANSFORMS: dict[int, Callable[[str], str]] = {
    0: lambda text: text,
    1: _replace_great("Fascinating!"),
    2: _replace_great("Excellent."),
    3: _replace_great("Ha! Nice!"),
    4: _replace_great("Oh wow, how original."),
    5: _replace_great("Magnificent!"),
    6: _replace_great("How thought-provoking."),
    7: _replace_great("INCREDIBLE!"),
    8: _replace_great("Cool."),
    9: _systematic,
}


def apply_intensity(text: str, level: int) -> str:
    if level <= 1:
        return f"{text} 💕"
    if level >= 7:
        return _LOUD_AFFIRMATION_RE.sub("Listen.", text) + " Do it now! 👑"
    return text


def apply_style(text: str, style: int) -> str:
    return STYLE_TRANSFORMS.get(style, STYLE_TRANSFORMS[0])(text)


def personalize(text: str, personality: PersonalitySettings) -> str:
    return apply_style(apply_intensity(text, personality.intensity_level), personality.style_type)


def _format_number(value: float) -> str:
    if not math.isfinite(value):
        return "too large"
    if value == int(value):
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def _arithmetic(match: re.Match) -> str:
    a, op, b = float(match.group(1)), match.group(2), float(match.group(3))
    if op == "+":
        result = _format_number(a + b)
    elif op == "-":
        result = _format_number(a - b)
    elif op == "*":
        result = _format_number(a * b)
    else:
        result = _format_number(a / b) if b != 0 else "undefined"
    return f"{_format_number(a)} {op} {_format_number(b)} = {result}. Great! ✅"


@dataclass
class Rule:
    """One message category: a matcher plus either templates or a renderer."""
    name: str
    matches: Callable[[str], bool]
    templates: list[str] = field(default_factory=list)
    render: Callable[[str, datetime], str] | None = None


class RuleResponder:
    """Deterministic fallback responder.

    ``rng`` is the only source of randomness (template choice) and ``clock``
    the only source of time, so tests can pin both.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._rng = rng or random.Random()
        self._clock = clock or datetime.now
        self.rules: list[Rule] = [
            Rule("greeting", lambda m: bool(_GREETING_RE.match(m)), GREETINGS),
            Rule("help", lambda m: "help" in m or "what can you" in m, HELP),
            Rule("thanks", lambda m: "thank" in m, THANKS),
            Rule("wellbeing", lambda m: "how are you" in m, WELLBEING),
            Rule(
                "arithmetic",
                lambda m: bool(_ARITHMETIC_RE.match(m)),
                render=lambda m, now: _arithmetic(_ARITHMETIC_RE.match(m)),
            ),
            Rule(
                "clock",
                lambda m: bool(_CLOCK_RE.search(m)),
                render=lambda m, now: now.strftime("It's %H:%M on %A, %Y-%m-%d. 🕒"),
            ),
            Rule("default", lambda m: True, DEFAULTS),
        ]

    def classify(self, message: str) -> Rule:
        msg = (message or "").lower().strip()
        for rule in self.rules:
            if rule.matches(msg):
                return rule
        return self.rules[-1]

    def smart_response(self, message: str, personality: PersonalitySettings | None = None) -> str:
        """Answer ``message`` from the rule table; never fails, never empty."""
        personality = personality or PersonalitySettings()
        msg = (message or "").lower().strip()
        rule = self.classify(msg)

        if rule.render is not None:
            base = rule.render(msg, self._clock())
        else:
            base = self._rng.choice(rule.templates)

        return personalize(base, personality)
