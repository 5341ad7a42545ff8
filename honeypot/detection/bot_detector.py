"""Bot detection and visitor classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from . import pattern_library

LEGITIMATE_BOTS = (
    "Googlebot",
    "Bingbot",
    "Slurp",
    "DuckDuckBot",
    "Baiduspider",
    "YandexBot",
    "facebookexternalhit",
    "Twitterbot",
    "LinkedInBot",
    "Applebot",
    "PingdomBot",
    "UptimeRobot",
    "AdsBot-Google",
    "Mediapartners-Google",
    "AhrefsBot",
    "SemrushBot",
)

AI_AGENTS = {
    "GPTBot": "GPTBot (OpenAI)",
    "ChatGPT-User": "ChatGPT",
    "Google-Extended": "Google AI (Gemini)",
    "Googlebot-Extended": "Google AI Training",
    "ClaudeBot": "Claude (Anthropic)",
    "Claude-Web": "Claude Web",
    "Anthropic": "Anthropic",
    "PerplexityBot": "Perplexity",
    "CCBot": "Common Crawl (AI Training)",
    "Bytespider": "ByteDance (TikTok AI)",
    "Diffbot": "Diffbot",
    "Cohere-ai": "Cohere AI",
    "Meta-ExternalAgent": "Meta AI",
    "FacebookBot": "Facebook AI",
    "ImagesiftBot": "Imagesift AI",
    "Omgilibot": "Omgili AI",
}

HTTP_CLIENT_PATTERNS = (
    (re.compile(r"^curl/", re.IGNORECASE), "curl"),
    (re.compile(r"^wget/", re.IGNORECASE), "wget"),
    (re.compile(r"^python-requests/", re.IGNORECASE), "python-requests"),
    (re.compile(r"^python-urllib", re.IGNORECASE), "python-urllib"),
    (re.compile(r"^Go-http-client", re.IGNORECASE), "Go-http-client"),
    (re.compile(r"^Java/", re.IGNORECASE), "Java HTTP"),
    (re.compile(r"^PHP/", re.IGNORECASE), "PHP HTTP"),
    (re.compile(r"^Ruby", re.IGNORECASE), "Ruby HTTP"),
    (re.compile(r"^axios/", re.IGNORECASE), "axios"),
    (re.compile(r"^node-fetch", re.IGNORECASE), "node-fetch"),
    (re.compile(r"^okhttp", re.IGNORECASE), "OkHttp"),
    (re.compile(r"^libwww-perl", re.IGNORECASE), "libwww-perl"),
    (re.compile(r"^lwp-", re.IGNORECASE), "LWP"),
    (re.compile(r"^Mechanize", re.IGNORECASE), "Mechanize"),
    (re.compile(r"^Scrapy", re.IGNORECASE), "Scrapy"),
)

GENERIC_BOT = re.compile(r"\b(bot|crawler|spider|scan|scrape|harvest|extract)\b", re.IGNORECASE)

_INLINE_FLAGS = re.compile(r"^\(\?[a-z]+\)")
_TOOL_NAME = re.compile(r"\w+")


@dataclass(frozen=True, slots=True)
class BotClassification:
    type: str
    name: str


def tool_name(rule: re.Pattern) -> str:
    """Readable tool name from a user-agent signature rule."""
    source = _INLINE_FLAGS.sub("", rule.pattern)
    match = _TOOL_NAME.search(source)
    return match.group(0) if match else source


class BotDetector:
    """Classifies user agents as good bots, AI agents, bad bots or humans."""

    @staticmethod
    def is_legitimate_bot(user_agent: str) -> bool:
        lowered = user_agent.lower()
        return any(bot.lower() in lowered for bot in LEGITIMATE_BOTS)

    @staticmethod
    def detect_ai_agent(user_agent: str) -> Optional[str]:
        lowered = user_agent.lower()
        for token, label in AI_AGENTS.items():
            if token.lower() in lowered:
                return label
        return None

    @classmethod
    def classify(cls, user_agent: str) -> BotClassification:
        if user_agent == "":
            return BotClassification("bad_bot", "Empty UA")

        # AI agents first, some of them also carry a crawler token
        ai_agent = cls.detect_ai_agent(user_agent)
        if ai_agent:
            return BotClassification("ai_agent", ai_agent)

        lowered = user_agent.lower()
        for bot in LEGITIMATE_BOTS:
            if bot.lower() in lowered:
                return BotClassification("good_bot", bot)

        for rule in pattern_library.suspicious_user_agents():
            if rule.search(user_agent):
                return BotClassification("bad_bot", tool_name(rule))

        for pattern, name in HTTP_CLIENT_PATTERNS:
            if pattern.search(user_agent):
                return BotClassification("bad_bot", name)

        if GENERIC_BOT.search(user_agent):
            return BotClassification("bad_bot", "Unknown Bot")

        return BotClassification("human", "")
