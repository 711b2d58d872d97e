"""
Deterministic keyword classification for news relevance and event format
"""

import re

AI_KEYWORDS_LATIN = [
    "AI", "LLM", "GPT", "BERT", "Transformer", "NLP",
    "artificial intelligence", "machine learning", "deep learning",
    "neural network", "language model", "computer vision",
    "reinforcement learning", "generative",
]

AI_KEYWORDS_CJK = [
    "人工智能", "机器学习", "深度学习", "神经网络", "大模型", "计算机视觉",
    "强化学习", "生成模型", "算法", "数据科学", "智能体",
]

# Latin keywords need word boundaries, otherwise "AI" matches "said"
_LATIN_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in AI_KEYWORDS_LATIN) + r")s?\b",
    re.IGNORECASE
)

EVENT_TYPE_KEYWORDS = {
    "online": ["线上", "在线", "webinar", "virtual", "online", "直播", "远程"],
    "offline": ["线下", "现场", "会场", "地点", "venue", "地址"],
}


def is_ai_related(title: str, text: str) -> bool:
    """Keyword gate for general tech feeds"""
    haystack = f"{title or ''} {text or ''}"
    if _LATIN_PATTERN.search(haystack):
        return True
    return any(keyword in haystack for keyword in AI_KEYWORDS_CJK)


def identify_event_type(text: str) -> str:
    """Online keywords win; anything unrecognised is treated as offline"""
    lower = (text or "").lower()
    if any(keyword in lower for keyword in EVENT_TYPE_KEYWORDS["online"]):
        return "online"
    return "offline"
