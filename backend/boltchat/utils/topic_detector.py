"""Keyword-based topic tagging for conversation summaries.

Each tag has a handful of patterns; the tag with the most hits across the
user's messages wins. Ties go to the tag declared first.
"""

import logging
import re
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

TOPIC_PATTERNS: dict[str, list[re.Pattern[str]]] = {
    "React": [
        re.compile(r"\breact(?:\.js|js)?\b", re.IGNORECASE),
        re.compile(r"\b(?:jsx|usememo|useeffect|usestate|usecallback)\b", re.IGNORECASE),
    ],
    "Node.js": [
        re.compile(r"\bnode(?:\.js|js)?\b", re.IGNORECASE),
        re.compile(r"\b(?:express|npm)\b", re.IGNORECASE),
    ],
    "SQL": [
        re.compile(r"\b(?:sql|postgres(?:ql)?|mysql|sqlite)\b", re.IGNORECASE),
        re.compile(r"\bselect\b.+\bfrom\b", re.IGNORECASE),
    ],
    "Python": [
        re.compile(r"\bpython\b", re.IGNORECASE),
        re.compile(r"\b(?:django|flask|fastapi|pandas)\b", re.IGNORECASE),
    ],
    "TypeScript": [
        re.compile(r"\btypescript\b", re.IGNORECASE),
        re.compile(r"\.tsx?\b", re.IGNORECASE),
    ],
}


def detect_topic(texts: Iterable[str]) -> Optional[str]:
    """Return the best-matching topic tag for ``texts``, or ``None``."""
    scores = dict.fromkeys(TOPIC_PATTERNS, 0)
    for text in texts:
        for topic, patterns in TOPIC_PATTERNS.items():
            scores[topic] += sum(len(p.findall(text)) for p in patterns)

    best = max(scores, key=lambda topic: scores[topic])
    if scores[best] == 0:
        return None
    logger.debug("Detected topic %s (scores=%s)", best, scores)
    return best
