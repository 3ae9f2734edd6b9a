"""
Slug, reading-time and tag helpers shared by posts, categories and images.
"""

import math
import random
import re
from typing import Iterable

from django.utils.html import strip_tags

WORDS_PER_MINUTE = 200

CATEGORY_COLORS = [
    "#EF4444",  # Red
    "#F97316",  # Orange
    "#EAB308",  # Yellow
    "#22C55E",  # Green
    "#14B8A6",  # Teal
    "#3B82F6",  # Blue
    "#8B5CF6",  # Purple
    "#EC4899",  # Pink
    "#6366F1",  # Indigo
    "#06B6D4",  # Cyan
]

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
URL_PATTERN = r"^https?://\S+$"


def slugify(text: str) -> str:
    """Generate slug from text."""
    text = text.lower().strip()
    text = re.sub(r"[^a-z0-9\s_-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def calculate_reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words/min, never less than 1."""
    word_count = len(strip_tags(content or "").split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Strip tags and drop duplicates, keeping first-seen order.

    Raises ValueError on an empty tag so schema validators report it.
    """
    result: list[str] = []
    for tag in tags:
        tag = str(tag).strip()
        if not tag:
            raise ValueError("Tags must not be empty")
        if tag not in result:
            result.append(tag)
    return result


def random_category_color() -> str:
    """Pick a palette color for categories created without one."""
    return random.choice(CATEGORY_COLORS)
