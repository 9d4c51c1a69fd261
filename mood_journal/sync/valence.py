"""
Mood label ⇄ valence mapping.

Valence-based health services store a signed pleasantness score in [-1, 1]
instead of a label. These helpers translate in both directions and build the
free-text reflection attached to a saved sample.

Mapping:
    label → valence: fixed buckets (-0.8, -0.4, 0.0, 0.4, 0.8); unknown → 0.0
    valence → label: clamp to [-1, 1], split at -0.6 / -0.2 / 0.2 / 0.6
"""

from typing import Dict, Iterable

MOOD_VALENCES: Dict[str, float] = {
    "非常难过": -0.8,
    "抑郁": -0.8,
    "绝望": -0.8,
    "难过": -0.4,
    "沮丧": -0.4,
    "有点难过": -0.4,
    "一般": 0.0,
    "平静": 0.0,
    "中性": 0.0,
    "开心": 0.4,
    "愉快": 0.4,
    "比较开心": 0.4,
    "轻松": 0.4,
    "非常开心": 0.8,
    "狂欢": 0.8,
    "兴奋": 0.8,
    "满足": 0.8,
}

LABELS_PREFIX = "标签: "
REFLECTION_SEPARATOR = " | "


def clamp_valence(valence: float) -> float:
    """Clamp a valence into [-1.0, 1.0]."""
    return max(-1.0, min(1.0, valence))


def mood_to_valence(mood: str) -> float:
    """
    Map a mood label to a valence score.

    Examples:
        >>> mood_to_valence("开心")
        0.4
        >>> mood_to_valence("custom label")
        0.0
    """
    return MOOD_VALENCES.get(mood.strip(), 0.0)


def valence_to_mood(valence: float) -> str:
    """
    Map a valence score to a mood label.

    Examples:
        >>> valence_to_mood(-0.9)
        '非常难过'
        >>> valence_to_mood(0.0)
        '一般'
    """
    value = clamp_valence(valence)
    if value < -0.6:
        return "非常难过"
    if value < -0.2:
        return "难过"
    if value < 0.2:
        return "一般"
    if value < 0.6:
        return "开心"
    return "非常开心"


def build_reflection(note: str, labels: Iterable[str] = ()) -> str:
    """
    Combine a note and labels into one reflection string.

    Examples:
        >>> build_reflection("ran 5k", ["happy", "proud"])
        'ran 5k | 标签: happy, proud'
    """
    parts = []
    if note:
        parts.append(note)
    label_list = [label for label in labels if label]
    if label_list:
        parts.append(LABELS_PREFIX + ", ".join(label_list))
    return REFLECTION_SEPARATOR.join(parts)
