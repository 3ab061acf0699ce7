"""
Descriptive tags derived from one person's survey answers.

Rules are checked in a fixed field order; each field yields at most one
tag and the first three tags produced are kept. The order, not any notion
of importance, decides which tags survive truncation:

    cleanliness_level    >= 4 Clean        <= 2 Relaxed
    sleep_schedule       <= 2 Early Bird   >= 4 Night Owl
    introvert_extrovert  >= 4 Social       <= 2 Quiet
    pets_preference      >= 4 Pet Lover    == 1 No Pets
    study_habits         >= 4 Studious
    guest_comfort        >= 4 Welcoming    <= 2 Homebody
"""

import operator
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from ..schema import AnswerSet

MAX_TAGS = 3


@dataclass(frozen=True)
class TagRule:
    """
    Threshold rule for one survey field.

    Branches are (comparison, threshold, tag) triples tried in order; the
    first one that holds gives the field's tag.
    """
    field: str
    branches: Tuple[Tuple[Callable[[int, int], bool], int, str], ...]

    def apply(self, answers: AnswerSet) -> Optional[str]:
        value = answers[self.field]
        for compare, threshold, tag in self.branches:
            if compare(value, threshold):
                return tag
        return None


TAG_RULES: Tuple[TagRule, ...] = (
    TagRule("cleanliness_level", ((operator.ge, 4, "Clean"), (operator.le, 2, "Relaxed"))),
    TagRule("sleep_schedule", ((operator.le, 2, "Early Bird"), (operator.ge, 4, "Night Owl"))),
    TagRule("introvert_extrovert", ((operator.ge, 4, "Social"), (operator.le, 2, "Quiet"))),
    TagRule("pets_preference", ((operator.ge, 4, "Pet Lover"), (operator.eq, 1, "No Pets"))),
    TagRule("study_habits", ((operator.ge, 4, "Studious"),)),
    TagRule("guest_comfort", ((operator.ge, 4, "Welcoming"), (operator.le, 2, "Homebody"))),
)


def derive_tags(answers: Any, max_tags: int = MAX_TAGS) -> Tuple[str, ...]:
    """
    Summarize an answer set as at most max_tags short descriptors.

    Args:
        answers: AnswerSet (or mapping) to describe
        max_tags: Truncation length

    Returns:
        Tuple of tags in rule order

    Raises:
        MalformedAnswerSet: If the answers are missing a field or out of range
    """
    answers = AnswerSet.coerce(answers)

    tags = []
    for rule in TAG_RULES:
        if len(tags) >= max_tags:
            break
        tag = rule.apply(answers)
        if tag is not None:
            tags.append(tag)
    return tuple(tags)
