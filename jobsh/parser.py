from dataclasses import dataclass, field
from enum import Enum


class ControlOperator(Enum):
    NONE = ""
    SEQUENTIAL = ";"
    BACKGROUND = "&"
    PIPE = "|"


OPERATORS = {op.value: op for op in ControlOperator if op.value}
OPERATOR_CHARS = "".join(OPERATORS)


@dataclass(frozen=True)
class Segment:
    """One command plus the operator that terminated it."""

    command: tuple = field(default_factory=tuple)
    operator: ControlOperator = ControlOperator.NONE

    def __post_init__(self):
        object.__setattr__(self, "command", tuple(self.command))

    @property
    def background(self):
        return self.operator is ControlOperator.BACKGROUND


def parse_line(line):
    """
    Split a raw line into segments.
    No quoting: tokens are whitespace separated and a trailing ; & or |
    on a token closes the current command. '#' starts a comment.
    Returns: list of Segment in source order
    """
    segments, cur = [], []

    for word in line.split():
        if word.startswith("#"):
            break

        body = word.rstrip(OPERATOR_CHARS)
        ops = word[len(body):]
        if not ops:
            if word.endswith("#"):
                # "word#" ends the line and the word goes with it
                break
            cur.append(word)
            continue

        if body:
            cur.append(body)
        # "a;&" closes "a" and then an empty command
        for ch in ops:
            segments.append(Segment(cur, OPERATORS[ch]))
            cur = []

    if cur:
        segments.append(Segment(cur))

    return segments


def format_segments(segments):
    """Join segments back into a single-spaced token string."""
    words = []
    for seg in segments:
        words.extend(seg.command)
        if seg.operator is not ControlOperator.NONE:
            words.append(seg.operator.value)
    return " ".join(words)
