"""
Readability heuristic for extracted strings.

Binary data is full of short printable byte runs that are not text. Noise
tends to repeat one byte value or to be dominated by punctuation, so a
candidate is rejected when it shows either trait.
"""

from dataclasses import dataclass

# Strings at least this long must also pass the ratio/letter check
LONG_STRING_THRESHOLD = 20
MIN_ALPHANUM_RATIO_LONG = 0.5
MAX_CONSECUTIVE_CHAR_REPEAT = 10
MAX_CONSECUTIVE_NON_ALPHANUM = 15


def _is_ascii_letter(char: str) -> bool:
    return ("a" <= char <= "z") or ("A" <= char <= "Z")


def _is_ascii_digit(char: str) -> bool:
    return "0" <= char <= "9"


@dataclass
class ReadabilityStats:
    """Character statistics gathered in one pass over a string."""

    length: int = 0
    alphanumeric_count: int = 0
    longest_repeat_run: int = 0
    longest_non_alphanumeric_run: int = 0
    has_letter: bool = False

    @property
    def alphanumeric_ratio(self) -> float:
        if self.length == 0:
            return 0.0
        return self.alphanumeric_count / self.length

    @classmethod
    def from_text(cls, text: str) -> "ReadabilityStats":
        stats = cls(length=len(text))
        previous = ""
        repeat_run = 0
        non_alnum_run = 0

        for char in text:
            is_letter = _is_ascii_letter(char)
            is_alnum = is_letter or _is_ascii_digit(char)

            if is_letter:
                stats.has_letter = True
            if is_alnum:
                stats.alphanumeric_count += 1

            repeat_run = repeat_run + 1 if char == previous else 1
            previous = char
            stats.longest_repeat_run = max(stats.longest_repeat_run, repeat_run)

            non_alnum_run = 0 if is_alnum else non_alnum_run + 1
            stats.longest_non_alphanumeric_run = max(
                stats.longest_non_alphanumeric_run, non_alnum_run
            )

        return stats


class ReadabilityFilter:
    """
    Decide whether a printable string is plausibly human-readable text.

    Only ASCII letters and digits count as alphanumeric. The empty string
    passes, since none of the checks can fail on it.
    """

    def __init__(
        self,
        long_string_threshold: int = LONG_STRING_THRESHOLD,
        min_alphanum_ratio: float = MIN_ALPHANUM_RATIO_LONG,
        max_repeat_run: int = MAX_CONSECUTIVE_CHAR_REPEAT,
        max_non_alphanum_run: int = MAX_CONSECUTIVE_NON_ALPHANUM,
    ):
        self.long_string_threshold = long_string_threshold
        self.min_alphanum_ratio = min_alphanum_ratio
        self.max_repeat_run = max_repeat_run
        self.max_non_alphanum_run = max_non_alphanum_run

    def is_readable(self, text: str) -> bool:
        stats = ReadabilityStats.from_text(text)

        if stats.longest_repeat_run > self.max_repeat_run:
            return False
        if stats.longest_non_alphanumeric_run > self.max_non_alphanum_run:
            return False

        if stats.length >= self.long_string_threshold:
            if stats.alphanumeric_ratio < self.min_alphanum_ratio or not stats.has_letter:
                return False

        return True

    __call__ = is_readable


_default_filter = ReadabilityFilter()


def is_potentially_readable(text: str) -> bool:
    """Check a string against the default readability thresholds."""
    return _default_filter.is_readable(text)
