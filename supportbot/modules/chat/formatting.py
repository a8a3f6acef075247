"""
IRC text helpers.

Colors use mIRC control codes: \x03 followed by a two digit color number.
"""

import random
from typing import Callable

COLOR_CODE = "\x03"
ZERO_WIDTH_SPACE = "\u200b"

# Colors readable on both light and dark backgrounds
READABLE_COLORS = ["02", "03", "04", "05", "06", "07", "09", "10", "11", "12", "13"]


def space_nick(nick: str) -> str:
    """Break a nick with a zero-width space so mentions don't highlight the user."""
    if len(nick) < 2:
        return nick
    return f"{nick[0]}{ZERO_WIDTH_SPACE}{nick[1:]}"


def random_irc_color() -> str:
    return random.choice(READABLE_COLORS)


def irc_color_func(color: str) -> Callable[[str], str]:
    def colorize(text: str) -> str:
        return f"{COLOR_CODE}{color}{text}{COLOR_CODE}"

    return colorize
