import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from supportbot.modules.chat import irc_color_func, random_irc_color, space_nick
from supportbot.modules.chat.formatting import READABLE_COLORS


def test_space_nick():
    assert space_nick("bob") == "b\u200bob"
    assert space_nick("x") == "x"
    assert space_nick("") == ""


def test_random_color_is_readable():
    for _ in range(20):
        assert random_irc_color() in READABLE_COLORS


def test_color_func_wraps_text():
    assert irc_color_func("04")("#help-1") == "\x0304#help-1\x03"
