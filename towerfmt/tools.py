#
# towerfmt tools: message formatting and notation field helpers
#

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Callable, Sequence

__all__ = [
    'as_callable',
    'as_char_pair',
    'as_char_pairs',
    'fmt_type',
    'fmt_value',
    'wrap_repeated',
]


# Methods --------------------------------------------------------------------------------------------------------------

def fmt_type(obj: Any, *, max_repr: int = 120) -> str:
    """Format type information for exception messages.

    Examples:
        >>> fmt_type(42)
        '<type: int>'
        >>> fmt_type(int)
        '<type: int>'
    """
    target_type = obj if isinstance(obj, type) else type(obj)
    try:
        type_name = target_type.__name__
    except AttributeError:
        type_name = str(target_type)
    return f"<type: {_truncate(type_name, max_repr)}>"


def fmt_value(x: Any, *, max_repr: int = 120) -> str:
    """
    Format a single value as a type-value pair for exception messages.

    Broken __repr__ methods are reported instead of propagated, since the message is usually
    being built while another error is already on its way out.

    Examples:
        >>> fmt_value(42)
        '<int: 42>'
        >>> fmt_value("hello world", max_repr=8)
        "<str: 'hell'...>"
    """
    t = type(x).__name__
    try:
        base_repr = repr(x)
    except Exception as e:
        base_repr = f"<{t} object (repr failed: {type(e).__name__})>"
    base_repr = base_repr.replace(">", "\\>")
    return f"<{t}: {_truncate(base_repr, max_repr)}>"


def as_callable(func: Any, field: str) -> Callable:
    """Return func unchanged if callable, otherwise raise TypeError naming the field."""
    if not callable(func):
        raise TypeError(f"{field} must be callable, not {fmt_type(func)}")
    return func


def as_char_pair(chars: Any, field: str) -> tuple[str, str]:
    """
    Validate a (before, after) pair of literal strings.

    Raises:
        TypeError: If chars is not a sequence of two strings.
    """
    if isinstance(chars, str) or not isinstance(chars, Sequence) or len(chars) != 2:
        raise TypeError(f"{field} must be a pair of strings, got {fmt_value(chars)}")
    before, after = chars
    if not isinstance(before, str) or not isinstance(after, str):
        raise TypeError(f"{field} must hold strings, got {fmt_value(chars)}")
    return before, after


def as_char_pairs(chars: Any, field: str, count: int) -> tuple[tuple[str, str], ...]:
    """Validate a fixed-length sequence of (before, after) string pairs."""
    if isinstance(chars, str) or not isinstance(chars, Sequence) or len(chars) != count:
        raise TypeError(f"{field} must hold {count} pairs of strings, got {fmt_value(chars)}")
    return tuple(as_char_pair(pair, f"{field}[{i}]") for i, pair in enumerate(chars))


def wrap_repeated(text: str, chars: tuple[str, str], times: int, *, before: bool = True) -> str:
    """
    Wrap text in a marker pair ``times`` times.

    With before=True the opening marker is stacked in front ("f(f(x))"); otherwise both halves
    go after the text ("x!!").

    Examples:
        >>> wrap_repeated("5", ("f(", ")"), 2)
        'f(f(5))'
        >>> wrap_repeated("5", ("", "!"), 3)
        '5!!!'
    """
    opening, closing = chars
    if before:
        return opening * times + text + closing * times
    return text + (opening + closing) * times


# Private Methods ------------------------------------------------------------------------------------------------------

def _truncate(s: str, max_len: int, ellipsis: str = "...") -> str:
    if max_len <= 0:
        return ""
    if len(s) <= max_len:
        return s
    if len(s) >= 2 and s[0] in ("'", '"') and s[-1] == s[0]:
        inner = s[1:1 + max(1, max_len - 4)]
        return f"{s[0]}{inner}{s[0]}{ellipsis}"
    return s[:max(1, max_len)] + ellipsis
