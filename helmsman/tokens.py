"""
Token stream elements, cursor and short-option unfolding.

Elements
- raw strings: unconsumed tokens (positional data for the caller when left over).
- Occurrence: a matched option (keyword + descriptor + extracted value), put in
  place of the raw token it was matched from.
- PathElement: an already-resolved positional chunk a caller may splice in; the
  parser skips it.

TokenStream wraps the caller's list with an explicit cursor. Elements after the
cursor are never touched except by take() at the cursor itself, so the list can
be edited in place while it is scanned.
"""
import re

from .utils import *

BUNDLE = re.compile(r"-[A-Za-z0-9]{2,}")


class Occurrence:
    """
    One matched option in the token stream.

    Fields
    - keyword: str, the literal token that matched (e.g. "-v" or "--verbose").
    - descriptor: Descriptor, the option it resolved to.
    - value: Unset until extracted, then True (flag), str (enumerated) or list[str] (callback).
    - position: int, 1-based position of the keyword in the original input.
    """
    __slots__ = ("keyword", "descriptor", "value", "position")

    def __init__(self, keyword, descriptor, /, *, position=0):
        self.keyword = keyword
        self.descriptor = descriptor
        self.value = Unset
        self.position = position

    def __rich_repr__(self):
        yield "keyword", self.keyword
        yield "property", self.descriptor.property
        yield "value", self.value

    def __repr__(self):
        return "occurrence(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class PathElement:
    """
    An already-resolved positional chunk, e.g. a sub-path a dispatcher has consumed.
    """
    __slots__ = ("path",)

    def __init__(self, *path):
        if not all(isinstance(part, str) for part in path):
            raise TypeError("path elements must be strings")
        self.path = tuple(path)

    def __eq__(self, other, /):
        if not isinstance(other, PathElement):
            return NotImplemented
        return self.path == other.path

    def __hash__(self):
        return hash(self.path)

    def __repr__(self):
        return "path-element(%s)" % ", ".join(map(repr, self.path))


class TokenStream:
    """
    Cursor over a mutable token list.

    - peek(): element at the cursor (Unset when exhausted).
    - take(): remove and return the element at the cursor.
    - replace(element): swap the element at the cursor and step past it.
    - advance(): step past the element at the cursor.
    - exhausted / last: cursor is past the end / on the final element.
    - position: 1-based position of the cursor element in the original input.
    """
    __slots__ = ("tokens", "index", "_consumed")

    def __init__(self, tokens, /):
        if not isinstance(tokens, list):
            raise TypeError("token stream must wrap a list")
        self.tokens = tokens
        self.index = 0
        self._consumed = 0

    @property
    def exhausted(self):
        return self.index >= len(self.tokens)

    @property
    def last(self):
        return self.index == len(self.tokens) - 1

    @property
    def position(self):
        return self.index + self._consumed + 1

    def peek(self):
        if self.exhausted:
            return Unset
        return self.tokens[self.index]

    def take(self):
        if self.exhausted:
            raise IndexError("take from an exhausted token stream")
        self._consumed += 1
        return self.tokens.pop(self.index)

    def replace(self, element, /):
        if self.exhausted:
            raise IndexError("replace in an exhausted token stream")
        self.tokens[self.index] = element
        self.index += 1

    def advance(self):
        self.index += 1

    def __repr__(self):
        return "token-stream(index=%d, tokens=%r)" % (self.index, self.tokens)


def unfold(tokens, terminator=Unset, /):
    """
    Expand bundled short options in place: ["-abc"] becomes ["-a", "-b", "-c"].

    Only raw tokens fully matching r"-[A-Za-z0-9]{2,}" are expanded, in their
    original position. Scanning stops at the first token equal to terminator,
    which (with everything after it) is left untouched.

    Returns the same list.
    """
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if terminator is not Unset and token == terminator:
            break
        if isinstance(token, str) and BUNDLE.fullmatch(token):
            shorts = ["-" + char for char in token[1:]]
            tokens[index:index + 1] = shorts
            index += len(shorts)
            continue
        index += 1
    return tokens


__all__ = (
    "Occurrence",
    "PathElement",
    "TokenStream",
    "unfold",
)
