"""
Option matching: resolve the token at the stream cursor to a descriptor.

A token is a long option when it fully matches r"--[A-Za-z0-9-]+" and equals a
declared long name, or a short option when it fully matches r"-[A-Za-z0-9]" and
equals a declared short name. Anything else is left for the caller as
positional data.
"""
from .completion import suggest_keywords
from .tokens import Occurrence
from .utils import *
from .validation import SHORT, LONG


def match(table, stream, completion=Unset, /):
    """
    Try to match the element at the cursor of stream against table.

    Parameters
    - table: Mapping[str, Descriptor]
    - stream: TokenStream, positioned on the candidate token.
    - completion: Completion | Unset
      When active and editing, and the token is the last one (no argument
      typed yet), every keyword starting with the token is offered, whether
      or not the token is a complete match.

    Returns
    - Occurrence with an Unset value on match; None otherwise (the stream is
      not moved either way).
    """
    token = stream.peek()
    if not isinstance(token, str):
        return None

    if completion is not Unset and completion.active and completion.editing and stream.last:
        suggest_keywords(completion, table, token)

    if LONG.fullmatch(token):
        kind = "long"
    elif SHORT.fullmatch(token):
        kind = "short"
    else:
        return None

    found = None
    for descriptor in table.values():
        if getattr(descriptor, kind) == token:
            found = descriptor

    if found is None:
        return None
    return Occurrence(token, found, position=stream.position)


__all__ = (
    "match",
)
