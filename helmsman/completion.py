"""
Completion context and suggestion helpers.

A Completion value is threaded through one parse. The matcher, the extractor and
the parser consult it and append suggestions to it; the caller reads
`response` once parsing is over.

State
- completing: completion was requested for this run.
- editing: the last token is still being typed (no trailing space yet).
- response: ordered suggestions, duplicates dropped.
- resolved: a branch produced the definitive suggestions; later stages stop
  offering (the "what options are still available" fallback included).

The context must be reset() by the caller before it is reused.
"""
from collections.abc import Sequence


class Completion:
    __slots__ = ("completing", "editing", "response", "resolved")

    def __init__(self, completing=False, editing=False):
        self.completing = bool(completing)
        self.editing = bool(editing)
        self.response = []
        self.resolved = False

    @property
    def active(self):
        return self.completing and not self.resolved

    def offer(self, *suggestions):
        for suggestion in suggestions:
            if not isinstance(suggestion, str):
                raise TypeError("completion suggestions must be strings")
            if suggestion not in self.response:
                self.response.append(suggestion)

    def resolve(self):
        self.resolved = True

    def reset(self):
        self.response.clear()
        self.resolved = False

    def __rich_repr__(self):
        yield "completing", self.completing
        yield "editing", self.editing
        yield "resolved", self.resolved
        yield "response", self.response

    def __repr__(self):
        return "completion(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def suggest_keywords(completion, table, prefix, /):
    """
    Offer every declared long name, then every short name, starting with prefix.
    """
    descriptors = table.values()
    keywords = [descriptor.long for descriptor in descriptors] + [descriptor.short for descriptor in descriptors]
    completion.offer(*(keyword for keyword in keywords if keyword and keyword.startswith(prefix)))


def suggest_candidates(completion, candidates, prefix="", /):
    """
    Offer the candidates starting with prefix and resolve the context.
    """
    completion.offer(*(candidate for candidate in candidates if candidate.startswith(prefix)))
    completion.resolve()


def suggest_provided(completion, descriptor, accepted, /):
    """
    Ask the descriptor's completion provider for suggestions.

    The provider receives the editing flag and a copy of the values accepted so
    far. A list or tuple result is offered and resolves the context; None (or
    any other shape) means the provider has nothing to say.
    """
    if descriptor.complete is None:
        return
    suggestions = descriptor.complete(completion.editing, list(accepted))
    if isinstance(suggestions, Sequence) and not isinstance(suggestions, str):
        completion.offer(*suggestions)
        completion.resolve()


def suggest_remaining(completion, table, seen, /):
    """
    Offer long/short names of options that can still be given: repeatable ones
    and those not seen in this pass.
    """
    for descriptor in table.values():
        if descriptor.repeat or descriptor.property not in seen:
            completion.offer(*(name for name in (descriptor.long, descriptor.short) if name))


__all__ = (
    "Completion",
    "suggest_keywords",
    "suggest_candidates",
    "suggest_provided",
    "suggest_remaining",
)
