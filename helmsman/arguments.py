r"""
Helmsman argument specifications.

Overview
- Every option descriptor carries exactly one argument spec, chosen among three
  sealed variants and dispatched by explicit case analysis in the extractor:
  • NoArgument: presence-only flag, e.g. --verbose (the value becomes True).
  • Enumerated(*candidates): exactly one following token, restricted to a fixed,
    ordered set of permitted strings, e.g. --mode fast|slow.
  • Callback(function): zero or more following tokens, accepted one by one by a
    caller-supplied function (variable arity).

- Callback contract
  • function(accepted, token) is called with a copy of the values accepted so far
    and the next raw token (None once the stream is exhausted).
  • A truthy return accepts the token and asks for the next one.
  • A falsy return rejects the token and stops the loop (the token is left alone).
  • An Exception instance accepts the token but reports the exception message as
    an invalid-argument fault; the loop keeps going.

- Coercion
  • coerce(object) turns the raw shapes used by declarations into a variant:
    None/Unset → NoArgument(), iterable of str → Enumerated, callable → Callback.

Validation highlights
- Enumerated requires at least one candidate; candidates must be strings and unique.
- Callback requires a callable.

Quick example:
    >>> from helmsman.arguments import Enumerated, Callback, coerce
    >>> Enumerated("fast", "slow").candidates
    ('fast', 'slow')
    >>> coerce(["a", "b"])
    enumerated(candidates=('a', 'b'))
    >>> coerce(None) is coerce(None)
    True

Public API
- Classes: NoArgument, Enumerated, Callback
- Functions: coerce
"""
import functools
import operator
import re
from collections.abc import Iterable

from .utils import *


class ArgumentType(type):
    """
    Metaclass that gives argument specs a stable, introspectable shape.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and option listings.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Seal concrete variants against subclassing (sealed=True) so that the
      extractor's case analysis stays exhaustive.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation, e.g. enumerated(candidates=('a', 'b')).
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


class Arguments(metaclass=ArgumentType):
    """
    Common base of the three argument-spec variants (never instantiated directly).
    """

    def __new__(cls, *args, **kwargs):
        if cls is Arguments:
            raise TypeError("cannot instantiate 'Arguments' directly, use one of its variants")
        return super().__new__(cls)


class NoArgument(Arguments, sealed=True):
    """
    Presence-only spec: the option takes no value and resolves to True.

    NoArgument() always returns the same instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self


class Enumerated(Arguments, sealed=True):
    """
    Single-value spec restricted to an ordered set of permitted strings.

    Parameters
    - *candidates: str
      Permitted values, in the order they are suggested during completion.

    Raises
    - TypeError: when no candidate is given or a candidate is not a string.
    - ValueError: when candidates contain duplicates.
    """
    __introspectable__ = ("candidates",)

    def __new__(cls, *candidates):
        if not candidates:
            raise TypeError(f"{cls.__typename__} must specify at least one candidate")

        sanitized = []
        for candidate in candidates:
            if not isinstance(candidate, str):
                raise TypeError(f"{cls.__typename__} candidates must be strings")
            if candidate in sanitized:
                raise ValueError(f"{cls.__typename__} candidates cannot contain duplicates")
            sanitized.append(candidate)

        self = super().__new__(cls)
        self._candidates = tuple(sanitized)
        return self

    def __contains__(self, token, /):
        return token in self._candidates

    def __iter__(self):
        return iter(self._candidates)

    def __eq__(self, other, /):
        if not isinstance(other, Enumerated):
            return NotImplemented
        return self._candidates == other._candidates

    def __hash__(self):
        return hash(self._candidates)


class Callback(Arguments, sealed=True):
    """
    Variable-arity spec delegating acceptance to a caller-supplied function.

    Parameters
    - function: Callable[[list[str], str | None], bool | Exception]
      See the module documentation for the verdict contract.
    """
    __introspectable__ = ("function",)

    def __new__(cls, function, /):
        if not callable(function):
            raise TypeError(f"{cls.__typename__} function must be callable")
        self = super().__new__(cls)
        self._function = function
        return self

    def __call__(self, accepted, token, /):
        return self._function(accepted, token)

    def __eq__(self, other, /):
        if not isinstance(other, Callback):
            return NotImplemented
        return self._function == other._function

    def __hash__(self):
        return hash(self._function)


def coerce(object, /):
    """
    Turn a raw declaration shape into an argument-spec variant.

    Accepted shapes
    - NoArgument | Enumerated | Callback: returned unchanged.
    - None | Unset: NoArgument().
    - callable: Callback(object).
    - iterable of str (not a bare str): Enumerated(*object).

    Raises
    - TypeError: for any other shape (a bare string included, since it is almost
      always a forgotten list).
    """
    match object:
        case NoArgument() | Enumerated() | Callback():
            return object
        case None | UnsetType():
            return NoArgument()
        case str():
            raise TypeError("coerce() argument must be an iterable of strings, not a string")
        case _ if callable(object):
            return Callback(object)
        case Iterable():
            return Enumerated(*object)
        case _:
            raise TypeError("coerce() argument must be None, a callable, or an iterable of strings")


__all__ = (
    # Classes (variants)
    "NoArgument",
    "Enumerated",
    "Callback",

    # Functions
    "coerce",
)
