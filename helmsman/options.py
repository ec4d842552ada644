"""
Helmsman option descriptors and schema tables.

What this module provides
- Descriptor: the static metadata of one option (names, argument spec,
  requirement and repeatability) bound to a property of a schema.
- OptionTable: the per-schema, insertion-ordered mapping from property name to
  Descriptor. Tables are built at schema-definition time and frozen once a
  parser takes them.
- Option + @schema: a declarative way to build a table from class attributes.
- describe(schema, property): the setter-style annotation interface; it returns
  (creating if absent) the mutable descriptor for a schema property.
- tableof(schema): the table owned by a schema.
- listing(table): the rich Table rendering of any descriptor mapping.

Quick start
    from helmsman import schema, Option, Enumerated

    @schema
    class Config:
        verbose = Option("-v", "--verbose", brief="talk more")
        mode = Option("--mode", args=Enumerated("fast", "slow"), required=True)
        tags = Option("-t", "--tag", args=lambda accepted, token: token is not None
                      and not token.startswith("-"), repeat=True)

Design notes
- Setters only check types; name formats, collisions and repeat/argument
  coherence are reported by helmsman.validation.verify so that every problem of
  a table is surfaced in one pass.
- Tables live in the schema's own namespace under __options__ and are not
  inherited by subclasses.
"""
from collections.abc import Mapping

from rich.table import Table
from rich.text import Text

from .arguments import NoArgument, Enumerated, Callback, coerce
from .utils import *


class Descriptor:
    """
    Static metadata for one configurable option.

    Fields
    - schema: the schema (class) that owns the descriptor (read-only).
    - property: the property name written on targets (read-only).
    - short: str | None, e.g. "-v".
    - long: str | None, e.g. "--verbose".
    - brief: str | None, one-line description.
    - required: bool, the option must appear at least once.
    - repeat: bool, occurrences accumulate into a list instead of overwriting.
    - args: NoArgument | Enumerated | Callback (raw shapes are coerced).
    - complete: Callable[[bool, list[str]], list[str] | None] | None, completion
      provider used by the callback policy.

    Lifecycle
    - Mutable while the schema is being declared; freeze() makes every field
      read-only (parsing never writes to descriptors).
    """
    __slots__ = (
        "_schema",
        "_property",
        "_short",
        "_long",
        "_brief",
        "_required",
        "_repeat",
        "_args",
        "_complete",
        "_frozen",
    )

    def __init__(self, schema, property, /):
        if not isinstance(property, str):
            raise TypeError("descriptor property must be a string")
        object.__setattr__(self, "_frozen", False)
        self._schema = schema
        self._property = property
        self._short = None
        self._long = None
        self._brief = None
        self._required = False
        self._repeat = False
        self._args = NoArgument()
        self._complete = None

    def __setattr__(self, name, value, /):
        if self._frozen:
            raise AttributeError(f"descriptor {self._property!r} is frozen and cannot be modified")
        object.__setattr__(self, name, value)

    @property
    def short(self):
        return self._short

    @short.setter
    def short(self, value):
        self._short = value

    @property
    def long(self):
        return self._long

    @long.setter
    def long(self, value):
        self._long = value

    @property
    def brief(self):
        return self._brief

    @brief.setter
    def brief(self, value):
        if not isinstance(value, str | Text | None):
            raise TypeError("descriptor 'brief' must be a string")
        self._brief = value

    @property
    def required(self):
        return self._required

    @required.setter
    def required(self, value):
        self._required = bool(value)

    @property
    def repeat(self):
        return self._repeat

    @repeat.setter
    def repeat(self, value):
        self._repeat = bool(value)

    @property
    def args(self):
        return self._args

    @args.setter
    def args(self, value):
        self._args = coerce(value)

    @property
    def complete(self):
        return self._complete

    @complete.setter
    def complete(self, value):
        if value is not None and not callable(value):
            raise TypeError("descriptor 'complete' must be callable")
        self._complete = value

    @property
    def frozen(self):
        return self._frozen

    @property
    def names(self):
        """
        Declared names, long first, absent ones skipped.
        """
        return tuple(name for name in (self._long, self._short) if name)

    def freeze(self):
        object.__setattr__(self, "_frozen", True)
        return self

    schema = property(lambda self: self._schema)
    property = property(lambda self: self._property)

    def __rich_repr__(self):
        yield "property", self._property
        yield "short", self._short
        yield "long", self._long
        yield "brief", self._brief
        yield "required", self._required
        yield "repeat", self._repeat
        yield "args", self._args

    def __repr__(self):
        return "descriptor(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class OptionTable(Mapping):
    """
    Insertion-ordered mapping from property name to Descriptor for one schema.

    - describe(property) returns the descriptor for property, creating it on first use.
    - freeze() freezes the table and all its descriptors; describe() then only
      returns existing descriptors.
    - Renders as a rich Table listing names, argument shape and brief.
    """

    def __init__(self, schema=None, /):
        self._schema = schema
        self._descriptors = {}
        self._frozen = False

    schema = property(lambda self: self._schema)
    frozen = property(lambda self: self._frozen)

    def describe(self, property, /):
        try:
            return self._descriptors[property]
        except KeyError:
            if self._frozen:
                raise AttributeError(f"option table is frozen, cannot describe {property!r}") from None
        descriptor = self._descriptors[property] = Descriptor(self._schema, property)
        return descriptor

    def freeze(self):
        for descriptor in self._descriptors.values():
            descriptor.freeze()
        self._frozen = True
        return self

    def __getitem__(self, property, /):
        return self._descriptors[property]

    def __iter__(self):
        return iter(self._descriptors)

    def __len__(self):
        return len(self._descriptors)

    def __repr__(self):
        return "option-table(%s)" % ", ".join(map(repr, self._descriptors))

    def __rich__(self):
        return listing(self)


class Option:
    """
    Declarative option spec, used as a class attribute of a @schema class.

    Parameters
    - *names: str
      Short ("-v") and/or long ("--verbose") names; names starting with "--"
      are long, any other name is short. At most one of each.
    - brief: str, one-line description.
    - required: bool, the option must be present.
    - repeat: bool, occurrences accumulate into a list.
    - args: None | iterable of str | callable | argument spec (see helmsman.arguments).
    - complete: completion provider for callback-driven options.
    - default: value left on the class attribute once the schema is built.
    """

    def __init__(
            self,
            *names,
            brief=Unset,
            required=False,
            repeat=False,
            args=Unset,
            complete=Unset,
            default=None
    ):
        self.short = None
        self.long = None
        for name in names:
            if not isinstance(name, str):
                raise TypeError("option names must be strings")
            kind = "long" if name.startswith("--") else "short"
            if getattr(self, kind) is not None:
                raise TypeError(f"option can have only one {kind} name")
            setattr(self, kind, name)

        self.brief = coalesce(brief)
        self.required = bool(required)
        self.repeat = bool(repeat)
        self.args = coerce(args)
        self.complete = coalesce(complete)
        self.default = default

    def __repr__(self):
        return "option(%s)" % ", ".join(map(repr, filter(None, (self.short, self.long))))


def listing(table, /):
    """
    Render any mapping of descriptors as a rich Table: names, argument shape
    and brief, with required/repeatable markers.
    """
    listed = Table(box=None, show_header=False, pad_edge=False)
    listed.add_column("names", style="bold #00E5FF", no_wrap=True)
    listed.add_column("argument", style="#C8C8D0")
    listed.add_column("brief")

    for descriptor in table.values():
        match descriptor.args:
            case Enumerated() as spec:
                argument = "{%s}" % "|".join(spec.candidates)
            case Callback():
                argument = descriptor.property.upper() + "..."
            case _:
                argument = ""

        markers = []
        if descriptor.required:
            markers.append("required")
        if descriptor.repeat:
            markers.append("repeatable")

        brief = Text(str(descriptor.brief or ""))
        if markers:
            brief.append(" (%s)" % ", ".join(markers), style="dim")

        listed.add_row(", ".join(reversed(descriptor.names)), argument, brief)
    return listed


def tableof(schema, /, *, create=False):
    """
    Return the OptionTable owned by schema (a class, or an instance of one).

    Parameters
    - create: when True, an empty table is created and stored on the class if
      none exists yet.

    Raises
    - TypeError: when the schema owns no table and create is False.
    """
    owner = schema if isinstance(schema, type) else type(schema)
    table = vars(owner).get("__options__")
    if isinstance(table, OptionTable):
        return table
    if not create:
        raise TypeError(f"{owner.__name__!r} has no option table")
    table = OptionTable(owner)
    setattr(owner, "__options__", table)
    return table


def describe(schema, property, /):
    """
    Return the mutable descriptor for schema.property, creating it if absent.

    This is the annotation interface: any declaration layer (decorators,
    builders, @schema) funnels through it before the first parse.
    """
    return tableof(schema, create=True).describe(property)


def schema(cls, /):
    """
    Class decorator: collect Option class attributes into the class's table.

    Each Option attribute becomes a descriptor keyed by the attribute name (in
    declaration order), and the attribute is replaced by the option's default.

    Usage
        @schema
        class Config:
            verbose = Option("-v", "--verbose")
    """
    if not isinstance(cls, type):
        raise TypeError("@schema() must be applied to a class")

    table = tableof(cls, create=True)
    for name, value in list(vars(cls).items()):
        if not isinstance(value, Option):
            continue
        descriptor = table.describe(name)
        descriptor.short = value.short
        descriptor.long = value.long
        descriptor.brief = value.brief
        descriptor.required = value.required
        descriptor.repeat = value.repeat
        descriptor.args = value.args
        descriptor.complete = value.complete
        setattr(cls, name, value.default)
    return cls


__all__ = (
    # Classes
    "Descriptor",
    "OptionTable",
    "Option",

    # Functions
    "listing",
    "tableof",
    "describe",
    "schema",
)
