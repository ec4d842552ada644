r"""
Registration checks for option tables.

verify() walks a descriptor table once, in table order, and records one fault
per offending descriptor. It never stops at the first problem so that a
schema author sees everything that is wrong in a single run.

Checks (first failing check wins for a given descriptor)
- the entry is a Descriptor;
- short name matches r"-[A-Za-z0-9]" and is not already used in the table;
- long name matches r"--[A-Za-z0-9-]+" and is not already used in the table;
- at least one of short/long is present;
- repeat is only set together with an argument spec.
"""
import re

from .arguments import NoArgument
from .faults import *
from .options import Descriptor
from .utils import *

SHORT = re.compile(r"-[A-Za-z0-9]")
LONG = re.compile(r"--[A-Za-z0-9-]+")


def _check_name(descriptor, kind, pattern, names):
    """
    Format and collision check for one name of a descriptor.

    Returns the fault to record, or None when the name is absent (any falsy
    value) or valid (a valid name is added to names).
    """
    name = getattr(descriptor, kind)
    if not name:
        return None

    if not isinstance(name, str) or not pattern.fullmatch(name):
        return MalformedNameError(
            "invalid %s name %r for option %r" % (kind, name, descriptor.property),
            title="malformed option name",
            code=FaultCode.MALFORMED_NAME,
            property=descriptor.property,
            name=name,
            hint="%s names look like %s" % (kind, "-x" if kind == "short" else "--long-name"),
            docs=getdoc(FaultCode.MALFORMED_NAME),
        )

    if name in names:
        return DuplicatedNameError(
            "duplicate %s name %r for option %r" % (kind, name, descriptor.property),
            title="duplicated option name",
            code=FaultCode.DUPLICATED_NAME,
            property=descriptor.property,
            name=name,
            hint="give every option of a schema its own names",
            docs=getdoc(FaultCode.DUPLICATED_NAME),
        )

    names.add(name)
    return None


def verify(table, names=Unset, /, *, faults=Unset):
    """
    Check a descriptor table's internal consistency.

    Parameters
    - table: Mapping[str, Descriptor]
      The table to check, usually an OptionTable.
    - names: set[str]
      Name-collision set scoped to this table; a fresh set is used when omitted.
    - faults: list
      When given, every registration fault is appended to it.

    Returns
    - bool: True when every descriptor passed all checks.
    """
    names = coalesce(names, set())
    correct = True

    def record(fault):
        nonlocal correct
        correct = False
        if faults is not Unset:
            faults.append(fault)

    for key, descriptor in table.items():
        if not isinstance(descriptor, Descriptor):
            record(InvalidDescriptorError(
                "invalid option definition for %r" % key,
                title="invalid option definition",
                code=FaultCode.INVALID_DESCRIPTOR,
                property=key,
                hint="declare options through describe() or @schema",
                docs=getdoc(FaultCode.INVALID_DESCRIPTOR),
            ))
            continue

        if fault := _check_name(descriptor, "short", SHORT, names):
            record(fault)
            continue

        if fault := _check_name(descriptor, "long", LONG, names):
            record(fault)
            continue

        if not descriptor.short and not descriptor.long:
            record(NamelessOptionError(
                "option %r must have a short or long name" % key,
                title="nameless option",
                code=FaultCode.NAMELESS_OPTION,
                property=key,
                hint="add a short (-x) or a long (--name) name",
                docs=getdoc(FaultCode.NAMELESS_OPTION),
            ))
            continue

        if descriptor.repeat and isinstance(descriptor.args, NoArgument):
            record(RepeatWithoutArgumentError(
                "repeatable option %r must take arguments" % key,
                title="repeat without argument",
                code=FaultCode.REPEAT_WITHOUT_ARGUMENT,
                property=key,
                hint="give the option candidates or a callback, or drop repeat",
                docs=getdoc(FaultCode.REPEAT_WITHOUT_ARGUMENT),
            ))
            continue

    return correct


__all__ = (
    "verify",
)
