"""
Helmsman parse orchestration.

Parser binds a frozen, verified option table to runtime flags and scans token
lists against it.

Flow of one parse()
- scan left to right with two sets: pending (required properties) and seen
  (non-repeatable properties written in this pass).
- the terminator stops the scan; anything after it stays in the list.
- unmatched elements are skipped and stay in the list (positional data).
- a matched token is replaced in place by its Occurrence, its property leaves
  pending right away, then the value is extracted (consuming the argument tokens).
- successful values are merged into the target: repeatable options extend a
  list, a second write of a non-repeatable option warns and overwrites.
- when completion is still active after the scan, the options that can still
  be given are offered.
- every property still pending is reported as missing.

Faults are collected in Parser.faults and never raised by parse(); report()
(or invoke()) surfaces them through helmsman.faults.trigger.
"""
import copy
import shlex
import sys
from collections.abc import Iterable, Mapping, MutableMapping
from types import MappingProxyType

from .completion import suggest_remaining
from .extraction import extract
from .faults import *
from .matching import match
from .options import Descriptor, OptionTable, listing, tableof
from .tokens import TokenStream, unfold
from .utils import *
from .validation import verify


def _write(target, property, value):
    if isinstance(target, MutableMapping):
        target[property] = value
    else:
        setattr(target, property, value)


def _read(target, property):
    if isinstance(target, MutableMapping):
        return target.get(property, Unset)
    return getattr(target, property, Unset)


class Parser:
    """
    Option parser for one schema table.

    Parameters
    - table: OptionTable | Mapping[str, Descriptor] | schema class (its table is used)
      A plain mapping is snapshotted into a read-only view; its descriptors are
      frozen like those of an OptionTable.
    - terminator: str | Unset
      End-of-options marker, e.g. "--". Unset disables it.
    - prog: str, program name shown in fault headers.
    - shell: bool, render faults on stderr instead of raising/warning.
    - fancy: bool, render faults inside panels.
    - colorful: bool, style fault output.
    - deferred: bool, in shell mode do not exit after printing errors.

    Raises (through trigger)
    - OptionExit: when the table fails registration checks.
    """

    def __init__(
            self,
            table,
            /,
            terminator=Unset,
            *,
            prog=Unset,
            shell=Unset,
            fancy=Unset,
            colorful=Unset,
            deferred=Unset
    ):
        if not isinstance(table, OptionTable):
            table = MappingProxyType(dict(table)) if isinstance(table, Mapping) else tableof(table)
        if not isinstance(terminator, str | Unset):
            raise TypeError("Parser() terminator must be a string")

        self._table = table
        self._terminator = terminator
        self._prog = coalesce(prog)
        self._shell = bool(coalesce(shell, False))
        self._fancy = bool(coalesce(fancy, False))
        self._colorful = bool(coalesce(colorful, False))
        self._deferred = bool(coalesce(deferred, False))
        self._faults = []

        if not verify(table, faults=self._faults):
            runtime = self._runtime()
            trigger(OptionExit([copy.replace(fault, **runtime) for fault in self._faults]), **runtime)
        if isinstance(table, OptionTable):
            table.freeze()
        else:
            for descriptor in table.values():
                if isinstance(descriptor, Descriptor):
                    descriptor.freeze()

    table = property(lambda self: self._table)
    terminator = property(lambda self: self._terminator)
    shell = property(lambda self: self._shell)
    fancy = property(lambda self: self._fancy)
    colorful = property(lambda self: self._colorful)
    deferred = property(lambda self: self._deferred)

    @property
    def faults(self):
        """
        Faults recorded by the last parse (a copy).
        """
        return list(self._faults)

    def _runtime(self):
        return {
            "prog": self._prog,
            "shell": self._shell,
            "fancy": self._fancy,
            "colorful": self._colorful,
            "deferred": self._deferred,
        }

    def _merge(self, target, occurrence, seen):
        descriptor = occurrence.descriptor
        property = descriptor.property
        value = occurrence.value

        if descriptor.repeat:
            existing = _read(target, property)
            values = value if isinstance(value, list) else [value]
            if isinstance(existing, list):
                existing.extend(values)
            else:
                _write(target, property, list(values))
            return

        if property in seen:
            self._faults.append(OverwrittenOptionWarning(
                "option %r at %s position overwrites an earlier value" % (
                    occurrence.keyword, ordinal(occurrence.position)
                ),
                title="overwritten option",
                code=FaultCode.OVERWRITTEN_OPTION,
                keyword=occurrence.keyword,
                position=occurrence.position,
                property=property,
                hint="give %s only once, the last value wins" % "/".join(descriptor.names),
                docs=getdoc(FaultCode.OVERWRITTEN_OPTION),
            ))
        _write(target, property, value)
        seen.add(property)

    def parse(self, target, tokens, /, completion=Unset):
        """
        Scan tokens against the table and write values onto target.

        Parameters
        - target: object | MutableMapping, receives one value per matched property.
        - tokens: list, mutated in place; consumed tokens are removed, matched
          keywords become Occurrence elements, everything else stays.
        - completion: Completion | Unset, fed with suggestions during the pass.

        Returns
        - bool: True when no error fault was recorded (warnings do not count).
        """
        if not isinstance(tokens, list):
            raise TypeError("parse() tokens must be a list")

        self._faults.clear()
        table = self._table
        stream = TokenStream(tokens)
        pending = dict.fromkeys(property for property, descriptor in table.items() if descriptor.required)
        seen = set()
        correct = True

        while not stream.exhausted:
            element = stream.peek()
            if self._terminator is not Unset and element == self._terminator:
                break

            occurrence = match(table, stream, completion)
            if occurrence is None:
                stream.advance()
                continue

            stream.replace(occurrence)
            pending.pop(occurrence.descriptor.property, None)

            if not extract(occurrence, stream, completion, faults=self._faults):
                correct = False
                continue

            self._merge(target, occurrence, seen)

        if completion is not Unset and completion.active:
            suggest_remaining(completion, table, seen)

        for property in pending:
            descriptor = table[property]
            correct = False
            self._faults.append(MissingRequiredError(
                "required option %r is missing" % "/".join(descriptor.names),
                title="missing required option",
                code=FaultCode.MISSING_REQUIRED,
                property=property,
                hint="add %s to the command line" % (descriptor.long or descriptor.short),
                docs=getdoc(FaultCode.MISSING_REQUIRED),
            ))

        return correct

    def report(self):
        """
        Surface the faults of the last parse.

        - warnings are triggered first (warned, or printed in shell mode).
        - errors, when any, are grouped into one OptionExit and triggered: raised
          outside shell mode, printed (then exit 1 unless deferred) in shell mode.
        """
        runtime = self._runtime()
        exceptions = []
        warnings = []

        for fault in map(lambda fault: copy.replace(fault, **runtime), self._faults):
            if isinstance(fault, OptionException):
                exceptions.append(fault)
            elif isinstance(fault, OptionWarning):
                warnings.append(fault)
            else:
                raise RuntimeError("unexpected fault")

        for warning in warnings:
            trigger(warning)

        if not exceptions:
            return

        trigger(OptionExit(exceptions), **runtime)

    def __rich__(self):
        return listing(self._table)

    def __repr__(self):
        return "parser(%r, terminator=%r)" % (self._table, self._terminator)


def invoke(parser, target, prompt=Unset, /, *, completion=Unset):
    """
    Convenience runner: normalize a prompt, parse it and surface faults.

    Parameters
    - parser: Parser
    - target: object | MutableMapping written by the parse.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (blank items dropped, each stripped).
    - completion: Completion | Unset. When completing, faults are left in
      parser.faults instead of being surfaced.

    Returns
    - list: the remaining token list (Occurrence elements and positional data).

    Raises
    - TypeError: when parser is not a Parser or prompt has an invalid type.
    - OptionExit: on parse failure outside shell mode.
    """
    if not isinstance(parser, Parser):
        raise TypeError("invoke() first argument must be a parser")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        def _sanitized(iterable):
            for item in iterable:
                if not isinstance(item, str):
                    raise TypeError("invoke() prompt must be a string or an iterable of strings")
                if item := item.strip():
                    yield item
        tokens = list(_sanitized(prompt))
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    unfold(tokens, parser.terminator)
    parser.parse(target, tokens, completion)

    if completion is Unset or not completion.completing:
        parser.report()
    return tokens


__all__ = (
    "Parser",
    "invoke",
)
