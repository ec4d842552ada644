"""
Value extraction: consume the argument tokens of a matched option.

The policy is picked by explicit case analysis on the descriptor's argument spec:
- NoArgument: the value is True, nothing is consumed.
- Enumerated: exactly one following token, which must be one of the candidates.
- Callback: zero or more following tokens, accepted one by one by the callback.

Faults are recorded, never raised: a failed extraction returns False and the
parser keeps scanning. Completion suggestions for argument values are offered
on the way (candidates for enumerated options, the completion provider for
callback options).
"""
from .arguments import NoArgument, Enumerated, Callback
from .completion import suggest_candidates, suggest_provided
from .faults import *
from .utils import *


def _active(completion):
    return completion is not Unset and completion.active


def _extract_enumerated(occurrence, spec, stream, completion, record):
    """
    consume exactly one token and check it against the candidates.
    """
    keyword = occurrence.keyword
    token = stream.peek()

    if _active(completion) and completion.editing and stream.last and isinstance(token, str):
        suggest_candidates(completion, spec.candidates, token)

    if not isinstance(token, str):
        record(MissingArgumentError(
            "option %r at %s position requires an argument" % (keyword, ordinal(occurrence.position)),
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            keyword=keyword,
            position=occurrence.position,
            hint="provide one of: %s (for example: %s %s)" % (
                ", ".join(spec.candidates), keyword, spec.candidates[0]
            ),
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        ))
        return False

    position = stream.position
    stream.take()

    if token not in spec:
        record(InvalidChoiceError(
            "invalid argument %r for option %r at %s position" % (token, keyword, ordinal(position)),
            title="invalid choice",
            code=FaultCode.INVALID_CHOICE,
            keyword=keyword,
            position=position,
            token=token,
            candidates=spec.candidates,
            hint="option %s requires an argument in [%s]" % (keyword, ", ".join(spec.candidates)),
            docs=getdoc(FaultCode.INVALID_CHOICE),
        ))
        return False

    occurrence.value = token
    return True


def _extract_callback(occurrence, spec, stream, completion, record):
    """
    accept tokens one by one until the callback rejects one or the stream runs out.

    loop
    - peek the next raw token (None when exhausted or not a raw string).
    - exhausted and completing: ask the completion provider.
    - call the callback with a copy of the accepted values and the token.
    - falsy verdict or no token: stop, nothing consumed.
    - otherwise consume and append; an Exception verdict records a fault but the
      loop goes on.
    """
    keyword = occurrence.keyword
    accepted = []
    correct = True

    while True:
        token = stream.peek()
        if not isinstance(token, str):
            token = None

        if stream.exhausted and _active(completion):
            suggest_provided(completion, occurrence.descriptor, accepted)

        try:
            verdict = spec(list(accepted), token)
        except Exception as exception:
            record(DelegatedCallbackError(
                "something occurred in the argument callback of option %r at %s position" % (
                    keyword, ordinal(occurrence.position)
                ),
                title="delegated callback error",
                code=FaultCode.DELEGATED_ERROR,
                keyword=keyword,
                position=occurrence.position,
                token=token,
                exception=exception,
                hint="the callback raised %s: %s" % (type(exception).__name__, exception),
                docs=getdoc(FaultCode.DELEGATED_ERROR),
            ))
            correct = False
            break

        if not verdict or token is None:
            break

        position = stream.position
        accepted.append(stream.take())

        if isinstance(verdict, Exception):
            record(RejectedArgumentError(
                "invalid argument %r for option %r at %s position" % (token, keyword, ordinal(position)),
                title="invalid argument",
                code=FaultCode.REJECTED_ARGUMENT,
                keyword=keyword,
                position=position,
                token=token,
                exception=verdict,
                hint=str(verdict) or "check the value given to %s" % keyword,
                docs=getdoc(FaultCode.REJECTED_ARGUMENT),
            ))
            correct = False

    occurrence.value = accepted
    return correct


def extract(occurrence, stream, completion=Unset, /, *, faults=Unset):
    """
    Extract the value of a matched option from the tokens following it.

    Parameters
    - occurrence: Occurrence whose value is set on success (and, for the
      callback policy, even on failure).
    - stream: TokenStream positioned just after the occurrence.
    - completion: Completion | Unset, consulted and fed with suggestions.
    - faults: list, receives the recorded faults when given.

    Returns
    - bool: True when the value was extracted without any fault.
    """
    def record(fault):
        if faults is not Unset:
            faults.append(fault)

    match spec := occurrence.descriptor.args:
        case NoArgument():
            occurrence.value = True
            return True
        case Enumerated():
            return _extract_enumerated(occurrence, spec, stream, completion, record)
        case Callback():
            return _extract_callback(occurrence, spec, stream, completion, record)
        case _:
            raise RuntimeError("unexpected argument spec")


__all__ = (
    "extract",
)
