"""
Marker substitution for code templates.

Templates use Unity-style markers: ``#KEY#`` is replaced by the value of
``KEY``, ``##`` escapes a single ``#``, and anything that looks like a marker
but is malformed is an error. A ``#`` with no closing ``#`` (``#region foo``)
is passed through unless the policy is strict.
"""
import re
from enum import Enum
from typing import Dict, List, Mapping, Union

from .errors import InvalidMarkerError, UnresolvedKeyError

KEY_FORMAT = re.compile(r"[A-Z][A-Z0-9_]*")
_MARKER = re.compile(r"#([A-Za-z0-9_]*)(#?)")


class IncompletePolicy(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"


PolicyLike = Union[IncompletePolicy, str]


def _replacer(entries: Mapping[str, str], policy: IncompletePolicy):
    def replace(match: "re.Match[str]") -> str:
        text, inner, closing = match.group(0), match.group(1), match.group(2)
        if not closing:
            if policy is IncompletePolicy.STRICT:
                raise InvalidMarkerError(text)
            return text
        if inner == "":
            return "#"
        if KEY_FORMAT.fullmatch(inner):
            try:
                return entries[inner]
            except KeyError:
                raise UnresolvedKeyError(inner) from None
        raise InvalidMarkerError(text)

    return replace


def resolve(
    template_text: str,
    replacements: Mapping[str, str],
    on_incomplete: PolicyLike = IncompletePolicy.LENIENT,
) -> str:
    """Replace every ``#KEY#`` marker in ``template_text``.

    Values are emitted verbatim and never re-scanned. Any error aborts the
    whole call.

    Raises:
      InvalidMarkerError: malformed marker, or incomplete marker under the
        strict policy.
      UnresolvedKeyError: well-formed key missing from ``replacements``.
    """
    policy = IncompletePolicy(on_incomplete)
    return _MARKER.sub(_replacer(replacements, policy), template_text)


def expand_script_variables(script_name: str, replacements: Mapping[str, str]) -> Dict[str, str]:
    """Return a copy of ``replacements`` with SCRIPTNAME, NAME and SCRIPTNAME_LOWER set.

    SCRIPTNAME_LOWER only lower-cases the first character (``FOOBar`` -> ``fOOBar``).
    """
    expanded = dict(replacements)
    expanded["SCRIPTNAME"] = script_name
    expanded["NAME"] = script_name
    expanded["SCRIPTNAME_LOWER"] = script_name[:1].lower() + script_name[1:]
    return expanded


def resolve_script(
    script_name: str,
    template_text: str,
    replacements: Mapping[str, str],
    on_incomplete: PolicyLike = IncompletePolicy.LENIENT,
) -> str:
    return resolve(template_text, expand_script_variables(script_name, replacements), on_incomplete)


def find_keys(template_text: str) -> List[str]:
    """Keys referenced by well-formed markers, in order of first appearance."""
    keys: List[str] = []
    for match in _MARKER.finditer(template_text):
        inner = match.group(1)
        if match.group(2) and KEY_FORMAT.fullmatch(inner) and inner not in keys:
            keys.append(inner)
    return keys
