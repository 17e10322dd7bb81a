"""
Label selector parsing.

Compiles ``kubectl -l`` style queries into an immutable ``LabelSelector``.
Selectors are rendered back to a canonical string and evaluated by the API
server; ``matches`` is provided for in-memory clusters.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Tuple

from batch_evict.errors import SelectorSyntaxError

_NAME = r"[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?"
_NAME_RE = re.compile(rf"^{_NAME}$")
_DNS_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")

_SET_TERM_RE = re.compile(r"^(?P<key>[^\s!=(),]+)\s+(?P<op>notin|in)\s*\((?P<values>[^()]*)\)$")
_EQUALITY_TERM_RE = re.compile(r"^(?P<key>[^\s!=(),]+)\s*(?P<op>==|!=|=)\s*(?P<value>[^\s!=(),]*)$")
_EXISTS_TERM_RE = re.compile(r"^(?P<neg>!?)\s*(?P<key>[^\s!=(),]+)$")

MAX_NAME_LENGTH = 63
MAX_PREFIX_LENGTH = 253


class Operator(str, Enum):
    EQUALS = "="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"


@dataclass(frozen=True)
class Requirement:
    """A single term of a label selector."""
    key: str
    operator: Operator
    values: Tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        present = self.key in labels
        if self.operator is Operator.EXISTS:
            return present
        if self.operator is Operator.DOES_NOT_EXIST:
            return not present
        if self.operator in (Operator.EQUALS, Operator.IN):
            return present and labels[self.key] in self.values
        # != and notin also match objects that lack the key
        return not present or labels[self.key] not in self.values

    def __str__(self) -> str:
        if self.operator is Operator.EXISTS:
            return self.key
        if self.operator is Operator.DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in (Operator.IN, Operator.NOT_IN):
            return f"{self.key} {self.operator.value} ({','.join(self.values)})"
        return f"{self.key}{self.operator.value}{self.values[0]}"


@dataclass(frozen=True)
class LabelSelector:
    """Conjunction of requirements. No requirements selects everything."""
    requirements: Tuple[Requirement, ...] = ()

    @classmethod
    def everything(cls) -> "LabelSelector":
        return cls()

    @property
    def empty(self) -> bool:
        return not self.requirements

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        labels = labels or {}
        return all(req.matches(labels) for req in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(req) for req in self.requirements)


def parse_selector(text: str | None) -> LabelSelector:
    """
    Parse a label selector string.

    Args:
        text: Selector such as ``"app=web,tier in (a,b),!canary"``. ``None``
            or blank selects everything.

    Returns:
        The compiled LabelSelector

    Raises:
        SelectorSyntaxError: when any term is malformed
    """
    if text is None or not text.strip():
        return LabelSelector.everything()

    requirements = [_parse_term(text, term.strip()) for term in _split_terms(text)]
    return LabelSelector(tuple(requirements))


def _split_terms(text: str) -> List[str]:
    terms: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char == "(":
            depth += 1
            if depth > 1:
                raise SelectorSyntaxError(text, "nested parentheses")
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise SelectorSyntaxError(text, "unbalanced parentheses")
        if char == "," and depth == 0:
            terms.append("".join(current))
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise SelectorSyntaxError(text, "unbalanced parentheses")
    terms.append("".join(current))
    return terms


def _parse_term(text: str, term: str) -> Requirement:
    if not term:
        raise SelectorSyntaxError(text, "empty requirement")

    match = _SET_TERM_RE.match(term)
    if match:
        key = _validate_key(text, match.group("key"))
        raw_values = [v.strip() for v in match.group("values").split(",")]
        if raw_values == [""]:
            raise SelectorSyntaxError(text, f"set for {key!r} needs at least one value")
        values: Dict[str, None] = {}
        for value in raw_values:
            values[_validate_value(text, value)] = None
        op = Operator.IN if match.group("op") == "in" else Operator.NOT_IN
        return Requirement(key, op, tuple(values))

    match = _EQUALITY_TERM_RE.match(term)
    if match:
        key = _validate_key(text, match.group("key"))
        value = _validate_value(text, match.group("value"))
        op = Operator.NOT_EQUALS if match.group("op") == "!=" else Operator.EQUALS
        return Requirement(key, op, (value,))

    match = _EXISTS_TERM_RE.match(term)
    if match:
        key = _validate_key(text, match.group("key"))
        op = Operator.DOES_NOT_EXIST if match.group("neg") else Operator.EXISTS
        return Requirement(key, op)

    raise SelectorSyntaxError(text, f"cannot parse requirement {term!r}")


def _validate_key(text: str, key: str) -> str:
    name = key
    if "/" in key:
        prefix, name = key.split("/", 1)
        if not prefix or len(prefix) > MAX_PREFIX_LENGTH or not _DNS_SUBDOMAIN_RE.match(prefix):
            raise SelectorSyntaxError(text, f"invalid key prefix in {key!r}")
    if not name or len(name) > MAX_NAME_LENGTH or not _NAME_RE.match(name):
        raise SelectorSyntaxError(text, f"invalid key {key!r}")
    return key


def _validate_value(text: str, value: str) -> str:
    if value and (len(value) > MAX_NAME_LENGTH or not _NAME_RE.match(value)):
        raise SelectorSyntaxError(text, f"invalid value {value!r}")
    return value
