"""
Connection kinds for the block editor.

A kind is the role a connection plays on its block. The four base roles
come in opposite pairs (value input/output, next/previous statement).
The grammatical variant adds one value input/output pair per grammatical
case; each case only ever pairs with its own counterpart.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional


class GrammaticalCase(Enum):
    """Grammatical cases carried by the case-specific value kinds."""
    NOMINATIVE = "nominative"
    GENITIVE = "genitive"
    DATIVE = "dative"
    ACCUSATIVE = "accusative"
    ABLATIVE = "ablative"
    VOCATIVE = "vocative"


class ConnectionKind(Enum):
    """Enumeration of connection roles."""
    INPUT_VALUE = 1
    OUTPUT_VALUE = 2
    NEXT_STATEMENT = 3
    PREVIOUS_STATEMENT = 4
    NOMINATIVE_INPUT_VALUE = 5
    NOMINATIVE_OUTPUT_VALUE = 6
    GENITIVE_INPUT_VALUE = 7
    GENITIVE_OUTPUT_VALUE = 8
    DATIVE_INPUT_VALUE = 9
    DATIVE_OUTPUT_VALUE = 10
    ACCUSATIVE_INPUT_VALUE = 11
    ACCUSATIVE_OUTPUT_VALUE = 12
    ABLATIVE_INPUT_VALUE = 13
    ABLATIVE_OUTPUT_VALUE = 14
    VOCATIVE_INPUT_VALUE = 15
    VOCATIVE_OUTPUT_VALUE = 16

    @property
    def opposite(self) -> 'ConnectionKind':
        return OPPOSITE_KIND[self]

    @property
    def is_superior(self) -> bool:
        """True if a connection of this kind faces down or right (parent side)."""
        return self in SUPERIOR_KINDS

    @property
    def is_value(self) -> bool:
        return self in VALUE_KINDS

    @property
    def is_statement(self) -> bool:
        return self in STATEMENT_KINDS

    @property
    def case(self) -> Optional[GrammaticalCase]:
        return KIND_CASE.get(self)

    @classmethod
    def for_case(cls, case: GrammaticalCase, output: bool = False) -> 'ConnectionKind':
        """Return the input (or output) kind for a grammatical case."""
        suffix = 'OUTPUT_VALUE' if output else 'INPUT_VALUE'
        return cls[f"{case.name}_{suffix}"]


_CASE_PAIRS = {
    case: (ConnectionKind.for_case(case), ConnectionKind.for_case(case, output=True))
    for case in GrammaticalCase
}

VALUE_INPUT_KINDS: FrozenSet[ConnectionKind] = frozenset(
    [ConnectionKind.INPUT_VALUE] + [pair[0] for pair in _CASE_PAIRS.values()]
)
"""Inputs that accept a value block, base and every grammatical case."""

VALUE_OUTPUT_KINDS: FrozenSet[ConnectionKind] = frozenset(
    [ConnectionKind.OUTPUT_VALUE] + [pair[1] for pair in _CASE_PAIRS.values()]
)
"""Outputs that plug a value block into an input."""

VALUE_KINDS: FrozenSet[ConnectionKind] = VALUE_INPUT_KINDS | VALUE_OUTPUT_KINDS

STATEMENT_KINDS: FrozenSet[ConnectionKind] = frozenset(
    [ConnectionKind.NEXT_STATEMENT, ConnectionKind.PREVIOUS_STATEMENT]
)

SUPERIOR_KINDS: FrozenSet[ConnectionKind] = VALUE_INPUT_KINDS | {ConnectionKind.NEXT_STATEMENT}
"""Kinds whose owner becomes the parent when connected."""

SINGLE_USE_KINDS: FrozenSet[ConnectionKind] = VALUE_OUTPUT_KINDS | {ConnectionKind.PREVIOUS_STATEMENT}
"""Inferior kinds: never offered as a snap target while occupied."""

CONTAINER_KINDS: FrozenSet[ConnectionKind] = SUPERIOR_KINDS
"""Kinds whose attached child may itself be collapsed (unhide descends through these)."""

OPPOSITE_KIND: Dict[ConnectionKind, ConnectionKind] = {
    ConnectionKind.INPUT_VALUE: ConnectionKind.OUTPUT_VALUE,
    ConnectionKind.OUTPUT_VALUE: ConnectionKind.INPUT_VALUE,
    ConnectionKind.NEXT_STATEMENT: ConnectionKind.PREVIOUS_STATEMENT,
    ConnectionKind.PREVIOUS_STATEMENT: ConnectionKind.NEXT_STATEMENT,
}
for _input_kind, _output_kind in _CASE_PAIRS.values():
    OPPOSITE_KIND[_input_kind] = _output_kind
    OPPOSITE_KIND[_output_kind] = _input_kind

KIND_CASE: Dict[ConnectionKind, GrammaticalCase] = {}
for _case, _pair in _CASE_PAIRS.items():
    KIND_CASE[_pair[0]] = _case
    KIND_CASE[_pair[1]] = _case

del _input_kind, _output_kind, _case, _pair
