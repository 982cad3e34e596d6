"""
Tag aggregation.

A tagged union stamps the literal of each payload variant onto the payload
type under the union's tag name. Unrelated unions may tag the same payload,
under the same or under different tag names, so the literals are collected
per (payload index, tag name) across every union registered in a run.
"""

import logging
from typing import Dict, List, Sequence

from tsforge.common import quote
from tsforge.descriptors import Descriptor, RecordDescriptor, UnionDescriptor

logger = logging.getLogger(__name__)


class TagGroup:
    """ All literals bound to one payload under one tag name """

    def __init__(self, tag: str, literals: List[str]) -> None:
        self.tag = tag
        self.literals = literals

    @property
    def distinct_literals(self) -> List[str]:
        """ Literals without duplicates, in first-occurrence order """
        seen: List[str] = []
        for literal in self.literals:
            if literal not in seen:
                seen.append(literal)
        return seen

    @property
    def is_fixed(self) -> bool:
        """ A single literal renders as a fixed, non-settable field """
        return len(self.distinct_literals) == 1

    @property
    def ts_type(self) -> str:
        return ' | '.join(quote(literal) for literal in self.distinct_literals)

    @property
    def default_literal(self) -> str:
        return quote(self.distinct_literals[0])

    def __repr__(self) -> str:
        return f"TagGroup({self.tag!r}, {self.literals!r})"


class TagBindings:
    """ index -> { tag name -> ordered literals, duplicates preserved } """

    def __init__(self) -> None:
        self._bindings: Dict[int, Dict[str, List[str]]] = {}

    def bind(self, payload_index: int, tag: str, literal: str) -> None:
        """ Appends a literal for (payload_index, tag) """
        self._bindings.setdefault(payload_index, {}).setdefault(tag, []).append(literal)
        logger.debug("Bound tag %s='%s' to descriptor #%d", tag, literal, payload_index)

    def bind_union(self, union: UnionDescriptor, descriptors: Sequence[Descriptor]) -> None:
        """
        Binds every record payload of a tagged union. Scalar and wrapped
        payloads have no interface to carry the tag field; their literal only
        appears in the union alias.
        """
        if not union.tag:
            return
        for variant in union.variants:
            if variant.is_unit:
                continue
            if not isinstance(descriptors[variant.dependency], RecordDescriptor):
                logger.warning("Tag %s of %s is not written onto the %s payload of variant %s",
                               union.tag, union.name, variant.ts_type, variant.name)
                continue
            self.bind(variant.dependency, union.tag, variant.tag_literal)

    def groups_for(self, index: int) -> List[TagGroup]:
        """ Tag groups of a payload, in the order their tag names were first bound """
        return [TagGroup(tag, list(literals)) for tag, literals in self._bindings.get(index, {}).items()]

    def literals_for(self, index: int, tag: str) -> List[str]:
        return list(self._bindings.get(index, {}).get(tag, []))

    def __contains__(self, index: int) -> bool:
        return index in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
