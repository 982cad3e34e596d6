"""
The descriptor registry.

An append-only arena of descriptors plus an identity -> index map. Types
register depth-first: a descriptor's dependencies are registered (and so get
their indices) while its build callback runs, before the descriptor itself is
appended. Any index a descriptor refers to therefore already exists.
"""

import logging
from typing import Callable, Dict, Hashable, Iterator, List, Tuple

from tsforge.descriptors import Descriptor, UnionDescriptor
from tsforge.errors import CycleError, TsForgeError, describe_identity
from tsforge.tag_bindings import TagBindings

logger = logging.getLogger(__name__)


class DescriptorRegistry:
    """ Deduplicates types by identity and assigns their indices """

    def __init__(self) -> None:
        self.descriptors: List[Descriptor] = []
        self.id_map: Dict[Hashable, int] = {}
        self.tag_bindings = TagBindings()
        self._building: List[Hashable] = []
        self._consumed = False

    def register(self, identity: Hashable, build: Callable[[], Descriptor]) -> int:
        """
        Returns the index of `identity`, building and appending its descriptor
        the first time the identity is seen.

        Args:
            identity: Stable, hashable identity of the concrete type
            build: Produces the descriptor; may register dependencies itself

        Returns:
            int: The index of the descriptor in the arena
        """
        if self._consumed:
            raise TsForgeError("Registry has already been consumed",
                               context=describe_identity(identity))
        index = self.id_map.get(identity)
        if index is not None:
            return index
        if identity in self._building:
            start = self._building.index(identity)
            raise CycleError(self._building[start:] + [identity])

        self._building.append(identity)
        try:
            descriptor = build()
        finally:
            self._building.pop()

        index = len(self.descriptors)
        self.descriptors.append(descriptor)
        self.id_map[identity] = index
        logger.debug("Registered #%d %s as %r", index, describe_identity(identity), descriptor)
        if isinstance(descriptor, UnionDescriptor):
            self.tag_bindings.bind_union(descriptor, self.descriptors)
        return index

    def index_of(self, identity: Hashable) -> int:
        return self.id_map[identity]

    def consume(self) -> Tuple[List[Descriptor], TagBindings]:
        """
        Seals the registry and hands its arena and tag bindings to the caller.
        A registry can be consumed once; nothing can be registered afterwards.
        """
        if self._consumed:
            raise TsForgeError("Registry has already been consumed")
        self._consumed = True
        return self.descriptors, self.tag_bindings

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __getitem__(self, index: int) -> Descriptor:
        return self.descriptors[index]

    def __len__(self) -> int:
        return len(self.descriptors)

    def __iter__(self) -> Iterator[Descriptor]:
        return iter(self.descriptors)
