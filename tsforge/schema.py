"""
The input contract: a data-only schema of records, unions and API interfaces.

A schema document is a JSON list of type definitions, or an object holding
that list under `types`. Each definition names its kind, its target file and
its members; members refer to other types by name (or `id`), to builtin
scalars, or to generic wrappers over such references:

    {"kind": "record", "name": "Group", "file": "group.ts", "rename_all": "camelCase",
     "fields": [{"name": "members", "type": {"sequence": "Person"}},
                {"name": "leader", "type": {"nullable": "Person"}}]}

Option checks happen here, when the schema is loaded, so that a bad option
aborts the run before anything is registered.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from tsforge.errors import ConfigurationError, SchemaError

logger = logging.getLogger(__name__)

KINDS = ('record', 'union', 'api')
RENAME_POLICIES = ('none', 'camelCase')
MEMBER_KEYS = {'record': 'fields', 'union': 'variants', 'api': 'methods'}

TypeRef = Union[str, Dict[str, Any], List[Any]]


def validate_type_definition(type_def: Dict[str, Any]) -> None:
    """
    Rejects options a type definition's kind does not support.

    Raises:
        ConfigurationError: On a missing name or file, an unknown kind or
            rename policy, a tag on a record or a builder on a union.
    """
    if not isinstance(type_def, dict):
        raise ConfigurationError(f"Type definition must be an object, got {type(type_def).__name__}")
    name = type_def.get('name')
    if not name:
        raise ConfigurationError("Type definition without a name")
    kind = type_def.get('kind')
    if kind not in KINDS:
        raise ConfigurationError(f"Unknown kind '{kind}'", context=name)
    if not type_def.get('file'):
        raise ConfigurationError("A target file is required", context=name)
    rename_all = type_def.get('rename_all')
    if rename_all is not None and rename_all not in RENAME_POLICIES:
        raise ConfigurationError(f"Unknown rename policy '{rename_all}'", context=name)
    if type_def.get('tag') and kind != 'union':
        raise ConfigurationError(f"A {kind} does not support a tag", context=name)
    if type_def.get('builder') and kind != 'record':
        raise ConfigurationError(f"A {kind} does not support a builder", context=name)
    members = type_def.get(MEMBER_KEYS[kind], [])
    if not isinstance(members, list):
        raise ConfigurationError(f"'{MEMBER_KEYS[kind]}' must be a list", context=name)
    for member in members:
        if not isinstance(member, dict) or not member.get('name'):
            raise ConfigurationError(f"Every entry of '{MEMBER_KEYS[kind]}' needs a name", context=name)


class TypeSchema:
    """ A validated list of type definitions, indexed by identity and name """

    def __init__(self, types: List[Dict[str, Any]]) -> None:
        self.types = types
        self._by_id: Dict[str, Dict[str, Any]] = {}
        self._by_name: Dict[str, List[Dict[str, Any]]] = {}
        for type_def in types:
            validate_type_definition(type_def)
            type_id = self.type_id(type_def)
            if type_id in self._by_id:
                raise SchemaError(f"Duplicate type identity '{type_id}'")
            self._by_id[type_id] = type_def
            self._by_name.setdefault(type_def['name'], []).append(type_def)
        logger.debug("Loaded schema with %d type definitions", len(types))

    @classmethod
    def from_document(cls, document: Union[List[Any], Dict[str, Any]]) -> 'TypeSchema':
        if isinstance(document, dict):
            if 'types' not in document:
                raise SchemaError("Schema document has no 'types' list")
            document = document['types']
        if not isinstance(document, list):
            raise SchemaError("Schema document must be a list of type definitions")
        return cls(document)

    @classmethod
    def load(cls, schema_path: str) -> 'TypeSchema':
        with open(schema_path, 'r', encoding='utf-8') as file:
            document = json.load(file)
        return cls.from_document(document)

    @staticmethod
    def type_id(type_def: Dict[str, Any]) -> str:
        return type_def.get('id') or type_def['name']

    @staticmethod
    def identity(type_def: Dict[str, Any]) -> Tuple[str, str]:
        """ The registry identity of a schema type """
        return ('type', TypeSchema.type_id(type_def))

    def lookup(self, reference: str) -> Optional[Dict[str, Any]]:
        """ Finds a type by identity, or by name when the name is unambiguous """
        if reference in self._by_id:
            return self._by_id[reference]
        candidates = self._by_name.get(reference, [])
        if len(candidates) > 1:
            raise SchemaError(f"Type reference '{reference}' is ambiguous, refer to it by id")
        return candidates[0] if candidates else None

    def roots(self, names: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """ The requested top-level types, or all of them in schema order """
        if not names:
            return list(self.types)
        result = []
        for name in names:
            type_def = self.lookup(name)
            if type_def is None:
                raise SchemaError(f"Unknown root type '{name}'")
            result.append(type_def)
        return result

    def __len__(self) -> int:
        return len(self.types)
