# pylint: disable=line-too-long

""" SchemaToTypeScript registers a type schema's types and generates their TypeScript declarations """

import logging
from typing import Any, Dict, Hashable, List, Optional, Tuple

from tsforge.common import camel, split_comments
from tsforge.descriptors import (BUILTIN_SCALARS, BYTE_SCALAR, GENERIC_WRAPPERS, ApiDescriptor,
                                 BuiltinScalarDescriptor, FieldDescriptor, GenericWrapperDescriptor,
                                 MethodDescriptor, RecordDescriptor, UnionDescriptor, wrapper_display_name)
from tsforge.errors import SchemaError
from tsforge.file_group import FileGroup
from tsforge.registry import DescriptorRegistry
from tsforge.schema import TypeRef, TypeSchema

logger = logging.getLogger(__name__)


class SchemaToTypeScript:
    """ Converts a type schema to TypeScript interfaces, union aliases and builders """

    def __init__(self, schema: TypeSchema, index_file: bool = False) -> None:
        self.schema = schema
        self.index_file = index_file

    def ref_identity(self, type_ref: TypeRef) -> Hashable:
        """
        The registry identity of a type reference: ('builtin', name) for a
        scalar, ('type', id) for a schema type and (kind, *argument
        identities) for a generic wrapper.
        """
        if isinstance(type_ref, str):
            if type_ref in BUILTIN_SCALARS:
                return ('builtin', type_ref)
            type_def = self.schema.lookup(type_ref)
            if type_def is None:
                raise SchemaError(f"Unknown type reference '{type_ref}'")
            return TypeSchema.identity(type_def)
        kind, args = self.split_wrapper(type_ref)
        return (kind,) + tuple(self.ref_identity(arg) for arg in args)

    @staticmethod
    def split_wrapper(type_ref: TypeRef) -> Tuple[str, List[TypeRef]]:
        """ Splits {"map": [K, V]} into ('map', [K, V]) """
        if not isinstance(type_ref, dict) or len(type_ref) != 1:
            raise SchemaError(f"Malformed type reference {type_ref!r}")
        kind, value = next(iter(type_ref.items()))
        arity = GENERIC_WRAPPERS.get(kind)
        if arity is None:
            raise SchemaError(f"Unknown generic wrapper '{kind}'")
        args = [value] if arity == 1 else value
        if not isinstance(args, list) or len(args) != arity:
            raise SchemaError(f"'{kind}' takes {arity} type argument(s), got {value!r}")
        return kind, args

    def register_type_ref(self, registry: DescriptorRegistry, type_ref: TypeRef) -> int:
        """ Registers the type a reference stands for and returns its index """
        identity = self.ref_identity(type_ref)
        if isinstance(type_ref, str):
            if type_ref in BUILTIN_SCALARS:
                return registry.register(identity, lambda: BuiltinScalarDescriptor(BUILTIN_SCALARS[type_ref]))
            type_def = self.schema.lookup(type_ref)
            if type_def['kind'] == 'api':
                raise SchemaError(f"'{type_ref}' is an api and cannot be used as a type", context=type_def['name'])
            return self.register_type(registry, type_def)

        kind, args = self.split_wrapper(type_ref)

        def build_wrapper() -> GenericWrapperDescriptor:
            deps = [self.register_type_ref(registry, arg) for arg in args]
            names = [registry[dep].name for dep in deps]
            byte_item = kind == 'sequence' and args[0] == BYTE_SCALAR
            return GenericWrapperDescriptor(wrapper_display_name(kind, names, byte_item), deps,
                                            optional=kind == 'nullable')

        return registry.register(identity, build_wrapper)

    def register_type(self, registry: DescriptorRegistry, type_def: Dict[str, Any]) -> int:
        """ Registers a schema type and, depth-first, everything it refers to """
        builders = {
            'record': self.build_record,
            'union': self.build_union,
            'api': self.build_api,
        }
        build = builders[type_def['kind']]
        return registry.register(TypeSchema.identity(type_def), lambda: build(registry, type_def))

    def register_roots(self, registry: DescriptorRegistry, roots: Optional[List[str]] = None) -> List[int]:
        """ Registers the requested top-level types in order """
        indices = []
        for type_def in self.schema.roots(roots):
            logger.debug("Registering top-level type %s", type_def['name'])
            indices.append(self.register_type(registry, type_def))
        return indices

    @staticmethod
    def display_name(type_def: Dict[str, Any]) -> str:
        return type_def.get('rename') or type_def['name']

    @staticmethod
    def member_name(type_def: Dict[str, Any], member: Dict[str, Any]) -> str:
        """ A member's display name after its own rename or the type's rename policy """
        if member.get('rename'):
            return member['rename']
        if type_def.get('rename_all') == 'camelCase':
            return camel(member['name'])
        return member['name']

    @staticmethod
    def members(type_def: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        return [m for m in type_def.get(key, []) if not m.get('skip', False)]

    def build_field(self, registry: DescriptorRegistry, type_def: Dict[str, Any], member: Dict[str, Any]) -> FieldDescriptor:
        if 'type' not in member:
            raise SchemaError(f"Field '{member['name']}' has no type", context=type_def['name'])
        dep = self.register_type_ref(registry, member['type'])
        target = registry[dep]
        optional = isinstance(target, GenericWrapperDescriptor) and target.optional
        return FieldDescriptor(member['name'], self.member_name(type_def, member), target.name, optional,
                               split_comments(member.get('comments') or member.get('doc')),
                               member.get('tag_value') or '', dep)

    def build_variant(self, registry: DescriptorRegistry, type_def: Dict[str, Any], member: Dict[str, Any]) -> FieldDescriptor:
        type_ref = member.get('type')
        if isinstance(type_ref, list):
            if len(type_ref) > 1:
                raise SchemaError(f"Variant '{member['name']}' carries more than one payload type", context=type_def['name'])
            type_ref = type_ref[0] if type_ref else None
        if type_ref is None:
            return FieldDescriptor(member['name'], self.member_name(type_def, member),
                                   comments=split_comments(member.get('comments') or member.get('doc')),
                                   tag_value=member.get('tag_value') or '')
        return self.build_field(registry, type_def, dict(member, type=type_ref))

    def build_record(self, registry: DescriptorRegistry, type_def: Dict[str, Any]) -> RecordDescriptor:
        fields = [self.build_field(registry, type_def, f) for f in self.members(type_def, 'fields')]
        return RecordDescriptor(self.display_name(type_def), type_def['file'], fields,
                                split_comments(type_def.get('comments') or type_def.get('doc')),
                                bool(type_def.get('builder', False)))

    def build_union(self, registry: DescriptorRegistry, type_def: Dict[str, Any]) -> UnionDescriptor:
        variants = [self.build_variant(registry, type_def, v) for v in self.members(type_def, 'variants')]
        return UnionDescriptor(self.display_name(type_def), type_def['file'], variants,
                               split_comments(type_def.get('comments') or type_def.get('doc')),
                               type_def.get('tag') or '')

    def build_api(self, registry: DescriptorRegistry, type_def: Dict[str, Any]) -> ApiDescriptor:
        methods = []
        for method in self.members(type_def, 'methods'):
            params = []
            for param in method.get('params', []):
                if 'name' not in param or 'type' not in param:
                    raise SchemaError(f"Parameters of '{method['name']}' need a name and a type", context=type_def['name'])
                dep = self.register_type_ref(registry, param['type'])
                target = registry[dep]
                param_name = camel(param['name'])
                if isinstance(target, GenericWrapperDescriptor) and target.optional:
                    param_name += '?'
                params.append((param_name, target.name, dep))
            return_type = None
            return_dep = None
            if method.get('returns') is not None:
                return_dep = self.register_type_ref(registry, method['returns'])
                target = registry[return_dep]
                return_type = target.name
                if isinstance(target, GenericWrapperDescriptor) and target.optional:
                    return_type += ' | undefined'
            methods.append(MethodDescriptor(camel(method['name']), params, return_type, return_dep,
                                            split_comments(method.get('comments') or method.get('doc'))))
        return ApiDescriptor(self.display_name(type_def), type_def['file'], methods,
                             split_comments(type_def.get('comments') or type_def.get('doc')))

    def generate(self, roots: Optional[List[str]] = None) -> List[Tuple[str, str]]:
        """ Registers the roots and renders every file in memory """
        group = FileGroup()
        self.register_roots(group.registry, roots)
        return group.gen_data(self.index_file)

    def convert_schema(self, output_dir: str, roots: Optional[List[str]] = None) -> List[str]:
        """ Registers the roots and writes every file below `output_dir` """
        group = FileGroup()
        self.register_roots(group.registry, roots)
        return group.gen_files(output_dir, self.index_file)


def convert_schema_to_typescript(schema_path, ts_dir_path, index_file=False, roots=None):
    """Convert a type schema file to TypeScript declaration files."""
    converter = SchemaToTypeScript(TypeSchema.load(schema_path), index_file=index_file)
    return converter.convert_schema(ts_dir_path, roots)


def convert_schema_dict_to_typescript(schema, ts_dir_path, index_file=False, roots=None):
    """Convert an in-memory type schema document to TypeScript declaration files."""
    converter = SchemaToTypeScript(TypeSchema.from_document(schema), index_file=index_file)
    return converter.convert_schema(ts_dir_path, roots)


def generate_typescript(schema, index_file=False, roots=None):
    """Render an in-memory type schema document to (file name, text) pairs."""
    converter = SchemaToTypeScript(TypeSchema.from_document(schema), index_file=index_file)
    return converter.generate(roots)
