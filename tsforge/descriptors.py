""" Descriptor model: the nodes stored in the registry arena """

from typing import List, Optional, Tuple, Union


# Builtin scalar names and the TypeScript type they map to.
BUILTIN_SCALARS = {
    'u8': 'number',
    'u16': 'number',
    'u32': 'number',
    'u64': 'number',
    'u128': 'number',
    'usize': 'number',
    'i8': 'number',
    'i16': 'number',
    'i32': 'number',
    'i64': 'number',
    'i128': 'number',
    'isize': 'number',
    'f32': 'number',
    'f64': 'number',
    'string': 'string',
    'str': 'string',
    'char': 'string',
    'bool': 'boolean',
}

# Generic wrapper kinds and the number of type arguments each takes.
GENERIC_WRAPPERS = {
    'sequence': 1,
    'nullable': 1,
    'pair': 2,
    'map': 2,
    'either': 2,
}

BYTE_SCALAR = 'u8'


class FieldDescriptor:
    """ A record field or a union variant """

    def __init__(self, ident: str, name: str, ts_type: str = '', optional: bool = False,
                 comments: Optional[List[str]] = None, tag_value: str = '',
                 dependency: Optional[int] = None) -> None:
        self.ident = ident
        self.name = name
        self.ts_type = ts_type
        self.optional = optional
        self.comments = comments or []
        self.tag_value = tag_value
        self.dependency = dependency

    @property
    def is_unit(self) -> bool:
        """ True for a union variant that carries no payload """
        return self.dependency is None

    @property
    def tag_literal(self) -> str:
        """ The literal a tagged union uses for this variant """
        return self.tag_value or self.name

    def __repr__(self) -> str:
        return f"FieldDescriptor({self.name!r}: {self.ts_type!r})"


class MethodDescriptor:
    """ A method signature of an API interface """

    def __init__(self, name: str, params: List[Tuple[str, str, int]],
                 return_type: Optional[str] = None, return_dependency: Optional[int] = None,
                 comments: Optional[List[str]] = None) -> None:
        self.name = name
        self.params = params
        self.return_type = return_type
        self.return_dependency = return_dependency
        self.comments = comments or []

    @property
    def dependencies(self) -> List[int]:
        deps = [dep for _, _, dep in self.params]
        if self.return_dependency is not None:
            deps.append(self.return_dependency)
        return deps


class RecordDescriptor:
    """ A named product type, emitted as an interface (and optionally a builder) """

    def __init__(self, name: str, file_name: str, fields: List[FieldDescriptor],
                 comments: Optional[List[str]] = None, need_builder: bool = False) -> None:
        self.name = name
        self.file_name = file_name
        self.fields = fields
        self.comments = comments or []
        self.need_builder = need_builder

    @property
    def dependencies(self) -> List[int]:
        return [f.dependency for f in self.fields if f.dependency is not None]

    def __repr__(self) -> str:
        return f"RecordDescriptor({self.name!r}, {self.file_name!r})"


class UnionDescriptor:
    """ A named sum type, emitted as a type alias over its variants """

    def __init__(self, name: str, file_name: str, variants: List[FieldDescriptor],
                 comments: Optional[List[str]] = None, tag: str = '') -> None:
        self.name = name
        self.file_name = file_name
        self.variants = variants
        self.comments = comments or []
        self.tag = tag

    @property
    def dependencies(self) -> List[int]:
        return [v.dependency for v in self.variants if v.dependency is not None]

    def __repr__(self) -> str:
        return f"UnionDescriptor({self.name!r}, {self.file_name!r})"


class ApiDescriptor:
    """ A named interface made of method signatures """

    def __init__(self, name: str, file_name: str, methods: List[MethodDescriptor],
                 comments: Optional[List[str]] = None) -> None:
        self.name = name
        self.file_name = file_name
        self.methods = methods
        self.comments = comments or []

    @property
    def dependencies(self) -> List[int]:
        deps: List[int] = []
        for method in self.methods:
            deps.extend(method.dependencies)
        return deps


class BuiltinScalarDescriptor:
    """ A scalar that maps straight onto a TypeScript primitive """

    def __init__(self, name: str) -> None:
        self.name = name

    @property
    def dependencies(self) -> List[int]:
        return []

    def __repr__(self) -> str:
        return f"BuiltinScalarDescriptor({self.name!r})"


class GenericWrapperDescriptor:
    """
    A parametrized container (sequence, nullable, pair, map, either).

    Wrappers never emit a file of their own. They carry dependency edges to
    their type arguments and the display name synthesized from them.
    """

    def __init__(self, name: str, dependencies: List[int], optional: bool = False) -> None:
        self.name = name
        self.dependencies = dependencies
        self.optional = optional

    def __repr__(self) -> str:
        return f"GenericWrapperDescriptor({self.name!r})"


Descriptor = Union[RecordDescriptor, UnionDescriptor, ApiDescriptor,
                   BuiltinScalarDescriptor, GenericWrapperDescriptor]


def is_importable(descriptor: Descriptor) -> bool:
    """ Records and unions are the only descriptors another module can import """
    return isinstance(descriptor, (RecordDescriptor, UnionDescriptor))


def is_emitted(descriptor: Descriptor) -> bool:
    """ Descriptors that produce declarations in a target file """
    return isinstance(descriptor, (RecordDescriptor, UnionDescriptor, ApiDescriptor))


def wrapper_display_name(kind: str, arg_names: List[str], byte_item: bool = False) -> str:
    """
    Synthesizes the TypeScript spelling of a generic wrapper.

    Args:
        kind: One of GENERIC_WRAPPERS
        arg_names: Display names of the type arguments
        byte_item: True when a sequence's item is the byte scalar

    Returns:
        str: The display name
    """
    if kind == 'sequence':
        if byte_item:
            return 'Uint8Array'
        item = arg_names[0]
        if ' | ' in item or item.startswith('readonly '):
            item = f'({item})'
        return f'readonly {item}[]'
    if kind == 'nullable':
        return arg_names[0]
    if kind == 'pair':
        return f'(readonly [{arg_names[0]}, {arg_names[1]}])'
    if kind == 'map':
        return f'Map<{arg_names[0]}, {arg_names[1]}>'
    if kind == 'either':
        return f'{arg_names[0]} | {arg_names[1]}'
    raise ValueError(f"Unknown generic wrapper kind: {kind}")
