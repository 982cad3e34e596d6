# pylint: disable=missing-function-docstring

""" TypeScriptEmitter renders the registry arena into TypeScript modules """

import logging
from typing import Dict, List, Sequence, Tuple

from tsforge.common import quote
from tsforge.dependency_resolver import resolve_imports
from tsforge.descriptors import (ApiDescriptor, Descriptor, FieldDescriptor, RecordDescriptor,
                                 UnionDescriptor, is_emitted)
from tsforge.errors import ConfigurationError
from tsforge.tag_bindings import TagBindings, TagGroup
from tsforge.tswriter import TypeScriptWriter

logger = logging.getLogger(__name__)


class TypeScriptEmitter:
    """
    Groups the emitted descriptors of a consumed registry by target file and
    renders one module per file.

    Descriptors sharing a file are concatenated in registration order. A later
    descriptor with the same display name as an earlier one in the same file
    replaces it in place.
    """

    def __init__(self, descriptors: Sequence[Descriptor], tag_bindings: TagBindings) -> None:
        self.descriptors = descriptors
        self.tag_bindings = tag_bindings

    def group_by_file(self) -> Dict[str, List[int]]:
        files: Dict[str, List[int]] = {}
        for index, descriptor in enumerate(self.descriptors):
            if not is_emitted(descriptor):
                continue
            entries = files.setdefault(descriptor.file_name, [])
            replaced = next((pos for pos, idx in enumerate(entries)
                             if self.descriptors[idx].name == descriptor.name), None)
            if replaced is None:
                entries.append(index)
            else:
                logger.warning("%s is declared twice in %s, the later declaration wins",
                               descriptor.name, descriptor.file_name)
                entries[replaced] = index
        return files

    def emit(self) -> List[Tuple[str, str]]:
        """ (file name, module body) pairs, in order of first registration """
        return [(file_name, self.emit_file(file_name, indices))
                for file_name, indices in self.group_by_file().items()]

    def emit_file(self, file_name: str, indices: List[int]) -> str:
        writer = TypeScriptWriter()
        for position, index in enumerate(indices):
            descriptor = self.descriptors[index]
            for ts_name, module in resolve_imports(self.descriptors, descriptor.dependencies,
                                                   file_name, exclude=[index]):
                writer.add_import(ts_name, module)
            if position:
                writer.add_blank_line()
            if isinstance(descriptor, RecordDescriptor):
                self.write_record(writer, index, descriptor)
            elif isinstance(descriptor, UnionDescriptor):
                self.write_union(writer, descriptor)
            elif isinstance(descriptor, ApiDescriptor):
                self.write_api(writer, descriptor)
        return writer.finalize()

    def write_record(self, writer: TypeScriptWriter, index: int, record: RecordDescriptor) -> None:
        tag_groups = self.tag_bindings.groups_for(index)
        field_names = {f.name for f in record.fields}
        for group in tag_groups:
            if group.tag in field_names:
                logger.warning("Tag %s of %s shadows a field of the same name", group.tag, record.name)

        writer.add_comment(record.comments)
        writer.start_interface(record.name)
        for group in tag_groups:
            writer.add_field(group.tag, group.ts_type)
        for field in record.fields:
            writer.add_field(field.name, field.ts_type, field.optional, field.comments)
        writer.end_interface()

        if record.need_builder:
            writer.add_blank_line()
            self.write_builder(writer, record, tag_groups)

    def write_builder(self, writer: TypeScriptWriter, record: RecordDescriptor,
                      tag_groups: List[TagGroup]) -> None:
        """
        A fluent builder: a private backing field and a setter per member, and
        a build() that rejects unset required members before returning the
        object literal (tag fields first, then the declared fields).
        """
        setters = [(f.name, f.ts_type) for f in record.fields]
        setters.extend((g.tag, g.ts_type) for g in tag_groups if not g.is_fixed)
        if any(name == 'build' for name, _ in setters):
            raise ConfigurationError("A builder member named build collides with build()", context=record.name)

        writer.start_class(f'{record.name}Builder')
        for group in tag_groups:
            if group.is_fixed:
                writer.add_class_field(f'private _{group.tag} = {group.default_literal}')
            else:
                writer.add_class_field(f'private _{group.tag}!: {group.ts_type}')
        for field in record.fields:
            marker = '?' if field.optional else '!'
            writer.add_class_field(f'private _{field.name}{marker}: {field.ts_type}')

        for position, (name, ts_type) in enumerate(setters):
            if position:
                writer.add_blank_line()
            writer.start_method(f'public {name}(value: {ts_type})')
            writer.add_method_line(f'this._{name} = value')
            writer.add_method_line('return this')
            writer.end_method()

        if setters:
            writer.add_blank_line()
        writer.start_method('public build()')
        required = [g.tag for g in tag_groups if not g.is_fixed]
        required.extend(f.name for f in record.fields if not f.optional)
        for name in required:
            writer.add_method_line(f"if (this._{name} === undefined) throw new Error('missing {name}')")
        members = [f'{g.tag}: this._{g.tag}' for g in tag_groups]
        members.extend(f'{f.name}: this._{f.name}' for f in record.fields)
        if members:
            writer.add_method_line(f"return {{ {', '.join(members)} }}")
        else:
            writer.add_method_line('return {}')
        writer.end_method()
        writer.end_class()

    def write_union(self, writer: TypeScriptWriter, union: UnionDescriptor) -> None:
        writer.add_comment(union.comments)
        writer.start_union(union.name)
        for variant in union.variants:
            writer.add_union_variant(self.variant_literal(union, variant))
        writer.end_union()

    @staticmethod
    def variant_literal(union: UnionDescriptor, variant: FieldDescriptor) -> str:
        if variant.is_unit:
            return quote(variant.name)
        if union.tag:
            return f"{{ {union.tag}: {quote(variant.tag_literal)}; value: {variant.ts_type} }}"
        return f'{{ {variant.name}: {variant.ts_type} }}'

    def write_api(self, writer: TypeScriptWriter, api: ApiDescriptor) -> None:
        writer.add_comment(api.comments)
        writer.start_interface(api.name)
        for method in api.methods:
            params = [(name, ts_type) for name, ts_type, _ in method.params]
            writer.add_method(method.name, params, method.return_type, method.comments)
        writer.end_interface()
