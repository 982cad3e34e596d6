""" Tests for generating TypeScript declarations from type schemas """

import os
import sys
import tempfile
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from tsforge.errors import ConfigurationError, CycleError, SchemaError, TsForgeError
from tsforge.file_group import BANNER, FileGroup
from tsforge.schema import TypeSchema
from tsforge.schematots import (SchemaToTypeScript, convert_schema_dict_to_typescript,
                                convert_schema_to_typescript, generate_typescript)

SCHEMAS_DIR = os.path.join(os.path.dirname(current_script_path), 'schemas')


def load_fixture(name):
    return TypeSchema.load(os.path.join(SCHEMAS_DIR, name))


def generate(schema, **kwargs):
    """ Renders a schema document and strips the banner from every file """
    result = {}
    for file_name, content in generate_typescript(schema, **kwargs):
        if file_name != 'index.ts':
            assert content.startswith(BANNER + '\n')
            content = content[len(BANNER) + 1:]
        result[file_name] = content
    return result


def record(name, file_name, fields, **options):
    return dict({'kind': 'record', 'name': name, 'file': file_name, 'fields': fields}, **options)


def union(name, file_name, variants, **options):
    return dict({'kind': 'union', 'name': name, 'file': file_name, 'variants': variants}, **options)


class TestPeopleSchema(unittest.TestCase):
    """ Records, unit unions and tagged unions from the people fixture """

    def setUp(self):
        converter = SchemaToTypeScript(load_fixture('people.json'))
        self.files = dict(converter.generate())

    def test_files_follow_registration_order(self):
        self.assertEqual(list(self.files), ['person.ts', 'group.ts', 'gender.ts', 'pet.ts'])

    def test_person(self):
        self.assertEqual(
            self.files['person.ts'],
            "// DO NOT EDIT. CODE GENERATED BY tsforge.\n"
            "export interface Person {\n"
            "    age: number\n"
            "    enName: string\n"
            "}\n")

    def test_group_imports_person(self):
        self.assertEqual(
            self.files['group.ts'],
            BANNER + "\n"
            "import { Person } from './person'\n"
            "\n"
            "export interface Group {\n"
            "    name: string\n"
            "    capacity: number\n"
            "    members: readonly Person[]\n"
            "    leader?: Person\n"
            "}\n")

    def test_unit_union(self):
        self.assertEqual(
            self.files['gender.ts'],
            BANNER + "\n"
            "export type Gender =\n"
            "    | 'Male'\n"
            "    | 'Female'\n"
            "    | 'null'\n")

    def test_tagged_union_with_scalar_payloads(self):
        self.assertEqual(
            self.files['pet.ts'],
            BANNER + "\n"
            "export type Pet =\n"
            "    | { type: 'cat'; value: string }\n"
            "    | { type: 'dog'; value: string }\n"
            "    | 'None'\n")


class TestTaggedBuilders(unittest.TestCase):
    """ Tag aggregation across variants and the generated builders """

    def setUp(self):
        converter = SchemaToTypeScript(load_fixture('tagged.json'))
        self.files = {f: c[len(BANNER) + 1:] for f, c in converter.generate()}

    def test_payload_tagged_twice_gets_a_settable_tag(self):
        self.assertEqual(
            self.files['a.ts'],
            "export interface V1 {\n"
            "    type: 'tag1' | 'tag3'\n"
            "    f1: number\n"
            "    f2: string\n"
            "}\n"
            "\n"
            "export class V1Builder {\n"
            "    private _type!: 'tag1' | 'tag3'\n"
            "    private _f1!: number\n"
            "    private _f2!: string\n"
            "    public f1(value: number) {\n"
            "        this._f1 = value\n"
            "        return this\n"
            "    }\n"
            "\n"
            "    public f2(value: string) {\n"
            "        this._f2 = value\n"
            "        return this\n"
            "    }\n"
            "\n"
            "    public type(value: 'tag1' | 'tag3') {\n"
            "        this._type = value\n"
            "        return this\n"
            "    }\n"
            "\n"
            "    public build() {\n"
            "        if (this._type === undefined) throw new Error('missing type')\n"
            "        if (this._f1 === undefined) throw new Error('missing f1')\n"
            "        if (this._f2 === undefined) throw new Error('missing f2')\n"
            "        return { type: this._type, f1: this._f1, f2: this._f2 }\n"
            "    }\n"
            "}\n")

    def test_payload_tagged_once_gets_a_fixed_tag(self):
        self.assertEqual(
            self.files['b.ts'],
            "export interface V2 {\n"
            "    type: 'tag2'\n"
            "    f3: number\n"
            "}\n"
            "\n"
            "export class V2Builder {\n"
            "    private _type = 'tag2'\n"
            "    private _f3!: number\n"
            "    public f3(value: number) {\n"
            "        this._f3 = value\n"
            "        return this\n"
            "    }\n"
            "\n"
            "    public build() {\n"
            "        if (this._f3 === undefined) throw new Error('missing f3')\n"
            "        return { type: this._type, f3: this._f3 }\n"
            "    }\n"
            "}\n")

    def test_union_imports_each_payload_once(self):
        self.assertEqual(
            self.files['c.ts'],
            "import { V1 } from './a'\n"
            "import { V2 } from './b'\n"
            "\n"
            "export type TaggedEnum =\n"
            "    | { type: 'tag1'; value: V1 }\n"
            "    | { type: 'tag2'; value: V2 }\n"
            "    | { type: 'tag3'; value: V1 }\n")


class TestSchemaToTypeScript(unittest.TestCase):
    """ Generation features exercised through in-memory schemas """

    def test_payload_tagged_by_two_unions(self):
        schema = [
            record('V1', 'a.ts', [{'name': 'f1', 'type': 'u8'}]),
            union('A', 'a.ts', [{'name': 'V1', 'type': 'V1'}, {'name': 'V3', 'type': 'V1'}], tag='type'),
            union('B', 'b.ts', [{'name': 'V1', 'type': 'V1'}, {'name': 'V3', 'type': 'V1'}], tag='type2'),
        ]
        files = generate(schema, roots=['A', 'B'])
        self.assertEqual(list(files), ['a.ts', 'b.ts'])
        self.assertEqual(
            files['a.ts'],
            "export interface V1 {\n"
            "    type: 'V1' | 'V3'\n"
            "    type2: 'V1' | 'V3'\n"
            "    f1: number\n"
            "}\n"
            "\n"
            "export type A =\n"
            "    | { type: 'V1'; value: V1 }\n"
            "    | { type: 'V3'; value: V1 }\n")
        self.assertTrue(files['b.ts'].startswith("import { V1 } from './a'\n\nexport type B =\n"))

    def test_byte_sequence_is_uint8array(self):
        files = generate([record('Blob', 'blob.ts', [{'name': 'data', 'type': {'sequence': 'u8'}},
                                                     {'name': 'words', 'type': {'sequence': 'u16'}}])])
        self.assertIn('    data: Uint8Array\n', files['blob.ts'])
        self.assertIn('    words: readonly number[]\n', files['blob.ts'])

    def test_generic_wrappers(self):
        schema = [
            record('Person', 'person.ts', [{'name': 'age', 'type': 'u16'}]),
            record('Registry', 'registry.ts', [
                {'name': 'by_name', 'type': {'map': ['string', 'Person']}},
                {'name': 'entry', 'type': {'pair': ['string', 'u32']}},
                {'name': 'result', 'type': {'either': ['Person', 'string']}},
                {'name': 'choices', 'type': {'sequence': {'either': ['u8', 'bool']}}},
                {'name': 'grid', 'type': {'sequence': {'sequence': 'f64'}}},
                {'name': 'nickname', 'type': {'nullable': 'string'}},
            ]),
        ]
        self.assertEqual(
            generate(schema, roots=['Registry'])['registry.ts'],
            "import { Person } from './person'\n"
            "\n"
            "export interface Registry {\n"
            "    by_name: Map<string, Person>\n"
            "    entry: (readonly [string, number])\n"
            "    result: Person | string\n"
            "    choices: readonly (number | boolean)[]\n"
            "    grid: readonly (readonly number[])[]\n"
            "    nickname?: string\n"
            "}\n")

    def test_skip_and_rename(self):
        schema = [record('Person', 'person.ts', [
            {'name': 'age', 'type': 'u16'},
            {'name': 'secret', 'type': 'string', 'skip': True},
            {'name': 'full_name', 'type': 'string', 'rename': 'displayName'},
        ], rename='Human', rename_all='camelCase')]
        self.assertEqual(
            generate(schema)['person.ts'],
            "export interface Human {\n"
            "    age: number\n"
            "    displayName: string\n"
            "}\n")

    def test_comments(self):
        schema = [
            record('Person', 'person.ts', [{'name': 'age', 'type': 'u16', 'doc': ' In years. '}],
                   doc='A person.\n\nNothing more.'),
            union('Align', 'align.ts', [{'name': 'Top'}], comments=['Vertical alignment']),
        ]
        files = generate(schema)
        self.assertEqual(
            files['person.ts'],
            "// A person.\n"
            "// Nothing more.\n"
            "export interface Person {\n"
            "    // In years.\n"
            "    age: number\n"
            "}\n")
        self.assertTrue(files['align.ts'].startswith("// Vertical alignment\nexport type Align =\n"))

    def test_camel_case_unit_variants(self):
        schema = [union('Align', 'align.ts', [{'name': 'Top'}, {'name': 'Center'}], rename_all='camelCase')]
        self.assertEqual(generate(schema)['align.ts'],
                         "export type Align =\n    | 'top'\n    | 'center'\n")

    def test_untagged_payload_variants(self):
        schema = [union('Value', 'value.ts', [{'name': 'Number', 'type': ['f64']},
                                              {'name': 'Text', 'type': 'string'},
                                              {'name': 'Empty', 'type': []}])]
        self.assertEqual(
            generate(schema)['value.ts'],
            "export type Value =\n"
            "    | { Number: number }\n"
            "    | { Text: string }\n"
            "    | 'Empty'\n")

    def test_empty_union_is_never(self):
        self.assertEqual(generate([union('Nothing', 'n.ts', [])])['n.ts'], "export type Nothing = never\n")

    def test_builder_with_optional_field(self):
        schema = [record('Options', 'options.ts', [
            {'name': 'limit', 'type': 'u32'},
            {'name': 'label', 'type': {'nullable': 'string'}},
        ], builder=True)]
        content = generate(schema)['options.ts']
        self.assertIn("    private _limit!: number\n    private _label?: string\n", content)
        self.assertIn("        if (this._limit === undefined) throw new Error('missing limit')\n"
                      "        return { limit: this._limit, label: this._label }\n", content)
        self.assertNotIn('missing label', content)

    def test_builder_without_members(self):
        content = generate([record('Empty', 'empty.ts', [], builder=True)])['empty.ts']
        self.assertEqual(
            content,
            "export interface Empty {\n"
            "}\n"
            "\n"
            "export class EmptyBuilder {\n"
            "    public build() {\n"
            "        return {}\n"
            "    }\n"
            "}\n")

    def test_api_interface(self):
        schema = [
            record('Person', 'person.ts', [{'name': 'age', 'type': 'u16'}]),
            {'kind': 'api', 'name': 'PersonService', 'file': 'service.ts', 'methods': [
                {'name': 'get_person', 'params': [{'name': 'person_id', 'type': 'u32'}],
                 'returns': {'nullable': 'Person'}},
                {'name': 'list_all', 'returns': {'sequence': 'Person'}},
                {'name': 'rename', 'params': [{'name': 'person_id', 'type': 'u32'},
                                              {'name': 'new_name', 'type': {'nullable': 'string'}}]},
            ]},
        ]
        self.assertEqual(
            generate(schema)['service.ts'],
            "import { Person } from './person'\n"
            "\n"
            "export interface PersonService {\n"
            "    getPerson(personId: number): Person | undefined\n"
            "    listAll(): readonly Person[]\n"
            "    rename(personId: number, newName?: string): void\n"
            "}\n")

    def test_same_file_types_are_concatenated_without_imports(self):
        schema = [
            record('Person', 'models.ts', [{'name': 'home', 'type': 'Address'}]),
            record('Address', 'models.ts', [{'name': 'street', 'type': 'string'}]),
        ]
        self.assertEqual(
            generate(schema),
            {'models.ts': "export interface Address {\n"
                          "    street: string\n"
                          "}\n"
                          "\n"
                          "export interface Person {\n"
                          "    home: Address\n"
                          "}\n"})

    def test_later_declaration_with_same_name_wins(self):
        schema = [
            record('Person', 'p.ts', [{'name': 'a', 'type': 'u8'}], id='p1'),
            record('Person', 'p.ts', [{'name': 'b', 'type': 'string'}], id='p2'),
        ]
        with self.assertLogs('tsforge.tsemitter', level='WARNING') as logs:
            files = generate(schema)
        self.assertEqual(files, {'p.ts': "export interface Person {\n    b: string\n}\n"})
        self.assertIn('declared twice', logs.output[0])

    def test_imports_use_relative_paths(self):
        schema = [
            record('Person', 'models/person.ts', [{'name': 'age', 'type': 'u16'}]),
            record('Group', 'views/group.ts', [{'name': 'owner', 'type': 'Person'}]),
            record('Team', 'team.ts', [{'name': 'lead', 'type': 'Person'}]),
        ]
        files = generate(schema)
        self.assertTrue(files['views/group.ts'].startswith("import { Person } from '../models/person'\n"))
        self.assertTrue(files['team.ts'].startswith("import { Person } from './models/person'\n"))

    def test_roots_limit_the_output(self):
        schema = TypeSchema.load(os.path.join(SCHEMAS_DIR, 'people.json')).types
        files = generate(schema, roots=['Group'])
        self.assertEqual(list(files), ['person.ts', 'group.ts'])
        with self.assertRaises(SchemaError):
            generate(schema, roots=['Missing'])

    def test_output_is_deterministic(self):
        schema = TypeSchema.load(os.path.join(SCHEMAS_DIR, 'tagged.json')).types
        self.assertEqual(generate_typescript(schema), generate_typescript(schema))

    def test_tag_shadowing_a_field_is_reported(self):
        schema = [
            record('V', 'v.ts', [{'name': 'type', 'type': 'string'}]),
            union('E', 'e.ts', [{'name': 'V', 'type': 'V'}], tag='type'),
        ]
        with self.assertLogs('tsforge.tsemitter', level='WARNING') as logs:
            generate(schema)
        self.assertIn('shadows', logs.output[0])

    def test_quotes_in_literals_are_escaped(self):
        schema = [
            record('V', 'v.ts', [{'name': 'f', 'type': 'u8'}], builder=True),
            union('E', 'e.ts', [{'name': 'A', 'type': 'V', 'tag_value': "it's"},
                                {'name': 'B', 'rename': "B'x"}], tag='type'),
        ]
        files = generate(schema)
        self.assertIn("    type: 'it\\'s'\n", files['v.ts'])
        self.assertIn("    private _type = 'it\\'s'\n", files['v.ts'])
        self.assertIn("    | { type: 'it\\'s'; value: V }\n", files['e.ts'])
        self.assertIn("    | 'B\\'x'\n", files['e.ts'])

    def test_wrapped_payload_of_tagged_union_is_reported(self):
        schema = [
            record('V', 'v.ts', [{'name': 'f', 'type': 'u8'}]),
            union('E', 'e.ts', [{'name': 'A', 'type': {'nullable': 'V'}}], tag='type'),
        ]
        with self.assertLogs('tsforge.tag_bindings', level='WARNING'):
            files = generate(schema)
        self.assertEqual(files['v.ts'], "export interface V {\n    f: number\n}\n")
        self.assertIn("    | { type: 'A'; value: V }\n", files['e.ts'])


class TestSchemaErrors(unittest.TestCase):
    """ Configuration and schema errors abort the run """

    def test_tag_on_record(self):
        with self.assertRaises(ConfigurationError):
            load_fixture('bad_tag_on_record.json')

    def test_builder_on_union(self):
        with self.assertRaises(ConfigurationError):
            generate([union('E', 'e.ts', [], builder=True)])

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError) as ctx:
            generate([{'kind': 'record', 'name': 'Person', 'fields': []}])
        self.assertEqual(ctx.exception.context, 'Person')

    def test_unknown_rename_policy(self):
        with self.assertRaises(ConfigurationError):
            generate([record('Person', 'person.ts', [], rename_all='snake_case')])

    def test_unknown_kind(self):
        with self.assertRaises(ConfigurationError):
            generate([{'kind': 'enum', 'name': 'E', 'file': 'e.ts'}])

    def test_variant_with_two_payloads(self):
        schema = [union('E', 'e.ts', [{'name': 'Both', 'type': ['u8', 'string']}])]
        with self.assertRaises(SchemaError) as ctx:
            generate(schema)
        self.assertIn('more than one payload type', str(ctx.exception))

    def test_unknown_reference(self):
        with self.assertRaises(SchemaError):
            generate([record('Person', 'person.ts', [{'name': 'pet', 'type': 'Pet'}])])

    def test_wrong_wrapper_arity(self):
        with self.assertRaises(SchemaError):
            generate([record('Person', 'person.ts', [{'name': 'tags', 'type': {'map': ['string']}}])])
        with self.assertRaises(SchemaError):
            generate([record('Person', 'person.ts', [{'name': 'tags', 'type': {'set': 'string'}}])])

    def test_ambiguous_name_reference(self):
        schema = [
            record('Person', 'a.ts', [], id='a.Person'),
            record('Person', 'b.ts', [], id='b.Person'),
            record('Group', 'group.ts', [{'name': 'owner', 'type': 'Person'}]),
        ]
        with self.assertRaises(SchemaError):
            generate(schema, roots=['Group'])
        files = generate([schema[0], schema[1],
                          record('Group', 'group.ts', [{'name': 'owner', 'type': 'b.Person'}])],
                         roots=['Group'])
        self.assertEqual(list(files), ['b.ts', 'group.ts'])

    def test_duplicate_identity(self):
        with self.assertRaises(SchemaError):
            generate([record('Person', 'a.ts', []), record('Person', 'b.ts', [])])

    def test_self_reference_is_a_cycle(self):
        schema = [record('Node', 'node.ts', [{'name': 'next', 'type': {'nullable': 'Node'}}])]
        with self.assertRaises(CycleError) as ctx:
            generate(schema)
        self.assertIn('Node -> nullable<Node> -> Node', str(ctx.exception))

    def test_mutual_reference_is_a_cycle(self):
        schema = [
            record('A', 'a.ts', [{'name': 'b', 'type': 'B'}]),
            record('B', 'b.ts', [{'name': 'a', 'type': {'sequence': 'A'}}]),
        ]
        with self.assertRaises(CycleError):
            generate(schema)

    def test_api_used_as_a_type(self):
        svc = {'kind': 'api', 'name': 'Svc', 'file': 'svc.ts', 'methods': []}
        with self.assertRaises(SchemaError) as ctx:
            generate([svc, record('R', 'r.ts', [{'name': 'svc', 'type': 'Svc'}])])
        self.assertIn('is an api', str(ctx.exception))
        with self.assertRaises(SchemaError):
            generate([svc, union('E', 'e.ts', [{'name': 'S', 'type': {'sequence': 'Svc'}}])])

    def test_builder_member_named_build(self):
        with self.assertRaises(ConfigurationError):
            generate([record('Job', 'job.ts', [{'name': 'build', 'type': 'u32'}], builder=True)])
        self.assertIn("    build: number\n", generate([record('Job', 'job.ts', [{'name': 'build', 'type': 'u32'}])])['job.ts'])

    def test_document_without_types(self):
        with self.assertRaises(SchemaError):
            TypeSchema.from_document({'records': []})


class TestFileGroup(unittest.TestCase):
    """ Writing files and the barrel """

    def test_gen_files_with_index(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            paths = convert_schema_to_typescript(os.path.join(SCHEMAS_DIR, 'people.json'), tmp_dir,
                                                 index_file=True)
            self.assertEqual([os.path.basename(p) for p in paths],
                             ['person.ts', 'group.ts', 'gender.ts', 'pet.ts', 'index.ts'])
            with open(os.path.join(tmp_dir, 'index.ts'), 'r', encoding='utf-8') as file:
                self.assertEqual(
                    file.read(),
                    BANNER + "\n"
                    'export * from "./gender"\n'
                    'export * from "./group"\n'
                    'export * from "./person"\n'
                    'export * from "./pet"\n')
            with open(os.path.join(tmp_dir, 'person.ts'), 'r', encoding='utf-8') as file:
                self.assertTrue(file.read().startswith(BANNER + "\nexport interface Person {\n"))

    def test_gen_files_creates_directories(self):
        schema = [record('Person', 'models/person.ts', [{'name': 'age', 'type': 'u16'}])]
        with tempfile.TemporaryDirectory() as tmp_dir:
            convert_schema_dict_to_typescript(schema, tmp_dir, index_file=True)
            self.assertTrue(os.path.isfile(os.path.join(tmp_dir, 'models', 'person.ts')))
            with open(os.path.join(tmp_dir, 'index.ts'), 'r', encoding='utf-8') as file:
                self.assertIn('export * from "./models/person"\n', file.read())

    def test_index_file_cannot_be_a_target(self):
        with self.assertRaises(ConfigurationError):
            generate_typescript([record('Index', 'index.ts', [])], index_file=True)

    def test_registry_is_consumed_once(self):
        group = FileGroup()
        SchemaToTypeScript(TypeSchema([record('A', 'a.ts', [])])).register_roots(group.registry)
        self.assertEqual([f for f, _ in group.gen_data()], ['a.ts'])
        with self.assertRaises(TsForgeError):
            group.gen_data()


if __name__ == '__main__':
    unittest.main()
