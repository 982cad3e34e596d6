"""
A small structured writer for TypeScript source text.

The writer collects import statements while declarations are written and
emits them, sorted and deduplicated, ahead of the body when the module is
finalized. Blocks (interfaces, classes, methods, union aliases) nest through
an indentation counter; output uses four-space indents and no semicolons.
"""

from typing import List, Optional, Sequence, Set, Tuple

from tsforge.errors import WriterStateError

INDENT = '    '


class TypeScriptWriter:
    """ Accumulates the imports and lines of one TypeScript module """

    def __init__(self) -> None:
        self.imports: Set[str] = set()
        self.lines: List[str] = []
        self.indent = 0
        self._blocks: List[str] = []
        self._union_variants: List[str] = []

    @property
    def state(self) -> str:
        """ 'top-level' or the kind of the innermost open block """
        return self._blocks[-1] if self._blocks else 'top-level'

    def add_import(self, ts_name: str, module: str) -> None:
        self.imports.add(f"import {{ {ts_name} }} from '{module}'")

    def add_blank_line(self) -> None:
        self._expect_not('union', 'add_blank_line')
        self.lines.append('')

    def add_comment(self, comments: Sequence[str]) -> None:
        self._expect_not('union', 'add_comment')
        for comment in comments:
            self._write_line(f'// {comment}')

    def start_interface(self, name: str, generics: str = '') -> None:
        self._expect('top-level', 'start_interface')
        self._write_line(f'export interface {name}{generics} {{')
        self._open('interface')

    def add_field(self, name: str, ts_type: str, optional: bool = False,
                  comments: Sequence[str] = ()) -> None:
        self._expect('interface', 'add_field')
        self.add_comment(comments)
        marker = '?' if optional else ''
        self._write_line(f'{name}{marker}: {ts_type}')

    def add_method(self, name: str, params: Sequence[Tuple[str, str]],
                   return_type: Optional[str] = None, comments: Sequence[str] = ()) -> None:
        """ A method signature inside an interface """
        self._expect('interface', 'add_method')
        self.add_comment(comments)
        param_str = ', '.join(f'{n}: {t}' for n, t in params)
        self._write_line(f'{name}({param_str}): {return_type or "void"}')

    def end_interface(self) -> None:
        self._close('interface')

    def start_class(self, name: str) -> None:
        self._expect('top-level', 'start_class')
        self._write_line(f'export class {name} {{')
        self._open('class')

    def add_class_field(self, decl: str) -> None:
        # decl like "private _f1!: number"
        self._expect('class', 'add_class_field')
        self._write_line(decl)

    def start_method(self, signature: str) -> None:
        # signature like "public f1(value: number)"
        self._expect('class', 'start_method')
        self._write_line(f'{signature} {{')
        self._open('method')

    def add_method_line(self, line: str) -> None:
        self._expect('method', 'add_method_line')
        self._write_line(line)

    def end_method(self) -> None:
        self._close('method')

    def end_class(self) -> None:
        self._close('class')

    def start_union(self, name: str) -> None:
        self._expect('top-level', 'start_union')
        self._write_line(f'export type {name} =')
        self._open('union')
        self._union_variants = []

    def add_union_variant(self, raw: str) -> None:
        self._expect('union', 'add_union_variant')
        self._union_variants.append(raw)

    def end_union(self) -> None:
        self._expect('union', 'end_union')
        if not self._union_variants:
            self.lines[-1] += ' never'
        for variant in self._union_variants:
            self._write_line(f'| {variant}')
        self._union_variants = []
        self._blocks.pop()
        self.indent -= 1

    def finalize(self) -> str:
        """ The sorted import block, a blank line if it is non-empty, then the body """
        if self._blocks:
            raise WriterStateError(f"Cannot finalize with open blocks: {', '.join(self._blocks)}")
        out: List[str] = sorted(self.imports)
        if out:
            out.append('')
        out.extend(self.lines)
        return '\n'.join(out) + '\n'

    def _open(self, block: str) -> None:
        self._blocks.append(block)
        self.indent += 1

    def _close(self, block: str) -> None:
        self._expect(block, f'end_{block}')
        self._blocks.pop()
        self.indent -= 1
        self._write_line('}')

    def _expect(self, state: str, operation: str) -> None:
        if self.state != state:
            raise WriterStateError(f"{operation} is not allowed in state '{self.state}'")

    def _expect_not(self, state: str, operation: str) -> None:
        if self.state == state:
            raise WriterStateError(f"{operation} is not allowed in state '{self.state}'")

    def _write_line(self, content: str) -> None:
        self.lines.append(f'{INDENT * self.indent}{content}')
