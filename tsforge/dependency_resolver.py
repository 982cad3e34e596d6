# resolve the imports of a declaration

import posixpath
from typing import Iterable, List, Sequence, Set, Tuple

from tsforge.common import remove_ext
from tsforge.descriptors import (BuiltinScalarDescriptor, Descriptor, GenericWrapperDescriptor,
                                 is_importable)


def import_dependencies_of(descriptors: Sequence[Descriptor], index: int) -> Set[int]:
    """
    Flattens one dependency down to the concrete named types it stands for.

    A record or union contributes itself, a generic wrapper contributes the
    closure of its own type arguments, and a builtin scalar contributes
    nothing. The arena is built leaves-first, so the walk always terminates.
    """
    descriptor = descriptors[index]
    if is_importable(descriptor):
        return {index}
    result: Set[int] = set()
    if isinstance(descriptor, GenericWrapperDescriptor):
        for dep in descriptor.dependencies:
            result.update(import_dependencies_of(descriptors, dep))
    elif not isinstance(descriptor, BuiltinScalarDescriptor):
        raise TypeError(f"{descriptor!r} cannot be used as a type reference")
    return result


def collect_import_indices(descriptors: Sequence[Descriptor], dependencies: Iterable[int]) -> Set[int]:
    """ Union of the closures of a declaration's direct dependencies """
    result: Set[int] = set()
    for dep in dependencies:
        result.update(import_dependencies_of(descriptors, dep))
    return result


def relative_module_path(from_file: str, to_file: str) -> str:
    """ The module specifier `from_file` uses to import `to_file` """
    from_dir = posixpath.dirname(from_file.replace('\\', '/')) or '.'
    target = remove_ext(to_file.replace('\\', '/'))
    relative_path = posixpath.relpath(target, from_dir)
    if not relative_path.startswith('.'):
        relative_path = f'./{relative_path}'
    return relative_path


def resolve_imports(descriptors: Sequence[Descriptor], dependencies: Iterable[int],
                    file_name: str, exclude: Iterable[int] = ()) -> List[Tuple[str, str]]:
    """
    Computes the minimal import list of a declaration emitted into `file_name`.

    Args:
        descriptors: The registry arena
        dependencies: The declaration's direct dependency indices
        file_name: The file the declaration is emitted into
        exclude: Indices that must not be imported (the declaration itself)

    Returns:
        List of (display name, module specifier), ordered by display name and
        then by file name.
    """
    excluded = set(exclude)
    entries: List[Tuple[str, str]] = []
    for idx in collect_import_indices(descriptors, dependencies):
        if idx in excluded:
            continue
        target = descriptors[idx]
        if target.file_name == file_name:
            continue
        entries.append((target.name, target.file_name))
    entries.sort()
    return [(name, relative_module_path(file_name, target_file)) for name, target_file in entries]
