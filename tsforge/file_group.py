""" FileGroup turns a populated registry into TypeScript files """

import logging
import os
from typing import List, Optional, Tuple

from tsforge.common import process_template, remove_ext
from tsforge.errors import ConfigurationError
from tsforge.registry import DescriptorRegistry
from tsforge.tsemitter import TypeScriptEmitter

logger = logging.getLogger(__name__)

BANNER = '// DO NOT EDIT. CODE GENERATED BY tsforge.'
INDEX_FILE_NAME = 'index.ts'


class FileGroup:
    """
    Members of a FileGroup:
    - are generated into the same output directory
    - share their dependencies
    - are concatenated into one module when they share a file name

    The group owns its registry. Generating data consumes the registry, so a
    group produces its files exactly once.
    """

    def __init__(self, registry: Optional[DescriptorRegistry] = None) -> None:
        self.registry = registry if registry is not None else DescriptorRegistry()

    def gen_data(self, index_file: bool = False) -> List[Tuple[str, str]]:
        """
        Renders every module of the group.

        Args:
            index_file: Also produce an index.ts re-exporting every module

        Returns:
            List of (file name, text) pairs; each text starts with the banner.
        """
        descriptors, tag_bindings = self.registry.consume()
        modules = TypeScriptEmitter(descriptors, tag_bindings).emit()
        data = [(file_name, process_template('schematots/module.ts.jinja', banner=BANNER, body=body))
                for file_name, body in modules]
        if index_file:
            file_names = [file_name for file_name, _ in modules]
            if INDEX_FILE_NAME in file_names:
                raise ConfigurationError(f"{INDEX_FILE_NAME} is both a target file and the barrel file")
            data.append((INDEX_FILE_NAME, self.gen_index(file_names)))
        return data

    @staticmethod
    def gen_index(file_names: List[str]) -> str:
        """ The barrel: one sorted `export *` line per generated module """
        modules = sorted({remove_ext(f.replace('\\', '/')) for f in file_names})
        return process_template('schematots/index.ts.jinja', banner=BANNER, modules=modules)

    def gen_files(self, output_dir: str, index_file: bool = False) -> List[str]:
        """
        Writes every module of the group below `output_dir`.

        Content is computed completely before the first file is written. I/O
        errors propagate to the caller.

        Returns:
            The paths of the written files.
        """
        data = self.gen_data(index_file)
        paths = []
        for file_name, content in data:
            file_path = os.path.join(output_dir, file_name)
            os.makedirs(os.path.dirname(file_path) or '.', exist_ok=True)
            with open(file_path, 'w', encoding='utf-8', newline='\n') as file:
                file.write(content)
            logger.info("Wrote %s", file_path)
            paths.append(file_path)
        return paths
