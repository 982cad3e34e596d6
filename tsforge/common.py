"""
Common utility functions for tsforge.
"""

# pylint: disable=line-too-long

import os
import re
from typing import List, Union

import jinja2


def camel(string):
    """
    Convert a string to camelCase from snake_case, camelCase, or PascalCase.
    This is the `camelCase` rename policy: `en_name` becomes `enName` and a
    variant called `Center` becomes `center`. A JSON codec paired with the
    generated declarations has to apply the same rule.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in camelCase.
    """
    if not string:
        return string
    words = _words(string)
    if not words:
        return string
    return words[0].lower() + ''.join(word.capitalize() for word in words[1:])


def _words(string: str) -> List[str]:
    if '_' in string:
        # snake_case
        return [w for w in re.split(r'_', string) if w]
    if string[0].isupper():
        # PascalCase
        return re.findall(r'[A-Z][a-z0-9]*', string)
    # camelCase
    return re.findall(r'[a-z0-9]+|[A-Z][a-z0-9]*', string)


def quote(literal: str) -> str:
    """ Renders a string as a single-quoted TypeScript literal """
    escaped = literal.replace('\\', '\\\\').replace("'", "\\'")
    return f"'{escaped}'"


def remove_ext(file_name: str) -> str:
    """ Strips the extension from a file name, keeping its directory """
    return os.path.splitext(file_name)[0]


def split_comments(doc: Union[str, List[str], None]) -> List[str]:
    """
    Normalizes a `doc` string or a `comments` list into trimmed comment lines.
    Blank lines are dropped.
    """
    if not doc:
        return []
    lines = doc.splitlines() if isinstance(doc, str) else list(doc)
    return [line.strip() for line in lines if line and line.strip()]


def process_template(file_path: str, **kvargs) -> str:
    """
    Process a file as a Jinja2 template with the given object as input.

    Args:
        file_path (str): The path to the file, relative to the package.
        **kvargs: The keyword arguments to pass to the template.

    Returns:
        str: The processed template as a string.
    """
    # Load the template environment
    file_dir = os.path.dirname(__file__)
    template_loader = jinja2.FileSystemLoader(searchpath=file_dir)
    template_env = jinja2.Environment(loader=template_loader)

    # Load the template from the file
    template = template_env.get_template(file_path)

    # Render the template with the object as input
    output = template.render(**kvargs)

    return output


