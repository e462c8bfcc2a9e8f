"""Reading and writing binding descriptor documents"""

import json
import os
import tempfile

from .errors import DescriptorError
from .types import BindingDescriptor


def dumps(descriptor: BindingDescriptor) -> str:
    """Serialize a descriptor to JSON text"""
    return json.dumps(descriptor.to_dict(), indent=2) + '\n'


def loads(text: str) -> BindingDescriptor:
    """Parse JSON text into a descriptor"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DescriptorError(f"Invalid descriptor JSON: {exc}") from exc
    return BindingDescriptor.from_dict(data)


def load(path: str) -> BindingDescriptor:
    """Load a descriptor from a JSON file"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as exc:
        raise DescriptorError(f"{path}: not valid UTF-8: {exc}") from exc
    try:
        return loads(text)
    except DescriptorError as exc:
        raise DescriptorError(f"{path}: {exc}") from exc


def save(descriptor: BindingDescriptor, path: str) -> str:
    """Write a descriptor to path and return the path"""
    write_text_atomic(path, dumps(descriptor))
    return path


def write_text_atomic(path: str, content: str):
    """Write content to path so readers never observe a partial file"""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=directory, prefix=f".{os.path.basename(path)}.", suffix='.tmp'
    )
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise
