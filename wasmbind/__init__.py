"""
WebAssembly Binding Compiler Package

Parses a module introspection dump and an annotated native header into a
binding descriptor, then generates typed host bindings from it:
  1. Dump parsing (type table, imports, exports)
  2. Header parsing (native signatures and documentation)
  3. Descriptor merging and persistence
  4. C# registry generation
"""

from .types import (
    ValueType, FunctionType, ImportedFunction, ExportedFunction,
    HeaderFunctionInfo, NativeParam, MergedExport, BindingDescriptor,
)
from .dump_parser import DumpParser, ParsedDump
from .header_parser import HeaderParser
from .merger import create_descriptor
from .type_mapper import TypeMapper, NativeType
from .call_shapes import SignatureKey, HelperShape, collect_helpers
from .csharp_generator import CSharpGenerator
from .generators import generate

__all__ = [
    'ValueType', 'FunctionType', 'ImportedFunction', 'ExportedFunction',
    'HeaderFunctionInfo', 'NativeParam', 'MergedExport', 'BindingDescriptor',
    'DumpParser', 'ParsedDump', 'HeaderParser', 'create_descriptor',
    'TypeMapper', 'NativeType', 'SignatureKey', 'HelperShape', 'collect_helpers',
    'CSharpGenerator', 'generate',
]
