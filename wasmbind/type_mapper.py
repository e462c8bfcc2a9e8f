"""Type lowering from module value kinds and native spellings to C# types"""

from enum import Enum
from typing import Optional

from .types import ValueType


class NativeType(Enum):
    """Native type spellings with a dedicated lowering rule"""
    RUNTIME_PTR = 'JSRuntime*'
    CONTEXT_PTR = 'JSContext*'
    VALUE_PTR = 'JSValue*'
    VALUE_CONST_PTR = 'JSValueConst*'
    MODULE_DEF_PTR = 'JSModuleDef*'
    CLASS_ID = 'JSClassID'
    VOID_PTR = 'void*'
    VOID = 'void'
    DOUBLE = 'double'
    FLOAT = 'float'
    INT64 = 'int64_t'
    UINT64 = 'uint64_t'
    INT32 = 'int32_t'
    INT = 'int'
    UINT32 = 'uint32_t'
    UNSIGNED_INT = 'unsigned int'
    SIZE = 'size_t'
    BOOL = 'JS_BOOL'
    CHAR_PTR = 'char*'
    CONST_CHAR_PTR = 'const char*'

    @classmethod
    def classify(cls, spelling: str) -> Optional['NativeType']:
        """Return the rule tag for an exact spelling, or None"""
        try:
            return cls(spelling)
        except ValueError:
            return None


class TypeMapper:
    """Maps module value kinds and native types to C# types"""

    DEFAULT_TYPE = 'int'
    VOID_TYPE = 'void'
    BUFFER_TYPE = 'JSMemoryPointer'

    WASM_TYPES = {
        ValueType.I32: 'int',
        ValueType.I64: 'long',
        ValueType.F32: 'float',
        ValueType.F64: 'double',
        ValueType.V128: 'V128',
        ValueType.NIL: 'void',
    }

    # Bound wrappers return these as plain int
    INT_RETURNS = frozenset({NativeType.UINT32, NativeType.UNSIGNED_INT})

    # VOID_PTR and VOID are resolved by context, not by this table
    NATIVE_TYPES = {
        NativeType.RUNTIME_PTR: 'JSRuntimePointer',
        NativeType.CONTEXT_PTR: 'JSContextPointer',
        NativeType.VALUE_PTR: 'JSValuePointer',
        NativeType.VALUE_CONST_PTR: 'JSValuePointer',
        NativeType.MODULE_DEF_PTR: 'JSModuleDefPointer',
        NativeType.CLASS_ID: 'JSClassID',
        NativeType.DOUBLE: 'double',
        NativeType.FLOAT: 'float',
        NativeType.INT64: 'long',
        NativeType.UINT64: 'ulong',
        NativeType.INT32: 'int',
        NativeType.INT: 'int',
        NativeType.UINT32: 'uint',
        NativeType.UNSIGNED_INT: 'uint',
        NativeType.SIZE: 'int',
        NativeType.BOOL: 'int',
        NativeType.CHAR_PTR: 'int',
        NativeType.CONST_CHAR_PTR: 'int',
    }

    @classmethod
    def to_csharp(cls, kind: ValueType) -> str:
        """Convert a module value kind to its C# type"""
        return cls.WASM_TYPES.get(kind, cls.DEFAULT_TYPE)

    @classmethod
    def native_to_csharp(cls, c_type: str, param_name: str = '') -> str:
        """Convert a native type spelling to its C# marshaling type.

        Untyped pointers become a memory handle only when the parameter
        name signals a buffer; every unrecognized spelling lowers to int.
        """
        tag = NativeType.classify(c_type)
        if tag is NativeType.VOID_PTR:
            if cls.is_buffer_name(param_name):
                return cls.BUFFER_TYPE
            return cls.DEFAULT_TYPE
        return cls.NATIVE_TYPES.get(tag, cls.DEFAULT_TYPE)

    @classmethod
    def return_type(cls, wasm_returns: ValueType, c_return_type: str) -> str:
        """C# return type for a wrapper method"""
        if wasm_returns is ValueType.NIL:
            return cls.VOID_TYPE
        tag = NativeType.classify(c_return_type)
        if tag is NativeType.VOID:
            return cls.VOID_TYPE
        if tag in cls.INT_RETURNS:
            return cls.DEFAULT_TYPE
        return cls.native_to_csharp(c_return_type)

    @staticmethod
    def is_buffer_name(param_name: str) -> bool:
        return param_name in ('buffer', 'ptr') or 'buf' in param_name
