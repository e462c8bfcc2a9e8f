"""Data types for module introspection and binding descriptors"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import DescriptorError

UNKNOWN_C_TYPE = 'unknown'


class ValueType(str, Enum):
    """WebAssembly value kind, or the absence of a return value"""
    I32 = 'i32'
    I64 = 'i64'
    F32 = 'f32'
    F64 = 'f64'
    V128 = 'v128'
    NIL = 'nil'
    # Any kind the dumper prints that has no member above (externref, funcref)
    UNKNOWN = 'unknown'

    @classmethod
    def parse(cls, text: str) -> Optional['ValueType']:
        """Return the kind spelled by text, or None if it is not recognized"""
        try:
            return cls(text.strip())
        except ValueError:
            return None

    @classmethod
    def from_dump(cls, text: str) -> 'ValueType':
        """Return the kind spelled in a dump, or UNKNOWN if it is not recognized"""
        return cls.parse(text) or cls.UNKNOWN


@dataclass
class FunctionType:
    """Module-level function signature"""
    params: list[ValueType] = field(default_factory=list)
    returns: ValueType = ValueType.NIL


@dataclass
class ImportedFunction:
    """Function imported by the module"""
    name: str
    module: str
    func_index: int
    signature: FunctionType


@dataclass
class ExportedFunction:
    """Function exported by the module"""
    name: str
    func_index: int
    signature: FunctionType


@dataclass
class HeaderFunctionInfo:
    """Native declaration and documentation for one exported function.

    param_types is ordered by native declaration order.
    """
    name: str
    c_return_type: str
    param_types: dict[str, str] = field(default_factory=dict)
    summary: str = ''
    param_docs: dict[str, str] = field(default_factory=dict)
    return_doc: str = ''


@dataclass
class NativeParam:
    """Native parameter of a merged export"""
    name: str
    c_type: str
    doc: str = ''


@dataclass
class MergedExport:
    """Export joined with its native declaration"""
    name: str
    func_index: int
    wasm_signature: FunctionType
    c_return_type: str = UNKNOWN_C_TYPE
    c_params: list[NativeParam] = field(default_factory=list)
    summary: str = ''
    return_doc: str = ''

    @property
    def is_degraded(self) -> bool:
        """True when no native declaration was found for this export"""
        return self.c_return_type == UNKNOWN_C_TYPE and not self.c_params


@dataclass
class BindingDescriptor:
    """Root document passed from the parse stage to the emit stage"""
    version: str
    types: dict[int, FunctionType] = field(default_factory=dict)
    imports: list[ImportedFunction] = field(default_factory=list)
    exports: list[MergedExport] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted document shape"""
        return {
            'version': self.version,
            'types': [
                {'index': index, **_signature_to_dict(sig)}
                for index, sig in sorted(self.types.items())
            ],
            'imports': [
                {
                    'name': imp.name,
                    'module': imp.module,
                    'funcIndex': imp.func_index,
                    **_signature_to_dict(imp.signature),
                }
                for imp in self.imports
            ],
            'exports': [
                {
                    'name': exp.name,
                    'funcIndex': exp.func_index,
                    'wasmSignature': _signature_to_dict(exp.wasm_signature),
                    'cReturnType': exp.c_return_type,
                    'cParams': [
                        {'name': p.name, 'cType': p.c_type, 'doc': p.doc}
                        for p in exp.c_params
                    ],
                    'summary': exp.summary,
                    'returnDoc': exp.return_doc,
                }
                for exp in self.exports
            ],
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'BindingDescriptor':
        """Create a descriptor from the persisted document shape.

        Raises:
            DescriptorError: If a key is missing, has the wrong JSON type,
                or names an unknown value kind.
        """
        root = _expect(data, dict, '$')
        types = {}
        for i, entry in enumerate(_get(root, 'types', list, '$')):
            path = f'$.types[{i}]'
            entry = _expect(entry, dict, path)
            types[_get(entry, 'index', int, path)] = _signature_from_dict(entry, path)

        imports = []
        for i, entry in enumerate(_get(root, 'imports', list, '$')):
            path = f'$.imports[{i}]'
            entry = _expect(entry, dict, path)
            imports.append(ImportedFunction(
                name=_get(entry, 'name', str, path),
                module=_get(entry, 'module', str, path),
                func_index=_get(entry, 'funcIndex', int, path),
                signature=_signature_from_dict(entry, path),
            ))

        exports = []
        for i, entry in enumerate(_get(root, 'exports', list, '$')):
            path = f'$.exports[{i}]'
            entry = _expect(entry, dict, path)
            params = []
            for j, p in enumerate(_get(entry, 'cParams', list, path)):
                ppath = f'{path}.cParams[{j}]'
                p = _expect(p, dict, ppath)
                params.append(NativeParam(
                    name=_get(p, 'name', str, ppath),
                    c_type=_get(p, 'cType', str, ppath),
                    doc=_get(p, 'doc', str, ppath),
                ))
            sig_path = f'{path}.wasmSignature'
            exports.append(MergedExport(
                name=_get(entry, 'name', str, path),
                func_index=_get(entry, 'funcIndex', int, path),
                wasm_signature=_signature_from_dict(
                    _get(entry, 'wasmSignature', dict, path), sig_path),
                c_return_type=_get(entry, 'cReturnType', str, path),
                c_params=params,
                summary=_get(entry, 'summary', str, path),
                return_doc=_get(entry, 'returnDoc', str, path),
            ))

        return cls(
            version=_get(root, 'version', str, '$'),
            types=types,
            imports=imports,
            exports=exports,
        )


def _signature_to_dict(sig: FunctionType) -> dict[str, Any]:
    return {
        'params': [p.value for p in sig.params],
        'returns': sig.returns.value,
    }


def _signature_from_dict(data: dict, path: str) -> FunctionType:
    params = []
    for i, raw in enumerate(_get(data, 'params', list, path)):
        params.append(_value_type(raw, f'{path}.params[{i}]'))
    returns = _value_type(_get(data, 'returns', str, path), f'{path}.returns')
    return FunctionType(params=params, returns=returns)


def _value_type(raw: Any, path: str) -> ValueType:
    kind = ValueType.parse(raw) if isinstance(raw, str) else None
    if kind is None:
        raise DescriptorError(f"{path}: unknown value type {raw!r}")
    return kind


def _expect(value: Any, kind: type, path: str) -> Any:
    # bool is an int subclass, never accept it where a number is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DescriptorError(
            f"{path}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _get(data: dict, key: str, kind: type, path: str) -> Any:
    if key not in data:
        raise DescriptorError(f"{path}: missing key '{key}'")
    return _expect(data[key], kind, f'{path}.{key}')
