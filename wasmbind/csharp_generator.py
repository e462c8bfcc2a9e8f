"""C# Generator - generates a registry class that binds module exports"""

import re
from typing import Optional
from xml.sax.saxutils import escape

from .call_shapes import (
    HelperShape,
    collect_helpers,
    delegate_type,
    resolve_helper,
    unique_helpers,
)
from .config import CSharpConfig
from .type_mapper import TypeMapper
from .types import BindingDescriptor, MergedExport

CSHARP_KEYWORDS = {
    'abstract', 'as', 'base', 'bool', 'break', 'byte', 'case', 'catch',
    'char', 'checked', 'class', 'const', 'continue', 'decimal', 'default',
    'delegate', 'do', 'double', 'else', 'enum', 'event', 'explicit',
    'extern', 'false', 'finally', 'fixed', 'float', 'for', 'foreach',
    'goto', 'if', 'implicit', 'in', 'int', 'interface', 'internal', 'is',
    'lock', 'long', 'namespace', 'new', 'null', 'object', 'operator',
    'out', 'override', 'params', 'private', 'protected', 'public',
    'readonly', 'ref', 'return', 'sbyte', 'sealed', 'short', 'sizeof',
    'stackalloc', 'static', 'string', 'struct', 'switch', 'this', 'throw',
    'true', 'try', 'typeof', 'uint', 'ulong', 'unchecked', 'unsafe',
    'ushort', 'using', 'virtual', 'void', 'volatile', 'while',
}

INDENT = '    '


class CSharpGenerator:
    """Generates the C# registry of typed wrappers over module exports"""

    def __init__(self, descriptor: BindingDescriptor, options: Optional[CSharpConfig] = None):
        self.descriptor = descriptor
        self.options = options or CSharpConfig()

    def generate(self) -> str:
        """Generate the complete C# source file"""
        helpers = collect_helpers(self.descriptor.exports)
        parts = [
            self._auto_gen_header(),
            self._file_header(),
            self._initialize_method(helpers),
            self._fields(),
            self._helper_methods(helpers),
            self._public_methods(),
            '}\n',
        ]
        return '\n'.join(parts)

    def method_name(self, export_name: str) -> str:
        prefix = self.options.name_prefix
        name = export_name[len(prefix):] if prefix and export_name.startswith(prefix) else export_name
        return _identifier(name)

    def field_name(self, export_name: str) -> str:
        return f'_{camel_case(self.method_name(export_name))}'

    def _auto_gen_header(self) -> str:
        """Generate the auto-generated banner carrying the module version"""
        lines = [
            '//' + '-' * 78,
            '// <auto-generated>',
            '//     This code was generated by a tool.',
            f'//     {self.options.product_name} Version: {self.descriptor.version}',
            '//',
            '//     Changes to this file may cause incorrect behavior and will be lost if',
            '//     the code is regenerated.',
            '// </auto-generated>',
            '//' + '-' * 78,
            '',
        ]
        return '\n'.join(lines)

    def _file_header(self) -> str:
        """Generate usings, namespace, class opening and constructor"""
        opts = self.options
        lines = [
            '#nullable enable',
            '',
            'using System;',
        ]
        lines.extend(f'using {ns};' for ns in opts.usings)
        lines.extend([
            '',
            f'namespace {opts.namespace};',
            '',
            f'internal sealed class {opts.class_name}',
            '{',
            f'{INDENT}public const int NullPointer = 0;',
            f'{INDENT}private readonly {opts.instance_type} _instance;',
            '',
            f'{INDENT}internal {opts.class_name}({opts.instance_type} instance)',
            f'{INDENT}{{',
            f'{INDENT * 2}_instance = instance ?? throw new ArgumentNullException(nameof(instance));',
            f'{INDENT * 2}InitializeFunctions();',
            f'{INDENT}}}',
        ])
        return '\n'.join(lines) + '\n'

    def _initialize_method(self, helpers: dict) -> str:
        lines = [
            f'{INDENT}private void InitializeFunctions()',
            f'{INDENT}{{',
        ]
        for exp in self.descriptor.exports:
            helper = resolve_helper(helpers, exp)
            lines.append(f'{INDENT * 2}{self.field_name(exp.name)} = {self._helper_call(helper, exp)};')
        lines.append(f'{INDENT}}}')
        return '\n'.join(lines) + '\n'

    def _helper_call(self, helper: HelperShape, exp: MergedExport) -> str:
        param_types = self._wasm_param_types(exp)
        type_args = f"<{', '.join(param_types)}>" if param_types else ''
        return f'{helper.name}{type_args}("{exp.name}")'

    def _fields(self) -> str:
        lines = [f'{INDENT}#region Function Invokers', '']
        for exp in self.descriptor.exports:
            lines.append(f'{INDENT}private {self._field_type(exp)}? {self.field_name(exp.name)};')
        lines.extend(['', f'{INDENT}#endregion'])
        return '\n'.join(lines) + '\n'

    def _field_type(self, exp: MergedExport) -> str:
        return_type = TypeMapper.to_csharp(exp.wasm_signature.returns)
        return delegate_type(return_type, self._wasm_param_types(exp))

    def _helper_methods(self, helpers: dict) -> str:
        """Generate each distinct invoker helper once, in key order"""
        lines = [f'{INDENT}#region Helper Methods for Creating Invokers', '']
        for helper in unique_helpers(helpers):
            lines.extend(self._helper_method(helper))
        lines.append(f'{INDENT}#endregion')
        return '\n'.join(lines) + '\n'

    def _helper_method(self, helper: HelperShape) -> list[str]:
        generic = helper.generic_suffix
        return [
            f'{INDENT}private {helper.delegate_type}? {helper.name}{generic}(string functionName)',
            f'{INDENT}{{',
            f'{INDENT * 2}return _instance.{helper.getter}{generic}(functionName);',
            f'{INDENT}}}',
            '',
        ]

    def _public_methods(self) -> str:
        lines = [f'{INDENT}#region Public API', '']
        for exp in self.descriptor.exports:
            lines.extend(self._public_method(exp))
        lines.append(f'{INDENT}#endregion')
        return '\n'.join(lines)

    def _public_method(self, exp: MergedExport) -> list[str]:
        """Generate the documented public wrapper for one export"""
        params = self._method_params(exp)
        return_type = TypeMapper.return_type(exp.wasm_signature.returns, exp.c_return_type)
        is_void = return_type == TypeMapper.VOID_TYPE
        field = self.field_name(exp.name)
        args = ', '.join(name for _, name, _ in params)
        signature = ', '.join(f'{ctype} {name}' for ctype, name, _ in params)

        lines = [f'{INDENT}/// <summary>{escape(exp.summary)}</summary>']
        for _, name, doc in params:
            lines.append(f'{INDENT}/// <param name="{name.lstrip("@")}">{escape(doc)}</param>')
        if exp.return_doc and not is_void:
            lines.append(f'{INDENT}/// <returns>{escape(exp.return_doc)}</returns>')

        # Null check runs inside the dispatcher, never before it.
        body = INDENT * 3
        lines.extend([
            f'{INDENT}public {return_type} {self.method_name(exp.name)}({signature})',
            f'{INDENT}{{',
            f'{INDENT * 2}{"" if is_void else "return "}{self.options.dispatcher}(() =>',
            f'{INDENT * 2}{{',
            f'{body}if ({field} == null)',
            f'{body}{INDENT}throw new InvalidOperationException("{exp.name} not available");',
            f'{body}{"" if is_void else "return "}{field}({args});',
            f'{INDENT * 2}}});',
            f'{INDENT}}}',
            '',
        ])
        return lines

    def _wasm_param_types(self, exp: MergedExport) -> list[str]:
        return [TypeMapper.to_csharp(p) for p in exp.wasm_signature.params]

    def _method_params(self, exp: MergedExport) -> list[tuple[str, str, str]]:
        """(C# type, parameter name, doc) in native declaration order"""
        if exp.is_degraded:
            return [
                (ctype, f'arg{i}', '')
                for i, ctype in enumerate(self._wasm_param_types(exp))
            ]
        return [
            (
                TypeMapper.native_to_csharp(p.c_type, p.name),
                parameter_name(p.name),
                p.doc,
            )
            for p in exp.c_params
        ]


def camel_case(name: str) -> str:
    return name[:1].lower() + name[1:]


def parameter_name(name: str) -> str:
    result = camel_case(_identifier(name))
    if result in CSHARP_KEYWORDS:
        return f'@{result}'
    return result


def _identifier(name: str) -> str:
    result = re.sub(r'\W', '_', name)
    if result[:1].isdigit():
        result = f'_{result}'
    return result
