"""Parser for wasm-objdump style module introspection dumps.

Only four line shapes are meaningful; every other line is ignored:

    type[2] (i32, f64) -> i32                 function type table entry
    func[5] sig=2                             function -> type assignment
    func[0] sig=1 <env.log> <- env.log        imported function
    func[5] <add> -> "add"                    exported function

Each shape is scanned over the whole text, so entries are recovered in
order of first appearance. Repeated indices follow last-write-wins.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator

from .types import ExportedFunction, FunctionType, ImportedFunction, ValueType

logger = logging.getLogger(__name__)

RESERVED_EXPORTS = ('malloc', 'free')

TYPE_PATTERN = re.compile(r'type\[(\d+)\]\s+\(([^)]*)\)\s+->\s+(.+)')
SIGNATURE_PATTERN = re.compile(r'func\[(\d+)\]\s+sig=(\d+)')
IMPORT_PATTERN = re.compile(
    r'func\[(\d+)\]\s+sig=(\d+)\s+<([^>]+)>\s+<-\s+([^\s]+)\.([^\s]+)'
)
EXPORT_PATTERN = re.compile(r'func\[(\d+)\]\s+(?:<[^>]+>\s+)?->\s+"([^"]+)"')


@dataclass
class TypeEntry:
    """A recognized type-table line"""
    index: int
    signature: FunctionType


@dataclass
class SignatureEntry:
    """A recognized function signature assignment"""
    func_index: int
    type_index: int


@dataclass
class ImportEntry:
    """A recognized import line, before type resolution"""
    func_index: int
    type_index: int
    name: str
    module: str
    field_name: str


@dataclass
class ExportEntry:
    """A recognized export line, before type resolution"""
    func_index: int
    name: str


@dataclass
class ParsedDump:
    """Complete parsed introspection dump"""
    types: dict[int, FunctionType] = field(default_factory=dict)
    signatures: dict[int, int] = field(default_factory=dict)
    imports: list[ImportedFunction] = field(default_factory=list)
    exports: list[ExportedFunction] = field(default_factory=list)


def lex_type_lines(content: str) -> Iterator[TypeEntry]:
    """Yield every type-table line; unrecognized kinds become UNKNOWN"""
    for match in TYPE_PATTERN.finditer(content):
        yield _type_entry(match)


def lex_signature_lines(content: str) -> Iterator[SignatureEntry]:
    for match in SIGNATURE_PATTERN.finditer(content):
        yield SignatureEntry(
            func_index=int(match.group(1)),
            type_index=int(match.group(2)),
        )


def lex_import_lines(content: str) -> Iterator[ImportEntry]:
    for match in IMPORT_PATTERN.finditer(content):
        yield ImportEntry(
            func_index=int(match.group(1)),
            type_index=int(match.group(2)),
            name=match.group(3),
            module=match.group(4),
            field_name=match.group(5),
        )


def lex_export_lines(content: str) -> Iterator[ExportEntry]:
    for match in EXPORT_PATTERN.finditer(content):
        yield ExportEntry(func_index=int(match.group(1)), name=match.group(2))


def _type_entry(match: re.Match) -> TypeEntry:
    params_str = match.group(2).strip()
    params = []
    if params_str:
        for raw in params_str.split(','):
            kind = ValueType.from_dump(raw)
            # nil only means "no return value"
            params.append(ValueType.UNKNOWN if kind is ValueType.NIL else kind)

    returns = ValueType.from_dump(match.group(3))
    if ValueType.UNKNOWN in (*params, returns):
        logger.debug("Type line with unrecognized kind: %s", match.group(0).strip())
    return TypeEntry(
        index=int(match.group(1)),
        signature=FunctionType(params=params, returns=returns),
    )


class DumpParser:
    """Recovers the type table, imports and exports from dump text"""

    def __init__(self, content: str, reserved_exports=RESERVED_EXPORTS):
        self.content = content
        self.reserved_exports = frozenset(reserved_exports)

    def parse(self) -> ParsedDump:
        result = ParsedDump()
        result.types = self.parse_types()
        result.signatures = self.parse_signatures()
        result.imports = self.parse_imports(result.types)
        result.exports = self.parse_exports(result.types, result.signatures)
        return result

    def parse_types(self) -> dict[int, FunctionType]:
        """Build the type index -> signature table (last write wins)"""
        types = {}
        for entry in lex_type_lines(self.content):
            types[entry.index] = entry.signature
        return types

    def parse_signatures(self) -> dict[int, int]:
        """Build the function index -> type index table (last write wins)"""
        signatures = {}
        for entry in lex_signature_lines(self.content):
            signatures[entry.func_index] = entry.type_index
        return signatures

    def parse_imports(self, types: dict[int, FunctionType]) -> list[ImportedFunction]:
        imports = []
        for entry in lex_import_lines(self.content):
            signature = types.get(entry.type_index)
            if signature is None:
                logger.debug(
                    "Dropping import %s: unresolved type %d",
                    entry.name, entry.type_index,
                )
                continue
            imports.append(ImportedFunction(
                name=entry.name,
                module=entry.module,
                func_index=entry.func_index,
                signature=signature,
            ))
        return imports

    def parse_exports(
        self,
        types: dict[int, FunctionType],
        signatures: dict[int, int],
    ) -> list[ExportedFunction]:
        exports = []
        for entry in lex_export_lines(self.content):
            if entry.name in self.reserved_exports:
                continue

            type_index = signatures.get(entry.func_index)
            if type_index is None:
                logger.debug(
                    "Dropping export %s: func[%d] has no signature",
                    entry.name, entry.func_index,
                )
                continue
            signature = types.get(type_index)
            if signature is None:
                logger.debug(
                    "Dropping export %s: unresolved type %d",
                    entry.name, type_index,
                )
                continue

            exports.append(ExportedFunction(
                name=entry.name,
                func_index=entry.func_index,
                signature=signature,
            ))
        return exports
