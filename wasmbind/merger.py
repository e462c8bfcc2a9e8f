"""Joins module exports with native header declarations"""

import logging
from typing import Optional

from .types import (
    BindingDescriptor,
    ExportedFunction,
    FunctionType,
    HeaderFunctionInfo,
    ImportedFunction,
    MergedExport,
    NativeParam,
    UNKNOWN_C_TYPE,
)

logger = logging.getLogger(__name__)


def merge_export(
    export: ExportedFunction,
    header_info: Optional[HeaderFunctionInfo],
) -> MergedExport:
    """Merge one export with its header declaration.

    The module-level signature is always copied from the export. Without a
    declaration the record is degraded: "unknown" return, no parameters and
    no documentation.
    """
    signature = FunctionType(
        params=list(export.signature.params),
        returns=export.signature.returns,
    )
    if header_info is None:
        return MergedExport(
            name=export.name,
            func_index=export.func_index,
            wasm_signature=signature,
            c_return_type=UNKNOWN_C_TYPE,
        )

    params = [
        NativeParam(
            name=name,
            c_type=c_type,
            doc=header_info.param_docs.get(name, ''),
        )
        for name, c_type in header_info.param_types.items()
    ]
    return MergedExport(
        name=export.name,
        func_index=export.func_index,
        wasm_signature=signature,
        c_return_type=header_info.c_return_type,
        c_params=params,
        summary=header_info.summary,
        return_doc=header_info.return_doc,
    )


def create_descriptor(
    version: str,
    types: dict[int, FunctionType],
    imports: list[ImportedFunction],
    exports: list[ExportedFunction],
    header_functions: dict[str, HeaderFunctionInfo],
) -> BindingDescriptor:
    """Build the binding descriptor; export order is preserved"""
    merged = []
    degraded = 0
    for export in exports:
        header_info = header_functions.get(export.name)
        if header_info is None:
            degraded += 1
            logger.warning("No header declaration for export %s", export.name)
        merged.append(merge_export(export, header_info))

    logger.info(
        "Merged %d exports (%d without header declarations)",
        len(merged), degraded,
    )
    return BindingDescriptor(
        version=version,
        types=dict(types),
        imports=list(imports),
        exports=merged,
    )
