"""Native header parser for annotated export declarations.

A declaration is recognized when it sits on one line of the form

    //! Summary line
    //! @param ctx Context to use
    //! @return Result value
    HAKO_EXPORT("HAKO_Foo") extern int HAKO_Foo(JSContext* ctx);

The structured comment block directly above the declaration supplies the
documentation. Both the export marker and the comment marker are
configurable.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .types import HeaderFunctionInfo

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_MACRO = 'HAKO_EXPORT'
DEFAULT_DOC_MARKER = '//!'

PARAM_PATTERN = re.compile(r'((?:const\s+)?[\w]+\**)\s+(\w+)')
PARAM_DOC_PATTERN = re.compile(r'@param\s+(\w+)\s+(.+)')
PARAM_TAG = '@param '
RETURN_TAG = '@return '


@dataclass
class DocBlock:
    """Documentation recovered from a structured comment block"""
    summary: str = ''
    param_docs: dict[str, str] = field(default_factory=dict)
    return_doc: str = ''


class HeaderParser:
    """Parses annotated export declarations out of a native header"""

    def __init__(
        self,
        content: str,
        export_macro: str = DEFAULT_EXPORT_MACRO,
        doc_marker: str = DEFAULT_DOC_MARKER,
    ):
        self.lines = content.split('\n')
        self.export_macro = export_macro
        self.doc_marker = doc_marker
        macro = re.escape(export_macro)
        self._marker_pattern = re.compile(rf'{macro}\("([^"]+)"\)')
        self._decl_pattern = re.compile(
            rf'{macro}\("[^"]+"\)\s+extern\s+([\w\s*]+?)\s+(\w+)\s*\(([^)]*)\);'
        )

    def parse(self) -> dict[str, HeaderFunctionInfo]:
        """Map each exported name to its native declaration info"""
        functions = {}
        for index, line in enumerate(self.lines):
            if f'{self.export_macro}(' not in line:
                continue
            info = self.parse_declaration(index)
            if info is None:
                logger.debug("Skipping malformed declaration at line %d", index + 1)
                continue
            functions[info.name] = info
        return functions

    def parse_declaration(self, index: int) -> Optional[HeaderFunctionInfo]:
        """Parse the declaration on the given line, or None if it does not match"""
        line = self.lines[index]

        marker = self._marker_pattern.search(line)
        if not marker:
            return None
        decl = self._decl_pattern.search(line)
        if not decl:
            return None

        docs = self.parse_docs(self.doc_lines(index))
        return HeaderFunctionInfo(
            name=marker.group(1),
            c_return_type=decl.group(1).strip(),
            param_types=self.parse_params(decl.group(3)),
            summary=docs.summary,
            param_docs=docs.param_docs,
            return_doc=docs.return_doc,
        )

    def doc_lines(self, index: int) -> list[str]:
        """Collect the contiguous comment block above a declaration line"""
        lines = []
        for i in range(index - 1, -1, -1):
            line = self.lines[i]
            if not line.strip() or self.doc_marker not in line:
                break
            lines.append(line)
        lines.reverse()
        return lines

    def parse_docs(self, doc_lines: list[str]) -> DocBlock:
        # Summary is the first plain line; @return is the last one seen.
        docs = DocBlock()
        for line in doc_lines:
            comment = line[line.index(self.doc_marker) + len(self.doc_marker):].strip()

            if comment.startswith(PARAM_TAG):
                if m := PARAM_DOC_PATTERN.match(comment):
                    docs.param_docs[m.group(1)] = m.group(2)
            elif comment.startswith(RETURN_TAG):
                docs.return_doc = comment[len(RETURN_TAG):].strip()
            elif comment and not comment.startswith('@') and not docs.summary:
                docs.summary = comment
        return docs

    @staticmethod
    def parse_params(params_str: str) -> dict[str, str]:
        """Map parameter name to type spelling in declaration order"""
        params = {}
        if not params_str.strip() or params_str.strip() == 'void':
            return params
        for m in PARAM_PATTERN.finditer(params_str):
            params[m.group(2)] = m.group(1).strip()
        return params
