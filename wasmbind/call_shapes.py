"""Call-shape classification and deduplication of invoker helpers.

Every export is characterized by a signature key: its lowered return type,
its arity, and whether any parameter lowers to a 64-bit float or a 64-bit
integer. Exports that share a key share one generic helper that asks the
runtime instance for a typed delegate. Keys whose helpers render the same
name, arity and delegate type are served by one helper.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

from .errors import HelperCollisionError, HelperResolutionError
from .type_mapper import TypeMapper
from .types import FunctionType, MergedExport

logger = logging.getLogger(__name__)

DOUBLE_TYPE = 'double'
LONG_TYPE = 'long'
FLOAT_TYPE = 'float'

RETURN_SUFFIXES = {
    LONG_TYPE: 'Int64',
    DOUBLE_TYPE: 'Double',
    FLOAT_TYPE: 'Float',
}
DEFAULT_RETURN_SUFFIX = 'Int32'


class SignatureKey(NamedTuple):
    """Classification of an export's delegate shape"""
    return_type: str
    param_count: int
    has_double: bool
    has_long: bool

    @classmethod
    def of(cls, signature: FunctionType) -> 'SignatureKey':
        param_types = [TypeMapper.to_csharp(p) for p in signature.params]
        return cls(
            return_type=TypeMapper.to_csharp(signature.returns),
            param_count=len(param_types),
            has_double=DOUBLE_TYPE in param_types,
            has_long=LONG_TYPE in param_types,
        )

    @property
    def serialized(self) -> str:
        """Stable text form; helpers are ordered by this string"""
        return '|'.join([
            self.return_type,
            str(self.param_count),
            _flag(self.has_double),
            _flag(self.has_long),
        ])

    @property
    def is_action(self) -> bool:
        return self.return_type == TypeMapper.VOID_TYPE


def _flag(value: bool) -> str:
    return 'true' if value else 'false'


@dataclass(frozen=True)
class HelperShape:
    """One generated invoker helper"""
    key: SignatureKey
    name: str
    getter: str

    @property
    def type_params(self) -> list[str]:
        return [f'T{i + 1}' for i in range(self.key.param_count)]

    @property
    def generic_suffix(self) -> str:
        params = self.type_params
        return f"<{', '.join(params)}>" if params else ''

    @property
    def delegate_type(self) -> str:
        """Generic delegate type returned by the helper"""
        return delegate_type(self.key.return_type, self.type_params)


def delegate_type(return_type: str, param_types: list[str]) -> str:
    """Action/Func delegate type for the given C# types"""
    if return_type == TypeMapper.VOID_TYPE:
        if not param_types:
            return 'Action'
        return f"Action<{', '.join(param_types)}>"
    return f"Func<{', '.join([*param_types, return_type])}>"


def helper_stem(key: SignatureKey) -> str:
    """Name stem shared by the helper and the instance getter.

    Void shapes are actions, the rest are functions named by the return
    suffix. At most one wide-parameter suffix is added, WithLong first.
    """
    if key.is_action:
        stem = 'Action'
    else:
        suffix = RETURN_SUFFIXES.get(key.return_type, DEFAULT_RETURN_SUFFIX)
        stem = f'Func{suffix}'

    if key.has_long:
        stem += 'WithLong'
    elif key.has_double:
        stem += 'WithDouble'
    return stem


def build_helper(key: SignatureKey) -> HelperShape:
    stem = helper_stem(key)
    getter = stem.replace('Func', 'Function', 1) if stem.startswith('Func') else stem
    return HelperShape(key=key, name=f'TryCreate{stem}', getter=f'Get{getter}')


def collect_helpers(exports: list[MergedExport]) -> dict[SignatureKey, HelperShape]:
    """Map every export shape to its helper, sorted by serialized key.

    Keys that render the same helper name, arity and delegate type share
    the first such helper.

    Raises:
        HelperCollisionError: If two keys render the same name and arity
            but need different delegate types.
    """
    keys = {SignatureKey.of(exp.wasm_signature) for exp in exports}
    helpers = {}
    by_overload = {}
    for key in sorted(keys, key=lambda k: k.serialized):
        helper = build_helper(key)
        overload = (helper.name, key.param_count)
        shared = by_overload.get(overload)
        if shared is None:
            by_overload[overload] = helper
        elif shared.delegate_type == helper.delegate_type:
            logger.debug(
                "Shape %s shares helper %s%s with %s",
                key.serialized, helper.name, helper.generic_suffix, shared.key.serialized,
            )
            helper = shared
        else:
            raise HelperCollisionError(
                f"Helper {helper.name}{helper.generic_suffix} is needed as both "
                f"{shared.delegate_type} ({shared.key.serialized}) and "
                f"{helper.delegate_type} ({key.serialized})"
            )
        helpers[key] = helper
    return helpers


def unique_helpers(helpers: dict[SignatureKey, HelperShape]) -> list[HelperShape]:
    """Helpers to declare, each once, in key order"""
    return list(dict.fromkeys(helpers.values()))


def resolve_helper(
    helpers: dict[SignatureKey, HelperShape],
    exp: MergedExport,
) -> HelperShape:
    """Find the helper for an export.

    Raises:
        HelperResolutionError: If deduplication produced no helper for the
            export's key.
    """
    key = SignatureKey.of(exp.wasm_signature)
    try:
        return helpers[key]
    except KeyError:
        raise HelperResolutionError(
            f"No invoker helper for {exp.name} with shape {key.serialized}"
        ) from None
