"""Exception taxonomy for the binding compiler"""


class BindgenError(Exception):
    """Base class for failures reported to the user"""


class ToolError(BindgenError):
    """An external tool could not be run or exited with an error"""


class DescriptorError(BindgenError):
    """A binding descriptor document could not be decoded"""


class UnsupportedTargetError(BindgenError):
    """The requested generation target is not known"""


class ConfigValidationError(BindgenError):
    """The configuration file is unreadable or malformed"""


class HelperResolutionError(RuntimeError):
    """No invocation helper exists for a computed signature key.

    Raised only when the deduplication pass and the initializer pass
    disagree, which is a bug rather than bad input.
    """


class HelperCollisionError(BindgenError):
    """Two call shapes need different helpers under one generated name"""


class InputError(BindgenError):
    """An input file is not readable text"""
