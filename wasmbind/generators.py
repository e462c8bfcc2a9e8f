"""Registry of generation targets"""

from .config import BindgenConfig
from .csharp_generator import CSharpGenerator
from .errors import UnsupportedTargetError
from .types import BindingDescriptor

GENERATORS = {
    'csharp': CSharpGenerator,
}


def supported_languages() -> list[str]:
    return sorted(GENERATORS)


def get_generator(language: str, descriptor: BindingDescriptor, config: BindgenConfig):
    """Create the generator for a target language.

    Raises:
        UnsupportedTargetError: If the language has no generator.
    """
    if language not in GENERATORS:
        raise UnsupportedTargetError(
            f"unsupported language '{language}' "
            f"(supported: {', '.join(supported_languages())})"
        )
    return GENERATORS[language](descriptor, getattr(config, language))


def generate(language: str, descriptor: BindingDescriptor, config: BindgenConfig) -> str:
    """Generate source for the given target language"""
    return get_generator(language, descriptor, config).generate()
