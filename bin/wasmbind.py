#!/usr/bin/env python3
"""
WebAssembly Binding Compiler

Parses a module's introspection dump and annotated header into a JSON
binding descriptor, and generates typed host bindings from it.

Usage:
    python wasmbind.py parse hako.wasm hako.h hako-bindings.json
    python wasmbind.py generate csharp hako-bindings.json HakoRegistry.generated.cs
"""

import sys
from pathlib import Path

# Add parent directory to path so wasmbind package can be found
sys.path.insert(0, str(Path(__file__).parent.parent))

from wasmbind.cli import main


if __name__ == "__main__":
    sys.exit(main())
