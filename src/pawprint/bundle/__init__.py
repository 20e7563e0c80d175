"""Build layer — template compilation and the esbuild lifecycle.

Stages ``src/`` with compiled templates, then runs esbuild once
(production) or keeps it watching (development).
"""

from pawprint.bundle.bridge import CompilerBridge, LoadResult
from pawprint.bundle.bundler import BuildOptions, EsbuildContext, find_esbuild
from pawprint.bundle.compiler import CompiledTemplate, NodeCompiler, TemplateCompiler
from pawprint.bundle.orchestrator import BuildOrchestrator

__all__ = [
    "BuildOptions",
    "BuildOrchestrator",
    "CompiledTemplate",
    "CompilerBridge",
    "EsbuildContext",
    "LoadResult",
    "NodeCompiler",
    "TemplateCompiler",
    "find_esbuild",
]
