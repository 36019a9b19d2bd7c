"""Compiler frontend: parsing, syntax helpers and semantic binding."""

from .binder import CSharpCompilation, SemanticModel
from .parser import CSharpParser, SyntaxTree
from .protocol import Compilation, SemanticBinder, SymbolInfo
from .symbols import Symbol

__all__ = [
    "CSharpCompilation",
    "CSharpParser",
    "Compilation",
    "SemanticBinder",
    "SemanticModel",
    "Symbol",
    "SymbolInfo",
    "SyntaxTree",
]
