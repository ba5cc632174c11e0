from .directives import DirectiveSyntaxError, scan_directives
from .loader import GraphLoadResult, load_module_graph, resolve_specifier
from .models import Binding, Directive, DirectiveKind, ModuleGraph, SourceModule
from .stage import stage_graph

__all__ = [
    "Binding",
    "Directive",
    "DirectiveKind",
    "DirectiveSyntaxError",
    "GraphLoadResult",
    "load_module_graph",
    "ModuleGraph",
    "resolve_specifier",
    "scan_directives",
    "SourceModule",
    "stage_graph",
]
