"""Analyzers that turn source text into findings."""

from architask.analysis.base import Analyzer, AnalyzerPipeline
from architask.analysis.bindings import BindingAnalyzer
from architask.analysis.complexity import ComplexityAnalyzer, ComplexityThresholds
from architask.analysis.dead_code import DeadCodeAnalyzer
from architask.analysis.naming import NamingAnalyzer, NamingConfig
from architask.analysis.scanner import ProjectScanner, ScanReport
from architask.analysis.security import SecurityAnalyzer, SecurityConfig
from architask.analysis.style import StyleAnalyzer, StyleConfig

__all__ = [
    "Analyzer",
    "AnalyzerPipeline",
    "BindingAnalyzer",
    "ComplexityAnalyzer",
    "ComplexityThresholds",
    "DeadCodeAnalyzer",
    "NamingAnalyzer",
    "NamingConfig",
    "ProjectScanner",
    "ScanReport",
    "SecurityAnalyzer",
    "SecurityConfig",
    "StyleAnalyzer",
    "StyleConfig",
]
