# src/pipeline/analyzers/__init__.py - v1
"""Tier analyzers: heuristic, structural and model."""

from aiexplorer.pipeline.analyzers.heuristic import HeuristicAnalyzer
from aiexplorer.pipeline.analyzers.model_analyzer import ModelAnalyzer
from aiexplorer.pipeline.analyzers.structural import StructuralAnalyzer

__all__ = ["HeuristicAnalyzer", "ModelAnalyzer", "StructuralAnalyzer"]
