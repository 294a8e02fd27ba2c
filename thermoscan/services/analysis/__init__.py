from .analysis_engine import AnalysisEngine

__all__ = ["AnalysisEngine"]
