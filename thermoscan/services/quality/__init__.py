from .quality_gate import QualityGate

__all__ = ["QualityGate"]
