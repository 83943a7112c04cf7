"""
Domain Ports - Interfaces that infrastructure adapters implement.
"""

from contextbudget.domain.ports.summarizer_port import SummarizerPort

__all__ = ["SummarizerPort"]
