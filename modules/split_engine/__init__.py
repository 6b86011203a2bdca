"""
Split Engine Module
===================

Responsibility:
- Contiguous k-fold views over a Dataset's training partition for cross-validation.
"""

from .split_engine import SplitEngine

__all__ = ['SplitEngine']
