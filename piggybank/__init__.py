"""
Piggy Bank - Source Package

A small personal finance tracker for kids: record money in and money out,
save towards goals, and see where the money went.

DESIGN PRINCIPLES:
1. The balance is always derived from transactions, never stored
2. Fail early, fail visibly
3. No silent corrections
4. Goal progress is only paid from money the user actually has
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Piggy Bank Team"
