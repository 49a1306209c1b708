"""
ciplan - CI build classification and test partitioning.

Decide the build type, plan the test runs, gate the release.
"""

from ciplan.aggregator import aggregate
from ciplan.classifier import classify
from ciplan.planner import plan

__version__ = "0.1.0"
__all__ = ["aggregate", "classify", "plan", "__version__"]
