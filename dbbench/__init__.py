"""
dbbench - cross-database benchmarking harness.

Drives read/write/query workloads against pluggable storage backends and
aggregates per-operation metrics into comparable run summaries.
"""

__version__ = "0.1.0"
