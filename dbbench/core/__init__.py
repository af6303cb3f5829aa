"""
Core benchmarking engine: metrics collection and operation execution.
"""
