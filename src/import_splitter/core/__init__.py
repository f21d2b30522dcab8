"""
Core Package.

Contains the two-phase rewriting engine:
- Usage Collector (binding discovery and member access rewriting)
- Import Rewriter (per-member import synthesis)
- Shared matching and import-shape helpers
- Orchestration Engine
"""
