"""Mindgraph: graph, layout and viewport engine for conversation mindmaps."""

__version__ = "0.1.0"
