"""archgraph: dependency graphs for TypeScript/JavaScript codebases."""

__version__ = "0.1.0"
