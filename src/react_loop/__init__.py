"""ReAct agent loop: model-driven tool orchestration over a text protocol."""

__version__ = "0.2.0"
