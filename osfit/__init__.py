"""OSFIT backend: translation pipeline, credential vault and answer streaming."""

__version__ = "0.1.0"
