"""sandbelt: run coding agents in disposable container sandboxes."""

__version__ = "0.1.0"
