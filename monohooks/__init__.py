"""Git hook dispatch and Nx workspace repair for polyglot monorepos."""

__version__ = "0.1.0"
