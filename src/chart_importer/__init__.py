"""Import Helm repository charts into the KubeSphere app store."""

__version__ = "0.1.0"
