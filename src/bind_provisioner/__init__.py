"""
BIND Provisioner

Installs and configures a BIND primary/secondary name-server pair.
"""

__version__ = "0.1.0"
