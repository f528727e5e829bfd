"""uptix - pin container images and GitHub sources referenced from Nix files."""

__version__ = "0.4.0"
