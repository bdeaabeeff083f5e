"""slb: OpenSSL shared-library builder and release pipeline."""

__version__ = "0.1.0"
