"""Value codecs for the PostgreSQL and openGauss wire protocol: encoding, hstore, logging and GSS hooks."""

__version__ = "0.1.0"
__all__ = ["encode", "gss", "hstore", "logger"]