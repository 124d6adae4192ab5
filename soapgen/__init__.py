"""SOAP generator — scaffold LoopBack models from a WSDL."""

__version__ = "0.1.0"
