"""
httpif - serve a directory over HTTP, one file operation per method.

    GET/HEAD  read a file        PUT     write a file
    DELETE    remove a file      POST    run a *.shar program
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .dispatcher import RequestDispatcher
from .server import HTTPServer

__all__ = ["HTTPServer", "RequestDispatcher", "ServerConfig", "__version__"]
