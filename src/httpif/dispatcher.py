"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Turns one HTTPRequest into one HTTPResponse by treating the method as an
operation on the file the URI names.

=============================================================================
METHOD → OPERATION
=============================================================================

    ┌────────┬───────────────────────────────┬────────────────────────────┐
    │ METHOD │ OPERATION                     │ STATUS                     │
    ├────────┼───────────────────────────────┼────────────────────────────┤
    │ GET    │ read file ("/" → /index.html) │ 200 / 403 dir / 404 / 500  │
    │ HEAD   │ GET, then drop the body       │ same as GET                │
    │ POST   │ no body: GET                  │ same as GET                │
    │        │ body + *.shar: run it         │ 200 text/plain / 500       │
    │        │ body + anything else: nothing │ 200, empty                 │
    │ PUT    │ create or overwrite file      │ 201 new / 200 existed      │
    │        │                               │ BadRequestError if no body │
    │ DELETE │ remove file                   │ 204 / 404                  │
    │ other  │ "Method not implemented."     │ 200, text/plain            │
    └────────┴───────────────────────────────┴────────────────────────────┘

=============================================================================
WHAT EVERY RESPONSE GETS
=============================================================================

After the handler runs, handle() always:

    1. copies the request's protocol version onto the response
    2. sets "Server" to the configured server name
    3. sets "Content-Length" when the response has a body
    4. writes an access log record (method, URI, status)

Errors the handlers cannot express as a status (PUT without a body, a
failed write, an executable that will not start) are raised as
DispatchError subclasses and left for the transport to answer.

=============================================================================
"""

import logging
import time
from typing import Callable, Dict, Optional

from .access_log import log_access
from .commands import CommandBridge, parse_arguments
from .config import ServerConfig
from .exceptions import (
    BadRequestError,
    DispatchError,
    ResourceIsDirectoryError,
    ResourceNotFoundError,
    StorageError,
)
from .http.mime_types import is_executable_type, resolve_content_type
from .http.request import HTTPMethod, HTTPRequest
from .http.response import HTTPResponse
from .http.status_codes import HTTPStatus
from .store import ResourceStore


logger = logging.getLogger(__name__)

NOT_IMPLEMENTED_TEXT = "Method not implemented."
INDEX_URI = "/index.html"


class RequestDispatcher:
    """
    Maps requests onto the resource store and the command bridge.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(web_root="/srv")
        dispatcher = RequestDispatcher(config)

        response = dispatcher.handle(HTTPRequest(method="GET", uri="/"))
        response.status            # 200
        response.body              # contents of /srv/index.html

    The store and bridge can be swapped out, e.g. for a bridge that only
    runs allow-listed programs:

        dispatcher = RequestDispatcher(config, bridge=RestrictedBridge())

    =========================================================================
    STATE
    =========================================================================

    The dispatcher keeps only what it was built with: configuration, store,
    bridge and the "not implemented" template. handle() never mutates any
    of it, so one instance serves every worker thread.

    =========================================================================
    """

    def __init__(
        self,
        config: ServerConfig,
        store: Optional[ResourceStore] = None,
        bridge: Optional[CommandBridge] = None,
    ):
        self.config = config
        self.store = store or ResourceStore(config.web_root)
        self.bridge = bridge or CommandBridge(timeout=config.command_timeout)

        # Handed out as a copy, so per-request header writes stay per-request
        self._not_implemented = HTTPResponse()
        self._not_implemented.set_content_type("text/plain")
        self._not_implemented.set_body(NOT_IMPLEMENTED_TEXT)

        self._handlers: Dict[HTTPMethod, Callable[[HTTPRequest], HTTPResponse]] = {
            HTTPMethod.GET: self._handle_get,
            HTTPMethod.POST: self._handle_post,
            HTTPMethod.PUT: self._handle_put,
            HTTPMethod.DELETE: self._handle_delete,
            HTTPMethod.HEAD: self._handle_head,
        }

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

        Args:
            request: The parsed request. Its uri may be rewritten in place
                     ("/" → "/index.html" for GET and friends).

        Returns:
            A fully populated response (never None).

        Raises:
            BadRequestError: The request is not valid for its method.
            ServerError: A filesystem or process failure the handler could
                         not map to a status code.
        """
        start_time = time.time()

        method = request.known_method
        try:
            if method is None:
                response = self._not_implemented.copy()
            else:
                response = self._handlers[method](request)
        except DispatchError as e:
            self._log(request, e.status_code, None, start_time)
            raise

        response.version = request.version
        response.set_header("Server", self.config.server_name)
        if response.body is not None:
            response.set_header("Content-Length", str(len(response.body)))

        self._log(request, response.status, response.body, start_time)
        return response

    # =========================================================================
    # PER-METHOD HANDLERS
    # =========================================================================

    def _handle_get(self, request: HTTPRequest) -> HTTPResponse:
        """
        Read the resource into the response body.

        Failures become status codes, with no body and no Content-Type:
        missing → 404, directory → 403, unreadable → 500.
        """
        if request.uri == "/":
            request.uri = INDEX_URI

        response = HTTPResponse()
        try:
            content = self.store.read(request.uri)
        except ResourceNotFoundError:
            response.status = HTTPStatus.NOT_FOUND
            return response
        except ResourceIsDirectoryError:
            response.status = HTTPStatus.FORBIDDEN
            return response
        except StorageError:
            response.status = HTTPStatus.INTERNAL_SERVER_ERROR
            return response

        content_type = resolve_content_type(request.uri)
        if content_type is not None:
            response.set_content_type(content_type)
        response.body = content
        return response

    def _handle_head(self, request: HTTPRequest) -> HTTPResponse:
        """GET without the body; Content-Length still reports its size."""
        response = self._handle_get(request)

        if response.body is not None:
            response.set_header("Content-Length", str(len(response.body)))
        response.body = None
        return response

    def _handle_post(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run an executable resource with the body's values as arguments.

        Without a body this is a GET. With a body, only resources resolving
        to the executable marker type are run; any other resource yields an
        empty 200 and the body is ignored.

        Raises:
            CommandError: The program could not be run.
        """
        if not request.has_body:
            return self._handle_get(request)

        path = self.store.resolve(request.uri)
        response = HTTPResponse()

        if not is_executable_type(resolve_content_type(path)):
            logger.debug(f"POST {request.uri}: not an executable resource, ignoring body")
            return response

        args = [str(path.absolute())] + parse_arguments(request.body)
        output = self.bridge.run(args)

        response.set_content_type("text/plain")
        response.set_body(output)
        return response

    def _handle_put(self, request: HTTPRequest) -> HTTPResponse:
        """
        Store the body at the URI: 201 if the file is new, 200 if it was
        overwritten.

        Raises:
            BadRequestError: The request carried no body. Nothing is
                             written in that case.
            StorageError: The write failed.
        """
        if not request.has_body:
            raise BadRequestError("Empty body")

        existed = self.store.exists(request.uri)
        self.store.write(request.uri, request.body)

        response = HTTPResponse()
        response.set_header("Content-Location", request.uri)
        response.status = HTTPStatus.OK if existed else HTTPStatus.CREATED
        return response

    def _handle_delete(self, request: HTTPRequest) -> HTTPResponse:
        """404 if nothing is there, otherwise delete (best effort) and 204."""
        response = HTTPResponse()

        if not self.store.exists(request.uri):
            response.status = HTTPStatus.NOT_FOUND
            return response

        self.store.delete(request.uri)
        response.status = HTTPStatus.NO_CONTENT
        return response

    def _log(self, request: HTTPRequest, status, body: Optional[bytes], start_time: float) -> None:
        log_access(
            method=request.method,
            uri=request.uri,
            status_code=status,
            content_length=None if body is None else len(body),
            duration_ms=(time.time() - start_time) * 1000,
            log_format=self.config.log_format,
        )
