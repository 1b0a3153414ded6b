"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the transport (socket server, thread pool, connection) to the
RequestDispatcher.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts, wraps the socket in a Connection

    2. QUEUE FOR PROCESSING
       └── ThreadPool.submit(); queue full → 503 and close

    3. READ + PARSE (worker thread)
       └── Connection.read_request() → RequestParser.parse()
           timeout → 408, too large → 413, malformed → 400/505

    4. DISPATCH
       └── handle_request(): RequestDispatcher.handle()
           DispatchError → plain-text error with its status
           anything else → 500

    5. SEND + CLOSE
       └── One request per connection, always "Connection: close"

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import Connection, RequestTooLargeError, SocketServer, ThreadPool
from .dispatcher import RequestDispatcher
from .exceptions import DispatchError
from .http import (
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    error_response,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Serves a directory over HTTP.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(web_root="./site", port=3000))
        server.run()            # Blocks until Ctrl+C / SIGTERM

    Without the network, requests go straight through handle_request():

        response = server.handle_request(HTTPRequest(method="GET", uri="/"))

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        dispatcher: Optional[RequestDispatcher] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self.dispatcher = dispatcher or RequestDispatcher(self.config)

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            workers=self.config.workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

    @property
    def address(self):
        """(host, port) the server is bound to."""
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the root logger from config. Pass False
                           when the caller already configured logging.
        """
        if setup_logging:
            self._setup_logging()

        self._thread_pool.start()
        logger.info(
            f"Serving {self.config.web_root} on {self.config.host}:{self.config.port} "
            f"with {self.config.workers} workers"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. run() returns once it has."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("httpif").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._socket_server.shutdown()
        logger.info(f"Thread pool stats: {self._thread_pool.stats}")
        self._thread_pool.shutdown(wait=True)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a parsed request and turn failures into responses.

        Never raises: a DispatchError becomes a plain-text response with
        its status, any other exception a 500.
        """
        try:
            return self.dispatcher.handle(request)
        except DispatchError as e:
            level = logging.WARNING if e.status_code.is_server_error else logging.INFO
            logger.log(level, f"{request.method} {request.uri} failed: {int(e.status_code)} {e}")
            response = error_response(e.status_code, str(e) or None, self.config.server_name)
        except Exception as e:
            logger.exception(f"Unhandled error for {request.method} {request.uri}: {e}")
            response = error_response(
                HTTPStatus.INTERNAL_SERVER_ERROR, None, self.config.server_name
            )

        response.version = request.version
        return response

    def _handle_connection(self, conn: Connection):
        """Called by the accept loop; hands the connection to a worker."""
        if not self._thread_pool.submit(self._process_connection, conn):
            logger.warning(
                f"[{conn.id}] Thread pool full ({self._thread_pool.busy_workers} busy, "
                f"{self._thread_pool.queued} queued), rejecting connection"
            )
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        """Read, parse, dispatch and answer one request (worker thread)."""
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError:
                self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                return
            except RequestTooLargeError as e:
                self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed before sending a request")
                return

            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.info(f"[{conn.id}] Malformed request from {conn.client_ip}: {e}")
                self._send_error(conn, e.status_code, str(e))
                return

            response = self.handle_request(request)
            conn.send_response(response.to_bytes())

    def _send_error(self, conn: Connection, status: int, message: str):
        """Error for failures before dispatch (overload, timeouts, parse errors)."""
        response = error_response(status, message, self.config.server_name)
        conn.send_response(response.to_bytes())
