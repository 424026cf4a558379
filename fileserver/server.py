import ssl
import socket
import threading

import h11

from fileserver import logger
from fileserver.router import RequestRouter
from fileserver.common.config import ServerConfig
from fileserver.common.exchange import HTTPExchange


class FileServer:
	"""
	Serves the configured directory over HTTP.

	Connections are handled strictly one after the other: a connection is
	accepted, exactly one request is read from it, answered and the
	connection is closed before the next one is accepted.
	"""
	def __init__(self, config:ServerConfig):
		self.config = config
		self.router = RequestRouter(config)
		self.sock:socket.socket = None
		self.port = config.port
		self.started_evt = threading.Event()
		self.stop_evt = threading.Event()

	def listen(self):
		s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		s.bind((self.config.host, self.config.port))
		s.listen(50)
		self.sock = s
		self.port = s.getsockname()[1]
		logger.info('[SERVER] HTTP fileserver started at %s:%s serving %s' % (self.config.host, self.port, self.config.root_path))
		self.started_evt.set()
		return self.port

	def serve_forever(self):
		if self.sock is None:
			self.listen()
		try:
			while not self.stop_evt.is_set():
				try:
					conn, addr = self.sock.accept()
				except OSError as e:
					if self.stop_evt.is_set():
						break
					logger.error('[SERVER] Accept failed: %s' % e)
					continue

				if self.stop_evt.is_set():
					conn.close()
					break
				self.handle_connection(conn, addr)
		finally:
			self.close()

	def stop(self):
		"""Ends serve_forever from another thread"""
		self.stop_evt.set()
		if self.sock is None:
			return
		# wake up the blocking accept()
		host = self.config.host
		if host in ['', '0.0.0.0']:
			host = '127.0.0.1'
		try:
			with socket.create_connection((host, self.port), timeout = 1):
				pass
		except OSError:
			pass

	def close(self):
		if self.sock is not None:
			try:
				self.sock.close()
			except OSError:
				pass
			self.sock = None

	def handle_connection(self, conn:socket.socket, addr):
		logger.debug('[SERVER] Client connected from %s:%s' % addr[:2])
		if self.config.ssl_ctx is not None:
			try:
				conn = self.config.ssl_ctx.wrap_socket(conn, server_side=True)
			except OSError as e:
				logger.error('[SERVER] TLS handshake with %s:%s failed: %s' % (addr[0], addr[1], e))
				conn.close()
				return

		exchange = HTTPExchange(conn, addr)
		try:
			self.handle_exchange(exchange)
		finally:
			exchange.close()

	def handle_exchange(self, exchange:HTTPExchange):
		try:
			request = exchange.read_request()
		except h11.RemoteProtocolError as e:
			logger.error('[SERVER] Malformed request from %s: %s' % (exchange.addr, e))
			return
		except OSError as e:
			logger.error('[SERVER] Error reading request from %s: %s' % (exchange.addr, e))
			return

		if request is None:
			logger.info('[SERVER] Client disconnected: %s' % (exchange.addr,))
			return

		try:
			response = self.router.route(exchange.target, exchange)
		except Exception:
			logger.exception('[SERVER] Error handling %s' % exchange.target)
			if exchange.response_started:
				return
			response = exchange.response
			response.status = 500
			response.headers = []
			response.set_body('Internal Server Error')
			response.complete = False

		if response.complete is True:
			return

		try:
			exchange.send_response(response)
		except ConnectionError as e:
			logger.error('[SERVER] Client disconnected: %s' % e)
		except OSError as e:
			logger.error('[SERVER] Error: %s' % e)
		except h11.LocalProtocolError as e:
			logger.error('[SERVER] Could not send response: %s' % e)
