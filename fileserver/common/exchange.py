import socket
import datetime
import email.utils
import http
from itertools import count

import h11

from fileserver import logger
from fileserver._version import __version__


class Response:
	"""The response the router populates for a single request"""
	def __init__(self, status:int = 200, body:bytes = b''):
		self.status = status
		self.headers = []
		self.body = body
		# set once every byte of the answer has been written by the transmitter
		self.complete = False

	def set_header(self, name:str, value:str):
		self.headers = [(k, v) for k, v in self.headers if k.lower() != name.lower()]
		self.headers.append((name, value))

	def get_header(self, name:str):
		for k, v in self.headers:
			if k.lower() == name.lower():
				return v
		return None

	def set_body(self, body):
		if isinstance(body, str):
			body = body.encode('utf-8')
		self.body = body

	@property
	def reason(self):
		try:
			return http.HTTPStatus(self.status).phrase
		except ValueError:
			return ''

	def __repr__(self):
		return '<Response %s %s %s bytes>' % (self.status, self.headers, len(self.body))


class HTTPExchange:
	"""
	One accepted connection: the h11 state machine, the request read from it
	and the response the core fills in. The socket itself is owned by the
	connection loop.
	"""
	_next_id = count()

	def __init__(self, sock:socket.socket, addr = None):
		self.MAX_RECV = 2**16
		self.sock = sock
		self.addr = addr
		self.client_id = next(HTTPExchange._next_id)
		self.conn = h11.Connection(h11.SERVER)
		self.request:h11.Request = None
		self.response = Response()
		self.ident = " ".join(
			['fileserver/%s' % __version__, h11.PRODUCT_ID]
		).encode("ascii")

	@property
	def target(self) -> str:
		if self.request is None:
			return None
		return self.request.target.decode('ascii')

	@property
	def method(self) -> str:
		if self.request is None:
			return None
		return self.request.method.decode('ascii')

	@property
	def response_started(self) -> bool:
		return self.conn.our_state is not h11.SEND_RESPONSE

	@staticmethod
	def format_date_time(dt=None):
		"""Generate a RFC 7231 / RFC 9110 IMF-fixdate string"""
		if dt is None:
			dt = datetime.datetime.now(datetime.timezone.utc)
		return email.utils.format_datetime(dt, usegmt=True)

	def basic_headers(self):
		return [
			("Date", HTTPExchange.format_date_time().encode("ascii")),
			("Server", self.ident),
			("Connection", b"close"),
		]

	def get_headers(self, response:Response, content_length:bool = True):
		headers = self.basic_headers()
		for name, value in response.headers:
			headers.append((name, value.encode('utf-8')))
		if content_length is True:
			headers.append(("Content-Length", str(len(response.body)).encode("ascii")))
		return headers

	def _read_from_peer(self):
		data = self.sock.recv(self.MAX_RECV)
		logger.debug('[EXCHANGE %s] Received %s bytes' % (self.client_id, len(data)))
		self.conn.receive_data(data)

	def next_event(self):
		while True:
			event = self.conn.next_event()
			if event is h11.NEED_DATA:
				self._read_from_peer()
				continue
			return event

	def read_request(self) -> h11.Request:
		"""
		Reads exactly one request head from the peer.

		Returns:
			h11.Request or None if the peer closed the connection before sending anything

		Raises:
			h11.RemoteProtocolError: the peer sent something that is not HTTP/1.x
		"""
		event = self.next_event()
		if type(event) is h11.Request:
			self.request = event
			return event
		logger.debug('[EXCHANGE %s] No request, got %s' % (self.client_id, event))
		return None

	def send(self, event):
		assert type(event) is not h11.ConnectionClosed
		data = self.conn.send(event)
		try:
			self.sock.sendall(data)
		except BaseException:
			self.conn.send_failed()
			raise

	def send_response(self, response:Response):
		"""Sends a full response (head, body, end) through h11"""
		self.send(h11.Response(status_code=response.status, headers=self.get_headers(response)))
		if len(response.body) > 0 and self.method != 'HEAD':
			self.send(h11.Data(data=response.body))
		self.send(h11.EndOfMessage())

	def start_stream(self, response:Response):
		"""Sends the response head without a length, h11 picks chunked encoding for HTTP/1.1 peers"""
		self.send(h11.Response(status_code=response.status, headers=self.get_headers(response, content_length=False)))

	def send_data(self, data:bytes):
		if self.method == 'HEAD':
			return
		self.send(h11.Data(data=data))

	def end_stream(self):
		self.send(h11.EndOfMessage())

	def serialize_message(self, response:Response) -> bytes:
		lines = [('HTTP/1.1 %s %s' % (response.status, response.reason)).rstrip()]
		for name, value in self.get_headers(response):
			if isinstance(value, bytes):
				value = value.decode('utf-8')
			lines.append('%s: %s' % (name, value))
		lines.append('')
		lines.append('')
		head = '\r\n'.join(lines).encode('utf-8')
		if self.method == 'HEAD':
			return head
		return head + response.body

	def send_message(self, response:Response):
		"""
		Writes the response as a complete, self-contained HTTP message.
		This bypasses the h11 state machine, which allows only one response
		per request.
		"""
		self.sock.sendall(self.serialize_message(response))

	def close(self):
		try:
			self.sock.close()
		except OSError as e:
			logger.debug('[EXCHANGE %s] Error closing socket: %s' % (self.client_id, e))

	def __str__(self):
		return '[%s] %s %s' % (self.client_id, self.addr, self.target)
