import socket

import h11

from fileserver.common.exchange import Response


class RecordingExchange:
	"""Stands in for HTTPExchange, keeps every complete message written to it"""
	def __init__(self, fail_after = None):
		self.response = Response()
		self.messages = []
		self.fail_after = fail_after

	def send_message(self, response):
		if self.fail_after is not None and len(self.messages) >= self.fail_after:
			raise BrokenPipeError(32, 'Broken pipe')
		self.messages.append((response.status, list(response.headers), response.body))


def raw_request(port, target, method = 'GET', payload = None, ssl_ctx = None):
	"""Sends one request and reads until the server closes the connection"""
	if payload is None:
		payload = ('%s %s HTTP/1.1\r\nHost: localhost\r\n\r\n' % (method, target)).encode('ascii')
	sock = socket.create_connection(('127.0.0.1', port), timeout = 10)
	if ssl_ctx is not None:
		sock = ssl_ctx.wrap_socket(sock, server_hostname='localhost')
	data = b''
	try:
		sock.sendall(payload)
		while True:
			chunk = sock.recv(65536)
			if not chunk:
				break
			data += chunk
	finally:
		sock.close()
	return data

def parse_messages(data, method = 'GET'):
	"""
	Splits the raw bytes into HTTP responses.
	Returns a list of (status, headers, body) tuples, header names lowercased.
	"""
	messages = []
	while data:
		conn = h11.Connection(h11.CLIENT)
		conn.send(h11.Request(method=method, target='/', headers=[('Host', 'localhost')]))
		conn.send(h11.EndOfMessage())
		conn.receive_data(data)
		status = None
		headers = {}
		body = b''
		while True:
			event = conn.next_event()
			if event is h11.NEED_DATA:
				raise AssertionError('Incomplete response: %r' % data)
			if type(event) is h11.Response:
				status = event.status_code
				headers = {k.decode().lower(): v.decode('utf-8') for k, v in event.headers}
			elif type(event) is h11.Data:
				body += event.data
			elif type(event) is h11.EndOfMessage:
				break
		messages.append((status, headers, body))
		data, _ = conn.trailing_data
	return messages


