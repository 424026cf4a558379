import io
import os

from fileserver.transmit import transmit, content_disposition
from fileserver.common.config import CHUNK_SIZE
from fileserver.common.exchange import Response

from fileserver.test.utils import RecordingExchange


class FailingReader(io.BytesIO):
	def __init__(self, data, fail_on):
		super().__init__(data)
		self.reads = 0
		self.fail_on = fail_on

	def read(self, size = -1):
		self.reads += 1
		if self.reads == self.fail_on:
			raise OSError(5, 'Input/output error')
		return super().read(size)


def test_chunks_are_separate_messages():
	data = os.urandom(2 * CHUNK_SIZE + 100)
	exchange = RecordingExchange()
	response = exchange.response
	sent = transmit(io.BytesIO(data), '/srv/files/blob.bin', response, exchange)

	assert sent == 3
	assert [len(body) for _, _, body in exchange.messages] == [CHUNK_SIZE, CHUNK_SIZE, 100]
	assert b''.join(body for _, _, body in exchange.messages) == data
	for status, headers, _ in exchange.messages:
		assert status == 200
		assert ('Content-Type', 'application/octet-stream') in headers
		assert ('Content-Disposition', 'attachment; filename="blob.bin"') in headers
	assert response.complete is True

def test_exact_chunk_multiple():
	data = b'x' * CHUNK_SIZE
	exchange = RecordingExchange()
	transmit(io.BytesIO(data), 'x.bin', exchange.response, exchange)
	assert len(exchange.messages) == 1
	assert exchange.messages[0][2] == data

def test_small_chunk_size():
	exchange = RecordingExchange()
	transmit(io.BytesIO(b'0123456789'), 'a.txt', exchange.response, exchange, chunk_size = 4)
	assert [body for _, _, body in exchange.messages] == [b'0123', b'4567', b'89']

def test_empty_file_leaves_response_to_caller():
	exchange = RecordingExchange()
	response = exchange.response
	sent = transmit(io.BytesIO(b''), 'empty.txt', response, exchange)
	assert sent == 0
	assert exchange.messages == []
	assert response.complete is False
	assert response.status == 200
	assert response.body == b''
	assert response.get_header('Content-Disposition') == 'attachment; filename="empty.txt"'

def test_write_failure_becomes_trailing_error():
	data = b'y' * (3 * CHUNK_SIZE)
	exchange = RecordingExchange(fail_after = 1)
	response = exchange.response
	sent = transmit(io.BytesIO(data), 'y.bin', response, exchange)

	assert sent == 1
	assert len(exchange.messages) == 1
	assert exchange.messages[0][2] == data[:CHUNK_SIZE]
	assert response.status == 500
	assert response.body.startswith(b'Error reading or sending file: ')
	assert response.get_header('Content-Disposition') is None
	assert response.complete is False

def test_read_failure_becomes_trailing_error():
	data = b'z' * (3 * CHUNK_SIZE)
	exchange = RecordingExchange()
	response = exchange.response
	transmit(FailingReader(data, fail_on = 2), 'z.bin', response, exchange)

	assert len(exchange.messages) == 1
	assert response.status == 500
	assert b'Input/output error' in response.body
	assert response.complete is False

def test_content_disposition():
	assert content_disposition('/a/b/report.pdf') == 'attachment; filename="report.pdf"'
	assert content_disposition('say "hi".txt') == 'attachment; filename="say \\"hi\\".txt"'

def test_response_headers_replace():
	response = Response()
	response.set_header('Content-Type', 'text/plain')
	response.set_header('content-type', 'text/html')
	assert response.headers == [('content-type', 'text/html')]
	assert response.get_header('CONTENT-TYPE') == 'text/html'
