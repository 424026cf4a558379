import os

from fileserver import logger
from fileserver.common.config import CHUNK_SIZE, Framing
from fileserver.common.exchange import HTTPExchange, Response
from fileserver.utils.trace import traced


def content_disposition(filename:str) -> str:
	name = os.path.basename(filename).replace('\\', '\\\\').replace('"', '\\"')
	return 'attachment; filename="%s"' % name

def _set_failed(response:Response, e:Exception):
	response.status = 500
	response.headers = []
	response.set_body('Error reading or sending file: %s' % e)

def _transmit_messages(file_handle, response:Response, exchange:HTTPExchange, chunk_size:int):
	sent = 0
	try:
		while True:
			chunk = file_handle.read(chunk_size)
			if not chunk:
				break
			response.set_body(chunk)
			exchange.send_message(response)
			sent += 1
	except OSError as e:
		logger.error('[TRANSMIT] Error reading or sending file: %s (after %s messages)' % (e, sent))
		# what was already written stays written, the error goes out as the next message
		_set_failed(response, e)
		return sent

	if sent > 0:
		response.complete = True
	else:
		# empty file, the loop sends the bare head
		response.set_body(b'')
	return sent

def _transmit_stream(file_handle, response:Response, exchange:HTTPExchange, chunk_size:int):
	sent = 0
	try:
		exchange.start_stream(response)
		while True:
			chunk = file_handle.read(chunk_size)
			if not chunk:
				break
			exchange.send_data(chunk)
			sent += 1
		exchange.end_stream()
	except OSError as e:
		logger.error('[TRANSMIT] Error reading or sending file: %s (after %s chunks)' % (e, sent))
		_set_failed(response, e)
		if exchange.response_started:
			# the head is out, there is no way to report anything on this connection
			response.complete = True
		return sent

	response.complete = True
	return sent

@traced
def transmit(file_handle, filename:str, response:Response, exchange:HTTPExchange, framing:Framing = Framing.MESSAGE, chunk_size:int = CHUNK_SIZE) -> int:
	"""
	Sends an opened file to the client as a download.

	With Framing.MESSAGE every chunk read from the file is written as a
	complete HTTP message of its own (status line, headers, chunk). With
	Framing.STREAM a single response is sent and h11 frames the chunks.

	When reading or writing fails, the response is turned into a 500 error
	which the caller sends if it is not marked complete.

	Args:
		file_handle: binary file object, opened by the caller
		filename (str): path or name of the file, only the base name is used
		response (Response): response to populate
		exchange (HTTPExchange): the connection to write to
		framing (Framing): wire framing of the file contents
		chunk_size (int): read size

	Returns:
		int: number of chunks written
	"""
	response.status = 200
	response.set_header('Content-Type', 'application/octet-stream')
	response.set_header('Content-Disposition', content_disposition(filename))
	logger.debug('[TRANSMIT] Open buffer (%s) for %s' % (chunk_size, filename))

	if framing == Framing.STREAM:
		return _transmit_stream(file_handle, response, exchange, chunk_size)
	return _transmit_messages(file_handle, response, exchange, chunk_size)
