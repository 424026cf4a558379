import os

from fileserver import logger
from fileserver import listing
from fileserver.transmit import transmit
from fileserver.common.config import ServerConfig
from fileserver.common.exchange import HTTPExchange, Response
from fileserver.common.exceptions import PathError
from fileserver.common.pathresolver import resolve
from fileserver.utils.trace import traced


class RequestRouter:
	def __init__(self, config:ServerConfig):
		self.config = config
		self.root_path = config.root_path

	@traced
	def route(self, target:str, exchange:HTTPExchange) -> Response:
		"""
		Decides what to answer for a request target and populates the exchange's response.
		File downloads are written to the exchange directly.
		"""
		response = exchange.response
		logger.info('[ROUTER] Handle request for target: %s' % target)

		if target is None or target == '' or target == '/':
			return self._serve_listing(self.root_path, response)

		try:
			file_path = resolve(self.root_path, target)
		except PathError as e:
			logger.warning('[ROUTER] Rejected target %r: %s' % (target, e.message))
			return self._serve_error(response, 403, 'Forbidden')

		# os.path predicates report False for names the filesystem rejects
		if os.path.isdir(file_path):
			logger.debug('[ROUTER] File path %s is directory' % file_path)
			return self._serve_listing(file_path, response)

		if not os.path.isfile(file_path):
			logger.debug('[ROUTER] File path %s does not exist' % file_path)
			return self._serve_error(response, 404, 'File not found')

		return self._serve_file(file_path, response, exchange)

	def _serve_error(self, response:Response, status:int, message:str) -> Response:
		response.status = status
		response.headers = []
		response.set_body(message)
		return response

	def _serve_listing(self, dir_path, response:Response) -> Response:
		try:
			page = listing.render(dir_path, self.root_path)
		except OSError as e:
			logger.error('[ROUTER] Failed to list %s: %s' % (dir_path, e))
			return self._serve_error(response, 500, 'Failed to list directory: %s' % e.strerror)

		response.status = 200
		response.set_header('Content-Type', 'text/html')
		response.set_body(page)
		return response

	def _serve_file(self, file_path, response:Response, exchange:HTTPExchange) -> Response:
		try:
			f = open(file_path, 'rb')
		except OSError as e:
			logger.error('[ROUTER] File path %s failed to open: %s' % (file_path, e))
			return self._serve_error(response, 500, 'Failed to open file')

		with f:
			transmit(f, os.path.basename(file_path), response, exchange, self.config.framing)
		return response
