import os
import enum
import ssl
from typing import NamedTuple

from fileserver.common.exceptions import ConfigError

CHUNK_SIZE = 8192

class Framing(enum.Enum):
	MESSAGE = 'message' # every file chunk is sent as its own complete HTTP message
	STREAM = 'stream'   # one response, chunked transfer encoding

class ServerConfig(NamedTuple):
	root_path:str
	port:int
	host:str = '0.0.0.0'
	framing:Framing = Framing.MESSAGE
	ssl_ctx:ssl.SSLContext = None

	@staticmethod
	def from_args(root_path, port, host:str = '0.0.0.0', framing = Framing.MESSAGE, ssl_ctx:ssl.SSLContext = None):
		"""
		Validates the startup parameters and builds the config.

		Args:
			root_path (str): Directory to expose
			port (int|str): Listen port, 0 lets the OS pick one
			host (str): Listen address
			framing (Framing|str): How file contents are put on the wire
			ssl_ctx (ssl.SSLContext): Server side TLS context, None for plain HTTP

		Raises:
			ConfigError: on any invalid parameter
		"""
		if root_path is None:
			raise ConfigError('Invalid directory path')
		root_path = os.path.abspath(str(root_path))
		if not os.path.exists(root_path) or not os.path.isdir(root_path):
			raise ConfigError('Invalid directory path')

		try:
			port = int(port)
		except (TypeError, ValueError):
			raise ConfigError('Invalid port "%s"' % port)
		if port < 0 or port > 65535:
			raise ConfigError('Port must be between 0 and 65535, got %s' % port)

		if not isinstance(framing, Framing):
			try:
				framing = Framing(framing)
			except ValueError:
				raise ConfigError('Unknown framing "%s"' % framing)

		return ServerConfig(root_path, port, host, framing, ssl_ctx)

	def __str__(self):
		return '%s:%s -> %s (%s%s)' % (
			self.host,
			self.port,
			self.root_path,
			self.framing.value,
			', SSL' if self.ssl_ctx is not None else ''
		)
