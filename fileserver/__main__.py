import sys
import logging
import argparse

from fileserver import logger
from fileserver._version import __banner__
from fileserver.common.config import ServerConfig, Framing
from fileserver.common.exceptions import ConfigError
from fileserver.server import FileServer
from fileserver.utils.trace import tracelogger


class UsageArgumentParser(argparse.ArgumentParser):
	def error(self, message):
		self.print_usage(sys.stderr)
		self.exit(1, '%s: error: %s\n' % (self.prog, message))

def get_parser():
	parser = UsageArgumentParser(description='Serves a directory over HTTP: listings for directories, downloads for files')
	parser.add_argument('path_to_directory', help='Directory to serve')
	parser.add_argument('port', help='Listen port')
	parser.add_argument('--host', default = '0.0.0.0', help='Listen IP')
	parser.add_argument('--framing', choices=[x.value for x in Framing], default = Framing.MESSAGE.value, help='message: every file chunk is a separate HTTP message. stream: one chunked response')
	parser.add_argument('--ssl', action='store_true', help='Serve over TLS')
	parser.add_argument('--cert', help='TLS certificate file (self-signed one is generated if missing)')
	parser.add_argument('--key', help='TLS key file')
	parser.add_argument('-v', '--verbose', action='count', default=0, help='Verbosity, -vv also traces calls')
	parser.add_argument('-s', '--silent', action='store_true', help = 'dont print banner')
	return parser

def main(argv = None):
	parser = get_parser()
	args = parser.parse_args(argv)

	if args.verbose >= 1:
		logger.setLevel(logging.DEBUG)
	if args.verbose >= 2:
		tracelogger.setLevel(logging.DEBUG)

	ssl_ctx = None
	try:
		if args.ssl is True or args.cert is not None:
			from fileserver.certs import get_server_context
			ssl_ctx = get_server_context(args.cert, args.key)
		config = ServerConfig.from_args(args.path_to_directory, args.port, host = args.host, framing = args.framing, ssl_ctx = ssl_ctx)
	except ConfigError as e:
		print(e.message, file=sys.stderr)
		return 1
	except OSError as e:
		print('Failed to load TLS certificate: %s' % e, file=sys.stderr)
		return 1

	if args.silent is False:
		print(__banner__)

	server = FileServer(config)
	try:
		server.listen()
	except OSError as e:
		print('Error: %s' % e, file=sys.stderr)
		return 1

	if args.silent is False:
		print('Localhost Server started at port %s %s' % (server.port, '' if ssl_ctx is None else '(SSL)'))
	try:
		server.serve_forever()
	except KeyboardInterrupt:
		pass
	return 0

if __name__ == '__main__':
	sys.exit(main())
