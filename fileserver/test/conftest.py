import threading

import pytest

from fileserver.common.config import ServerConfig
from fileserver.server import FileServer


@pytest.fixture
def tree(tmp_path):
	"""root with a.txt (10 bytes) and sub/ holding inner.txt"""
	root = tmp_path / 'root'
	root.mkdir()
	(root / 'a.txt').write_bytes(b'0123456789')
	(root / 'sub').mkdir()
	(root / 'sub' / 'inner.txt').write_bytes(b'inner')
	return root

@pytest.fixture
def make_server():
	servers = []
	def _make(root, framing = 'message', ssl_ctx = None):
		config = ServerConfig.from_args(str(root), 0, host = '127.0.0.1', framing = framing, ssl_ctx = ssl_ctx)
		server = FileServer(config)
		server.listen()
		t = threading.Thread(target = server.serve_forever, daemon = True)
		t.start()
		servers.append((server, t))
		return server
	yield _make
	for server, t in servers:
		server.stop()
		t.join(5)
