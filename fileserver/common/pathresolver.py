import os
import urllib.parse
from pathlib import Path

from fileserver.common.exceptions import PathError, PathTraversalError


def split_target(target:str) -> str:
	"""Returns the decoded path part of a request target (no query, no fragment)"""
	if target.startswith('http://') or target.startswith('https://'):
		# absolute-form, only the path is ours
		target = urllib.parse.urlsplit(target).path
	path = target.split('#', 1)[0].split('?', 1)[0]
	return urllib.parse.unquote(path)

def resolve(root, target:str) -> Path:
	"""
	Maps a request target onto the filesystem, scoped under root.

	The target is percent-decoded, '.' segments are dropped and '..' segments
	remove the previous one. A single trailing slash is allowed, any other empty
	segment is rejected. Existence is not checked here.

	Args:
		root (str|Path): The served directory
		target (str): Request target as found on the request line

	Returns:
		Path: root-scoped path

	Raises:
		PathError: target contains a NUL byte or empty segments
		PathTraversalError: the target (or a symlink on the way) leads out of root
	"""
	root = os.path.abspath(str(root))
	path = split_target(target)
	if '\x00' in path:
		raise PathError(target, 'NUL byte in request target')

	if path.startswith('/'):
		path = path[1:]
	if path == '':
		return Path(root)

	segments = path.split('/')
	if segments[-1] == '':
		segments = segments[:-1]

	components = []
	for segment in segments:
		if segment == '':
			raise PathError(target, 'Empty segment in request target')
		if segment == '.':
			continue
		if segment == '..':
			if len(components) == 0:
				raise PathTraversalError(target)
			components.pop()
			continue
		if os.sep in segment or (os.altsep is not None and os.altsep in segment):
			raise PathError(target, 'Path separator in segment')
		components.append(segment)

	resolved = os.path.join(root, *components)

	# symlinks are allowed as long as they stay inside the served tree
	real_root = os.path.realpath(root)
	real_path = os.path.realpath(resolved)
	try:
		if os.path.commonpath([real_root, real_path]) != real_root:
			raise PathTraversalError(target)
	except ValueError:
		# different drives
		raise PathTraversalError(target)

	return Path(resolved)

def relative_location(path, root) -> str:
	"""Location of path relative to root, '.' for root itself, always '/' separated"""
	rel = os.path.relpath(os.path.abspath(str(path)), os.path.abspath(str(root)))
	return rel.replace(os.sep, '/')

def location_href(path, root) -> str:
	"""Root-absolute, percent-quoted URL path for a location under root"""
	rel = relative_location(path, root)
	if rel == '.':
		return '/'
	return '/' + urllib.parse.quote(rel)
