import os
import time
import html
from typing import List

from fileserver import logger
from fileserver._version import __version__
from fileserver.common.pathresolver import relative_location, location_href
from fileserver.utils.trace import traced


MEDIA_EXTENSIONS = ['.mp4', '.mp3', '.jpg', '.jpeg', '.png', '.gif', '.avi', '.mov', '.wav']
EXECUTABLE_EXTENSIONS = ['.exe', '.bat', '.msi', '.sh']
ARCHIVE_EXTENSIONS = ['.zip', '.tar', '.gz', '.rar', '.7z']

TYPE_STYLES = {
	'directory' : 'font-weight: bold; color: #2196F3;',
	'media' : 'color: #9C27B0;',
	'executable' : 'color: #FF9800;',
	'archive' : 'color: #4CAF50;',
	'plain' : 'color: #FFFFFF;',
}

EXTENSION_TYPES = {}
for ext in MEDIA_EXTENSIONS:
	EXTENSION_TYPES[ext] = 'media'
for ext in EXECUTABLE_EXTENSIONS:
	EXTENSION_TYPES[ext] = 'executable'
for ext in ARCHIVE_EXTENSIONS:
	EXTENSION_TYPES[ext] = 'archive'

LISTING_CSS = """
<style>
	* { box-sizing: border-box; }
	body {
		background-color: #1f1f1f;
		color: #FFFFFF;
		font-family: Arial, sans-serif;
		font-size: 16px;
		margin: 0;
		padding: 20px;
	}
	h1 { color: #90CAF9; font-size: 32px; text-align: center; margin: 10px 0; }
	h2 { color: #FFCC00; font-size: 24px; margin: 20px 0; }
	table { width: 100%; border-collapse: collapse; margin: 20px 0; background-color: #2f2f2f; border: 1px solid #3C3C3C; }
	th { background-color: #3C3C3C; color: #FFFFFF; padding: 12px; }
	td { background-color: #2f2f2f; color: #DDDDDD; padding: 12px; border: 1px solid #3C3C3C; }
	a { color: #FFCC00; text-decoration: underline; }
	a:hover { color: #FFD54F; }
	.parent { font-weight: bold; color: #90CAF9; }
	.footer { text-align: center; margin: 20px 0; font-size: 14px; color: #AAAAAA; }
	.name-col { width: 25%; }
	.link-col { width: 55%; }
	.date-col { width: 20%; }
</style>
"""


class DirectoryEntry:
	__slots__ = ['name', 'path', 'is_directory', 'modified_time']

	def __init__(self, name:str, path:str, is_directory:bool, modified_time:float):
		self.name = name
		self.path = path
		self.is_directory = is_directory
		self.modified_time = modified_time

	@staticmethod
	def from_direntry(entry:os.DirEntry):
		try:
			is_directory = entry.is_dir()
			st = entry.stat()
		except OSError:
			# dangling or looping symlink, report the link itself
			is_directory = False
			st = entry.stat(follow_symlinks=False)
		return DirectoryEntry(entry.name, os.path.abspath(entry.path), is_directory, st.st_mtime)

	def sort_key(self):
		return (not self.is_directory, self.name)

	def __repr__(self):
		return '<DirectoryEntry %s%s>' % (self.name, '/' if self.is_directory else '')


def classify(entry:DirectoryEntry) -> str:
	if entry.is_directory:
		return 'directory'
	_, ext = os.path.splitext(entry.name)
	return EXTENSION_TYPES.get(ext, 'plain')

def get_file_type_style(entry:DirectoryEntry) -> str:
	return TYPE_STYLES[classify(entry)]

def format_time(ts:float) -> str:
	"""Human readable local time, asctime style ('Mon Oct 19 10:02:03 2026')"""
	return time.asctime(time.localtime(ts))

def list_directory(path):
	"""
	Enumerates the immediate children of a directory and sorts them,
	directories first, then by name.

	Returns:
		tuple: (entries, directory count, file count)
	"""
	entries:List[DirectoryEntry] = []
	dir_count = 0
	file_count = 0
	with os.scandir(path) as it:
		for direntry in it:
			entry = DirectoryEntry.from_direntry(direntry)
			entries.append(entry)
			if entry.is_directory:
				dir_count += 1
			else:
				file_count += 1

	entries.sort(key=DirectoryEntry.sort_key)
	return entries, dir_count, file_count

@traced
def render(path, root, now:float = None) -> str:
	"""
	Generates the HTML listing page for a directory under root.

	Args:
		path (str|Path): Directory to list
		root (str|Path): The served directory, links are relative to it
		now (float): Timestamp printed as the current server time, defaults to time.time()

	Returns:
		str: the HTML page
	"""
	if now is None:
		now = time.time()
	path = os.path.abspath(str(path))
	root = os.path.abspath(str(root))

	base_link = relative_location(path, root)
	logger.debug('[LISTING] Generate file list HTML page for: %s' % base_link)

	parts = []
	parts.append('<html><head><meta charset="utf-8"><title>Files in: %s</title>' % html.escape(base_link))
	parts.append(LISTING_CSS)
	parts.append('</head><body><h1>Files in: %s</h1><br><hr><br>' % html.escape(base_link))

	if path != root:
		parent_href = location_href(os.path.dirname(path), root)
		parts.append('<a class="parent" href="%s">Back to Parent Directory</a><br><br>' % html.escape(parent_href))

	entries, dir_count, file_count = list_directory(path)

	parts.append('<h2>Summary Information</h2>')
	parts.append('<p>Total Directories: %s</p>' % dir_count)
	parts.append('<p>Total Files: %s</p>' % file_count)
	parts.append('<hr>')
	parts.append('<p>Current Server Time: %s</p>' % format_time(now))
	parts.append('<hr>')

	parts.append(
		'<table><tr><th>N</th><th class="name-col">NAME</th>'
		'<th class="link-col">LINK</th><th class="date-col">DATE</th></tr>'
	)
	for index, entry in enumerate(entries, 1):
		name = html.escape(entry.name)
		href = html.escape(location_href(entry.path, root))
		parts.append('<tr>')
		parts.append('<td>%s</td>' % index)
		parts.append('<td class="name-col" style="%s">%s%s</td>' % (
			get_file_type_style(entry), name, '/' if entry.is_directory else '')
		)
		parts.append('<td class="link-col"><a href="%s">%s</a></td>' % (href, name))
		parts.append('<td class="date-col">%s</td>' % format_time(entry.modified_time))
		parts.append('</tr>')

	parts.append('</table><br><hr><br>')
	parts.append('<p class="footer">Served by fileserver %s</p>' % __version__)
	parts.append('</body></html>')
	return ''.join(parts)
