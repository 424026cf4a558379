
class FileServerError(Exception):
	pass

class ConfigError(FileServerError):
	def __init__(self, message):
		self.message = message
		super().__init__(self.message)

class PathError(FileServerError):
	def __init__(self, target, message = "Invalid request target"):
		self.target = target
		self.message = message
		super().__init__('%s: %r' % (self.message, self.target))

class PathTraversalError(PathError):
	def __init__(self, target, message = "Request target escapes the served directory"):
		super().__init__(target, message)
