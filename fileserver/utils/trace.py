import logging
import functools
import contextvars

tracelogger = logging.getLogger('fileserver.trace')
# tracing is only on when explicitly requested, not with the package debug level
tracelogger.setLevel(logging.INFO)

INDENT = '  '
_depth = contextvars.ContextVar('fileserver_trace_depth', default=0)

def traced(func):
	"""Logs entering and leaving the wrapped function, indented by call depth"""
	@functools.wraps(func)
	def wrapper(*args, **kwargs):
		if not tracelogger.isEnabledFor(logging.DEBUG):
			return func(*args, **kwargs)

		depth = _depth.get()
		tracelogger.debug('%sEntering %s() - (%s)' % (INDENT * depth, func.__qualname__, func.__module__))
		token = _depth.set(depth + 1)
		try:
			return func(*args, **kwargs)
		finally:
			_depth.reset(token)
			tracelogger.debug('%sLeaving %s() - (%s)' % (INDENT * depth, func.__qualname__, func.__module__))
	return wrapper

def get_depth() -> int:
	return _depth.get()
