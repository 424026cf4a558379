
__version__ = "0.2.1"
__banner__ = \
"""
# fileserver %s 
# Directory listing and download over HTTP
""" % __version__
