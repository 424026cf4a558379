import os
import ssl
import uuid
import datetime
import tempfile
import logging

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

logger = logging.getLogger('fileserver.certs')


def generate_selfsigned(cn = 'fileserver', on = 'fileserver', key_exp = 65537, key_size = 2048):
	"""
	Generates a self-signed server certificate.

	Returns:
		tuple: (certificate PEM bytes, private key PEM bytes)
	"""
	logger.debug('Generating self-signed certificate for %s' % cn)
	one_day = datetime.timedelta(1, 0, 0)
	one_year = datetime.timedelta(365, 0, 0)
	now = datetime.datetime.now(datetime.timezone.utc)

	private_key = rsa.generate_private_key(
		public_exponent=key_exp,
		key_size=key_size,
	)
	name = x509.Name([
		x509.NameAttribute(NameOID.COMMON_NAME, cn),
		x509.NameAttribute(NameOID.ORGANIZATION_NAME, on),
	])
	builder = x509.CertificateBuilder()
	builder = builder.subject_name(name)
	builder = builder.issuer_name(name)
	builder = builder.not_valid_before(now - one_day)
	builder = builder.not_valid_after(now + one_year)
	builder = builder.serial_number(int(uuid.uuid4()))
	builder = builder.public_key(private_key.public_key())
	builder = builder.add_extension(
		x509.SubjectAlternativeName([x509.DNSName(cn), x509.DNSName('localhost')]), critical=False,
	)
	certificate = builder.sign(private_key=private_key, algorithm=hashes.SHA256())

	cert_pem = certificate.public_bytes(encoding=serialization.Encoding.PEM)
	key_pem = private_key.private_bytes(
		encoding=serialization.Encoding.PEM,
		format=serialization.PrivateFormat.TraditionalOpenSSL,
		encryption_algorithm=serialization.NoEncryption()
	)
	return cert_pem, key_pem

def store_selfsigned(cache_dir = None, cn = 'fileserver'):
	"""Writes a fresh self-signed certificate and key to cache_dir, returns both file paths"""
	if cache_dir is None:
		cache_dir = os.path.join(tempfile.gettempdir(), 'fileserver-certs')
	os.makedirs(cache_dir, exist_ok=True)

	cert_pem, key_pem = generate_selfsigned(cn = cn)
	certfile = os.path.join(cache_dir, 'cert.pem')
	keyfile = os.path.join(cache_dir, 'key.pem')
	with open(certfile, 'wb') as f:
		f.write(cert_pem)
	with open(keyfile, 'wb') as f:
		f.write(key_pem)
	os.chmod(keyfile, 0o600)
	return certfile, keyfile

def get_server_context(certfile = None, keyfile = None) -> ssl.SSLContext:
	"""Server side TLS context; a self-signed certificate is generated when no certfile is given"""
	if certfile is None:
		certfile, keyfile = store_selfsigned()
		logger.info('Using self-signed certificate %s' % certfile)
	ssl_ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
	ssl_ctx.load_cert_chain(certfile, keyfile=keyfile)
	return ssl_ctx
