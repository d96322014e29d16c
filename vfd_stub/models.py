"""Deterministic in-process VFD BaaS provider.

Issues bearer tokens and sub-account wallets so the VFD client can be exercised
end-to-end without network access to VFD's sandbox.
"""

import secrets
import uuid
from django.db import models
from django.utils.timezone import now


def gen_token():
	# Named function = migration-friendly
	return secrets.token_hex(24)


def gen_wallet_id():
	return f"VFDW-{uuid.uuid4().hex[:10].upper()}"


def gen_wallet_reference():
	return f"ASR-{uuid.uuid4().hex[:12].upper()}"


class VfdStubToken(models.Model):
	"""
	Tokens handed out by baasauth/token (never expire, like validityTime=-1)
	"""
	id = models.BigAutoField(primary_key=True)
	token = models.CharField(max_length=64, unique=True, default=gen_token)
	consumer_key = models.CharField(max_length=100)
	issued_at = models.DateTimeField(default=now)


class VfdStubWallet(models.Model):
	"""
	A provisioned sub-account; account numbers are sequential 10-digit NUBANs starting at 1000000001
	"""
	id = models.BigAutoField(primary_key=True)
	wallet_id = models.CharField(max_length=100, unique=True, default=gen_wallet_id)
	account_number = models.CharField(max_length=10, unique=True)
	account_name = models.CharField(max_length=200)
	wallet_reference = models.CharField(max_length=100, unique=True, default=gen_wallet_reference)
	phone_number = models.CharField(max_length=32, blank=True, default="")
	email = models.CharField(max_length=254, blank=True, default="")
	bvn = models.CharField(max_length=11, blank=True, default="")
	created_at = models.DateTimeField(default=now)

	@staticmethod
	def next_account_number() -> str:
		return str(1000000001 + VfdStubWallet.objects.count())
