"""Adapter over the VFD BaaS HTTP API.

In development VFD_BASE_URL points at the local vfd_stub app, so the same client
code path is exercised end-to-end; in production it points at VFD's sandbox or
live gateway. Webhook signing helpers live here too since both the stub and the
webhook view need the same HMAC scheme.
"""

import hashlib
import hmac
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class VFDError(Exception):
	"""
	Raised for transport failures and non-success VFD responses
	"""
	def __init__(self, message: str, status_code: int | None = None, payload: dict | None = None):
		super().__init__(message)
		self.message = message
		self.status_code = status_code
		self.payload = payload or {}


class VFDClient:
	"""
	Client-credentials token exchange + bearer-authenticated calls.
	A fresh token is requested per call (VFD issues non-expiring tokens with validityTime=-1).
	"""
	provider_name = "vfd"

	def __init__(self, base_url: str | None = None, consumer_key: str | None = None,
			consumer_secret: str | None = None, timeout: float | None = None, session=None):
		self.base_url = (base_url or settings.VFD_BASE_URL).rstrip("/")
		self.consumer_key = consumer_key or settings.VFD_CONSUMER_KEY
		self.consumer_secret = consumer_secret or settings.VFD_CONSUMER_SECRET
		self.timeout = timeout or getattr(settings, "VFD_TIMEOUT_SECONDS", 10)
		self.session = session or requests.Session()

	def _url(self, endpoint: str) -> str:
		return f"{self.base_url}/{endpoint.lstrip('/')}"

	def generate_token(self) -> str:
		try:
			resp = self.session.post(
				self._url("/baasauth/token"),
				auth=(self.consumer_key, self.consumer_secret),
				json={
					"consumerKey": self.consumer_key,
					"consumerSecret": self.consumer_secret,
					"validityTime": -1,
				},
				headers={"Accept": "application/json"},
				timeout=self.timeout,
			)
		except requests.RequestException as e:
			logger.error("VFD token request failed: %s", e)
			raise VFDError(f"VFD token generation failed: {e}") from e

		if not resp.ok:
			logger.error("VFD token generation failed: %s %s", resp.status_code, resp.reason)
			raise VFDError(f"VFD token generation failed: {resp.reason}", status_code=resp.status_code)
		try:
			return resp.json()["data"]["token"]
		except (ValueError, KeyError, TypeError) as e:
			raise VFDError("VFD token response malformed", status_code=resp.status_code) from e

	def request(self, method: str, endpoint: str, json: dict | None = None) -> dict:
		token = self.generate_token()
		try:
			resp = self.session.request(
				method,
				self._url(endpoint),
				json=json,
				headers={"Accept": "application/json", "Authorization": f"Bearer {token}"},
				timeout=self.timeout,
			)
		except requests.RequestException as e:
			logger.error("VFD %s %s failed: %s", method, endpoint, e)
			raise VFDError(str(e)) from e

		try:
			payload = resp.json()
		except ValueError:
			payload = {}
		if not resp.ok:
			message = payload.get("message") if isinstance(payload, dict) else None
			raise VFDError(message or resp.reason or "VFD API request failed", status_code=resp.status_code, payload=payload)
		return payload

	def create_wallet(self, *, full_name: str, phone_number: str, email: str,
			bvn: str | None = None, date_of_birth: str | None = None) -> dict:
		"""
		Returns VFD's data block: walletId, accountNumber, accountName, walletReference
		"""
		payload = self.request("POST", "/wallet/create", json={
			"walletName": full_name,
			"customerName": full_name,
			"bvn": bvn or settings.VFD_SANDBOX_BVN,
			"phoneNumber": phone_number,
			"email": email,
			"dateOfBirth": date_of_birth or settings.VFD_SANDBOX_DOB,
		})
		if not payload.get("success") or not isinstance(payload.get("data"), dict):
			raise VFDError(payload.get("message") or "Wallet creation failed", payload=payload)
		return payload["data"]


def sign_webhook_body(raw_body: bytes, secret: str) -> str:
	return hmac.new(key=secret.encode("utf-8"), msg=raw_body, digestmod=hashlib.sha256).hexdigest()


def webhook_signature_valid(raw_body: bytes, provided_sig: str, secret: str) -> bool:
	if not secret or not provided_sig:
		return False
	try:
		return hmac.compare_digest(sign_webhook_body(raw_body, secret), provided_sig)
	except TypeError:
		# non-ASCII header value
		return False
