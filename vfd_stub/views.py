"""HTTP endpoints for the VFD sandbox stub.

Mirrors the slice of the VFD BaaS surface the app uses (token exchange and
wallet creation), plus a credit helper that produces a signed webhook payload
for driving /api/webhooks/vfd by hand.
"""

import base64
import binascii
import json
import uuid
from decimal import Decimal, InvalidOperation
from django.conf import settings
from django.http import JsonResponse, HttpResponseBadRequest
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from core.adapters.vfd_adapter import sign_webhook_body
from .models import VfdStubToken, VfdStubWallet


def _basic_credentials(request):
	header = request.headers.get("Authorization") or ""
	if not header.startswith("Basic "):
		return None, None
	try:
		decoded = base64.b64decode(header.split(" ", 1)[1]).decode("utf-8")
	except (binascii.Error, UnicodeDecodeError):
		return None, None
	key, _, secret = decoded.partition(":")
	return key, secret


def _bearer_valid(request) -> bool:
	header = request.headers.get("Authorization") or ""
	if not header.startswith("Bearer "):
		return False
	return VfdStubToken.objects.filter(token=header.split(" ", 1)[1]).exists()


@csrf_exempt
def token(request):
	"""
	POST: Exchange consumer key/secret (Basic auth) for a bearer token
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	key, secret = _basic_credentials(request)
	if key != settings.VFD_CONSUMER_KEY or secret != settings.VFD_CONSUMER_SECRET:
		return JsonResponse({"status": "99", "message": "Invalid credentials"}, status=401)
	tok = VfdStubToken.objects.create(consumer_key=key)
	return JsonResponse({"status": "00", "message": "Successful", "data": {"token": tok.token}})


@csrf_exempt
def wallet_create(request):
	"""
	POST: Provision a sub-account wallet; returns walletId/accountNumber/accountName/walletReference
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	if not _bearer_valid(request):
		return JsonResponse({"success": False, "message": "Unauthorized"}, status=401)
	try:
		body = json.loads(request.body or b"{}")
	except ValueError:
		return HttpResponseBadRequest("Invalid JSON")

	name = (body.get("customerName") or body.get("walletName") or "").strip()
	phone = (body.get("phoneNumber") or "").strip()
	if not name or not phone:
		return JsonResponse({"success": False, "message": "customerName and phoneNumber are required"})

	wallet = VfdStubWallet.objects.create(
		account_number=VfdStubWallet.next_account_number(),
		account_name=name,
		phone_number=phone,
		email=body.get("email") or "",
		bvn=body.get("bvn") or "",
	)
	return JsonResponse({
		"status": "00",
		"success": True,
		"message": "Successful",
		"data": {
			"walletId": wallet.wallet_id,
			"accountNumber": wallet.account_number,
			"accountName": wallet.account_name,
			"walletReference": wallet.wallet_reference,
		},
	}, status=201)


@csrf_exempt
def wallet_credit(request):
	"""
	POST: Build a signed WALLET_CREDIT webhook for a stub wallet (simulated inbound transfer)
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		body = json.loads(request.body or b"{}")
		amount = Decimal(str(body.get("amount")))
	except (ValueError, InvalidOperation):
		return HttpResponseBadRequest("amount required")
	account_number = body.get("accountNumber")
	if not account_number:
		return HttpResponseBadRequest("accountNumber required")
	try:
		wallet = VfdStubWallet.objects.get(account_number=account_number)
	except VfdStubWallet.DoesNotExist:
		return JsonResponse({"success": False, "message": "Wallet not found"}, status=404)

	payload = {
		"eventType": "WALLET_CREDIT",
		"data": {
			"walletId": wallet.wallet_id,
			"accountNumber": wallet.account_number,
			"amount": f"{amount:.2f}",
			"senderName": body.get("senderName") or "",
			"reference": body.get("reference") or f"VFDREF-{uuid.uuid4().hex[:12].upper()}",
			"timestamp": timezone.now().isoformat(),
		},
	}
	raw = json.dumps(payload, separators=(",", ":"))
	return JsonResponse({
		"body": raw,
		"signature": sign_webhook_body(raw.encode("utf-8"), settings.VFD_WEBHOOK_SECRET),
	}, status=201)
