"""Operational endpoints: health, CSRF bootstrap, VFD wallet creation and the VFD credit webhook."""

import ipaddress
import json
import logging
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse, HttpResponseForbidden
from django.middleware.csrf import get_token
from django.views.decorators.csrf import csrf_exempt
from core.adapters.vfd_adapter import VFDError, webhook_signature_valid
from core.models import Profile
from core.services import apply_vfd_credit, create_vfd_wallet, record_ignored_event
from .helpers import api_view, json_body, require, error

logger = logging.getLogger(__name__)

CREDIT_EVENT_TYPES = ("WALLET_CREDIT", "CREDIT")


def health(request):
	return JsonResponse({"ok": True})


def csrf(request):
	# Forces creation/rotation of the CSRF token AND sets 'csrftoken' cookie
	return JsonResponse({"csrftoken": get_token(request)})


@api_view(methods=("POST",))
def vfd_create_wallet(request):
	"""
	POST: Open a VFD bank sub-account for the signed-in user and link it to their live main wallet
	"""
	body = json_body(request)
	full_name, phone_number = require(body, "fullName", "phoneNumber")
	email = body.get("email") or request.user.email

	logger.info("creating VFD wallet for user %s", request.user.pk)
	try:
		profile = create_vfd_wallet(request.user, full_name=full_name, phone_number=phone_number, email=email)
	except VFDError as e:
		logger.error("VFD wallet creation failed for user %s: %s", request.user.pk, e.message)
		# a provider answer is the caller's problem; transport and token failures are ours
		return error(e.message or "Wallet creation failed", status=400 if e.payload else 500)

	return JsonResponse({
		"success": True,
		"accountNumber": profile.vfd_account_number,
		"accountName": profile.vfd_account_name,
		"bankName": profile.vfd_bank_name,
		"walletId": profile.vfd_wallet_id,
	})


# --- Helpers -----------------------------------------------------------------

def _ip_allowed(request) -> bool:
	allowed = getattr(settings, "VFD_WEBHOOK_IP_ALLOWLIST", [])
	if not allowed:
		return True
	try:
		src = ipaddress.ip_address(request.META.get("REMOTE_ADDR", "127.0.0.1"))
		return any(src in ipaddress.ip_network(net) for net in allowed)
	except ValueError:
		return False


def _parse_vfd_credit(payload: dict) -> dict:
	"""
	Pull the fields we need out of a VFD credit notification:
	  {"eventType": "WALLET_CREDIT",
	   "data": {"walletId": "...", "amount": "5000.00", "reference": "...", "sessionId": "...", "senderName": "..."}}
	The event id is data.reference, falling back to data.sessionId.
	"""
	data = payload.get("data")
	if not isinstance(data, dict):
		raise KeyError("data")
	event_id = data.get("reference") or data.get("sessionId")
	if not event_id:
		raise KeyError("data.reference")
	if not data.get("walletId"):
		raise KeyError("data.walletId")
	if data.get("amount") in (None, ""):
		raise KeyError("data.amount")
	return dict(
		event_id=str(event_id),
		wallet_id=str(data["walletId"]),
		amount=data["amount"],
		sender_name=str(data.get("senderName") or ""),
	)


# --- Webhooks ----------------------------------------------------------------

@csrf_exempt
def vfd_webhook(request):
	"""
	Validates HMAC (X-VFD-Signature, hex SHA-256 of the raw body) + optional IP allowlist,
	then credits the live main wallet exactly once per event id.
	"""
	if request.method != "POST":
		return error("POST required", status=405)

	if not _ip_allowed(request):
		return HttpResponseForbidden("IP not allowed")

	raw = request.body or b""
	signature = request.headers.get("X-VFD-Signature") or ""
	if not webhook_signature_valid(raw, signature, getattr(settings, "VFD_WEBHOOK_SECRET", "")):
		logger.warning("VFD webhook rejected: bad signature")
		return HttpResponseForbidden("Bad signature")

	try:
		payload = json.loads(raw.decode("utf-8"))
	except (ValueError, UnicodeDecodeError):
		return error("Invalid JSON")
	if not isinstance(payload, dict):
		return error("Invalid JSON")

	event_type = str(payload.get("eventType", "")).upper()
	try:
		if event_type not in CREDIT_EVENT_TYPES:
			data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
			event_id = data.get("reference") or data.get("sessionId")
			if event_id:
				record_ignored_event(event_id=str(event_id), event_type=event_type or "unknown", payload=payload)
			return JsonResponse({"success": True, "message": "Event type not handled"})

		fields = _parse_vfd_credit(payload)
		logger.info("VFD credit %s for wallet %s", fields["event_id"], fields["wallet_id"])
		event, applied = apply_vfd_credit(payload=payload, **fields)
		if not applied:
			return JsonResponse({"success": True, "duplicate": True})
		return JsonResponse({"success": True, "reference": event.transaction.reference_number})

	except KeyError as e:
		return error(f"Missing field: {e}")
	except Profile.DoesNotExist:
		logger.error("VFD webhook: wallet not found for VFD ID %s", payload.get("data", {}).get("walletId"))
		return error("Wallet not found", status=404)
	except ValidationError as e:
		return error(e.message if hasattr(e, "message") else "invalid payload")
	except Exception:
		# Don't leak internals; log exception server-side
		logger.exception("VFD webhook processing failed")
		return error("Webhook processing failed", status=500)
