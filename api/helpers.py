"""Request/response plumbing shared by the API views."""

import functools
import json
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db.models import Q
from django.http import JsonResponse

from core.models import Profile
from core.services import lock_state

logger = logging.getLogger(__name__)

# ValidationError codes that mean "not allowed" rather than "bad input"
FORBIDDEN_CODES = {"forbidden"}


class BadRequest(Exception):
	pass


def json_body(request) -> dict:
	try:
		body = json.loads(request.body or b"{}")
	except (ValueError, UnicodeDecodeError):
		raise BadRequest("Invalid JSON")
	if not isinstance(body, dict):
		raise BadRequest("JSON object expected")
	return body


def require(body: dict, *names):
	missing = [n for n in names if body.get(n) in (None, "")]
	if missing:
		raise BadRequest(f"{missing[0]} required")
	return [body[n] for n in names]


def error(message: str, status: int = 400) -> JsonResponse:
	return JsonResponse({"error": message}, status=status)


def resolve_user(handle: str):
	"""
	Find a user by username, email or cash tag (with or without a leading $)
	"""
	User = get_user_model()
	handle = str(handle).strip()
	if not handle:
		raise User.DoesNotExist("user not found")
	user = User.objects.filter(Q(username__iexact=handle) | Q(email__iexact=handle)).first()
	if user is None:
		profile = Profile.objects.select_related("user").filter(cash_tag__iexact=handle.lstrip("$")).first()
		user = profile.user if profile else None
	if user is None:
		raise User.DoesNotExist("user not found")
	return user


def api_view(methods=("GET",), login=True):
	"""
	Method check + session auth + mapping of domain errors to JSON responses.

	ValidationError -> 400 (403 for "forbidden"), DoesNotExist -> 404.
	"""
	def decorator(view):
		@functools.wraps(view)
		def wrapper(request, *args, **kwargs):
			if request.method not in methods:
				return error(f"{' or '.join(methods)} only", status=405)
			if login and not request.user.is_authenticated:
				return error("Not authenticated", status=401)
			try:
				return view(request, *args, **kwargs)
			except BadRequest as e:
				return error(str(e))
			except ValidationError as e:
				code = e.message if hasattr(e, "message") else "; ".join(e.messages)
				return error(code, status=403 if code in FORBIDDEN_CODES else 400)
			except ObjectDoesNotExist as e:
				logger.debug("not found: %s", e)
				return error("Not found", status=404)
		return wrapper
	return decorator


# --- Serializers ---------------------------------------------------------------

def money(amount) -> str | None:
	return f"{amount:.2f}" if amount is not None else None


def iso(dt) -> str | None:
	return dt.isoformat() if dt else None


def main_wallet_json(w) -> dict:
	return {
		"id": str(w.id),
		"type": "main",
		"mode": w.mode,
		"balance": money(w.balance),
		"currency": w.currency,
		"bank_name": w.bank_name,
		"bank_account_number": w.bank_account_number,
	}


def sub_wallet_json(w) -> dict:
	data = {
		"id": str(w.id),
		"type": w.kind,
		"mode": w.mode,
		"name": w.name,
		"balance": money(w.balance),
		"currency": w.currency,
		"lock_state": lock_state(w),
		"lock_until": iso(w.lock_until),
		"lock_duration_days": w.lock_duration_days,
		"created_at": iso(w.created_at),
	}
	if w.kind == "budget":
		data.update({
			"spend_limit": money(w.spend_limit),
			"disbursement_frequency": w.disbursement_frequency,
			"disbursement_day": w.disbursement_day,
			"enable_rollover": w.enable_rollover,
			"automatic_allocation": w.automatic_allocation,
			"allocation_frequency": w.allocation_frequency,
			"allocation_day": w.allocation_day,
			"custom_notifications": w.custom_notifications,
		})
	else:
		data.update({
			"target_amount": money(w.target_amount),
			"target_date": iso(w.target_date),
			"progress": round(w.progress, 1),
			"funding_source": w.funding_source,
			"smart_reminders": w.smart_reminders,
			"flex_contributions": w.flex_contributions,
		})
	return data


def transaction_json(t) -> dict:
	return {
		"id": str(t.id),
		"reference_number": t.reference_number,
		"sender_id": t.sender_id,
		"receiver_id": t.receiver_id,
		"amount": money(t.amount),
		"currency": t.currency,
		"type": t.type,
		"activity_type": t.activity_type,
		"description": t.description,
		"status": t.status,
		"mode": t.mode,
		"related_entity_type": t.related_entity_type or None,
		"related_entity_id": t.related_entity_id or None,
		"circle_id": str(t.circle_id) if t.circle_id else None,
		"metadata": t.metadata,
		"created_at": iso(t.created_at),
	}


def circle_json(c, role=None) -> dict:
	return {
		"id": str(c.id),
		"name": c.name,
		"description": c.description,
		"category": c.category,
		"purpose": c.purpose,
		"mode": c.mode,
		"balance": money(c.balance),
		"currency": c.currency,
		"target_amount": money(c.target_amount),
		"deadline": iso(c.deadline),
		"visibility": c.visibility,
		"max_members": c.max_members,
		"member_count": c.member_count,
		"allow_external_contributions": c.allow_external_contributions,
		"show_member_names": c.show_member_names,
		"show_contributions": c.show_contributions,
		"recurring_amount": money(c.recurring_amount),
		"recurring_frequency": c.recurring_frequency,
		"created_by": c.created_by_id,
		"role": role,
	}


def member_json(m) -> dict:
	return {
		"id": m.id,
		"user_id": m.user_id,
		"role": m.role,
		"total_contributed": money(m.total_contributed),
		"joined_at": iso(m.joined_at),
	}


def profile_json(p) -> dict:
	return {
		"user_id": p.user_id,
		"email": p.user.email,
		"username": p.user.get_username(),
		"full_name": p.full_name,
		"phone_number": p.phone_number,
		"cash_tag": p.cash_tag,
		"avatar_url": p.avatar_url,
		"account_mode": p.account_mode,
		"kyc_status": p.kyc_status,
		"vfd": {
			"wallet_id": p.vfd_wallet_id,
			"account_number": p.vfd_account_number,
			"account_name": p.vfd_account_name,
			"bank_name": p.vfd_bank_name,
		} if p.vfd_wallet_id else None,
	}
