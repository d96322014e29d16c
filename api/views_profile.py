"""Profile, preference toggles and demo/live mode switch."""

from django.http import JsonResponse
from core import services
from core.models import UserSettings
from .helpers import api_view, json_body, require, profile_json


@api_view(methods=("GET", "POST"))
def profile(request):
	"""
	GET: The signed-in user's profile
	POST: Update {"full_name"?, "phone_number"?, "cash_tag"?, "avatar_url"?}
	"""
	if request.method == "POST":
		body = json_body(request)
		fields = {k: body[k] for k in services.PROFILE_FIELDS if k in body}
		p = services.update_profile(request.user, **fields)
	else:
		p = services.get_profile(request.user)
	return JsonResponse(profile_json(p))


@api_view(methods=("GET", "POST"))
def user_settings(request):
	"""
	GET/POST: Notification and privacy toggles; POST takes any subset as booleans
	"""
	if request.method == "POST":
		prefs = services.update_user_settings(request.user, **json_body(request))
	else:
		prefs = services.get_user_settings(request.user)
	return JsonResponse({k: getattr(prefs, k) for k in UserSettings.TOGGLES})


@api_view(methods=("POST",))
def mode(request):
	"""
	POST: {"mode": "demo"|"live"}
	"""
	(new_mode,) = require(json_body(request), "mode")
	p = services.set_account_mode(request.user, new_mode)
	return JsonResponse({"account_mode": p.account_mode})
