"""Session auth endpoints over django.contrib.auth (email + password)."""

import logging
from django.contrib.auth import authenticate, get_user_model, login as auth_login, logout as auth_logout
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from django.http import JsonResponse
from core import services
from .helpers import api_view, json_body, require, error, profile_json

logger = logging.getLogger(__name__)


@api_view(methods=("POST",), login=False)
def signup(request):
	"""
	POST: {"email", "password", "full_name"?}; creates the user, its profile, and starts a session
	"""
	body = json_body(request)
	email, password = require(body, "email", "password")
	email = str(email).strip().lower()
	User = get_user_model()
	if User.objects.filter(username__iexact=email).exists():
		return error("email_taken")
	validate_password(password)

	with transaction.atomic():
		user = User.objects.create_user(username=email, email=email, password=password)
		services.update_profile(user, full_name=body.get("full_name") or "")
	auth_login(request, user)
	logger.info("user %s signed up", user.pk)
	return JsonResponse(profile_json(services.get_profile(user)), status=201)


@api_view(methods=("POST",), login=False)
def login(request):
	body = json_body(request)
	email, password = require(body, "email", "password")
	user = authenticate(request, username=str(email).strip().lower(), password=password)
	if user is None:
		return error("invalid_credentials", status=401)
	auth_login(request, user)
	return JsonResponse(profile_json(services.get_profile(user)))


@api_view(methods=("POST",), login=False)
def logout(request):
	auth_logout(request)
	return JsonResponse({"ok": True})


@api_view()
def me(request):
	return JsonResponse(profile_json(services.get_profile(request.user)))
