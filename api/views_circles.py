"""Circle endpoints: list/create, detail, membership and money in/out."""

from django.http import JsonResponse
from core import circles, services
from core.models import Circle
from .helpers import api_view, json_body, require, money, circle_json, member_json, transaction_json, resolve_user


def _settings_fields(body: dict) -> dict:
	return {k: body[k] for k in circles.SETTINGS_FIELDS if k in body}


@api_view(methods=("GET", "POST"))
def circle_list(request):
	"""
	GET: Circles the user belongs to, with their role
	POST: Create a circle in the current mode {"name", "description"?, "visibility"?, ...}
	"""
	if request.method == "POST":
		body = json_body(request)
		require(body, "name")
		circle = circles.create_circle(request.user, services.get_account_mode(request.user), **_settings_fields(body))
		return JsonResponse(circle_json(circle, role="admin"), status=201)

	rows = circles.list_user_circles(request.user)
	return JsonResponse([circle_json(c, role) for c, role in rows], safe=False)


@api_view()
def public_circles(request):
	try:
		limit = min(int(request.GET.get("limit", 20)), 100)
	except ValueError:
		limit = 20
	return JsonResponse([circle_json(c) for c in circles.list_public_circles(limit)], safe=False)


@api_view()
def circle_detail(request, circle_id):
	detail = circles.get_circle_detail(request.user, circle_id)
	circle = detail["circle"]
	is_member = detail["role"] is not None
	members = []
	for m in detail["members"]:
		row = member_json(m)
		if circle.show_member_names or is_member:
			row["name"] = services.get_profile(m.user).full_name or m.user.get_username()
		if not circle.show_contributions and not is_member:
			row["total_contributed"] = None
		members.append(row)
	return JsonResponse({
		**circle_json(circle, detail["role"]),
		"user_contribution": money(detail["user_contribution"]),
		"members": members,
		"transactions": [transaction_json(t) for t in detail["transactions"]] if is_member else [],
	})


@api_view(methods=("POST",))
def join(request, circle_id):
	member = circles.join_circle(request.user, Circle.objects.get(pk=circle_id))
	return JsonResponse(member_json(member), status=201)


@api_view(methods=("POST",))
def invite(request, circle_id):
	"""
	POST: {"user": username|email|cash tag, "role"?: "member"|"moderator"}
	"""
	body = json_body(request)
	(handle,) = require(body, "user")
	circle = Circle.objects.get(pk=circle_id)
	member = circles.add_member(request.user, circle, resolve_user(handle), role=body.get("role") or "member")
	return JsonResponse(member_json(member), status=201)


@api_view(methods=("POST",))
def contribute(request, circle_id):
	body = json_body(request)
	(amount,) = require(body, "amount")
	circle = Circle.objects.get(pk=circle_id)
	tx = circles.contribute(request.user, circle, amount, services.get_account_mode(request.user),
		description=body.get("description") or None)
	circle.refresh_from_db(fields=["balance"])
	return JsonResponse({"transaction": transaction_json(tx), "circle_balance": money(circle.balance)}, status=201)


@api_view(methods=("POST",))
def withdraw(request, circle_id):
	body = json_body(request)
	(amount,) = require(body, "amount")
	circle = Circle.objects.get(pk=circle_id)
	tx = circles.withdraw(request.user, circle, amount, services.get_account_mode(request.user),
		reason=body.get("reason") or "")
	circle.refresh_from_db(fields=["balance"])
	return JsonResponse({"transaction": transaction_json(tx), "circle_balance": money(circle.balance)}, status=201)


@api_view(methods=("POST",))
def circle_settings(request, circle_id):
	body = json_body(request)
	circle = circles.update_circle_settings(request.user, Circle.objects.get(pk=circle_id), **_settings_fields(body))
	return JsonResponse(circle_json(circle, "admin"))


@api_view(methods=("POST",))
def leave(request, circle_id):
	circles.leave_circle(request.user, Circle.objects.get(pk=circle_id))
	return JsonResponse({"left": True})


@api_view(methods=("POST",))
def delete(request, circle_id):
	circles.delete_circle(request.user, Circle.objects.get(pk=circle_id))
	return JsonResponse({"deleted": True})


@api_view(methods=("POST",))
def promote(request, circle_id, member_id):
	member = circles.promote_member(request.user, Circle.objects.get(pk=circle_id), member_id)
	return JsonResponse(member_json(member))


@api_view(methods=("POST",))
def demote(request, circle_id, member_id):
	member = circles.demote_member(request.user, Circle.objects.get(pk=circle_id), member_id)
	return JsonResponse(member_json(member))


@api_view(methods=("POST",))
def remove(request, circle_id, member_id):
	circles.remove_member(request.user, Circle.objects.get(pk=circle_id), member_id)
	return JsonResponse({"removed": True})
