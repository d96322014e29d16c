"""Read-only endpoints over the activity log: feed, stats and analytics."""

from datetime import datetime, time

from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from core import services
from core.activity import list_activities, activity_stats, analytics_summary
from .helpers import api_view, money, transaction_json, BadRequest


def _int_param(request, name, default, ceiling):
	try:
		value = int(request.GET.get(name, default))
	except ValueError:
		raise BadRequest(f"{name} must be an integer")
	if value < 0:
		raise BadRequest(f"{name} must be >= 0")
	return min(value, ceiling)


def _date_param(request, name, end_of_day=False):
	raw = request.GET.get(name)
	if not raw:
		return None
	try:
		parsed = parse_date(raw)
	except ValueError:
		parsed = None
	if parsed is None:
		raise BadRequest(f"{name} must be YYYY-MM-DD")
	return timezone.make_aware(datetime.combine(parsed, time.max if end_of_day else time.min))


@api_view()
def activity(request):
	"""
	GET: Newest-first activity in the current mode.
	  ?limit=50&offset=0&types=send,top_up&date_from=2025-01-01&date_to=2025-01-31
	"""
	types = [t for t in request.GET.get("types", "").split(",") if t]
	date_from = _date_param(request, "date_from")
	date_to = _date_param(request, "date_to", end_of_day=True)
	rows, total = list_activities(
		request.user,
		services.get_account_mode(request.user),
		activity_types=types or None,
		date_from=date_from,
		date_to=date_to,
		limit=_int_param(request, "limit", 50, 200),
		offset=_int_param(request, "offset", 0, 10**6),
	)
	return JsonResponse({"total": total, "results": [transaction_json(t) for t in rows]})


@api_view()
def stats(request):
	data = activity_stats(request.user, services.get_account_mode(request.user))
	return JsonResponse({
		"total_activities": data["total_activities"],
		"this_month": data["this_month"],
		"total_sent": money(data["total_sent"]),
		"total_received": money(data["total_received"]),
	})


@api_view()
def analytics(request):
	"""
	GET: ?months=6 monthly inflow/outflow, outflow breakdown and net worth
	"""
	months = max(1, _int_param(request, "months", 6, 24))
	data = analytics_summary(request.user, services.get_account_mode(request.user), months=months)
	return JsonResponse({
		"months": [
			{"month": m["month"], "inflow": money(m["inflow"]), "outflow": money(m["outflow"])}
			for m in data["months"]
		],
		"outflow_breakdown": [
			{**row, "amount": money(row["amount"])} for row in data["outflow_breakdown"]
		],
		"total_inflow": money(data["total_inflow"]),
		"total_outflow": money(data["total_outflow"]),
		"net_worth": money(data["net_worth"]),
	})
