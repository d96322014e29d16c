"""Read-side queries over the Transaction log: activity feed, stats, analytics.

Every query is scoped to one account mode; rows from the other mode never leak in.
"""
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db.models import Q, Sum, Count
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .models import Transaction, ActivityType, BudgetWallet, GoalWallet, MainWallet
from .constants import ZERO, validate_mode

SENT_TYPES = (ActivityType.SEND, ActivityType.TRANSFER, ActivityType.WITHDRAWAL,
	ActivityType.CONTRIBUTION, ActivityType.CIRCLE_CONTRIBUTION)
RECEIVED_TYPES = (ActivityType.RECEIVE, ActivityType.DEPOSIT, ActivityType.TOP_UP)

# Outflow from the user's point of view when they are the sender
OUTFLOW_TYPES = (ActivityType.SEND, ActivityType.WITHDRAWAL, ActivityType.CIRCLE_CONTRIBUTION,
	ActivityType.CONTRIBUTION)


def _user_rows(user, mode: str):
	return Transaction.objects.filter(Q(sender=user) | Q(receiver=user), mode=validate_mode(mode))


def list_activities(user, mode: str, activity_types=None, date_from=None, date_to=None,
		limit: int = 50, offset: int = 0):
	"""
	Newest-first page of the user's activity in one mode. Returns (rows, total).
	"""
	qs = _user_rows(user, mode)
	if activity_types:
		unknown = set(activity_types) - set(ActivityType.values)
		if unknown:
			raise ValidationError("invalid_activity_type")
		qs = qs.filter(activity_type__in=activity_types)
	if date_from:
		qs = qs.filter(created_at__gte=date_from)
	if date_to:
		qs = qs.filter(created_at__lte=date_to)
	total = qs.count()
	rows = list(qs.order_by("-created_at")[offset:offset + limit])
	return rows, total


def _sum(qs) -> Decimal:
	return qs.aggregate(s=Sum("amount"))["s"] or ZERO


def activity_stats(user, mode: str, now=None) -> dict:
	now = now or timezone.now()
	start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
	rows = _user_rows(user, mode)
	return {
		"total_activities": rows.count(),
		"this_month": rows.filter(created_at__gte=start_of_month).count(),
		"total_sent": _sum(Transaction.objects.filter(sender=user, mode=mode, activity_type__in=SENT_TYPES)),
		"total_received": _sum(Transaction.objects.filter(receiver=user, mode=mode, activity_type__in=RECEIVED_TYPES)),
	}


def _month_start(dt):
	return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def analytics_summary(user, mode: str, months: int = 6, now=None) -> dict:
	"""
	Monthly inflow/outflow series for the last `months` months, outflow breakdown
	by activity type, and net worth across main/budget/goal wallets.
	"""
	validate_mode(mode)
	now = now or timezone.now()
	start = _month_start(now)
	for _ in range(months - 1):
		start = _month_start(start - timedelta(days=1))

	inflow_qs = Transaction.objects.filter(receiver=user, mode=mode, activity_type__in=RECEIVED_TYPES, created_at__gte=start)
	outflow_qs = Transaction.objects.filter(sender=user, mode=mode, activity_type__in=OUTFLOW_TYPES, created_at__gte=start)

	series = {}
	cursor = start
	for _ in range(months):
		series[cursor.strftime("%Y-%m")] = {"inflow": ZERO, "outflow": ZERO}
		cursor = _month_start(cursor + timedelta(days=32))

	for key, qs in (("inflow", inflow_qs), ("outflow", outflow_qs)):
		for row in qs.annotate(month=TruncMonth("created_at")).values("month").annotate(total=Sum("amount")):
			label = row["month"].strftime("%Y-%m")
			if label in series:
				series[label][key] = row["total"]

	breakdown = []
	total_out = _sum(outflow_qs)
	for row in outflow_qs.values("activity_type").annotate(total=Sum("amount"), count=Count("id")).order_by("-total"):
		pct = float(row["total"] / total_out * 100) if total_out else 0.0
		breakdown.append({
			"activity_type": row["activity_type"],
			"amount": row["total"],
			"count": row["count"],
			"percentage": round(pct, 1),
		})

	net_worth = (
		_balance(MainWallet.objects.filter(user=user, mode=mode))
		+ _balance(BudgetWallet.objects.filter(user=user, mode=mode))
		+ _balance(GoalWallet.objects.filter(user=user, mode=mode))
	)
	return {
		"months": [{"month": k, **v} for k, v in series.items()],
		"outflow_breakdown": breakdown,
		"total_inflow": _sum(inflow_qs),
		"total_outflow": total_out,
		"net_worth": net_worth,
	}


def _balance(qs) -> Decimal:
	return qs.aggregate(s=Sum("balance"))["s"] or ZERO
