"""Group savings circles: membership, roles and money in/out.

Money moves only through services.transfer, so a contribution debits the main
wallet, credits the circle, bumps the member's running total and logs the
Transaction in one unit.
"""
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from .models import Circle, CircleMember, CircleRole, CircleVisibility, Transaction, TransactionType, ActivityType
from .constants import to_positive_amount, to_date, validate_mode
from .services import transfer, get_main_wallet

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = (
	"name", "description", "category", "purpose", "target_amount", "deadline", "visibility", "max_members",
	"allow_external_contributions", "show_member_names", "show_contributions",
	"recurring_amount", "recurring_frequency",
)
MANAGER_ROLES = (CircleRole.ADMIN, CircleRole.MODERATOR)


def _membership(user, circle) -> CircleMember | None:
	return CircleMember.objects.filter(circle=circle, user=user).first()


def _require_role(user, circle, roles) -> CircleMember:
	member = _membership(user, circle)
	if member is None or member.role not in roles:
		raise ValidationError("forbidden")
	return member


def _clean_settings(fields: dict) -> dict:
	unknown = set(fields) - set(SETTINGS_FIELDS)
	if unknown:
		raise ValidationError(f"unknown_field:{sorted(unknown)[0]}")
	cleaned = dict(fields)
	for key in ("target_amount", "recurring_amount"):
		if cleaned.get(key) not in (None, ""):
			cleaned[key] = to_positive_amount(cleaned[key])
		elif key in cleaned:
			cleaned[key] = None
	if "deadline" in cleaned:
		cleaned["deadline"] = to_date(cleaned["deadline"])
	if "visibility" in cleaned and cleaned["visibility"] not in CircleVisibility.values:
		raise ValidationError("invalid_visibility")
	if "max_members" in cleaned:
		try:
			cleaned["max_members"] = int(cleaned["max_members"])
		except (TypeError, ValueError):
			raise ValidationError("invalid_max_members")
		if cleaned["max_members"] < 1:
			raise ValidationError("invalid_max_members")
	if "name" in cleaned and not (cleaned["name"] or "").strip():
		raise ValidationError("name_required")
	return cleaned


@transaction.atomic
def create_circle(user, mode: str, **fields) -> Circle:
	"""
	Create a circle in the given mode; the creator joins as admin
	"""
	validate_mode(mode)
	cleaned = _clean_settings(fields)
	if "name" not in cleaned:
		raise ValidationError("name_required")
	cleaned.setdefault("max_members", getattr(settings, "DEFAULT_CIRCLE_MAX_MEMBERS", 50))
	if not cleaned.get("purpose"):
		cleaned["purpose"] = cleaned.get("description") or ""
	circle = Circle.objects.create(created_by=user, mode=mode, **cleaned)
	CircleMember.objects.create(circle=circle, user=user, role=CircleRole.ADMIN)
	logger.info("circle %s created by %s", circle.pk, user.pk)
	return circle


def list_user_circles(user):
	"""
	[(circle, role)] for every circle the user belongs to
	"""
	rows = CircleMember.objects.filter(user=user).select_related("circle").order_by("-joined_at")
	return [(m.circle, m.role) for m in rows]


def list_public_circles(limit: int = 20):
	return list(Circle.objects.filter(visibility=CircleVisibility.PUBLIC).order_by("-created_at")[:limit])


def get_circle_detail(user, circle_id) -> dict:
	circle = Circle.objects.get(pk=circle_id)
	member = _membership(user, circle)
	if member is None and circle.visibility != CircleVisibility.PUBLIC:
		# private circles are invisible to outsiders
		raise Circle.DoesNotExist("Circle not found")
	members = list(circle.memberships.select_related("user").order_by("-total_contributed", "joined_at"))
	transactions = list(Transaction.objects.filter(circle=circle).order_by("-created_at")[:50])
	return {
		"circle": circle,
		"role": member.role if member else None,
		"user_contribution": member.total_contributed if member else 0,
		"members": members,
		"transactions": transactions,
	}


@transaction.atomic
def join_circle(user, circle) -> CircleMember:
	circle = Circle.objects.select_for_update().get(pk=circle.pk)
	if circle.visibility != CircleVisibility.PUBLIC:
		raise ValidationError("forbidden")
	if _membership(user, circle) is not None:
		raise ValidationError("already_member")
	if circle.memberships.count() >= circle.max_members:
		raise ValidationError("circle_full")
	return CircleMember.objects.create(circle=circle, user=user, role=CircleRole.MEMBER)


@transaction.atomic
def add_member(user, circle, new_user, role: str = CircleRole.MEMBER) -> CircleMember:
	"""
	Admin/moderator invite: bypasses the public-only rule but not the member cap
	"""
	_require_role(user, circle, MANAGER_ROLES)
	circle = Circle.objects.select_for_update().get(pk=circle.pk)
	if role not in (CircleRole.MEMBER, CircleRole.MODERATOR):
		raise ValidationError("invalid_role")
	if _membership(new_user, circle) is not None:
		raise ValidationError("already_member")
	if circle.memberships.count() >= circle.max_members:
		raise ValidationError("circle_full")
	return CircleMember.objects.create(circle=circle, user=new_user, role=role)


@transaction.atomic
def contribute(user, circle, amount, mode: str, description: str | None = None) -> Transaction:
	"""
	Main wallet -> circle. Non-members may contribute only when the circle allows external contributions.
	"""
	amount = to_positive_amount(amount)
	# circle rows lock before wallet rows, matching transfer's order
	circle = Circle.objects.select_for_update().get(pk=circle.pk)
	member = _membership(user, circle)
	if member is None and not circle.allow_external_contributions:
		raise ValidationError("forbidden")

	tx = transfer(user, get_main_wallet(user, mode), circle, amount,
		mode=mode, type=TransactionType.TRANSFER, activity_type=ActivityType.CIRCLE_CONTRIBUTION,
		description=description or f"Contributed to {circle.name}",
		circle=circle, related=circle, reference_prefix="CIRC")
	if member is not None:
		CircleMember.objects.filter(pk=member.pk).update(total_contributed=F("total_contributed") + amount)
	return tx


@transaction.atomic
def withdraw(user, circle, amount, mode: str, reason: str = "") -> Transaction:
	"""
	Circle -> the withdrawing manager's main wallet. Admins and moderators only.
	"""
	circle = Circle.objects.select_for_update().get(pk=circle.pk)
	_require_role(user, circle, MANAGER_ROLES)
	description = f"Withdrawal from {circle.name}"
	if reason:
		description += f" - {reason}"
	return transfer(user, circle, get_main_wallet(user, mode), amount,
		mode=mode, type=TransactionType.WITHDRAWAL, activity_type=ActivityType.CIRCLE_WITHDRAWAL,
		description=description, circle=circle, related=circle,
		metadata={"reason": reason} if reason else None, reference_prefix="CWD")


@transaction.atomic
def update_circle_settings(user, circle, **fields) -> Circle:
	_require_role(user, circle, (CircleRole.ADMIN,))
	cleaned = _clean_settings(fields)
	circle = Circle.objects.select_for_update().get(pk=circle.pk)
	if "max_members" in cleaned and cleaned["max_members"] < circle.memberships.count():
		raise ValidationError("max_members_below_member_count")
	for key, value in cleaned.items():
		setattr(circle, key, value)
	if cleaned:
		circle.save(update_fields=list(cleaned) + ["updated_at"])
	return circle


def _managed_member(user, circle, member_id) -> CircleMember:
	_require_role(user, circle, (CircleRole.ADMIN,))
	member = CircleMember.objects.get(pk=member_id, circle=circle)
	if member.role == CircleRole.ADMIN:
		raise ValidationError("cannot_modify_admin")
	return member


def promote_member(user, circle, member_id) -> CircleMember:
	member = _managed_member(user, circle, member_id)
	member.role = CircleRole.MODERATOR
	member.save(update_fields=["role"])
	return member


def demote_member(user, circle, member_id) -> CircleMember:
	member = _managed_member(user, circle, member_id)
	member.role = CircleRole.MEMBER
	member.save(update_fields=["role"])
	return member


def remove_member(user, circle, member_id) -> None:
	member = _managed_member(user, circle, member_id)
	member.delete()


def leave_circle(user, circle) -> None:
	member = _membership(user, circle)
	if member is None:
		raise ValidationError("not_member")
	if member.role == CircleRole.ADMIN:
		raise ValidationError("admin_cannot_leave")
	member.delete()


@transaction.atomic
def delete_circle(user, circle) -> None:
	"""
	Admin only; a circle still holding money can't be deleted (withdraw it first)
	"""
	_require_role(user, circle, (CircleRole.ADMIN,))
	circle = Circle.objects.select_for_update().get(pk=circle.pk)
	if circle.balance > 0:
		raise ValidationError("circle_not_empty")
	circle_id = circle.pk
	circle.delete()
	logger.info("circle %s deleted by %s", circle_id, user.pk)
