from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from core import circles, services
from core.models import Circle, CircleMember, CircleRole, Transaction, ActivityType

pytestmark = pytest.mark.django_db


@pytest.fixture
def circle(user):
	return circles.create_circle(user, "demo", name="Lagos Trip", visibility="public", target_amount="100000")


@pytest.fixture
def member(other_user, circle):
	services.top_up(other_user, "5000", "demo")
	circles.join_circle(other_user, circle)
	return other_user


def _code(exc_info):
	return exc_info.value.message


def test_creator_is_admin(user, circle):
	assert circles.list_user_circles(user) == [(circle, CircleRole.ADMIN)]
	assert circle.member_count == 1
	assert circle.max_members == 50


def test_contribution_moves_money_and_counts(member, circle):
	tx = circles.contribute(member, circle, "2000", "demo")
	circle.refresh_from_db()
	assert circle.balance == Decimal("2000.00")
	assert services.get_main_wallet(member, "demo").balance == Decimal("3000.00")
	assert CircleMember.objects.get(circle=circle, user=member).total_contributed == Decimal("2000.00")
	assert tx.activity_type == ActivityType.CIRCLE_CONTRIBUTION
	assert tx.circle_id == circle.pk


def test_contribution_in_other_mode_rejected(member, circle):
	services.top_up(member, "5000", "live")
	with pytest.raises(ValidationError) as exc:
		circles.contribute(member, circle, "100", "live")
	assert _code(exc) == "mode_mismatch"


def test_outsider_contribution_needs_permission(funded_user, django_user_model):
	owner = django_user_model.objects.create_user(username="owner", password="x")
	closed = circles.create_circle(owner, "demo", name="Family")
	with pytest.raises(ValidationError) as exc:
		circles.contribute(funded_user, closed, "100", "demo")
	assert _code(exc) == "forbidden"

	circles.update_circle_settings(owner, closed, allow_external_contributions=True)
	circles.contribute(funded_user, closed, "100", "demo")
	assert Circle.objects.get(pk=closed.pk).balance == Decimal("100.00")


def test_contribution_checks_current_circle_settings(user, other_user, circle):
	services.top_up(other_user, "1000", "demo")
	circles.update_circle_settings(user, circle, allow_external_contributions=True)
	loaded = Circle.objects.get(pk=circle.pk)
	circles.update_circle_settings(user, circle, allow_external_contributions=False)
	with pytest.raises(ValidationError) as exc:
		circles.contribute(other_user, loaded, "100", "demo")
	assert _code(exc) == "forbidden"
	assert services.get_main_wallet(other_user, "demo").balance == Decimal("1000.00")


def test_only_managers_withdraw(user, member, circle):
	circles.contribute(member, circle, "2000", "demo")
	with pytest.raises(ValidationError) as exc:
		circles.withdraw(member, circle, "500", "demo")
	assert _code(exc) == "forbidden"

	tx = circles.withdraw(user, circle, "500", "demo", reason="bus tickets")
	assert tx.description == "Withdrawal from Lagos Trip - bus tickets"
	assert services.get_main_wallet(user, "demo").balance == Decimal("500.00")

	m = CircleMember.objects.get(circle=circle, user=member)
	circles.promote_member(user, circle, m.pk)
	circles.withdraw(member, circle, "500", "demo")
	assert Circle.objects.get(pk=circle.pk).balance == Decimal("1000.00")


def test_withdraw_more_than_balance(user, circle):
	with pytest.raises(ValidationError) as exc:
		circles.withdraw(user, circle, "1", "demo")
	assert _code(exc) == "insufficient_balance"


def test_join_rules(user, other_user, django_user_model):
	private = circles.create_circle(user, "demo", name="Private")
	with pytest.raises(ValidationError):
		circles.join_circle(other_user, private)

	small = circles.create_circle(user, "demo", name="Tiny", visibility="public", max_members=2)
	circles.join_circle(other_user, small)
	with pytest.raises(ValidationError) as exc:
		circles.join_circle(other_user, small)
	assert _code(exc) == "already_member"

	third = django_user_model.objects.create_user(username="third", password="x")
	with pytest.raises(ValidationError) as exc:
		circles.join_circle(third, small)
	assert _code(exc) == "circle_full"


def test_invite_bypasses_visibility(user, other_user):
	private = circles.create_circle(user, "demo", name="Private")
	m = circles.add_member(user, private, other_user, role=CircleRole.MODERATOR)
	assert m.role == CircleRole.MODERATOR


def test_private_circle_hidden_from_outsiders(user, other_user):
	private = circles.create_circle(user, "demo", name="Private")
	with pytest.raises(Circle.DoesNotExist):
		circles.get_circle_detail(other_user, private.pk)
	assert circles.get_circle_detail(user, private.pk)["role"] == CircleRole.ADMIN


def test_detail_orders_members_by_contribution(user, member, circle):
	circles.contribute(member, circle, "1000", "demo")
	detail = circles.get_circle_detail(user, circle.pk)
	assert [m.user_id for m in detail["members"]] == [member.pk, user.pk]
	assert len(detail["transactions"]) == 1


def test_settings_admin_only_and_cap(user, member, circle):
	with pytest.raises(ValidationError):
		circles.update_circle_settings(member, circle, name="Hijacked")
	with pytest.raises(ValidationError) as exc:
		circles.update_circle_settings(user, circle, max_members=1)
	assert _code(exc) == "max_members_below_member_count"
	updated = circles.update_circle_settings(user, circle, name="Lagos Trip 2026", deadline="2026-12-01")
	assert updated.name == "Lagos Trip 2026"


def test_member_management(user, member, circle):
	admin_row = CircleMember.objects.get(circle=circle, user=user)
	with pytest.raises(ValidationError) as exc:
		circles.demote_member(user, circle, admin_row.pk)
	assert _code(exc) == "cannot_modify_admin"

	row = CircleMember.objects.get(circle=circle, user=member)
	assert circles.promote_member(user, circle, row.pk).role == CircleRole.MODERATOR
	assert circles.demote_member(user, circle, row.pk).role == CircleRole.MEMBER
	circles.remove_member(user, circle, row.pk)
	assert circle.member_count == 1


def test_leave(user, member, circle):
	with pytest.raises(ValidationError) as exc:
		circles.leave_circle(user, circle)
	assert _code(exc) == "admin_cannot_leave"
	circles.leave_circle(member, circle)
	with pytest.raises(ValidationError) as exc:
		circles.leave_circle(member, circle)
	assert _code(exc) == "not_member"


def test_delete_requires_empty_balance(user, member, circle):
	circles.contribute(member, circle, "300", "demo")
	with pytest.raises(ValidationError) as exc:
		circles.delete_circle(user, circle)
	assert _code(exc) == "circle_not_empty"

	circles.withdraw(user, circle, "300", "demo")
	circles.delete_circle(user, circle)
	assert not Circle.objects.filter(pk=circle.pk).exists()
	# the log survives the circle
	assert Transaction.objects.filter(activity_type=ActivityType.CIRCLE_WITHDRAWAL).count() == 1


def test_send_money_to_circle(member, circle):
	tx = services.send_money(member, "250", "demo", method="circle", circle=circle, note="week 1")
	assert tx.description == "Sent to circle - week 1"
	assert Circle.objects.get(pk=circle.pk).balance == Decimal("250.00")
