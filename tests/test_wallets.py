from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from core import services
from core.models import Transaction, BudgetWallet, GoalWallet, MainWallet, TransactionType, ActivityType

pytestmark = pytest.mark.django_db


def _main(user, mode="demo"):
	return services.get_main_wallet(user, mode)


def test_main_wallet_is_created_lazily_once_per_mode(user):
	demo = _main(user)
	assert demo.balance == 0
	assert _main(user).pk == demo.pk
	assert _main(user, "live").pk != demo.pk
	assert MainWallet.objects.filter(user=user).count() == 2


def test_top_up_credits_main_and_logs(user):
	tx = services.top_up(user, "2500.50", "demo")
	assert _main(user).balance == Decimal("2500.50")
	assert tx.type == TransactionType.DEPOSIT
	assert tx.activity_type == ActivityType.TOP_UP
	assert tx.description == "Added funds"
	assert tx.reference_number.startswith("TOPUP-")


def test_groceries_budget_funded_from_main(funded_user):
	budget = services.create_budget_wallet(funded_user, "demo", name="Groceries", budget_amount="4000")
	assert _main(funded_user).balance == Decimal("6000.00")
	assert BudgetWallet.objects.get(pk=budget.pk).balance == Decimal("4000.00")
	funding = Transaction.objects.get(related_entity_id=str(budget.pk))
	assert funding.activity_type == ActivityType.BUDGET_FUNDED
	assert funding.related_entity_type == "budget_wallet"


def test_budget_larger_than_main_balance_leaves_nothing_behind(funded_user):
	with pytest.raises(ValidationError) as exc:
		services.create_budget_wallet(funded_user, "demo", name="Rent", budget_amount="20000")
	assert exc.value.message == "insufficient_balance"
	assert not BudgetWallet.objects.exists()
	assert _main(funded_user).balance == Decimal("10000.00")


def test_insufficient_balance_does_not_write(user):
	with pytest.raises(ValidationError) as exc:
		services.send_money(user, "100", "demo", method="bank", bank_name="GTBank", account_number="0123456789")
	assert exc.value.message == "insufficient_balance"
	assert Transaction.objects.count() == 0
	assert _main(user).balance == 0


def test_send_to_bank(funded_user):
	tx = services.send_money(funded_user, "1500", "demo", method="bank", bank_name="GTBank",
		account_number="0123456789", note="rent")
	assert tx.description == "Sent to GTBank - 0123456789 - rent"
	assert tx.type == TransactionType.WITHDRAWAL
	assert tx.activity_type == ActivityType.SEND
	assert _main(funded_user).balance == Decimal("8500.00")


def test_send_to_user_credits_recipient_in_same_mode(funded_user, other_user):
	services.update_profile(other_user, full_name="Tunde Bakare", cash_tag="tunde")
	tx = services.send_money(funded_user, "3000", "demo", method="user", recipient=other_user)
	assert tx.description == "Sent to Tunde Bakare (tunde)"
	assert tx.receiver_id == other_user.pk
	assert _main(funded_user).balance == Decimal("7000.00")
	assert _main(other_user).balance == Decimal("3000.00")
	assert _main(other_user, "live").balance == 0


def test_send_to_self_is_rejected(funded_user):
	with pytest.raises(ValidationError):
		services.send_money(funded_user, "10", "demo", method="user", recipient=funded_user)


def test_idempotency_key_applies_once(user):
	first = services.top_up(user, "500", "demo", idempotency_key="client-key-1")
	again = services.top_up(user, "500", "demo", idempotency_key="client-key-1")
	assert first.pk == again.pk
	assert _main(user).balance == Decimal("500.00")
	assert Transaction.objects.count() == 1


def test_idempotency_key_of_another_user_conflicts(user, other_user):
	services.top_up(user, "500", "demo", idempotency_key="shared-key")
	with pytest.raises(ValidationError) as exc:
		services.top_up(other_user, "500", "demo", idempotency_key="shared-key")
	assert exc.value.message == "idempotency_key_conflict"
	assert _main(other_user).balance == 0


def test_idempotency_key_reused_for_other_amount_or_operation_conflicts(funded_user):
	services.top_up(funded_user, "500", "demo", idempotency_key="client-key-2")
	for action in (
		lambda: services.top_up(funded_user, "900", "demo", idempotency_key="client-key-2"),
		lambda: services.send_money(funded_user, "500", "demo", method="bank", bank_name="GTBank",
			account_number="1", idempotency_key="client-key-2"),
	):
		with pytest.raises(ValidationError) as exc:
			action()
		assert exc.value.message == "idempotency_key_conflict"
	assert _main(funded_user).balance == Decimal("10500.00")
	assert Transaction.objects.filter(reference_number="client-key-2").count() == 1


def test_modes_are_isolated(funded_user):
	assert _main(funded_user, "live").balance == 0
	live_goal = services.create_goal_wallet(funded_user, "live", name="Car", target_amount="500000")
	with pytest.raises(ValidationError) as exc:
		services.move_money(funded_user, _main(funded_user), live_goal, "100")
	assert exc.value.message == "mode_mismatch"
	assert services.list_goal_wallets(funded_user, "demo") == []


def test_balance_equals_sum_of_deltas(funded_user):
	goal = services.create_goal_wallet(funded_user, "demo", name="Laptop", target_amount="8000", initial_amount="1000")
	services.add_from_main(funded_user, goal, "2500")
	services.move_to_main(funded_user, goal, "500")
	assert Transaction.objects.filter(description="Added to goal: Laptop").count() == 1
	goal.refresh_from_db()
	assert goal.balance == Decimal("3000.00")
	assert _main(funded_user).balance == Decimal("7000.00")
	assert goal.progress == pytest.approx(37.5)


def test_same_wallet_transfer_rejected(funded_user):
	main = _main(funded_user)
	with pytest.raises(ValidationError) as exc:
		services.move_money(funded_user, main, main, "10")
	assert exc.value.message == "same_wallet"


def test_move_money_rejects_foreign_wallet(funded_user, other_user):
	theirs = services.create_budget_wallet(other_user, "demo", name="Theirs")
	with pytest.raises(ValidationError) as exc:
		services.move_money(funded_user, _main(funded_user), theirs, "10")
	assert exc.value.message == "forbidden"


def test_locked_wallet_refuses_outflows(funded_user):
	goal = services.create_goal_wallet(funded_user, "demo", name="Rent", target_amount="5000",
		initial_amount="2000", lock_days=30)
	assert services.lock_state(goal) == "locked"

	for action in (
		lambda: services.move_to_main(funded_user, goal, "100"),
		lambda: services.unlock_wallet(goal),
		lambda: services.delete_wallet(funded_user, goal),
	):
		with pytest.raises(ValidationError) as exc:
			action()
		assert exc.value.message == "wallet_locked"

	# inflows are still accepted
	services.add_from_main(funded_user, goal, "500")
	assert GoalWallet.objects.get(pk=goal.pk).balance == Decimal("2500.00")


def test_lock_expires_without_a_write(funded_user):
	budget = services.create_budget_wallet(funded_user, "demo", name="Fuel", budget_amount="1000", lock_days=7)
	future = timezone.now() + timedelta(days=8)
	assert services.lock_state(budget, now=future) == "unlocked"

	BudgetWallet.objects.filter(pk=budget.pk).update(lock_until=timezone.now() - timedelta(seconds=1))
	budget.refresh_from_db()
	services.move_to_main(funded_user, budget, "1000")
	services.unlock_wallet(budget)
	assert budget.is_locked is False


def test_relock_only_extends(funded_user):
	budget = services.create_budget_wallet(funded_user, "demo", name="Fuel", lock_days=30)
	until = budget.lock_until
	services.lock_wallet(budget, 5)
	assert budget.lock_until == until
	services.lock_wallet(budget, 60)
	assert budget.lock_until > until


def test_invalid_lock_duration(funded_user):
	budget = services.create_budget_wallet(funded_user, "demo", name="Fuel")
	with pytest.raises(ValidationError) as exc:
		services.lock_wallet(budget, 0)
	assert exc.value.message == "invalid_lock_duration"


def test_delete_sweeps_balance_to_main(funded_user):
	budget = services.create_budget_wallet(funded_user, "demo", name="Groceries", budget_amount="4000")
	tx = services.delete_wallet(funded_user, budget)
	assert not BudgetWallet.objects.filter(pk=budget.pk).exists()
	assert _main(funded_user).balance == Decimal("10000.00")
	assert tx.reference_number.startswith("DEL-")
	assert tx.description == "Transfer from deleted budget wallet Groceries"
	assert tx.amount == Decimal("4000.00")


def test_delete_empty_wallet_has_no_sweep(funded_user):
	goal = services.create_goal_wallet(funded_user, "demo", name="Trip", target_amount="100")
	assert services.delete_wallet(funded_user, goal) is None
	assert not GoalWallet.objects.exists()


def test_update_wallet_settings(funded_user):
	budget = services.create_budget_wallet(funded_user, "demo", name="Fuel")
	services.update_wallet_settings(budget, name="Transport", spend_limit="2000", locked=True, lock_days=3)
	budget.refresh_from_db()
	assert budget.name == "Transport"
	assert budget.spend_limit == Decimal("2000.00")
	assert services.lock_state(budget) == "locked"
	with pytest.raises(ValidationError):
		services.update_wallet_settings(budget, target_amount="10")


def test_transfer_over_ceiling(funded_user, settings):
	settings.MAX_SINGLE_TRANSFER_NGN = Decimal("5000")
	with pytest.raises(ValidationError) as exc:
		services.send_money(funded_user, "6000", "demo", method="bank", bank_name="GTBank", account_number="1")
	assert exc.value.message == "over_limit"


def test_account_mode_switch(user):
	assert services.get_account_mode(user) == "demo"
	services.set_account_mode(user, "live")
	assert services.get_account_mode(user) == "live"
	with pytest.raises(ValidationError):
		services.set_account_mode(user, "test")


def test_user_settings_toggles(user):
	prefs = services.update_user_settings(user, marketing_emails=True, show_balance=False)
	assert prefs.marketing_emails is True
	assert prefs.show_balance is False
	with pytest.raises(ValidationError):
		services.update_user_settings(user, dark_mode=True)
	with pytest.raises(ValidationError) as exc:
		services.update_user_settings(user, show_balance="false")
	assert exc.value.message == "invalid_setting_value:show_balance"
	prefs.refresh_from_db()
	assert prefs.show_balance is False
