"""Business orchestration for wallets.

Every balance change goes through transfer(): rows are locked, the balance is
re-checked against the stored value, and debit, credit and the Transaction
insert commit as one unit. The wallet, webhook and VFD flows below are thin
wrappers that pick the source, destination and description.
"""
import hashlib
import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.utils import timezone

from .models import (
	Profile, UserSettings, MainWallet, BudgetWallet, GoalWallet, Transaction, TransactionType,
	ActivityType, KycStatus, WebhookEvent, WebhookEventStatus,
)
from .constants import LIVE, ZERO, to_amount, to_positive_amount, to_date, validate_mode, generate_reference
from .adapters.vfd_adapter import VFDClient

logger = logging.getLogger(__name__)

WALLET_MODELS = {
	"budget": BudgetWallet,
	"goal": GoalWallet,
}

BUDGET_OPTIONS = (
	"disbursement_frequency", "disbursement_day", "enable_rollover", "automatic_allocation",
	"allocation_frequency", "allocation_day", "custom_notifications",
)
GOAL_OPTIONS = ("target_date", "funding_source", "image_url", "smart_reminders", "flex_contributions")


def _row_key(row):
	return (row._meta.label, str(row.pk))


def _lock_rows(*rows):
	"""
	Re-read rows with SELECT ... FOR UPDATE in a fixed order so two transfers over
	the same pair of wallets can't deadlock. Returns {row_key: locked_row}.
	"""
	present = sorted((r for r in rows if r is not None), key=_row_key)
	return {_row_key(r): type(r).objects.select_for_update().get(pk=r.pk) for r in present}


def _replayed(tx, user, amount, type):
	# reference numbers are global; a key reused by another sender or for a different operation is a conflict
	if tx.sender_id != user.pk or tx.amount != amount or tx.type != type:
		raise ValidationError("idempotency_key_conflict")
	return tx


@transaction.atomic
def transfer(user, source, destination, amount, *, mode: str, type: str, activity_type: str, description: str,
		receiver=None, related=None, circle=None, metadata: dict | None = None,
		reference_prefix: str = "TXN", idempotency_key: str | None = None,
		enforce_ceiling: bool = True) -> Transaction:
	"""
	Move amount from source to destination and log it.

	source=None means money enters from outside (top-up, bank credit); destination=None
	means it leaves (send to bank). With an idempotency_key the key is the reference
	number, and a repeat call returns the first Transaction without side-effects.
	enforce_ceiling=False skips MAX_SINGLE_TRANSFER_NGN for credits the bank has already settled.
	"""
	amount = to_positive_amount(amount)
	validate_mode(mode)
	if source is None and destination is None:
		raise ValueError("transfer needs a source or a destination")
	if source is not None and destination is not None and _row_key(source) == _row_key(destination):
		raise ValidationError("same_wallet")
	for row in (source, destination):
		if row is not None and row.mode != mode:
			raise ValidationError("mode_mismatch")
	ceiling = getattr(settings, "MAX_SINGLE_TRANSFER_NGN", None) if enforce_ceiling else None
	if ceiling is not None and amount > ceiling:
		raise ValidationError("over_limit")

	if idempotency_key:
		if len(idempotency_key) > 64:
			raise ValidationError("invalid_idempotency_key")
		existing = Transaction.objects.filter(reference_number=idempotency_key).first()
		if existing:
			return _replayed(existing, user, amount, type)

	locked = _lock_rows(source, destination)
	src = locked.get(_row_key(source)) if source is not None else None
	dst = locked.get(_row_key(destination)) if destination is not None else None

	if src is not None:
		if src.is_locked_at():
			raise ValidationError("wallet_locked")
		if src.balance < amount:
			raise ValidationError("insufficient_balance")

	if related is None:
		related = next((r for r in (dst, src) if r is not None and r.kind != "main"), dst or src)

	try:
		with transaction.atomic():
			tx = Transaction.objects.create(
				sender=user,
				receiver=receiver or user,
				amount=amount,
				type=type,
				activity_type=activity_type,
				description=description,
				mode=mode,
				reference_number=idempotency_key or generate_reference(reference_prefix),
				related_entity_type=getattr(related, "entity_type", ""),
				related_entity_id=str(related.pk) if related is not None else "",
				circle=circle,
				metadata=metadata or {},
			)
	except IntegrityError:
		# Another request with the same key raced us; nothing has been moved yet
		if idempotency_key:
			return _replayed(Transaction.objects.get(reference_number=idempotency_key), user, amount, type)
		raise

	if src is not None:
		src.balance -= amount
		src.save(update_fields=["balance", "updated_at"])
		source.balance = src.balance
	if dst is not None:
		dst.balance += amount
		dst.save(update_fields=["balance", "updated_at"])
		destination.balance = dst.balance

	logger.info("transfer %s %s %s: %s -> %s", tx.reference_number, amount, mode,
		_row_key(src) if src is not None else "external", _row_key(dst) if dst is not None else "external")
	return tx


# --- Profile / mode ------------------------------------------------------------

def get_profile(user) -> Profile:
	profile, _ = Profile.objects.get_or_create(user=user)
	return profile


def get_user_settings(user) -> UserSettings:
	prefs, _ = UserSettings.objects.get_or_create(user=user)
	return prefs


def update_user_settings(user, **toggles) -> UserSettings:
	prefs = get_user_settings(user)
	changed = []
	for key, value in toggles.items():
		if key not in UserSettings.TOGGLES:
			raise ValidationError(f"unknown_setting:{key}")
		if not isinstance(value, bool):
			raise ValidationError(f"invalid_setting_value:{key}")
		setattr(prefs, key, value)
		changed.append(key)
	if changed:
		prefs.save(update_fields=changed + ["updated_at"])
	return prefs


PROFILE_FIELDS = ("full_name", "phone_number", "cash_tag", "avatar_url")


def update_profile(user, **fields) -> Profile:
	profile = get_profile(user)
	changed = []
	for key, value in fields.items():
		if key not in PROFILE_FIELDS:
			raise ValidationError(f"unknown_field:{key}")
		setattr(profile, key, (value or "").strip())
		changed.append(key)
	if changed:
		profile.save(update_fields=changed + ["updated_at"])
	return profile


def get_account_mode(user) -> str:
	return get_profile(user).account_mode


def set_account_mode(user, mode: str) -> Profile:
	"""
	Switch which namespace (demo/live) the user's reads and writes go to.
	Rows are not copied or merged between modes.
	"""
	validate_mode(mode)
	profile = get_profile(user)
	if profile.account_mode != mode:
		profile.account_mode = mode
		profile.save(update_fields=["account_mode", "updated_at"])
		logger.info("user %s switched to %s mode", user.pk, mode)
	return profile


# --- Wallets -------------------------------------------------------------------

def get_main_wallet(user, mode: str) -> MainWallet:
	"""
	Fetch (or lazily create) the user's main wallet for this mode
	"""
	validate_mode(mode)
	try:
		with transaction.atomic():
			wallet, _ = MainWallet.objects.get_or_create(user=user, mode=mode)
	except IntegrityError:
		wallet = MainWallet.objects.get(user=user, mode=mode)
	return wallet


def wallet_model(kind: str):
	try:
		return WALLET_MODELS[kind]
	except KeyError:
		raise ValidationError("invalid_wallet_kind")


def get_user_wallet(user, kind: str, wallet_id):
	"""
	Budget or goal wallet; raises <Model>.DoesNotExist unless it belongs to user
	"""
	return wallet_model(kind).objects.get(user=user, pk=wallet_id)


def list_budget_wallets(user, mode: str):
	return list(BudgetWallet.objects.filter(user=user, mode=validate_mode(mode)).order_by("-created_at"))


def list_goal_wallets(user, mode: str):
	return list(GoalWallet.objects.filter(user=user, mode=validate_mode(mode)).order_by("-created_at"))


def wallets_overview(user, mode: str) -> dict:
	main = get_main_wallet(user, mode)
	budgets = list_budget_wallets(user, mode)
	goals = list_goal_wallets(user, mode)
	total = main.balance + sum((w.balance for w in budgets), ZERO) + sum((w.balance for w in goals), ZERO)
	return {"main": main, "budgets": budgets, "goals": goals, "total": total}


def _lock_until(days) -> tuple:
	try:
		days = int(days)
	except (TypeError, ValueError):
		raise ValidationError("invalid_lock_duration")
	if days < 1:
		raise ValidationError("invalid_lock_duration")
	return days, timezone.now() + timedelta(days=days)


@transaction.atomic
def create_budget_wallet(user, mode: str, *, name: str, budget_amount=0, spend_limit=None,
		lock_days=None, **options) -> BudgetWallet:
	"""
	Create a budget wallet and fund it from the main wallet with budget_amount
	"""
	validate_mode(mode)
	name = (name or "").strip()
	if not name:
		raise ValidationError("name_required")
	unknown = set(options) - set(BUDGET_OPTIONS)
	if unknown:
		raise ValidationError(f"unknown_field:{sorted(unknown)[0]}")
	budget_amount = to_amount(budget_amount)
	if budget_amount < 0:
		raise ValidationError("invalid_amount")

	wallet = BudgetWallet(
		user=user,
		mode=mode,
		name=name,
		spend_limit=to_positive_amount(spend_limit) if spend_limit not in (None, "") else None,
		**options,
	)
	if lock_days not in (None, ""):
		wallet.lock_duration_days, wallet.lock_until = _lock_until(lock_days)
		wallet.is_locked = True
	wallet.save()

	if budget_amount > 0:
		transfer(user, get_main_wallet(user, mode), wallet, budget_amount,
			mode=mode, type=TransactionType.TRANSFER, activity_type=ActivityType.BUDGET_FUNDED,
			description=f"Funded budget wallet {wallet.name}", reference_prefix="BUD")
	return wallet


@transaction.atomic
def create_goal_wallet(user, mode: str, *, name: str, target_amount, initial_amount=0,
		lock_days=None, **options) -> GoalWallet:
	validate_mode(mode)
	name = (name or "").strip()
	if not name:
		raise ValidationError("name_required")
	unknown = set(options) - set(GOAL_OPTIONS)
	if unknown:
		raise ValidationError(f"unknown_field:{sorted(unknown)[0]}")
	initial_amount = to_amount(initial_amount)
	if initial_amount < 0:
		raise ValidationError("invalid_amount")

	if "target_date" in options:
		options["target_date"] = to_date(options["target_date"])
	wallet = GoalWallet(user=user, mode=mode, name=name, target_amount=to_positive_amount(target_amount), **options)
	if lock_days not in (None, ""):
		wallet.lock_duration_days, wallet.lock_until = _lock_until(lock_days)
		wallet.is_locked = True
	wallet.save()

	if initial_amount > 0:
		transfer(user, get_main_wallet(user, mode), wallet, initial_amount,
			mode=mode, type=TransactionType.TRANSFER, activity_type=ActivityType.GOAL_CONTRIBUTION,
			description=f"Saved towards {wallet.name}", reference_prefix="GOAL")
	return wallet


def top_up(user, amount, mode: str, *, method: str = "bank", idempotency_key: str | None = None) -> Transaction:
	"""
	Credit the main wallet from an outside source
	"""
	wallet = get_main_wallet(user, mode)
	return transfer(user, None, wallet, amount,
		mode=mode, type=TransactionType.DEPOSIT, activity_type=ActivityType.TOP_UP,
		description="Added funds", metadata={"method": method},
		reference_prefix="TOPUP", idempotency_key=idempotency_key)


def send_money(user, amount, mode: str, *, method: str, bank_name: str = "", account_number: str = "",
		recipient=None, circle=None, note: str = "", idempotency_key: str | None = None) -> Transaction:
	"""
	Pay out of the main wallet to a bank account, another user, or a circle.

	Sending to another user credits their main wallet in the same mode, in the same unit.
	"""
	note = (note or "").strip()
	if method == "circle":
		from .circles import contribute
		if circle is None:
			raise ValidationError("circle_required")
		return contribute(user, circle, amount, mode, description="Sent to circle" + (f" - {note}" if note else ""))

	wallet = get_main_wallet(user, mode)
	if method == "bank":
		if not bank_name or not account_number:
			raise ValidationError("bank_details_required")
		description = f"Sent to {bank_name} - {account_number}"
		destination, receiver, tx_type = None, None, TransactionType.WITHDRAWAL
		metadata = {"method": method, "bank_name": bank_name, "account_number": account_number}
	elif method == "user":
		if recipient is None or recipient.pk == user.pk:
			raise ValidationError("invalid_recipient")
		profile = get_profile(recipient)
		name = profile.full_name or recipient.get_username()
		description = f"Sent to {name} ({profile.cash_tag})" if profile.cash_tag else f"Sent to {name}"
		destination, receiver, tx_type = get_main_wallet(recipient, mode), recipient, TransactionType.TRANSFER
		metadata = {"method": method}
	else:
		raise ValidationError("invalid_method")

	if note:
		description += f" - {note}"
	return transfer(user, wallet, destination, amount,
		mode=mode, type=tx_type, activity_type=ActivityType.SEND, description=description,
		receiver=receiver, related=destination or wallet, metadata=metadata,
		reference_prefix="SEND", idempotency_key=idempotency_key)


def move_to_main(user, wallet, amount) -> Transaction:
	"""
	Budget/goal wallet -> main wallet (same mode). Refused while the wallet is locked.
	"""
	return transfer(user, wallet, get_main_wallet(user, wallet.mode), amount,
		mode=wallet.mode, type=TransactionType.WITHDRAWAL, activity_type=ActivityType.WALLET_WITHDRAWAL,
		description="Moved to main wallet", related=wallet, reference_prefix="MOVE")


def add_from_main(user, wallet, amount) -> Transaction:
	if wallet.kind == "goal":
		activity, description = ActivityType.GOAL_CONTRIBUTION, f"Added to goal: {wallet.name}"
	else:
		activity, description = ActivityType.BUDGET_FUNDED, "Added from main wallet"
	tx = transfer(user, get_main_wallet(user, wallet.mode), wallet, amount,
		mode=wallet.mode, type=TransactionType.DEPOSIT, activity_type=activity,
		description=description, related=wallet, reference_prefix="ADD")
	if wallet.kind == "goal" and wallet.target_amount and wallet.balance >= wallet.target_amount:
		logger.info("goal wallet %s reached its target", wallet.pk)
	return tx


def move_money(user, source, destination, amount) -> Transaction:
	"""
	General wallet-to-wallet move between the user's own wallets
	"""
	for w in (source, destination):
		if w.user_id != user.pk:
			raise ValidationError("forbidden")
	return transfer(user, source, destination, amount,
		mode=source.mode, type=TransactionType.TRANSFER, activity_type=ActivityType.TRANSFER,
		description=f"Moved from {source.name} to {destination.name}", reference_prefix="MOVE")


@transaction.atomic
def delete_wallet(user, wallet) -> Transaction | None:
	"""
	Sweep any remaining balance back to the main wallet, then delete the row.
	Returns the sweep Transaction (None when the wallet was empty).
	"""
	current = type(wallet).objects.select_for_update().get(pk=wallet.pk, user=user)
	if current.is_locked_at():
		raise ValidationError("wallet_locked")
	tx = None
	if current.balance > 0:
		tx = transfer(user, current, get_main_wallet(user, current.mode), current.balance,
			mode=current.mode, type=TransactionType.TRANSFER, activity_type=ActivityType.WALLET_WITHDRAWAL,
			description=f"Transfer from deleted {current.kind} wallet {current.name}",
			related=current, metadata={"deleted_wallet": current.name}, reference_prefix="DEL")
	current.delete()
	logger.info("deleted %s wallet %s", wallet.kind, wallet.pk)
	return tx


# --- Lock state ----------------------------------------------------------------

def lock_state(wallet, now=None) -> str:
	return "locked" if wallet.is_locked_at(now) else "unlocked"


def lock_wallet(wallet, days) -> BudgetWallet | GoalWallet:
	"""
	unlocked -> locked-until(now + days). Re-locking a locked wallet can only extend it.
	"""
	days, until = _lock_until(days)
	if wallet.is_locked_at() and wallet.lock_until > until:
		until = wallet.lock_until
	wallet.is_locked = True
	wallet.lock_until = until
	wallet.lock_duration_days = days
	wallet.save(update_fields=["is_locked", "lock_until", "lock_duration_days", "updated_at"])
	return wallet


def unlock_wallet(wallet) -> BudgetWallet | GoalWallet:
	if wallet.is_locked_at():
		raise ValidationError("wallet_locked")
	wallet.is_locked = False
	wallet.lock_until = None
	wallet.save(update_fields=["is_locked", "lock_until", "updated_at"])
	return wallet


def update_wallet_settings(wallet, *, name=None, spend_limit=None, target_amount=None, locked=None, lock_days=None):
	if locked is True:
		lock_wallet(wallet, lock_days)
	elif locked is False and wallet.is_locked:
		unlock_wallet(wallet)

	changed = []
	if name is not None:
		if not name.strip():
			raise ValidationError("name_required")
		wallet.name = name.strip()
		changed.append("name")
	if spend_limit is not None:
		if wallet.kind != "budget":
			raise ValidationError("unknown_field:spend_limit")
		wallet.spend_limit = to_positive_amount(spend_limit) if spend_limit != "" else None
		changed.append("spend_limit")
	if target_amount is not None:
		if wallet.kind != "goal":
			raise ValidationError("unknown_field:target_amount")
		wallet.target_amount = to_positive_amount(target_amount)
		changed.append("target_amount")
	if changed:
		wallet.save(update_fields=changed + ["updated_at"])
	return wallet


# --- VFD -----------------------------------------------------------------------

def create_vfd_wallet(user, *, full_name: str, phone_number: str, email: str, client: VFDClient | None = None) -> Profile:
	"""
	Open a VFD bank sub-account, store it on the profile and prepare the live main wallet.
	VFDError from the client propagates to the caller.
	"""
	client = client or VFDClient()
	data = client.create_wallet(full_name=full_name, phone_number=phone_number, email=email)
	logger.info("VFD wallet %s created for user %s", data.get("walletId"), user.pk)

	bank_name = getattr(settings, "VFD_BANK_NAME", "VFD Microfinance Bank")
	with transaction.atomic():
		profile = Profile.objects.select_for_update().get(pk=get_profile(user).pk)
		profile.vfd_wallet_id = str(data["walletId"])
		profile.vfd_account_number = str(data.get("accountNumber", ""))
		profile.vfd_account_name = str(data.get("accountName", ""))
		profile.vfd_wallet_reference = str(data.get("walletReference", ""))
		profile.vfd_bank_name = bank_name
		profile.phone_number = phone_number or profile.phone_number
		profile.kyc_status = KycStatus.APPROVED
		profile.save()

		wallet = get_main_wallet(user, LIVE)
		wallet.bank_name = bank_name
		wallet.bank_account_number = profile.vfd_account_number
		wallet.save(update_fields=["bank_name", "bank_account_number", "updated_at"])
	return profile



def vfd_credit_reference(event_id: str) -> str:
	"""
	Transaction reference for a VFD event: "vfd:<id>", or "vfd:<sha256 prefix>" when the id
	would not fit in reference_number (64 chars)
	"""
	if len(event_id) <= 60:
		return f"vfd:{event_id}"
	return "vfd:" + hashlib.sha256(event_id.encode("utf-8")).hexdigest()[:60]


@transaction.atomic
def apply_vfd_credit(*, event_id: str, wallet_id: str, amount, sender_name: str = "", payload: dict | None = None):
	"""
	Credit the live main wallet for a verified VFD credit notification.

	Idempotence: ensured by WebhookEvent (provider, event_id) uniqueness and the
	event id doubling as the Transaction reference. Bank credits are
	already settled, so the single-transfer ceiling does not apply. Returns (event, applied_now).
	Raises Profile.DoesNotExist for an unknown wallet id before anything is written.
	"""
	amount = to_positive_amount(amount)
	if len(event_id) > WebhookEvent._meta.get_field("event_id").max_length:
		raise ValidationError("invalid_event_id")
	profile = Profile.objects.select_related("user").get(vfd_wallet_id=wallet_id)

	event, _ = WebhookEvent.objects.get_or_create(
		provider="vfd",
		event_id=event_id,
		defaults=dict(event_type="credit", payload=payload or {}),
	)
	event = WebhookEvent.objects.select_for_update().get(pk=event.pk)
	if event.status == WebhookEventStatus.APPLIED:
		return event, False

	wallet = get_main_wallet(profile.user, LIVE)
	tx = transfer(profile.user, None, wallet, amount,
		mode=LIVE, type=TransactionType.DEPOSIT, activity_type=ActivityType.DEPOSIT,
		description=f"Deposit from {sender_name or 'Bank Transfer'}",
		metadata={"provider": "vfd", "event_id": event_id, "wallet_id": wallet_id},
		idempotency_key=vfd_credit_reference(event_id), enforce_ceiling=False)

	event.status = WebhookEventStatus.APPLIED
	event.transaction = tx
	event.processed_at = timezone.now()
	event.save(update_fields=["status", "transaction", "processed_at"])
	return event, True


def record_ignored_event(*, event_id: str, event_type: str, payload: dict) -> WebhookEvent:
	event, _ = WebhookEvent.objects.get_or_create(
		provider="vfd",
		event_id=event_id,
		defaults=dict(event_type=event_type[:32], payload=payload, status=WebhookEventStatus.IGNORED,
			processed_at=timezone.now()),
	)
	return event
