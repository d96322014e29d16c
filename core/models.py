"""Database models for the wallet backend.


Tables:
- Profile: per-user identity, account mode and VFD bank linkage
- UserSettings: notification/privacy toggles
- MainWallet: primary spendable balance, one per (user, mode)
- BudgetWallet / GoalWallet: sub-accounts with spend limits or savings targets
- Circle / CircleMember: group savings pool with role-based membership
- Transaction: append-only activity log; written in the same atomic unit as the balances it moves
- WebhookEvent: idempotent record of provider notifications, so we never double-credit
"""

import uuid
from django.db import models
from django.conf import settings
from django.utils import timezone

DEFAULT_CURRENCY = getattr(settings, "DEFAULT_CURRENCY", "NGN")


class AccountMode(models.TextChoices):
	DEMO = "demo", "Demo"
	LIVE = "live", "Live"


class KycStatus(models.TextChoices):
	PENDING = "pending", "Pending"
	APPROVED = "approved", "Approved"
	REJECTED = "rejected", "Rejected"


class Profile(models.Model):
	"""
	One row per auth user. account_mode selects which wallet rows the app reads and writes.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
	full_name = models.CharField(max_length=200, blank=True, default="")
	phone_number = models.CharField(max_length=32, blank=True, default="")
	cash_tag = models.CharField(max_length=50, blank=True, default="")
	avatar_url = models.URLField(blank=True, default="")
	account_mode = models.CharField(max_length=8, choices=AccountMode.choices, default=AccountMode.DEMO)
	kyc_status = models.CharField(max_length=16, choices=KycStatus.choices, default=KycStatus.PENDING)
	vfd_wallet_id = models.CharField(max_length=100, null=True, blank=True, unique=True)
	vfd_account_number = models.CharField(max_length=20, blank=True, default="")
	vfd_account_name = models.CharField(max_length=200, blank=True, default="")
	vfd_wallet_reference = models.CharField(max_length=100, blank=True, default="")
	vfd_bank_name = models.CharField(max_length=100, blank=True, default="")
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)


class UserSettings(models.Model):
	"""
	Notification and privacy toggles (one row per user)
	"""
	id = models.BigAutoField(primary_key=True)
	user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="app_settings")
	push_notifications = models.BooleanField(default=True)
	email_notifications = models.BooleanField(default=True)
	sms_notifications = models.BooleanField(default=False)
	transaction_alerts = models.BooleanField(default=True)
	circle_updates = models.BooleanField(default=True)
	marketing_emails = models.BooleanField(default=False)
	profile_public = models.BooleanField(default=True)
	show_balance = models.BooleanField(default=True)
	allow_circle_invites = models.BooleanField(default=True)
	biometric_for_transfers = models.BooleanField(default=False)
	updated_at = models.DateTimeField(auto_now=True)

	TOGGLES = (
		"push_notifications", "email_notifications", "sms_notifications", "transaction_alerts",
		"circle_updates", "marketing_emails", "profile_public", "show_balance",
		"allow_circle_invites", "biometric_for_transfers",
	)


class MainWallet(models.Model):
	"""
	The user's primary spendable balance in one mode. Created lazily on first read.
	"""
	kind = "main"
	entity_type = "main_wallet"

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="main_wallets")
	mode = models.CharField(max_length=8, choices=AccountMode.choices, default=AccountMode.DEMO)
	balance = models.DecimalField(max_digits=18, decimal_places=2, default=0)
	currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
	bank_name = models.CharField(max_length=100, blank=True, default="")
	bank_account_number = models.CharField(max_length=20, blank=True, default="")
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		unique_together = (("user", "mode"),)

	@property
	def name(self):
		return "Main wallet"

	def is_locked_at(self, now=None) -> bool:
		return False


class SubWallet(models.Model):
	"""
	Shared columns for budget and goal wallets.

	A wallet is locked while is_locked is set and lock_until is still in the future;
	once the date passes it reads as unlocked without any write.
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="%(class)ss")
	mode = models.CharField(max_length=8, choices=AccountMode.choices, default=AccountMode.DEMO)
	name = models.CharField(max_length=120)
	balance = models.DecimalField(max_digits=18, decimal_places=2, default=0)
	currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
	is_locked = models.BooleanField(default=False)
	lock_until = models.DateTimeField(null=True, blank=True)
	lock_duration_days = models.PositiveIntegerField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		abstract = True

	def is_locked_at(self, now=None) -> bool:
		if not self.is_locked or self.lock_until is None:
			return False
		return self.lock_until > (now or timezone.now())


class BudgetWallet(SubWallet):
	kind = "budget"
	entity_type = "budget_wallet"

	spend_limit = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
	disbursement_frequency = models.CharField(max_length=16, blank=True, default="") # 'daily'|'weekly'|'monthly'
	disbursement_day = models.CharField(max_length=16, blank=True, default="")
	enable_rollover = models.BooleanField(default=False)
	automatic_allocation = models.BooleanField(default=False)
	allocation_frequency = models.CharField(max_length=16, blank=True, default="")
	allocation_day = models.CharField(max_length=16, blank=True, default="")
	custom_notifications = models.BooleanField(default=False)


class FundingSource(models.TextChoices):
	MANUAL = "manual", "Manual"
	AUTO = "auto", "Automatic"


class GoalWallet(SubWallet):
	kind = "goal"
	entity_type = "goal_wallet"

	target_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
	target_date = models.DateField(null=True, blank=True)
	funding_source = models.CharField(max_length=8, choices=FundingSource.choices, default=FundingSource.MANUAL)
	image_url = models.URLField(blank=True, default="")
	smart_reminders = models.BooleanField(default=False)
	flex_contributions = models.BooleanField(default=True)

	@property
	def progress(self) -> float:
		"""
		Percent of target reached, capped at 100
		"""
		if not self.target_amount or self.target_amount <= 0:
			return 0.0
		return min(100.0, float(self.balance / self.target_amount * 100))


class CircleVisibility(models.TextChoices):
	PUBLIC = "public", "Public"
	PRIVATE = "private", "Private"


class Circle(models.Model):
	"""
	Group savings pool. Balance moves only through the ledger (contribute/withdraw).
	"""
	kind = "circle"
	entity_type = "circle"

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	name = models.CharField(max_length=200)
	description = models.TextField(blank=True, default="")
	category = models.CharField(max_length=50, blank=True, default="")
	purpose = models.TextField(blank=True, default="")
	mode = models.CharField(max_length=8, choices=AccountMode.choices, default=AccountMode.DEMO)
	balance = models.DecimalField(max_digits=18, decimal_places=2, default=0)
	currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
	target_amount = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
	deadline = models.DateField(null=True, blank=True)
	visibility = models.CharField(max_length=8, choices=CircleVisibility.choices, default=CircleVisibility.PRIVATE)
	max_members = models.PositiveIntegerField(default=50)
	allow_external_contributions = models.BooleanField(default=False)
	show_member_names = models.BooleanField(default=True)
	show_contributions = models.BooleanField(default=True)
	recurring_amount = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
	recurring_frequency = models.CharField(max_length=16, blank=True, default="")
	created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="created_circles")
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	@property
	def member_count(self) -> int:
		return self.memberships.count()

	def is_locked_at(self, now=None) -> bool:
		return False


class CircleRole(models.TextChoices):
	ADMIN = "admin", "Admin"
	MODERATOR = "moderator", "Moderator"
	MEMBER = "member", "Member"


class CircleMember(models.Model):
	id = models.BigAutoField(primary_key=True)
	circle = models.ForeignKey(Circle, on_delete=models.CASCADE, related_name="memberships")
	user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="circle_memberships")
	role = models.CharField(max_length=16, choices=CircleRole.choices, default=CircleRole.MEMBER)
	total_contributed = models.DecimalField(max_digits=18, decimal_places=2, default=0)
	joined_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		unique_together = (("circle", "user"),)


class TransactionType(models.TextChoices):
	DEPOSIT = "deposit", "Deposit"
	WITHDRAWAL = "withdrawal", "Withdrawal"
	TRANSFER = "transfer", "Transfer"


class TransactionStatus(models.TextChoices):
	PENDING = "pending", "Pending"
	COMPLETED = "completed", "Completed"
	FAILED = "failed", "Failed"


class ActivityType(models.TextChoices):
	TRANSFER = "transfer", "Transfer"
	DEPOSIT = "deposit", "Deposit"
	WITHDRAWAL = "withdrawal", "Withdrawal"
	CONTRIBUTION = "contribution", "Contribution"
	WALLET_CREATED = "wallet_created", "Wallet created"
	WALLET_FUNDED = "wallet_funded", "Wallet funded"
	WALLET_WITHDRAWAL = "wallet_withdrawal", "Wallet withdrawal"
	CIRCLE_CREATED = "circle_created", "Circle created"
	CIRCLE_JOINED = "circle_joined", "Circle joined"
	CIRCLE_CONTRIBUTION = "circle_contribution", "Circle contribution"
	CIRCLE_WITHDRAWAL = "circle_withdrawal", "Circle withdrawal"
	BUDGET_CREATED = "budget_created", "Budget created"
	BUDGET_FUNDED = "budget_funded", "Budget funded"
	BUDGET_DISBURSEMENT = "budget_disbursement", "Budget disbursement"
	GOAL_CREATED = "goal_created", "Goal created"
	GOAL_CONTRIBUTION = "goal_contribution", "Goal contribution"
	GOAL_COMPLETED = "goal_completed", "Goal completed"
	SEND = "send", "Send"
	RECEIVE = "receive", "Receive"
	TOP_UP = "top_up", "Top up"
	REQUEST_SENT = "request_sent", "Request sent"
	REQUEST_RECEIVED = "request_received", "Request received"


class Transaction(models.Model):
	"""
	Activity log row. Inserted in the same atomic unit as the balance changes it
	describes; only status may change afterwards.

	reference_number is unique and doubles as the idempotency key for retried calls
	"""
	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
	sender = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="sent_transactions")
	receiver = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="received_transactions")
	amount = models.DecimalField(max_digits=18, decimal_places=2)
	currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
	type = models.CharField(max_length=16, choices=TransactionType.choices)
	activity_type = models.CharField(max_length=32, choices=ActivityType.choices)
	description = models.TextField(blank=True, default="")
	status = models.CharField(max_length=16, choices=TransactionStatus.choices, default=TransactionStatus.COMPLETED)
	mode = models.CharField(max_length=8, choices=AccountMode.choices, default=AccountMode.DEMO)
	reference_number = models.CharField(max_length=64, unique=True)
	related_entity_type = models.CharField(max_length=20, blank=True, default="") # 'main_wallet'|'budget_wallet'|'goal_wallet'|'circle'|'user'
	related_entity_id = models.CharField(max_length=64, blank=True, default="")
	circle = models.ForeignKey(Circle, null=True, blank=True, on_delete=models.SET_NULL, related_name="transactions")
	metadata = models.JSONField(default=dict, blank=True)
	created_at = models.DateTimeField(default=timezone.now, db_index=True)

	class Meta:
		indexes = [
			models.Index(fields=["sender", "mode", "created_at"], name="core_tx_sender_mode_idx"),
			models.Index(fields=["receiver", "mode", "created_at"], name="core_tx_receiver_mode_idx"),
		]


class WebhookEventStatus(models.TextChoices):
	RECEIVED = "received", "Received"
	APPLIED = "applied", "Applied"
	IGNORED = "ignored", "Ignored"
	REJECTED = "rejected", "Rejected"


class WebhookEvent(models.Model):
	"""
	Provider notification we ingested.

	(provider, event_id) is unique to prevent double-ingest/double-credit
	"""
	id = models.BigAutoField(primary_key=True)
	provider = models.CharField(max_length=32, default="vfd")
	event_id = models.CharField(max_length=128)
	event_type = models.CharField(max_length=32)
	payload = models.JSONField(default=dict, blank=True)
	status = models.CharField(max_length=16, choices=WebhookEventStatus.choices, default=WebhookEventStatus.RECEIVED)
	transaction = models.ForeignKey(Transaction, null=True, blank=True, on_delete=models.SET_NULL, related_name="webhook_events")
	last_error = models.TextField(blank=True, default="")
	received_at = models.DateTimeField(auto_now_add=True)
	processed_at = models.DateTimeField(null=True, blank=True)

	class Meta:
		unique_together = (("provider", "event_id"),)
