# Generated manually for the initial wallet schema

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

MODE_CHOICES = [("demo", "Demo"), ("live", "Live")]


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		migrations.swappable_dependency(settings.AUTH_USER_MODEL),
	]

	operations = [
		migrations.CreateModel(
			name="Profile",
			fields=[
				("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
				("full_name", models.CharField(blank=True, default="", max_length=200)),
				("phone_number", models.CharField(blank=True, default="", max_length=32)),
				("cash_tag", models.CharField(blank=True, default="", max_length=50)),
				("avatar_url", models.URLField(blank=True, default="")),
				("account_mode", models.CharField(choices=MODE_CHOICES, default="demo", max_length=8)),
				("kyc_status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], default="pending", max_length=16)),
				("vfd_wallet_id", models.CharField(blank=True, max_length=100, null=True, unique=True)),
				("vfd_account_number", models.CharField(blank=True, default="", max_length=20)),
				("vfd_account_name", models.CharField(blank=True, default="", max_length=200)),
				("vfd_wallet_reference", models.CharField(blank=True, default="", max_length=100)),
				("vfd_bank_name", models.CharField(blank=True, default="", max_length=100)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL)),
			],
		),
		migrations.CreateModel(
			name="UserSettings",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("push_notifications", models.BooleanField(default=True)),
				("email_notifications", models.BooleanField(default=True)),
				("sms_notifications", models.BooleanField(default=False)),
				("transaction_alerts", models.BooleanField(default=True)),
				("circle_updates", models.BooleanField(default=True)),
				("marketing_emails", models.BooleanField(default=False)),
				("profile_public", models.BooleanField(default=True)),
				("show_balance", models.BooleanField(default=True)),
				("allow_circle_invites", models.BooleanField(default=True)),
				("biometric_for_transfers", models.BooleanField(default=False)),
				("updated_at", models.DateTimeField(auto_now=True)),
				("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="app_settings", to=settings.AUTH_USER_MODEL)),
			],
		),
		migrations.CreateModel(
			name="MainWallet",
			fields=[
				("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
				("mode", models.CharField(choices=MODE_CHOICES, default="demo", max_length=8)),
				("balance", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
				("currency", models.CharField(default="NGN", max_length=3)),
				("bank_name", models.CharField(blank=True, default="", max_length=100)),
				("bank_account_number", models.CharField(blank=True, default="", max_length=20)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="main_wallets", to=settings.AUTH_USER_MODEL)),
			],
			options={
				"unique_together": {("user", "mode")},
			},
		),
		migrations.CreateModel(
			name="BudgetWallet",
			fields=[
				("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
				("mode", models.CharField(choices=MODE_CHOICES, default="demo", max_length=8)),
				("name", models.CharField(max_length=120)),
				("balance", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
				("currency", models.CharField(default="NGN", max_length=3)),
				("is_locked", models.BooleanField(default=False)),
				("lock_until", models.DateTimeField(blank=True, null=True)),
				("lock_duration_days", models.PositiveIntegerField(blank=True, null=True)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				("spend_limit", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
				("disbursement_frequency", models.CharField(blank=True, default="", max_length=16)),
				("disbursement_day", models.CharField(blank=True, default="", max_length=16)),
				("enable_rollover", models.BooleanField(default=False)),
				("automatic_allocation", models.BooleanField(default=False)),
				("allocation_frequency", models.CharField(blank=True, default="", max_length=16)),
				("allocation_day", models.CharField(blank=True, default="", max_length=16)),
				("custom_notifications", models.BooleanField(default=False)),
				("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="budgetwallets", to=settings.AUTH_USER_MODEL)),
			],
			options={
				"abstract": False,
			},
		),
		migrations.CreateModel(
			name="GoalWallet",
			fields=[
				("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
				("mode", models.CharField(choices=MODE_CHOICES, default="demo", max_length=8)),
				("name", models.CharField(max_length=120)),
				("balance", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
				("currency", models.CharField(default="NGN", max_length=3)),
				("is_locked", models.BooleanField(default=False)),
				("lock_until", models.DateTimeField(blank=True, null=True)),
				("lock_duration_days", models.PositiveIntegerField(blank=True, null=True)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				("target_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
				("target_date", models.DateField(blank=True, null=True)),
				("funding_source", models.CharField(choices=[("manual", "Manual"), ("auto", "Automatic")], default="manual", max_length=8)),
				("image_url", models.URLField(blank=True, default="")),
				("smart_reminders", models.BooleanField(default=False)),
				("flex_contributions", models.BooleanField(default=True)),
				("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="goalwallets", to=settings.AUTH_USER_MODEL)),
			],
			options={
				"abstract": False,
			},
		),
		migrations.CreateModel(
			name="Circle",
			fields=[
				("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
				("name", models.CharField(max_length=200)),
				("description", models.TextField(blank=True, default="")),
				("category", models.CharField(blank=True, default="", max_length=50)),
				("purpose", models.TextField(blank=True, default="")),
				("mode", models.CharField(choices=MODE_CHOICES, default="demo", max_length=8)),
				("balance", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
				("currency", models.CharField(default="NGN", max_length=3)),
				("target_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
				("deadline", models.DateField(blank=True, null=True)),
				("visibility", models.CharField(choices=[("public", "Public"), ("private", "Private")], default="private", max_length=8)),
				("max_members", models.PositiveIntegerField(default=50)),
				("allow_external_contributions", models.BooleanField(default=False)),
				("show_member_names", models.BooleanField(default=True)),
				("show_contributions", models.BooleanField(default=True)),
				("recurring_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
				("recurring_frequency", models.CharField(blank=True, default="", max_length=16)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				("created_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="created_circles", to=settings.AUTH_USER_MODEL)),
			],
		),
		migrations.CreateModel(
			name="CircleMember",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("role", models.CharField(choices=[("admin", "Admin"), ("moderator", "Moderator"), ("member", "Member")], default="member", max_length=16)),
				("total_contributed", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
				("joined_at", models.DateTimeField(auto_now_add=True)),
				("circle", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="core.circle")),
				("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="circle_memberships", to=settings.AUTH_USER_MODEL)),
			],
			options={
				"unique_together": {("circle", "user")},
			},
		),
		migrations.CreateModel(
			name="Transaction",
			fields=[
				("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
				("amount", models.DecimalField(decimal_places=2, max_digits=18)),
				("currency", models.CharField(default="NGN", max_length=3)),
				("type", models.CharField(choices=[("deposit", "Deposit"), ("withdrawal", "Withdrawal"), ("transfer", "Transfer")], max_length=16)),
				("activity_type", models.CharField(choices=[
					("transfer", "Transfer"), ("deposit", "Deposit"), ("withdrawal", "Withdrawal"),
					("contribution", "Contribution"), ("wallet_created", "Wallet created"),
					("wallet_funded", "Wallet funded"), ("wallet_withdrawal", "Wallet withdrawal"),
					("circle_created", "Circle created"), ("circle_joined", "Circle joined"),
					("circle_contribution", "Circle contribution"), ("circle_withdrawal", "Circle withdrawal"),
					("budget_created", "Budget created"), ("budget_funded", "Budget funded"),
					("budget_disbursement", "Budget disbursement"), ("goal_created", "Goal created"),
					("goal_contribution", "Goal contribution"), ("goal_completed", "Goal completed"),
					("send", "Send"), ("receive", "Receive"), ("top_up", "Top up"),
					("request_sent", "Request sent"), ("request_received", "Request received"),
				], max_length=32)),
				("description", models.TextField(blank=True, default="")),
				("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")], default="completed", max_length=16)),
				("mode", models.CharField(choices=MODE_CHOICES, default="demo", max_length=8)),
				("reference_number", models.CharField(max_length=64, unique=True)),
				("related_entity_type", models.CharField(blank=True, default="", max_length=20)),
				("related_entity_id", models.CharField(blank=True, default="", max_length=64)),
				("metadata", models.JSONField(blank=True, default=dict)),
				("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
				("circle", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="transactions", to="core.circle")),
				("receiver", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="received_transactions", to=settings.AUTH_USER_MODEL)),
				("sender", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="sent_transactions", to=settings.AUTH_USER_MODEL)),
			],
			options={
				"indexes": [
					models.Index(fields=["sender", "mode", "created_at"], name="core_tx_sender_mode_idx"),
					models.Index(fields=["receiver", "mode", "created_at"], name="core_tx_receiver_mode_idx"),
				],
			},
		),
		migrations.CreateModel(
			name="WebhookEvent",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("provider", models.CharField(default="vfd", max_length=32)),
				("event_id", models.CharField(max_length=128)),
				("event_type", models.CharField(max_length=32)),
				("payload", models.JSONField(blank=True, default=dict)),
				("status", models.CharField(choices=[("received", "Received"), ("applied", "Applied"), ("ignored", "Ignored"), ("rejected", "Rejected")], default="received", max_length=16)),
				("last_error", models.TextField(blank=True, default="")),
				("received_at", models.DateTimeField(auto_now_add=True)),
				("processed_at", models.DateTimeField(blank=True, null=True)),
				("transaction", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="webhook_events", to="core.transaction")),
			],
			options={
				"unique_together": {("provider", "event_id")},
			},
		),
	]
