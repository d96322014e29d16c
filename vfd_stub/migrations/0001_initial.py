# Generated manually for the VFD sandbox stub

import django.utils.timezone
import vfd_stub.models
from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = []

	operations = [
		migrations.CreateModel(
			name="VfdStubToken",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("token", models.CharField(default=vfd_stub.models.gen_token, max_length=64, unique=True)),
				("consumer_key", models.CharField(max_length=100)),
				("issued_at", models.DateTimeField(default=django.utils.timezone.now)),
			],
		),
		migrations.CreateModel(
			name="VfdStubWallet",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("wallet_id", models.CharField(default=vfd_stub.models.gen_wallet_id, max_length=100, unique=True)),
				("account_number", models.CharField(max_length=10, unique=True)),
				("account_name", models.CharField(max_length=200)),
				("wallet_reference", models.CharField(default=vfd_stub.models.gen_wallet_reference, max_length=100, unique=True)),
				("phone_number", models.CharField(blank=True, default="", max_length=32)),
				("email", models.CharField(blank=True, default="", max_length=254)),
				("bvn", models.CharField(blank=True, default="", max_length=11)),
				("created_at", models.DateTimeField(default=django.utils.timezone.now)),
			],
		),
	]
