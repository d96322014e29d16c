import pytest
from django.test import Client

from core import services
from core.models import BudgetWallet

pytestmark = pytest.mark.django_db


def _post(client, url, body=None, **extra):
	return client.post(url, body or {}, content_type="application/json", **extra)


@pytest.mark.parametrize("url", ["/api/wallets", "/api/circles", "/api/activity", "/api/profile", "/api/analytics"])
def test_requires_login(url):
	resp = Client().get(url)
	assert resp.status_code == 401
	assert resp.json() == {"error": "Not authenticated"}


def test_health():
	assert Client().get("/api/health").json() == {"ok": True}


def test_wrong_method(auth_client):
	assert auth_client.get("/api/wallets/top-up").status_code == 405


def test_wallet_flow(auth_client, user):
	resp = _post(auth_client, "/api/wallets/top-up", {"amount": "10000"})
	assert resp.status_code == 201
	assert resp.json()["balance"] == "10000.00"

	resp = _post(auth_client, "/api/wallets/budget", {"name": "Groceries", "budget_amount": "4000", "spend_limit": "1000"})
	assert resp.status_code == 201
	budget = resp.json()
	assert budget["balance"] == "4000.00"
	assert budget["lock_state"] == "unlocked"

	overview = auth_client.get("/api/wallets").json()
	assert overview["mode"] == "demo"
	assert overview["main"]["balance"] == "6000.00"
	assert overview["total"] == "10000.00"
	assert [b["name"] for b in overview["budgets"]] == ["Groceries"]

	base = f"/api/wallets/budget/{budget['id']}"
	assert auth_client.get(base).json()["spend_limit"] == "1000.00"
	resp = _post(auth_client, f"{base}/move-to-main", {"amount": "1000"})
	assert resp.status_code == 201
	assert resp.json()["balance"] == "3000.00"

	assert _post(auth_client, f"{base}/lock", {"days": 30}).json()["lock_state"] == "locked"
	resp = _post(auth_client, f"{base}/unlock")
	assert resp.status_code == 400
	assert resp.json() == {"error": "wallet_locked"}
	assert _post(auth_client, f"{base}/delete").status_code == 400

	BudgetWallet.objects.filter(pk=budget["id"]).update(is_locked=False, lock_until=None)
	resp = _post(auth_client, f"{base}/delete")
	assert resp.status_code == 200
	assert resp.json()["swept"] == "3000.00"
	assert resp.json()["main_balance"] == "10000.00"
	assert auth_client.get(base).status_code == 404


def test_move_between_wallets(auth_client, funded_user):
	goal = _post(auth_client, "/api/wallets/goal", {"name": "Laptop", "target_amount": "50000", "target_date": "2026-12-31"}).json()
	assert goal["target_date"] == "2026-12-31"
	resp = _post(auth_client, "/api/wallets/move", {
		"from": {"type": "main"}, "to": {"type": "goal", "id": goal["id"]}, "amount": "2500",
	})
	assert resp.status_code == 201
	assert resp.json()["from_balance"] == "7500.00"
	assert resp.json()["to_balance"] == "2500.00"


def test_insufficient_balance_is_400(auth_client):
	resp = _post(auth_client, "/api/wallets/send", {"method": "bank", "amount": "50", "bank_name": "GTBank", "account_number": "1"})
	assert resp.status_code == 400
	assert resp.json() == {"error": "insufficient_balance"}


def test_send_to_user_by_cash_tag(auth_client, funded_user, other_user):
	services.update_profile(other_user, cash_tag="tunde")
	resp = _post(auth_client, "/api/wallets/send", {"method": "user", "amount": "700", "recipient": "$tunde"})
	assert resp.status_code == 201
	assert services.get_main_wallet(other_user, "demo").balance == 700
	resp = _post(auth_client, "/api/wallets/send", {"method": "user", "amount": "1", "recipient": "nobody"})
	assert resp.status_code == 404


def test_idempotency_header(auth_client, user):
	for _ in range(2):
		_post(auth_client, "/api/wallets/top-up", {"amount": "100"}, HTTP_IDEMPOTENCY_KEY="abc-1")
	assert services.get_main_wallet(user, "demo").balance == 100


def test_other_users_wallet_is_404(auth_client, other_user):
	theirs = services.create_budget_wallet(other_user, "demo", name="Private")
	assert auth_client.get(f"/api/wallets/budget/{theirs.pk}").status_code == 404
	assert _post(auth_client, f"/api/wallets/budget/{theirs.pk}/delete").status_code == 404


def test_mode_switch_changes_namespace(auth_client, funded_user):
	resp = _post(auth_client, "/api/profile/mode", {"mode": "live"})
	assert resp.json() == {"account_mode": "live"}
	assert auth_client.get("/api/wallets/main").json()["balance"] == "0.00"
	assert _post(auth_client, "/api/profile/mode", {"mode": "prod"}).status_code == 400


def test_profile_and_settings(auth_client):
	resp = _post(auth_client, "/api/profile", {"full_name": "Ada Obi", "cash_tag": "ada"})
	assert resp.json()["full_name"] == "Ada Obi"
	assert auth_client.get("/api/profile").json()["cash_tag"] == "ada"

	resp = _post(auth_client, "/api/profile/settings", {"sms_notifications": True})
	assert resp.json()["sms_notifications"] is True
	assert _post(auth_client, "/api/profile/settings", {"theme": "dark"}).status_code == 400
	resp = _post(auth_client, "/api/profile/settings", {"sms_notifications": "false"})
	assert resp.json() == {"error": "invalid_setting_value:sms_notifications"}
	assert auth_client.get("/api/profile/settings").json()["sms_notifications"] is True


def test_circle_endpoints(auth_client, user, other_user):
	resp = _post(auth_client, "/api/circles", {"name": "Ajo", "visibility": "public"})
	assert resp.status_code == 201
	circle_id = resp.json()["id"]
	assert resp.json()["role"] == "admin"

	other = Client()
	other.force_login(other_user)
	services.top_up(other_user, "1000", "demo")
	assert [c["id"] for c in other.get("/api/circles/public").json()] == [circle_id]
	assert _post(other, f"/api/circles/{circle_id}/join").status_code == 201
	resp = _post(other, f"/api/circles/{circle_id}/contribute", {"amount": "400"})
	assert resp.json()["circle_balance"] == "400.00"
	assert _post(other, f"/api/circles/{circle_id}/withdraw", {"amount": "100"}).status_code == 403

	detail = auth_client.get(f"/api/circles/{circle_id}").json()
	assert detail["member_count"] == 2
	assert detail["members"][0]["total_contributed"] == "400.00"
	member_id = detail["members"][0]["id"]

	assert _post(auth_client, f"/api/circles/{circle_id}/members/{member_id}/promote").json()["role"] == "moderator"
	assert _post(auth_client, f"/api/circles/{circle_id}/delete").json() == {"error": "circle_not_empty"}
	assert _post(auth_client, f"/api/circles/{circle_id}/withdraw", {"amount": "400"}).status_code == 201
	assert _post(auth_client, f"/api/circles/{circle_id}/delete").json() == {"deleted": True}


def test_activity_endpoints(auth_client, funded_user):
	_post(auth_client, "/api/wallets/send", {"method": "bank", "amount": "1500", "bank_name": "GTBank", "account_number": "1"})
	feed = auth_client.get("/api/activity?types=send&limit=10").json()
	assert feed["total"] == 1
	assert feed["results"][0]["description"] == "Sent to GTBank - 1"
	assert auth_client.get("/api/activity?date_from=yesterday").status_code == 400

	stats = auth_client.get("/api/activity/stats").json()
	assert stats == {"total_activities": 2, "this_month": 2, "total_sent": "1500.00", "total_received": "10000.00"}

	analytics = auth_client.get("/api/analytics?months=3").json()
	assert len(analytics["months"]) == 3
	assert analytics["net_worth"] == "8500.00"


def test_signup_and_login():
	c = Client()
	resp = _post(c, "/api/auth/signup", {"email": "Kemi@Example.com", "password": "a-long-password-1", "full_name": "Kemi"})
	assert resp.status_code == 201
	assert resp.json()["account_mode"] == "demo"
	assert c.get("/api/auth/me").json()["email"] == "kemi@example.com"
	assert _post(c, "/api/auth/signup", {"email": "kemi@example.com", "password": "x-long-password-2"}).status_code == 400

	_post(c, "/api/auth/logout")
	assert c.get("/api/wallets").status_code == 401
	assert _post(c, "/api/auth/login", {"email": "kemi@example.com", "password": "wrong"}).status_code == 401
	assert _post(c, "/api/auth/login", {"email": "kemi@example.com", "password": "a-long-password-1"}).status_code == 200
	assert c.get("/api/wallets").status_code == 200


def test_main_wallet_is_not_a_sub_wallet_route(auth_client, user):
	main = services.get_main_wallet(user, "demo")
	resp = _post(auth_client, f"/api/wallets/main/{main.pk}/delete")
	assert resp.status_code == 400
	assert resp.json() == {"error": "invalid_wallet_kind"}
