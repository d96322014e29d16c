"""Wallet endpoints: overview, top-up, send, moves, budget/goal wallets and their lock/settings/delete actions.

Every call runs in the user's current account mode (Profile.account_mode).
"""

from django.http import JsonResponse
from core import services
from core.models import Circle
from .helpers import api_view, json_body, require, money, main_wallet_json, sub_wallet_json, transaction_json, resolve_user, BadRequest


def _tx_response(tx, wallet=None, status=201):
	data = {"transaction": transaction_json(tx)}
	if wallet is not None:
		data["balance"] = money(wallet.balance)
	return JsonResponse(data, status=status)


@api_view()
def wallets(request):
	"""
	GET: Main, budget and goal wallets for the current mode plus their total
	"""
	mode = services.get_account_mode(request.user)
	overview = services.wallets_overview(request.user, mode)
	return JsonResponse({
		"mode": mode,
		"main": main_wallet_json(overview["main"]),
		"budgets": [sub_wallet_json(w) for w in overview["budgets"]],
		"goals": [sub_wallet_json(w) for w in overview["goals"]],
		"total": money(overview["total"]),
	})


@api_view()
def main_wallet(request):
	mode = services.get_account_mode(request.user)
	return JsonResponse(main_wallet_json(services.get_main_wallet(request.user, mode)))


@api_view(methods=("POST",))
def top_up(request):
	"""
	POST: Credit the main wallet {"amount": "5000", "method": "bank"}
	"""
	body = json_body(request)
	(amount,) = require(body, "amount")
	mode = services.get_account_mode(request.user)
	tx = services.top_up(request.user, amount, mode, method=body.get("method") or "bank",
		idempotency_key=request.headers.get("Idempotency-Key"))
	return _tx_response(tx, services.get_main_wallet(request.user, mode))


@api_view(methods=("POST",))
def send(request):
	"""
	POST: Pay out of the main wallet.
	  bank:   {"method": "bank", "amount", "bank_name", "account_number", "note"?}
	  user:   {"method": "user", "amount", "recipient": username|email|cash tag, "note"?}
	  circle: {"method": "circle", "amount", "circle_id", "note"?}
	"""
	body = json_body(request)
	method, amount = require(body, "method", "amount")
	mode = services.get_account_mode(request.user)
	kwargs = dict(method=method, note=body.get("note") or "", idempotency_key=request.headers.get("Idempotency-Key"))
	if method == "bank":
		kwargs.update(bank_name=body.get("bank_name") or "", account_number=body.get("account_number") or "")
	elif method == "user":
		(handle,) = require(body, "recipient")
		kwargs["recipient"] = resolve_user(str(handle))
	elif method == "circle":
		(circle_id,) = require(body, "circle_id")
		kwargs["circle"] = Circle.objects.get(pk=circle_id)
	tx = services.send_money(request.user, amount, mode, **kwargs)
	return _tx_response(tx, services.get_main_wallet(request.user, mode))


def _wallet_from_ref(user, ref: dict):
	if not isinstance(ref, dict):
		raise BadRequest("wallet reference must be {\"type\", \"id\"}")
	kind = ref.get("type")
	if kind == "main":
		return services.get_main_wallet(user, services.get_account_mode(user))
	return services.get_user_wallet(user, kind, ref.get("id"))


@api_view(methods=("POST",))
def move(request):
	"""
	POST: {"from": {"type": "budget", "id": ...}, "to": {"type": "main"}, "amount": "4000"}
	"""
	body = json_body(request)
	src_ref, dst_ref, amount = require(body, "from", "to", "amount")
	source = _wallet_from_ref(request.user, src_ref)
	destination = _wallet_from_ref(request.user, dst_ref)
	tx = services.move_money(request.user, source, destination, amount)
	return JsonResponse({
		"transaction": transaction_json(tx),
		"from_balance": money(source.balance),
		"to_balance": money(destination.balance),
	}, status=201)


def _options(body: dict, names) -> dict:
	return {n: body[n] for n in names if body.get(n) is not None}


@api_view(methods=("POST",))
def create_budget(request):
	body = json_body(request)
	(name,) = require(body, "name")
	wallet = services.create_budget_wallet(
		request.user, services.get_account_mode(request.user),
		name=name,
		budget_amount=body.get("budget_amount") or 0,
		spend_limit=body.get("spend_limit"),
		lock_days=body.get("lock_days"),
		**_options(body, services.BUDGET_OPTIONS),
	)
	return JsonResponse(sub_wallet_json(wallet), status=201)


@api_view(methods=("POST",))
def create_goal(request):
	body = json_body(request)
	name, target_amount = require(body, "name", "target_amount")
	wallet = services.create_goal_wallet(
		request.user, services.get_account_mode(request.user),
		name=name,
		target_amount=target_amount,
		initial_amount=body.get("initial_amount") or 0,
		lock_days=body.get("lock_days"),
		**_options(body, services.GOAL_OPTIONS),
	)
	return JsonResponse(sub_wallet_json(wallet), status=201)


@api_view()
def wallet_detail(request, kind, wallet_id):
	wallet = services.get_user_wallet(request.user, kind, wallet_id)
	return JsonResponse(sub_wallet_json(wallet))


@api_view(methods=("POST",))
def move_to_main(request, kind, wallet_id):
	wallet = services.get_user_wallet(request.user, kind, wallet_id)
	(amount,) = require(json_body(request), "amount")
	tx = services.move_to_main(request.user, wallet, amount)
	return _tx_response(tx, wallet)


@api_view(methods=("POST",))
def add_from_main(request, kind, wallet_id):
	wallet = services.get_user_wallet(request.user, kind, wallet_id)
	(amount,) = require(json_body(request), "amount")
	tx = services.add_from_main(request.user, wallet, amount)
	return _tx_response(tx, wallet)


@api_view(methods=("POST",))
def lock(request, kind, wallet_id):
	wallet = services.get_user_wallet(request.user, kind, wallet_id)
	(days,) = require(json_body(request), "days")
	return JsonResponse(sub_wallet_json(services.lock_wallet(wallet, days)))


@api_view(methods=("POST",))
def unlock(request, kind, wallet_id):
	wallet = services.get_user_wallet(request.user, kind, wallet_id)
	return JsonResponse(sub_wallet_json(services.unlock_wallet(wallet)))


@api_view(methods=("POST",))
def wallet_settings(request, kind, wallet_id):
	"""
	POST: {"name"?, "spend_limit"?, "target_amount"?, "locked"?: bool, "lock_days"?}
	"""
	wallet = services.get_user_wallet(request.user, kind, wallet_id)
	body = json_body(request)
	wallet = services.update_wallet_settings(
		wallet,
		name=body.get("name"),
		spend_limit=body.get("spend_limit"),
		target_amount=body.get("target_amount"),
		locked=body.get("locked"),
		lock_days=body.get("lock_days"),
	)
	return JsonResponse(sub_wallet_json(wallet))


@api_view(methods=("POST",))
def delete(request, kind, wallet_id):
	"""
	POST: Delete a budget/goal wallet; any balance is swept back to the main wallet first
	"""
	wallet = services.get_user_wallet(request.user, kind, wallet_id)
	tx = services.delete_wallet(request.user, wallet)
	main = services.get_main_wallet(request.user, wallet.mode)
	return JsonResponse({
		"deleted": True,
		"swept": money(tx.amount) if tx else "0.00",
		"transaction": transaction_json(tx) if tx else None,
		"main_balance": money(main.balance),
	})
