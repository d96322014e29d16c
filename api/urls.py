"""Public API surface.

- /health, /csrf: liveness and CSRF cookie bootstrap
- /auth/*: email + password session login
- /vfd/create-wallet, /webhooks/vfd: VFD bank account opening and credit notifications
- /wallets/*: main, budget and goal wallets in the current account mode
- /circles/*: group savings circles
- /activity, /analytics: read-only views over the transaction log
- /profile/*: profile, preference toggles and demo/live switch
"""

from django.urls import path
from . import views_auth as auth, views_wallets as wallets, views_circles as circles, views_profile as profile
from .views_ops import health, csrf, vfd_create_wallet, vfd_webhook
from .views_read import activity, stats, analytics


urlpatterns = [
	path("health", health),
	path("csrf", csrf),
	path("vfd/create-wallet", vfd_create_wallet),
	path("webhooks/vfd", vfd_webhook, name="vfd_webhook"),

	path("auth/signup", auth.signup),
	path("auth/login", auth.login),
	path("auth/logout", auth.logout),
	path("auth/me", auth.me),

	path("wallets", wallets.wallets),
	path("wallets/main", wallets.main_wallet),
	path("wallets/top-up", wallets.top_up),
	path("wallets/send", wallets.send),
	path("wallets/move", wallets.move),
	path("wallets/budget", wallets.create_budget),
	path("wallets/goal", wallets.create_goal),
	path("wallets/<str:kind>/<uuid:wallet_id>", wallets.wallet_detail),
	path("wallets/<str:kind>/<uuid:wallet_id>/move-to-main", wallets.move_to_main),
	path("wallets/<str:kind>/<uuid:wallet_id>/add-from-main", wallets.add_from_main),
	path("wallets/<str:kind>/<uuid:wallet_id>/lock", wallets.lock),
	path("wallets/<str:kind>/<uuid:wallet_id>/unlock", wallets.unlock),
	path("wallets/<str:kind>/<uuid:wallet_id>/settings", wallets.wallet_settings),
	path("wallets/<str:kind>/<uuid:wallet_id>/delete", wallets.delete),

	path("circles", circles.circle_list),
	path("circles/public", circles.public_circles),
	path("circles/<uuid:circle_id>", circles.circle_detail),
	path("circles/<uuid:circle_id>/join", circles.join),
	path("circles/<uuid:circle_id>/invite", circles.invite),
	path("circles/<uuid:circle_id>/contribute", circles.contribute),
	path("circles/<uuid:circle_id>/withdraw", circles.withdraw),
	path("circles/<uuid:circle_id>/settings", circles.circle_settings),
	path("circles/<uuid:circle_id>/leave", circles.leave),
	path("circles/<uuid:circle_id>/delete", circles.delete),
	path("circles/<uuid:circle_id>/members/<int:member_id>/promote", circles.promote),
	path("circles/<uuid:circle_id>/members/<int:member_id>/demote", circles.demote),
	path("circles/<uuid:circle_id>/members/<int:member_id>/remove", circles.remove),

	path("activity", activity),
	path("activity/stats", stats),
	path("analytics", analytics),

	path("profile", profile.profile),
	path("profile/settings", profile.user_settings),
	path("profile/mode", profile.mode),
]
